"""Conversión de filas SQL a entidades de dominio."""

from datetime import datetime, timezone
from decimal import Decimal
from typing import Any


def as_utc(value: datetime | None) -> datetime | None:
    """SQLite devuelve datetimes naive; se interpretan como UTC."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


def as_decimal(value: Any) -> Decimal | None:
    if value is None:
        return None
    return value if isinstance(value, Decimal) else Decimal(str(value))


def row_values(row: Any, datetime_fields: tuple[str, ...]) -> dict[str, Any]:
    data = dict(row)
    for name in datetime_fields:
        if name in data:
            data[name] = as_utc(data[name])
    return data
