"""Entidades PromoCode y PromoCodeUsage."""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any

from travel_booking.domain.value_objects.promo_type import PromoCodeType

WILDCARD_SERVICE = "all"


class PromoCodeStatus(str, Enum):
    """Estados posibles de un código promocional."""

    ACTIVE = "active"
    INACTIVE = "inactive"
    EXPIRED = "expired"


def normalize_code(code: str) -> str:
    """Los códigos se comparan y guardan siempre en mayúsculas."""
    return code.strip().upper()


@dataclass
class PromoCode:
    """
    Código promocional configurado por un administrador.

    Solo cambia por ediciones administrativas; usage_count se incrementa
    únicamente a través de una redención registrada en el ledger.
    """

    # Identificadores
    id: str | None = None
    code: str = ""
    name: str = ""
    description: str | None = None

    # Descuento
    type: PromoCodeType = PromoCodeType.PERCENTAGE
    value: Decimal = Decimal("0")
    min_order_amount: Decimal | None = None
    max_discount_amount: Decimal | None = None

    # Límites de uso
    usage_limit: int | None = None
    usage_count: int = 0
    per_user_limit: int | None = 1

    # Vigencia
    valid_from: datetime | None = None
    valid_until: datetime | None = None
    status: PromoCodeStatus = PromoCodeStatus.ACTIVE

    # Restricciones
    applicable_services: list[str] | None = None
    applicable_currencies: list[str] | None = None
    first_order_only: bool = False

    metadata: dict[str, Any] = field(default_factory=dict)

    created_at: datetime | None = None
    updated_at: datetime | None = None

    def __post_init__(self) -> None:
        self.code = normalize_code(self.code)

    @property
    def is_active(self) -> bool:
        return self.status == PromoCodeStatus.ACTIVE

    @property
    def has_usage_left(self) -> bool:
        return self.usage_limit is None or self.usage_count < self.usage_limit

    def applies_to_service(self, service_type: str | None) -> bool:
        if not service_type or not self.applicable_services:
            return True
        services = {s.lower() for s in self.applicable_services}
        return WILDCARD_SERVICE in services or service_type.lower() in services

    def applies_to_currency(self, currency: str | None) -> bool:
        if not currency or not self.applicable_currencies:
            return True
        return currency.upper() in {c.upper() for c in self.applicable_currencies}

    def deactivate(self) -> None:
        self.status = PromoCodeStatus.INACTIVE


@dataclass
class PromoCodeUsage:
    """Fila append-only del ledger de redenciones."""

    id: str | None = None
    user_id: str = ""
    promo_code_id: str = ""
    order_id: str = ""
    discount_amount: Decimal = Decimal("0")
    order_amount: Decimal = Decimal("0")
    currency: str = "SAR"
    applied_at: datetime | None = None
