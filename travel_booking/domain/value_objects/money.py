"""Helpers de montos: todo importe se maneja como Decimal de 2 decimales."""

from decimal import ROUND_HALF_UP, Decimal

CENTS = Decimal("0.01")


def to_decimal(value: Decimal | int | float | str) -> Decimal:
    # str() evita arrastrar el error binario de un float
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def round_money(value: Decimal | int | float | str) -> Decimal:
    """
    Redondeo comercial (half-up) a centavos.

    Ejemplo: 10.005 -> 10.01, 10.004 -> 10.00.
    """
    return to_decimal(value).quantize(CENTS, rounding=ROUND_HALF_UP)
