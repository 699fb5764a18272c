"""
Cálculo de precios de un carrito.

Funciones puras: reciben montos y reglas, retornan montos redondeados.
Nunca confían en totales enviados por el cliente.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from decimal import Decimal

from travel_booking.domain.value_objects.money import round_money, to_decimal
from travel_booking.domain.value_objects.promo_type import PromoCodeType

ZERO = Decimal("0.00")


@dataclass(frozen=True)
class PromoTerms:
    """Términos de descuento guardados en la cotización al aplicar un código."""

    type: PromoCodeType
    value: Decimal
    max_discount_amount: Decimal | None = None


@dataclass(frozen=True)
class PriceBreakdown:
    subtotal: Decimal
    discount: Decimal
    taxes: Decimal
    total: Decimal


def compute_discount(
    promo_type: PromoCodeType | str,
    value: Decimal,
    subtotal: Decimal,
    max_discount_amount: Decimal | None = None,
) -> Decimal:
    """
    Calcula el descuento de un código sobre un subtotal.

    - percentage: subtotal * value / 100, con tope max_discount_amount si existe.
    - fixed: min(value, subtotal); el descuento nunca supera el monto de la orden.
    """
    subtotal = to_decimal(subtotal)
    value = to_decimal(value)
    if subtotal <= 0 or value <= 0:
        return ZERO

    if PromoCodeType(promo_type) == PromoCodeType.PERCENTAGE:
        discount = subtotal * value / Decimal("100")
        if max_discount_amount is not None and discount > to_decimal(max_discount_amount):
            discount = to_decimal(max_discount_amount)
    else:
        discount = min(value, subtotal)

    return round_money(min(discount, subtotal))


def calculate_breakdown(
    prices: Iterable[Decimal],
    tax_rate: Decimal,
    promo: PromoTerms | None = None,
) -> PriceBreakdown:
    """
    Recalcula subtotal, descuento, impuestos y total.

    taxes = (subtotal - discount) * tax_rate
    total = (subtotal - discount) + taxes
    """
    amounts = [to_decimal(p) for p in prices]
    if any(amount < 0 for amount in amounts):
        raise ValueError("Los precios no pueden ser negativos")

    subtotal = round_money(sum(amounts, Decimal("0")))
    discount = ZERO
    if promo is not None:
        discount = compute_discount(
            promo.type, promo.value, subtotal, promo.max_discount_amount
        )

    taxable = subtotal - discount
    taxes = round_money(taxable * to_decimal(tax_rate))
    total = round_money(taxable + taxes)
    return PriceBreakdown(subtotal=subtotal, discount=discount, taxes=taxes, total=total)
