"""
Evaluador de códigos promocionales.

Función pura sobre un snapshot del código, los conteos ya leídos y la hora
actual. No modifica nada: evaluar N veces nunca cambia usage_count ni el ledger.
Las reglas se aplican en orden y gana la primera que falla.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from travel_booking.domain.entities.promo_code import PromoCode
from travel_booking.domain.services.pricing import ZERO, compute_discount
from travel_booking.domain.value_objects.money import round_money, to_decimal
from travel_booking.domain.value_objects.promo_type import PromoCodeType

INVALID_CODE = "Invalid promo code"
NOT_YET_ACTIVE = "This promo code is not yet active"
EXPIRED = "This promo code has expired"
USAGE_LIMIT_REACHED = "This promo code has reached its usage limit"
ALREADY_USED = "You have already used this promo code"
MIN_ORDER_AMOUNT = "Minimum order amount is {min_amount}"
INVALID_SERVICE = "This promo code is not valid for this service"
INVALID_CURRENCY = "This promo code is not valid for your currency"
FIRST_ORDER_ONLY = "This promo code is only valid on your first order"


@dataclass(frozen=True)
class PromoEvaluation:
    valid: bool
    discount_amount: Decimal = ZERO
    reason: str | None = None
    min_order_amount: Decimal | None = None
    code: str | None = None
    name: str | None = None
    type: PromoCodeType | None = None
    value: Decimal | None = None
    max_discount_amount: Decimal | None = None
    message: str | None = None

    @classmethod
    def rejected(cls, reason: str, min_order_amount: Decimal | None = None) -> "PromoEvaluation":
        return cls(valid=False, reason=reason, min_order_amount=min_order_amount)


def evaluate_promo_code(
    promo: PromoCode | None,
    subtotal: Decimal,
    now: datetime,
    currency: str | None = None,
    service_type: str | None = None,
    user_usage_count: int | None = None,
    has_previous_orders: bool | None = None,
) -> PromoEvaluation:
    """
    Evalúa un código contra un subtotal.

    Args:
        promo: Código leído del repositorio (None si no existe).
        subtotal: Subtotal del carrito u orden.
        now: Hora de evaluación.
        currency: Moneda del pedido; si falta se omite la regla de moneda.
        service_type: Tipo de servicio; si falta se omite la regla de servicio.
        user_usage_count: Redenciones previas del usuario; None si no hay usuario.
        has_previous_orders: Si el usuario ya tiene órdenes no canceladas.

    Returns:
        PromoEvaluation con valid=False y reason en el primer fallo.
    """
    subtotal = to_decimal(subtotal)

    if promo is None or not promo.is_active:
        return PromoEvaluation.rejected(INVALID_CODE)

    if promo.valid_from is not None and now < promo.valid_from:
        return PromoEvaluation.rejected(NOT_YET_ACTIVE)
    if promo.valid_until is not None and now > promo.valid_until:
        return PromoEvaluation.rejected(EXPIRED)

    if not promo.has_usage_left:
        return PromoEvaluation.rejected(USAGE_LIMIT_REACHED)

    if (
        user_usage_count is not None
        and promo.per_user_limit is not None
        and user_usage_count >= promo.per_user_limit
    ):
        return PromoEvaluation.rejected(ALREADY_USED)

    if promo.min_order_amount is not None and subtotal < to_decimal(promo.min_order_amount):
        min_amount = round_money(promo.min_order_amount)
        return PromoEvaluation.rejected(
            MIN_ORDER_AMOUNT.format(min_amount=min_amount), min_order_amount=min_amount
        )

    if not promo.applies_to_service(service_type):
        return PromoEvaluation.rejected(INVALID_SERVICE)

    if not promo.applies_to_currency(currency):
        return PromoEvaluation.rejected(INVALID_CURRENCY)

    if promo.first_order_only and has_previous_orders:
        return PromoEvaluation.rejected(FIRST_ORDER_ONLY)

    discount = compute_discount(promo.type, promo.value, subtotal, promo.max_discount_amount)
    return PromoEvaluation(
        valid=True,
        discount_amount=discount,
        code=promo.code,
        name=promo.name,
        type=PromoCodeType(promo.type),
        value=to_decimal(promo.value),
        max_discount_amount=promo.max_discount_amount,
        message=promo.description or f"{promo.name or promo.code} applied!",
    )
