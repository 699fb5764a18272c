"""Entidades del dominio de reservas de viaje."""

from travel_booking.domain.entities.promo_code import (
    PromoCode,
    PromoCodeStatus,
    PromoCodeUsage,
    normalize_code,
)
from travel_booking.domain.entities.quote import Quote, QuoteItem, QuoteStatus, ServiceType
from travel_booking.domain.entities.sub_booking import BookingStatus, SubBooking
from travel_booking.domain.entities.order import (
    ORDER_TRANSITIONS,
    Order,
    OrderStatus,
    OrderStatusIntent,
)
from travel_booking.domain.entities.payment import Payment, PaymentMethod, PaymentStatus
from travel_booking.domain.entities.payment_option import (
    BankAccount,
    PaymentMethodConfig,
    ProcessingFee,
    ProcessingFeeType,
)

__all__ = [
    "PromoCode",
    "PromoCodeStatus",
    "PromoCodeUsage",
    "normalize_code",
    "Quote",
    "QuoteItem",
    "QuoteStatus",
    "ServiceType",
    "BookingStatus",
    "SubBooking",
    "ORDER_TRANSITIONS",
    "Order",
    "OrderStatus",
    "OrderStatusIntent",
    "Payment",
    "PaymentMethod",
    "PaymentStatus",
    "BankAccount",
    "PaymentMethodConfig",
    "ProcessingFee",
    "ProcessingFeeType",
]
