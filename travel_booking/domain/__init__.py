"""
Capa de Dominio - Núcleo de reservas de viaje.

Esta capa contiene la lógica de negocio pura, sin dependencias de frameworks.

Estructura:
- entities/: Quote, PromoCode, Order, SubBooking, Payment
- value_objects/: montos (Decimal), OrderNumber, BookingReference, TravelerSnapshot
- services/: cálculo de precios y evaluación de códigos promocionales
- errors.py: Excepciones específicas del dominio
"""

from travel_booking.domain.entities import (
    Order,
    OrderStatus,
    Payment,
    PaymentStatus,
    PromoCode,
    Quote,
    QuoteItem,
    QuoteStatus,
    SubBooking,
)
from travel_booking.domain.errors import (
    BusinessRuleError,
    ConflictError,
    DomainError,
    NotFoundError,
    ValidationError,
)
from travel_booking.domain.value_objects import round_money

__all__ = [
    "Order",
    "OrderStatus",
    "Payment",
    "PaymentStatus",
    "PromoCode",
    "Quote",
    "QuoteItem",
    "QuoteStatus",
    "SubBooking",
    "BusinessRuleError",
    "ConflictError",
    "DomainError",
    "NotFoundError",
    "ValidationError",
    "round_money",
]
