"""Value Objects del dominio de reservas de viaje."""

from travel_booking.domain.value_objects.booking_reference import SERVICE_PREFIXES, BookingReference
from travel_booking.domain.value_objects.money import round_money, to_decimal
from travel_booking.domain.value_objects.order_number import OrderNumber
from travel_booking.domain.value_objects.promo_type import PromoCodeType
from travel_booking.domain.value_objects.traveler import TravelerSnapshot, TravelerType

__all__ = [
    "BookingReference",
    "SERVICE_PREFIXES",
    "OrderNumber",
    "PromoCodeType",
    "TravelerSnapshot",
    "TravelerType",
    "round_money",
    "to_decimal",
]
