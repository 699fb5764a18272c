"""Entidad SubBooking - reserva de un servicio individual dentro de una orden."""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any


class BookingStatus(str, Enum):
    """Estados posibles de una sub-reserva."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    TICKETED = "ticketed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"


@dataclass
class SubBooking:
    id: str | None = None
    order_id: str | None = None
    service_type: str = ""
    title: str | None = None
    provider_booking_reference: str = ""
    status: BookingStatus = BookingStatus.PENDING

    details: dict[str, Any] = field(default_factory=dict)
    travelers: list[dict[str, Any]] | None = None
    price: Decimal = Decimal("0.00")
    currency: str = "SAR"
    service_date: datetime | None = None
    documents: list[dict[str, Any]] | None = None

    confirmed_at: datetime | None = None
    cancelled_at: datetime | None = None
    created_at: datetime | None = None

    def confirm(self, confirmed_at: datetime) -> None:
        self.status = BookingStatus.CONFIRMED
        self.confirmed_at = confirmed_at

    def complete(self) -> None:
        self.status = BookingStatus.COMPLETED

    def cancel(self, cancelled_at: datetime) -> None:
        self.status = BookingStatus.CANCELLED
        self.cancelled_at = cancelled_at

    def refund(self) -> None:
        self.status = BookingStatus.REFUNDED
