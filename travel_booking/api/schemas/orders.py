from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, constr

from travel_booking.api.schemas.common import CurrencyCode, Money, NonNegativeMoney, UtcDatetime
from travel_booking.application.use_cases.update_order_status import FulfilmentAction
from travel_booking.domain.entities.order import OrderStatus, OrderStatusIntent
from travel_booking.domain.entities.quote import ServiceType
from travel_booking.domain.entities.sub_booking import BookingStatus


class OrderItemRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    service_type: ServiceType
    title: constr(strip_whitespace=True, min_length=1, max_length=255)
    price: NonNegativeMoney
    details: dict[str, Any] = Field(default_factory=dict)
    travelers: list[dict[str, Any]] | None = None
    service_date: UtcDatetime | None = None
    provider_booking_reference: constr(strip_whitespace=True, max_length=64) | None = None
    documents: list[dict[str, Any]] | None = None


class CreateOrderRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    items: list[OrderItemRequest] = Field(min_length=1)
    payment_method: str | None = None
    payment_reference: str | None = None
    status: OrderStatusIntent = OrderStatusIntent.PENDING
    currency: CurrencyCode | None = None
    promo_code: constr(strip_whitespace=True, min_length=1, max_length=50) | None = None


class CreateOrderFromQuoteRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    payment_method: str | None = None
    payment_reference: str | None = None
    status: OrderStatusIntent = OrderStatusIntent.PENDING


class CancelOrderRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    reason: constr(strip_whitespace=True, max_length=500) | None = None


class UpdateOrderStatusRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    action: FulfilmentAction


class SubBookingResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    order_id: str
    service_type: str
    title: str | None = None
    provider_booking_reference: str
    status: BookingStatus
    details: dict[str, Any]
    travelers: list[dict[str, Any]] | None = None
    price: Money
    currency: str
    service_date: datetime | None = None
    documents: list[dict[str, Any]] | None = None
    confirmed_at: datetime | None = None
    cancelled_at: datetime | None = None


class OrderResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    order_number: str
    quote_id: str | None = None
    status: OrderStatus
    subtotal: Money
    discount: Money
    taxes: Money
    total: Money
    currency: str
    promo_code: str | None = None
    payment_method: str | None = None
    payment_reference: str | None = None
    paid_at: datetime | None = None
    cancelled_at: datetime | None = None
    cancellation_reason: str | None = None
    created_at: datetime | None = None
    bookings: list[SubBookingResponse]


class OrderListResponse(BaseModel):
    items: list[OrderResponse]
    total: int
    page: int
    limit: int
    total_pages: int
