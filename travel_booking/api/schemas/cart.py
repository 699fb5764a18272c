from datetime import date, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, constr

from travel_booking.api.schemas.common import CurrencyCode, Money, NonNegativeMoney, UtcDatetime
from travel_booking.domain.entities.quote import QuoteStatus, ServiceType
from travel_booking.domain.value_objects.promo_type import PromoCodeType


class AddCartItemRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    service_type: ServiceType
    service_id: constr(strip_whitespace=True, min_length=1, max_length=255)
    service_name: constr(strip_whitespace=True, min_length=1, max_length=255)
    price: NonNegativeMoney
    currency: CurrencyCode | None = None
    service_details: dict[str, Any] = Field(default_factory=dict)
    travelers: list[dict[str, Any]] | None = None
    expires_at: UtcDatetime | None = None
    service_date: date | None = None


class ApplyPromoRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    code: constr(strip_whitespace=True, min_length=1, max_length=50)


class QuoteItemResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    service_type: ServiceType
    service_id: str
    service_name: str
    service_details: dict[str, Any]
    travelers: list[dict[str, Any]] | None = None
    price: Money
    currency: str
    expires_at: datetime | None = None


class QuoteResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    status: QuoteStatus
    subtotal: Money
    discount: Money
    taxes: Money
    total: Money
    currency: str
    promo_code: str | None = None
    promo_type: PromoCodeType | None = None
    promo_value: Money | None = None
    expires_at: datetime | None = None
    items: list[QuoteItemResponse]


class CheckoutResponse(BaseModel):
    order_id: str
    checkout_url: str
    quote: QuoteResponse
