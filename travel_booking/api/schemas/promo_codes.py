from datetime import datetime
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, constr

from travel_booking.api.schemas.common import CurrencyCode, Money, NonNegativeMoney, UtcDatetime
from travel_booking.domain.entities.promo_code import PromoCodeStatus
from travel_booking.domain.entities.quote import ServiceType
from travel_booking.domain.value_objects.promo_type import PromoCodeType


class ValidatePromoRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    code: constr(strip_whitespace=True, min_length=1, max_length=50)
    subtotal: NonNegativeMoney
    currency: CurrencyCode | None = None
    service_type: ServiceType | None = None


class ValidatePromoResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    valid: bool
    discount_amount: Money
    reason: str | None = None
    min_order_amount: Money | None = None
    code: str | None = None
    name: str | None = None
    type: PromoCodeType | None = None
    value: Money | None = None
    message: str | None = None


class PromoCodeCreateRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    code: constr(strip_whitespace=True, min_length=1, max_length=50)
    name: constr(strip_whitespace=True, min_length=1, max_length=255)
    description: str | None = None
    type: PromoCodeType
    value: Decimal = Field(gt=0)
    min_order_amount: NonNegativeMoney | None = None
    max_discount_amount: Decimal | None = Field(default=None, gt=0)
    usage_limit: int | None = Field(default=None, ge=1)
    per_user_limit: int | None = Field(default=1, ge=1)
    valid_from: UtcDatetime | None = None
    valid_until: UtcDatetime | None = None
    status: PromoCodeStatus = PromoCodeStatus.ACTIVE
    applicable_services: list[str] | None = None
    applicable_currencies: list[str] | None = None
    first_order_only: bool = False
    metadata: dict[str, Any] = Field(default_factory=dict)


class PromoCodeUpdateRequest(BaseModel):
    """Actualización parcial: solo se aplican los campos enviados."""

    model_config = ConfigDict(extra="forbid")

    code: constr(strip_whitespace=True, min_length=1, max_length=50) | None = None
    name: constr(strip_whitespace=True, min_length=1, max_length=255) | None = None
    description: str | None = None
    type: PromoCodeType | None = None
    value: Decimal | None = Field(default=None, gt=0)
    min_order_amount: NonNegativeMoney | None = None
    max_discount_amount: Decimal | None = Field(default=None, gt=0)
    usage_limit: int | None = Field(default=None, ge=1)
    per_user_limit: int | None = Field(default=None, ge=1)
    valid_from: UtcDatetime | None = None
    valid_until: UtcDatetime | None = None
    status: PromoCodeStatus | None = None
    applicable_services: list[str] | None = None
    applicable_currencies: list[str] | None = None
    first_order_only: bool | None = None
    metadata: dict[str, Any] | None = None


class PromoCodeResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    code: str
    name: str
    description: str | None = None
    type: PromoCodeType
    value: Money
    min_order_amount: Money | None = None
    max_discount_amount: Money | None = None
    usage_limit: int | None = None
    usage_count: int
    per_user_limit: int | None = None
    valid_from: datetime | None = None
    valid_until: datetime | None = None
    status: PromoCodeStatus
    applicable_services: list[str] | None = None
    applicable_currencies: list[str] | None = None
    first_order_only: bool


class PublicPromoCodeResponse(BaseModel):
    """Vista pública de un código activo (sin contadores de uso)."""

    model_config = ConfigDict(from_attributes=True)

    code: str
    name: str
    description: str | None = None
    type: PromoCodeType
    value: Money
    min_order_amount: Money | None = None
    max_discount_amount: Money | None = None
    valid_until: datetime | None = None
    applicable_services: list[str] | None = None


# Campos que admiten null explícito en un PATCH (null = sin límite/restricción)
NULLABLE_PROMO_FIELDS = frozenset(
    {
        "description",
        "min_order_amount",
        "max_discount_amount",
        "usage_limit",
        "per_user_limit",
        "valid_from",
        "valid_until",
        "applicable_services",
        "applicable_currencies",
    }
)
