from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, constr

from travel_booking.api.schemas.common import CurrencyCode, Money
from travel_booking.application.use_cases.handle_payment_callback import PaymentOutcome
from travel_booking.domain.entities.payment import PaymentMethod, PaymentStatus
from travel_booking.domain.entities.payment_option import ProcessingFeeType


class InitiatePaymentRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    order_id: constr(strip_whitespace=True, min_length=1)
    amount: Money
    currency: CurrencyCode
    method: PaymentMethod


class PaymentCallbackRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    payment_id: constr(strip_whitespace=True, min_length=1)
    outcome: PaymentOutcome
    gateway_reference: str | None = None
    failure_reason: constr(max_length=500) | None = None


class RefundPaymentRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    amount: Money | None = None


class PaymentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    order_id: str
    idempotency_key: str
    amount: Money
    currency: str
    method: PaymentMethod
    status: PaymentStatus
    gateway_reference: str | None = None
    failure_reason: str | None = None
    refunded_amount: Money
    requires_3ds: bool
    redirect_url: str
    created_at: datetime | None = None
    completed_at: datetime | None = None
    failed_at: datetime | None = None


class PaymentCallbackResponse(BaseModel):
    received: bool
    payment_id: str
    status: PaymentStatus | None = None


class ProcessingFeeResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    type: ProcessingFeeType
    value: Decimal


class PaymentMethodResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    method: PaymentMethod
    name: str
    description: str | None = None
    icon: str | None = None
    enabled: bool
    requires_verification: bool
    min_amount: Money | None = None
    max_amount: Money | None = None
    processing_fee: ProcessingFeeResponse | None = None


class BankAccountResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    bank_name: str
    account_name: str
    iban: str
    swift_code: str | None = None
    instructions: str | None = None
    is_primary: bool
