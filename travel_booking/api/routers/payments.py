from fastapi import APIRouter, Depends, Header, status

from travel_booking.api.dependencies import get_current_user_id, get_use_cases
from travel_booking.api.schemas.payments import (
    BankAccountResponse,
    InitiatePaymentRequest,
    PaymentCallbackRequest,
    PaymentCallbackResponse,
    PaymentMethodResponse,
    PaymentResponse,
    RefundPaymentRequest,
)
from travel_booking.infrastructure.db.retry import retry_on_deadlock

router = APIRouter()


@router.post("/payments", response_model=PaymentResponse, status_code=status.HTTP_201_CREATED)
async def initiate_payment(
    payload: InitiatePaymentRequest,
    idempotency_key: str | None = Header(default=None, alias="Idempotency-Key"),
    user_id: str = Depends(get_current_user_id),
    use_cases=Depends(get_use_cases),
):
    """Sin Idempotency-Key se genera una; con la misma key se retorna el mismo pago."""
    return await retry_on_deadlock(
        lambda: use_cases["initiate_payment"].execute(
            user_id=user_id,
            order_id=payload.order_id,
            amount=payload.amount,
            currency=payload.currency,
            method=payload.method,
            idempotency_key=idempotency_key,
        )
    )


@router.get("/payments/methods", response_model=list[PaymentMethodResponse])
async def list_payment_methods(use_cases=Depends(get_use_cases)):
    return await use_cases["list_payment_methods"].execute()


@router.get("/payments/bank-accounts", response_model=list[BankAccountResponse])
async def list_bank_accounts(use_cases=Depends(get_use_cases)):
    """Datos para transferencias manuales; incluir el número de orden en la referencia."""
    return await use_cases["list_bank_accounts"].execute()


@router.post("/payments/webhook", response_model=PaymentCallbackResponse)
async def payment_webhook(
    payload: PaymentCallbackRequest,
    use_cases=Depends(get_use_cases),
) -> PaymentCallbackResponse:
    payment = await use_cases["payment_callback"].execute(
        payment_id=payload.payment_id,
        outcome=payload.outcome,
        gateway_reference=payload.gateway_reference,
        failure_reason=payload.failure_reason,
    )
    return PaymentCallbackResponse(
        received=True,
        payment_id=payload.payment_id,
        status=payment.status if payment else None,
    )


@router.get("/payments/{payment_id}", response_model=PaymentResponse)
async def get_payment(
    payment_id: str,
    user_id: str = Depends(get_current_user_id),
    use_cases=Depends(get_use_cases),
):
    return await use_cases["get_payment"].execute(user_id=user_id, payment_id=payment_id)


@router.post("/admin/payments/{payment_id}/refund", response_model=PaymentResponse)
async def refund_payment(
    payment_id: str,
    payload: RefundPaymentRequest | None = None,
    use_cases=Depends(get_use_cases),
):
    amount = payload.amount if payload else None
    return await use_cases["refund_payment"].execute(payment_id=payment_id, amount=amount)
