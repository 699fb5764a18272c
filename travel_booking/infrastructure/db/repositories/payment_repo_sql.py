from sqlalchemy import insert, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from travel_booking.application.interfaces.payment_repo import PaymentRepo
from travel_booking.domain.entities.payment import Payment, PaymentMethod, PaymentStatus
from travel_booking.domain.errors import DuplicateIdempotencyKeyError
from travel_booking.infrastructure.db.mapping import as_decimal, row_values
from travel_booking.infrastructure.db.tables import payments

PAYMENT_DATETIMES = ("created_at", "completed_at", "failed_at")


class PaymentRepoSQL(PaymentRepo):
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, payment: Payment) -> Payment:
        stmt = insert(payments).values(
            id=payment.id,
            user_id=payment.user_id,
            order_id=payment.order_id,
            idempotency_key=payment.idempotency_key,
            amount=payment.amount,
            currency=payment.currency,
            method=PaymentMethod(payment.method).value,
            status=PaymentStatus(payment.status).value,
            gateway_reference=payment.gateway_reference,
            failure_reason=payment.failure_reason,
            refunded_amount=payment.refunded_amount,
            created_at=payment.created_at,
            completed_at=payment.completed_at,
            failed_at=payment.failed_at,
        )
        try:
            # El perdedor de la carrera revierte solo el savepoint y relee al ganador
            async with self._session.begin_nested():
                await self._session.execute(stmt)
        except IntegrityError:
            raise DuplicateIdempotencyKeyError(payment.idempotency_key) from None
        return payment

    async def get(self, payment_id: str, for_update: bool = False) -> Payment | None:
        stmt = select(payments).where(payments.c.id == payment_id)
        if for_update:
            stmt = stmt.with_for_update()
        result = await self._session.execute(stmt)
        row = result.mappings().first()
        return self._map_payment(row) if row else None

    async def get_by_idempotency_key(self, idem_key: str) -> Payment | None:
        stmt = select(payments).where(payments.c.idempotency_key == idem_key)
        result = await self._session.execute(stmt)
        row = result.mappings().first()
        return self._map_payment(row) if row else None

    async def save(self, payment: Payment) -> None:
        stmt = (
            update(payments)
            .where(payments.c.id == payment.id)
            .values(
                status=PaymentStatus(payment.status).value,
                gateway_reference=payment.gateway_reference,
                failure_reason=payment.failure_reason,
                refunded_amount=payment.refunded_amount,
                completed_at=payment.completed_at,
                failed_at=payment.failed_at,
            )
        )
        await self._session.execute(stmt)

    def _map_payment(self, row) -> Payment:
        data = row_values(row, PAYMENT_DATETIMES)
        return Payment(
            id=data["id"],
            user_id=data["user_id"],
            order_id=data["order_id"],
            idempotency_key=data["idempotency_key"],
            amount=as_decimal(data["amount"]),
            currency=data["currency"],
            method=PaymentMethod(data["method"]),
            status=PaymentStatus(data["status"]),
            gateway_reference=data["gateway_reference"],
            failure_reason=data["failure_reason"],
            refunded_amount=as_decimal(data["refunded_amount"]),
            created_at=data["created_at"],
            completed_at=data["completed_at"],
            failed_at=data["failed_at"],
        )
