import logging
from enum import Enum

from travel_booking.application.interfaces.clock import Clock
from travel_booking.application.interfaces.order_repo import OrderRepo
from travel_booking.application.interfaces.outbox_repo import OutboxRepo
from travel_booking.application.interfaces.payment_repo import PaymentRepo
from travel_booking.application.interfaces.transaction_manager import TransactionManager
from travel_booking.domain.constants import EVENT_PAYMENT_COMPLETED
from travel_booking.domain.entities.payment import Payment


class PaymentOutcome(str, Enum):
    SUCCESS = "success"
    FAILURE = "failure"


class HandlePaymentCallbackUseCase:
    """
    Aplica el resultado que reporta el gateway de pago.

    pending|processing -> completed (éxito) o failed (fallo). Los estados
    terminales rechazan el callback. Un payment_id desconocido se registra
    en el log y se reconoce sin cambiar nada.
    """

    def __init__(
        self,
        payment_repo: PaymentRepo,
        order_repo: OrderRepo,
        outbox_repo: OutboxRepo,
        transaction_manager: TransactionManager,
        clock: Clock,
    ) -> None:
        self._payment_repo = payment_repo
        self._order_repo = order_repo
        self._outbox_repo = outbox_repo
        self._transaction_manager = transaction_manager
        self._clock = clock
        self._logger = logging.getLogger(__name__)

    async def execute(
        self,
        payment_id: str,
        outcome: PaymentOutcome,
        gateway_reference: str | None = None,
        failure_reason: str | None = None,
    ) -> Payment | None:
        outcome = PaymentOutcome(outcome)
        async with self._transaction_manager.start():
            payment = await self._payment_repo.get(payment_id, for_update=True)
            if payment is None:
                self._logger.warning(
                    "Payment callback for unknown payment",
                    extra={"payment_id": payment_id, "outcome": outcome.value},
                )
                return None

            now = self._clock.now()
            if outcome == PaymentOutcome.SUCCESS:
                payment.complete(now, gateway_reference)
                await self._payment_repo.save(payment)
                await self._on_completed(payment)
            else:
                payment.fail(now, failure_reason, gateway_reference)
                await self._payment_repo.save(payment)

        self._logger.info(
            "Payment callback processed",
            extra={
                "payment_id": payment.id,
                "order_id": payment.order_id,
                "status": payment.status.value,
                "gateway_reference": payment.gateway_reference,
            },
        )
        return payment

    async def _on_completed(self, payment: Payment) -> None:
        order = await self._order_repo.get(payment.order_id, for_update=True)
        if order is not None:
            order.record_payment(payment.completed_at, payment.gateway_reference or payment.id)
            order.updated_at = payment.completed_at
            await self._order_repo.save(order)

        await self._outbox_repo.enqueue(
            event_type=EVENT_PAYMENT_COMPLETED,
            aggregate_type="payment",
            aggregate_code=payment.id,
            payload={
                "payment_id": payment.id,
                "order_id": payment.order_id,
                "order_number": order.order_number if order else None,
                "user_id": payment.user_id,
                "amount": str(payment.amount),
                "currency": payment.currency,
                "method": payment.method.value,
            },
        )
