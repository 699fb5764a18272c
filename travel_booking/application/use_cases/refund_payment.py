import logging
from decimal import Decimal

from travel_booking.application.interfaces.clock import Clock
from travel_booking.application.interfaces.order_repo import OrderRepo
from travel_booking.application.interfaces.payment_repo import PaymentRepo
from travel_booking.application.interfaces.transaction_manager import TransactionManager
from travel_booking.domain.entities.order import OrderStatus
from travel_booking.domain.entities.payment import Payment
from travel_booking.domain.errors import PaymentNotFoundError


class RefundPaymentUseCase:
    """
    Reembolso total o parcial de un pago completado.

    Un reembolso total de una orden completed o cancelled la mueve a refunded.
    """

    def __init__(
        self,
        payment_repo: PaymentRepo,
        order_repo: OrderRepo,
        transaction_manager: TransactionManager,
        clock: Clock,
    ) -> None:
        self._payment_repo = payment_repo
        self._order_repo = order_repo
        self._transaction_manager = transaction_manager
        self._clock = clock
        self._logger = logging.getLogger(__name__)

    async def execute(self, payment_id: str, amount: Decimal | None = None) -> Payment:
        async with self._transaction_manager.start():
            payment = await self._payment_repo.get(payment_id, for_update=True)
            if payment is None:
                raise PaymentNotFoundError(payment_id)

            fully_refunded = payment.refund(amount)
            await self._payment_repo.save(payment)

            order_refunded = False
            if fully_refunded:
                order = await self._order_repo.get(payment.order_id, for_update=True)
                if order is not None and order.status in (OrderStatus.COMPLETED, OrderStatus.CANCELLED):
                    order.refund()
                    order.updated_at = self._clock.now()
                    await self._order_repo.save(order)
                    order_refunded = True

        self._logger.info(
            "Payment refunded",
            extra={
                "payment_id": payment.id,
                "status": payment.status.value,
                "refunded_amount": str(payment.refunded_amount),
                "order_refunded": order_refunded,
            },
        )
        return payment
