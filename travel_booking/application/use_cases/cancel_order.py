import logging

from travel_booking.application.interfaces.clock import Clock
from travel_booking.application.interfaces.order_repo import OrderRepo
from travel_booking.application.interfaces.transaction_manager import TransactionManager
from travel_booking.domain.entities.order import Order
from travel_booking.domain.errors import OrderNotFoundError


class CancelOrderUseCase:
    """
    Cancela una orden y todas sus sub-reservas en la misma transacción.

    Rechaza órdenes ya canceladas o completadas.
    """

    def __init__(
        self,
        order_repo: OrderRepo,
        transaction_manager: TransactionManager,
        clock: Clock,
    ) -> None:
        self._order_repo = order_repo
        self._transaction_manager = transaction_manager
        self._clock = clock
        self._logger = logging.getLogger(__name__)

    async def execute(self, user_id: str, order_id: str, reason: str | None = None) -> Order:
        async with self._transaction_manager.start():
            order = await self._order_repo.get(order_id, user_id=user_id, for_update=True)
            if order is None:
                raise OrderNotFoundError(order_id)

            now = self._clock.now()
            order.cancel(now, reason)
            order.updated_at = now
            await self._order_repo.save(order)

        self._logger.info(
            "Order cancelled",
            extra={
                "order_id": order.id,
                "order_number": order.order_number,
                "user_id": user_id,
                "bookings": len(order.bookings),
            },
        )
        return order
