import logging
from enum import Enum

from travel_booking.application.interfaces.clock import Clock
from travel_booking.application.interfaces.order_repo import OrderRepo
from travel_booking.application.interfaces.outbox_repo import OutboxRepo
from travel_booking.application.interfaces.transaction_manager import TransactionManager
from travel_booking.application.use_cases.create_order import order_notification_payload
from travel_booking.domain.constants import EVENT_ORDER_CONFIRMED
from travel_booking.domain.entities.order import Order, OrderStatus
from travel_booking.domain.entities.sub_booking import BookingStatus
from travel_booking.domain.errors import OrderNotFoundError


class FulfilmentAction(str, Enum):
    CONFIRM = "confirm"
    START_PROCESSING = "start_processing"
    COMPLETE = "complete"


ACTION_TARGETS = {
    FulfilmentAction.CONFIRM: OrderStatus.CONFIRMED,
    FulfilmentAction.START_PROCESSING: OrderStatus.PROCESSING,
    FulfilmentAction.COMPLETE: OrderStatus.COMPLETED,
}


class UpdateOrderStatusUseCase:
    """Transiciones de fulfilment (operación interna), validadas por la máquina de estados."""

    def __init__(
        self,
        order_repo: OrderRepo,
        outbox_repo: OutboxRepo,
        transaction_manager: TransactionManager,
        clock: Clock,
    ) -> None:
        self._order_repo = order_repo
        self._outbox_repo = outbox_repo
        self._transaction_manager = transaction_manager
        self._clock = clock
        self._logger = logging.getLogger(__name__)

    async def execute(self, order_id: str, action: FulfilmentAction) -> Order:
        action = FulfilmentAction(action)
        async with self._transaction_manager.start():
            order = await self._order_repo.get(order_id, for_update=True)
            if order is None:
                raise OrderNotFoundError(order_id)

            previous = OrderStatus(order.status)
            now = self._clock.now()
            order.transition_to(ACTION_TARGETS[action])
            order.updated_at = now

            for booking in order.bookings:
                if booking.status == BookingStatus.CANCELLED:
                    continue
                if action == FulfilmentAction.CONFIRM and booking.status == BookingStatus.PENDING:
                    booking.confirm(now)
                elif action == FulfilmentAction.COMPLETE:
                    booking.complete()

            await self._order_repo.save(order)

            if action == FulfilmentAction.CONFIRM:
                await self._outbox_repo.enqueue(
                    event_type=EVENT_ORDER_CONFIRMED,
                    aggregate_type="order",
                    aggregate_code=order.order_number,
                    payload=order_notification_payload(order),
                )

        self._logger.info(
            "Order status updated",
            extra={
                "order_id": order.id,
                "from_status": previous.value,
                "to_status": order.status.value,
            },
        )
        return order
