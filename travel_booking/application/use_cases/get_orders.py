from dataclasses import dataclass

from travel_booking.application.interfaces.order_repo import OrderRepo
from travel_booking.domain.constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from travel_booking.domain.entities.order import Order
from travel_booking.domain.entities.sub_booking import SubBooking
from travel_booking.domain.errors import OrderNotFoundError, SubBookingNotFoundError


@dataclass
class OrderPage:
    items: list[Order]
    total: int
    page: int
    limit: int

    @property
    def total_pages(self) -> int:
        return (self.total + self.limit - 1) // self.limit if self.total else 0


class ListOrdersUseCase:
    """Órdenes del usuario, más recientes primero."""

    def __init__(self, order_repo: OrderRepo) -> None:
        self._order_repo = order_repo

    async def execute(self, user_id: str, page: int = 1, limit: int = DEFAULT_PAGE_SIZE) -> OrderPage:
        page = max(1, page)
        limit = min(max(1, limit), MAX_PAGE_SIZE)
        orders, total = await self._order_repo.list_by_user(
            user_id, offset=(page - 1) * limit, limit=limit
        )
        return OrderPage(items=orders, total=total, page=page, limit=limit)


class GetOrderUseCase:
    """Una orden del usuario; si pertenece a otro usuario se reporta como inexistente."""

    def __init__(self, order_repo: OrderRepo) -> None:
        self._order_repo = order_repo

    async def execute(self, user_id: str, order_id: str) -> Order:
        order = await self._order_repo.get(order_id, user_id=user_id)
        if order is None:
            raise OrderNotFoundError(order_id)
        return order


class GetSubBookingUseCase:
    def __init__(self, order_repo: OrderRepo) -> None:
        self._order_repo = order_repo

    async def execute(self, user_id: str, order_id: str, booking_id: str) -> SubBooking:
        booking = await self._order_repo.get_sub_booking(order_id, booking_id, user_id)
        if booking is None:
            raise SubBookingNotFoundError(booking_id)
        return booking
