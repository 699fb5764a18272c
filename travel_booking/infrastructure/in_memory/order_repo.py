import copy

from travel_booking.application.interfaces.order_repo import OrderRepo
from travel_booking.domain.entities.order import Order, OrderStatus
from travel_booking.domain.entities.sub_booking import SubBooking
from travel_booking.domain.errors import OrderNumberConflictError
from travel_booking.infrastructure.in_memory.store import SnapshotStore


class InMemoryOrderRepo(SnapshotStore, OrderRepo):
    _state_attrs = ("_orders", "_bookings")

    def __init__(self) -> None:
        self._orders: dict[str, Order] = {}
        self._bookings: dict[str, SubBooking] = {}

    def _hydrate(self, order: Order) -> Order:
        result = copy.deepcopy(order)
        result.bookings = [
            copy.deepcopy(b) for b in self._bookings.values() if b.order_id == order.id
        ]
        return result

    async def create(self, order: Order) -> Order:
        if any(o.order_number == order.order_number for o in self._orders.values()):
            raise OrderNumberConflictError(order.order_number)
        stored = copy.deepcopy(order)
        stored.bookings = []
        self._orders[order.id] = stored
        return order

    async def add_sub_bookings(self, order_id: str, bookings: list[SubBooking]) -> None:
        for booking in bookings:
            self._bookings[booking.id] = copy.deepcopy(booking)

    async def get(
        self, order_id: str, user_id: str | None = None, for_update: bool = False
    ) -> Order | None:
        order = self._orders.get(order_id)
        if order is None or (user_id is not None and order.user_id != user_id):
            return None
        return self._hydrate(order)

    async def list_by_user(self, user_id: str, offset: int, limit: int) -> tuple[list[Order], int]:
        mine = [o for o in self._orders.values() if o.user_id == user_id]
        # Más recientes primero; a igual timestamp, el último insertado primero
        orders = sorted(reversed(mine), key=lambda o: o.created_at, reverse=True)
        return [self._hydrate(o) for o in orders[offset : offset + limit]], len(orders)

    async def get_sub_booking(
        self, order_id: str, booking_id: str, user_id: str
    ) -> SubBooking | None:
        order = self._orders.get(order_id)
        booking = self._bookings.get(booking_id)
        if order is None or booking is None or order.user_id != user_id:
            return None
        if booking.order_id != order_id:
            return None
        return copy.deepcopy(booking)

    async def save(self, order: Order) -> None:
        stored = copy.deepcopy(order)
        stored.bookings = []
        self._orders[order.id] = stored
        for booking in order.bookings:
            self._bookings[booking.id] = copy.deepcopy(booking)

    async def has_previous_orders(self, user_id: str, exclude_order_id: str | None = None) -> bool:
        return any(
            o.user_id == user_id and o.status != OrderStatus.CANCELLED and o.id != exclude_order_id
            for o in self._orders.values()
        )

    # Helpers para tests
    def count(self) -> int:
        return len(self._orders)

    def booking_count(self) -> int:
        return len(self._bookings)
