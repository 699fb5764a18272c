from travel_booking.domain.entities.order import Order
from travel_booking.domain.entities.sub_booking import SubBooking


class OrderRepo:
    async def create(self, order: Order) -> Order:
        """Inserta la cabecera; raises OrderNumberConflictError si el número ya existe."""
        raise NotImplementedError

    async def add_sub_bookings(self, order_id: str, bookings: list[SubBooking]) -> None:
        raise NotImplementedError

    async def get(
        self, order_id: str, user_id: str | None = None, for_update: bool = False
    ) -> Order | None:
        """Retorna la orden con sus sub-reservas; con user_id filtra por dueño."""
        raise NotImplementedError

    async def list_by_user(self, user_id: str, offset: int, limit: int) -> tuple[list[Order], int]:
        """Órdenes del usuario, más recientes primero, y el total."""
        raise NotImplementedError

    async def get_sub_booking(
        self, order_id: str, booking_id: str, user_id: str
    ) -> SubBooking | None:
        raise NotImplementedError

    async def save(self, order: Order) -> None:
        """Persiste estado/pago/cancelación de la orden y el estado de sus sub-reservas."""
        raise NotImplementedError

    async def has_previous_orders(self, user_id: str, exclude_order_id: str | None = None) -> bool:
        """True si el usuario tiene alguna orden no cancelada (distinta de exclude_order_id)."""
        raise NotImplementedError
