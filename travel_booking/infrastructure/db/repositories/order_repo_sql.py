from sqlalchemy import func, insert, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from travel_booking.application.interfaces.order_repo import OrderRepo
from travel_booking.domain.entities.order import Order, OrderStatus
from travel_booking.domain.entities.sub_booking import BookingStatus, SubBooking
from travel_booking.domain.errors import OrderNumberConflictError
from travel_booking.infrastructure.db.mapping import as_decimal, row_values
from travel_booking.infrastructure.db.tables import orders, sub_bookings

ORDER_DATETIMES = ("paid_at", "cancelled_at", "created_at", "updated_at")
BOOKING_DATETIMES = ("service_date", "confirmed_at", "cancelled_at", "created_at")


class OrderRepoSQL(OrderRepo):
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, order: Order) -> Order:
        try:
            async with self._session.begin_nested():
                await self._session.execute(insert(orders).values(**self._order_values(order)))
        except IntegrityError:
            if await self._order_number_exists(order.order_number):
                raise OrderNumberConflictError(order.order_number) from None
            raise
        return order

    async def add_sub_bookings(self, order_id: str, bookings: list[SubBooking]) -> None:
        if not bookings:
            return
        rows = [{**self._booking_values(b), "order_id": order_id} for b in bookings]
        await self._session.execute(insert(sub_bookings), rows)

    async def get(
        self, order_id: str, user_id: str | None = None, for_update: bool = False
    ) -> Order | None:
        stmt = select(orders).where(orders.c.id == order_id)
        if user_id is not None:
            stmt = stmt.where(orders.c.user_id == user_id)
        if for_update:
            stmt = stmt.with_for_update()
        result = await self._session.execute(stmt)
        row = result.mappings().first()
        if not row:
            return None
        order = self._map_order(row)
        order.bookings = await self._load_bookings(order.id)
        return order

    async def list_by_user(self, user_id: str, offset: int, limit: int) -> tuple[list[Order], int]:
        count_stmt = select(func.count()).select_from(orders).where(orders.c.user_id == user_id)
        total = int((await self._session.execute(count_stmt)).scalar_one())

        stmt = (
            select(orders)
            .where(orders.c.user_id == user_id)
            .order_by(orders.c.created_at.desc(), orders.c.order_number.desc())
            .offset(offset)
            .limit(limit)
        )
        result = await self._session.execute(stmt)
        page = [self._map_order(row) for row in result.mappings().all()]
        for order in page:
            order.bookings = await self._load_bookings(order.id)
        return page, total

    async def get_sub_booking(
        self, order_id: str, booking_id: str, user_id: str
    ) -> SubBooking | None:
        stmt = (
            select(sub_bookings)
            .join(orders, orders.c.id == sub_bookings.c.order_id)
            .where(
                sub_bookings.c.id == booking_id,
                sub_bookings.c.order_id == order_id,
                orders.c.user_id == user_id,
            )
        )
        result = await self._session.execute(stmt)
        row = result.mappings().first()
        return self._map_booking(row) if row else None

    async def save(self, order: Order) -> None:
        values = self._order_values(order)
        for key in ("id", "user_id", "order_number", "created_at"):
            values.pop(key)
        await self._session.execute(update(orders).where(orders.c.id == order.id).values(**values))

        for booking in order.bookings:
            stmt = (
                update(sub_bookings)
                .where(sub_bookings.c.id == booking.id)
                .values(
                    status=BookingStatus(booking.status).value,
                    provider_booking_reference=booking.provider_booking_reference,
                    documents=booking.documents,
                    confirmed_at=booking.confirmed_at,
                    cancelled_at=booking.cancelled_at,
                )
            )
            await self._session.execute(stmt)

    async def has_previous_orders(self, user_id: str, exclude_order_id: str | None = None) -> bool:
        stmt = select(orders.c.id).where(
            orders.c.user_id == user_id,
            orders.c.status != OrderStatus.CANCELLED.value,
        )
        if exclude_order_id:
            stmt = stmt.where(orders.c.id != exclude_order_id)
        result = await self._session.execute(stmt.limit(1))
        return result.first() is not None

    async def _order_number_exists(self, order_number: str) -> bool:
        stmt = select(orders.c.id).where(orders.c.order_number == order_number)
        result = await self._session.execute(stmt)
        return result.first() is not None

    async def _load_bookings(self, order_id: str) -> list[SubBooking]:
        stmt = (
            select(sub_bookings)
            .where(sub_bookings.c.order_id == order_id)
            .order_by(sub_bookings.c.created_at, sub_bookings.c.id)
        )
        result = await self._session.execute(stmt)
        return [self._map_booking(row) for row in result.mappings().all()]

    def _map_order(self, row) -> Order:
        data = row_values(row, ORDER_DATETIMES)
        return Order(
            id=data["id"],
            user_id=data["user_id"],
            quote_id=data["quote_id"],
            order_number=data["order_number"],
            status=OrderStatus(data["status"]),
            subtotal=as_decimal(data["subtotal"]),
            discount=as_decimal(data["discount"]),
            taxes=as_decimal(data["taxes"]),
            total=as_decimal(data["total"]),
            currency=data["currency"],
            promo_code=data["promo_code"],
            payment_method=data["payment_method"],
            payment_reference=data["payment_reference"],
            paid_at=data["paid_at"],
            cancelled_at=data["cancelled_at"],
            cancellation_reason=data["cancellation_reason"],
            created_at=data["created_at"],
            updated_at=data["updated_at"],
        )

    def _map_booking(self, row) -> SubBooking:
        data = row_values(row, BOOKING_DATETIMES)
        return SubBooking(
            id=data["id"],
            order_id=data["order_id"],
            service_type=data["service_type"],
            title=data["title"],
            provider_booking_reference=data["provider_booking_reference"],
            status=BookingStatus(data["status"]),
            details=data["details"] or {},
            travelers=data["travelers"],
            price=as_decimal(data["price"]),
            currency=data["currency"],
            service_date=data["service_date"],
            documents=data["documents"],
            confirmed_at=data["confirmed_at"],
            cancelled_at=data["cancelled_at"],
            created_at=data["created_at"],
        )

    @staticmethod
    def _order_values(order: Order) -> dict:
        return {
            "id": order.id,
            "user_id": order.user_id,
            "quote_id": order.quote_id,
            "order_number": order.order_number,
            "status": OrderStatus(order.status).value,
            "subtotal": order.subtotal,
            "discount": order.discount,
            "taxes": order.taxes,
            "total": order.total,
            "currency": order.currency,
            "promo_code": order.promo_code,
            "payment_method": order.payment_method,
            "payment_reference": order.payment_reference,
            "paid_at": order.paid_at,
            "cancelled_at": order.cancelled_at,
            "cancellation_reason": order.cancellation_reason,
            "created_at": order.created_at,
            "updated_at": order.updated_at,
        }

    @staticmethod
    def _booking_values(booking: SubBooking) -> dict:
        return {
            "id": booking.id,
            "service_type": booking.service_type,
            "title": booking.title,
            "provider_booking_reference": booking.provider_booking_reference,
            "status": BookingStatus(booking.status).value,
            "details": booking.details,
            "travelers": booking.travelers,
            "price": booking.price,
            "currency": booking.currency,
            "service_date": booking.service_date,
            "documents": booking.documents,
            "confirmed_at": booking.confirmed_at,
            "cancelled_at": booking.cancelled_at,
            "created_at": booking.created_at,
        }
