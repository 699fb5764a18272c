from sqlalchemy import delete, insert, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from travel_booking.application.interfaces.quote_repo import QuoteRepo
from travel_booking.domain.entities.quote import Quote, QuoteItem, QuoteStatus, ServiceType
from travel_booking.domain.value_objects.promo_type import PromoCodeType
from travel_booking.infrastructure.db.mapping import as_decimal, row_values
from travel_booking.infrastructure.db.tables import quote_items, quotes

QUOTE_DATETIMES = ("expires_at", "created_at", "updated_at")
ITEM_DATETIMES = ("expires_at", "created_at")


class QuoteRepoSQL(QuoteRepo):
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_draft(self, user_id: str, for_update: bool = False) -> Quote | None:
        stmt = select(quotes).where(
            quotes.c.user_id == user_id,
            quotes.c.status == QuoteStatus.DRAFT.value,
        )
        if for_update:
            stmt = stmt.with_for_update()
        result = await self._session.execute(stmt)
        row = result.mappings().first()
        return await self._hydrate(row) if row else None

    async def get(self, quote_id: str, for_update: bool = False) -> Quote | None:
        stmt = select(quotes).where(quotes.c.id == quote_id)
        if for_update:
            stmt = stmt.with_for_update()
        result = await self._session.execute(stmt)
        row = result.mappings().first()
        return await self._hydrate(row) if row else None

    async def create_draft(self, quote: Quote) -> Quote:
        try:
            # Savepoint: si otro request creó el borrador, solo se revierte el insert
            async with self._session.begin_nested():
                await self._session.execute(insert(quotes).values(**self._quote_values(quote)))
        except IntegrityError:
            winner = await self.get_draft(quote.user_id, for_update=True)
            if winner is None:
                raise
            return winner
        quote.items = []
        return quote

    async def save(self, quote: Quote) -> None:
        values = self._quote_values(quote)
        values.pop("id")
        values.pop("created_at")
        stmt = update(quotes).where(quotes.c.id == quote.id).values(**values)
        await self._session.execute(stmt)

    async def add_item(self, item: QuoteItem) -> QuoteItem:
        stmt = insert(quote_items).values(
            id=item.id,
            quote_id=item.quote_id,
            service_type=ServiceType(item.service_type).value,
            service_id=item.service_id,
            service_name=item.service_name,
            service_details=item.service_details,
            travelers=item.travelers,
            price=item.price,
            currency=item.currency,
            expires_at=item.expires_at,
            created_at=item.created_at,
        )
        await self._session.execute(stmt)
        return item

    async def remove_item(self, quote_id: str, item_id: str) -> bool:
        stmt = delete(quote_items).where(
            quote_items.c.quote_id == quote_id,
            quote_items.c.id == item_id,
        )
        result = await self._session.execute(stmt)
        return result.rowcount > 0

    async def _hydrate(self, row) -> Quote:
        data = row_values(row, QUOTE_DATETIMES)
        stmt = (
            select(quote_items)
            .where(quote_items.c.quote_id == data["id"])
            .order_by(quote_items.c.created_at, quote_items.c.id)
        )
        result = await self._session.execute(stmt)
        items = [self._map_item(item_row) for item_row in result.mappings().all()]
        return Quote(
            id=data["id"],
            user_id=data["user_id"],
            status=QuoteStatus(data["status"]),
            subtotal=as_decimal(data["subtotal"]),
            discount=as_decimal(data["discount"]),
            taxes=as_decimal(data["taxes"]),
            total=as_decimal(data["total"]),
            currency=data["currency"],
            promo_code=data["promo_code"],
            promo_type=PromoCodeType(data["promo_type"]) if data["promo_type"] else None,
            promo_value=as_decimal(data["promo_value"]),
            promo_max_discount=as_decimal(data["promo_max_discount"]),
            expires_at=data["expires_at"],
            lock_version=data["lock_version"] or 0,
            created_at=data["created_at"],
            updated_at=data["updated_at"],
            items=items,
        )

    def _map_item(self, row) -> QuoteItem:
        data = row_values(row, ITEM_DATETIMES)
        return QuoteItem(
            id=data["id"],
            quote_id=data["quote_id"],
            service_type=ServiceType(data["service_type"]),
            service_id=data["service_id"],
            service_name=data["service_name"],
            service_details=data["service_details"] or {},
            travelers=data["travelers"],
            price=as_decimal(data["price"]),
            currency=data["currency"],
            expires_at=data["expires_at"],
            created_at=data["created_at"],
        )

    @staticmethod
    def _quote_values(quote: Quote) -> dict:
        return {
            "id": quote.id,
            "user_id": quote.user_id,
            "status": QuoteStatus(quote.status).value,
            "subtotal": quote.subtotal,
            "discount": quote.discount,
            "taxes": quote.taxes,
            "total": quote.total,
            "currency": quote.currency,
            "promo_code": quote.promo_code,
            "promo_type": PromoCodeType(quote.promo_type).value if quote.promo_type else None,
            "promo_value": quote.promo_value,
            "promo_max_discount": quote.promo_max_discount,
            "expires_at": quote.expires_at,
            "lock_version": quote.lock_version,
            "created_at": quote.created_at,
            "updated_at": quote.updated_at,
        }
