from dataclasses import dataclass

from travel_booking.application.use_cases.get_cart import CartMutation
from travel_booking.domain.entities.quote import Quote
from travel_booking.domain.errors import EmptyCartError, ExpiredCartItemsError


@dataclass
class CheckoutResult:
    quote: Quote
    checkout_url: str


class CheckoutCartUseCase(CartMutation):
    """
    Cierra el borrador: draft -> pending_payment.

    Es el único camino hacia pending_payment. Requiere al menos un ítem y
    ningún ítem vencido; si falla, la cotización sigue en draft.
    """

    async def execute(self, user_id: str) -> CheckoutResult:
        async with self._transaction_manager.start():
            quote = await self._draft_loader.load(user_id)
            if not quote.items:
                raise EmptyCartError()

            expired = quote.expired_items(self._clock.now())
            if expired:
                raise ExpiredCartItemsError([item.service_name for item in expired])

            quote.mark_pending_payment()
            quote = await self._recalculate_and_save(quote)

        self._logger.info(
            "Cart checked out",
            extra={"quote_id": quote.id, "user_id": user_id, "total": str(quote.total)},
        )
        return CheckoutResult(quote=quote, checkout_url=f"/payment/{quote.id}")
