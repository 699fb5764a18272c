from travel_booking.application.use_cases.get_cart import CartMutation
from travel_booking.domain.entities.quote import Quote
from travel_booking.domain.errors import QuoteItemNotFoundError


class RemoveCartItemUseCase(CartMutation):
    async def execute(self, user_id: str, item_id: str) -> Quote:
        async with self._transaction_manager.start():
            quote = await self._draft_loader.load(user_id)
            if not any(item.id == item_id for item in quote.items):
                raise QuoteItemNotFoundError(item_id)

            await self._quote_repo.remove_item(quote.id, item_id)
            quote.items = [item for item in quote.items if item.id != item_id]
            quote = await self._recalculate_and_save(quote)

        self._logger.info("Cart item removed", extra={"quote_id": quote.id, "item_id": item_id})
        return quote
