from travel_booking.application.use_cases.get_cart import CartMutation
from travel_booking.domain.entities.quote import Quote


class RemoveCartPromoUseCase(CartMutation):
    async def execute(self, user_id: str) -> Quote:
        async with self._transaction_manager.start():
            quote = await self._draft_loader.load(user_id)
            quote.clear_promo()
            return await self._recalculate_and_save(quote)
