from travel_booking.domain.entities.quote import Quote, QuoteItem


class QuoteRepo:
    """Persistencia de cotizaciones; cada lectura trae el set de ítems persistido."""

    async def get_draft(self, user_id: str, for_update: bool = False) -> Quote | None:
        raise NotImplementedError

    async def get(self, quote_id: str, for_update: bool = False) -> Quote | None:
        raise NotImplementedError

    async def create_draft(self, quote: Quote) -> Quote:
        """Inserta un borrador; si otro request ganó la carrera retorna el existente."""
        raise NotImplementedError

    async def save(self, quote: Quote) -> None:
        """Persiste estado, montos y código aplicado (no los ítems)."""
        raise NotImplementedError

    async def add_item(self, item: QuoteItem) -> QuoteItem:
        raise NotImplementedError

    async def remove_item(self, quote_id: str, item_id: str) -> bool:
        raise NotImplementedError
