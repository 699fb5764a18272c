import copy

from travel_booking.application.interfaces.quote_repo import QuoteRepo
from travel_booking.domain.entities.quote import Quote, QuoteItem, QuoteStatus
from travel_booking.infrastructure.in_memory.store import SnapshotStore


class InMemoryQuoteRepo(SnapshotStore, QuoteRepo):
    _state_attrs = ("_quotes", "_items")

    def __init__(self) -> None:
        self._quotes: dict[str, Quote] = {}
        self._items: dict[str, QuoteItem] = {}

    def _hydrate(self, quote: Quote) -> Quote:
        result = copy.deepcopy(quote)
        result.items = [
            copy.deepcopy(item) for item in self._items.values() if item.quote_id == quote.id
        ]
        return result

    async def get_draft(self, user_id: str, for_update: bool = False) -> Quote | None:
        for quote in self._quotes.values():
            if quote.user_id == user_id and quote.status == QuoteStatus.DRAFT:
                return self._hydrate(quote)
        return None

    async def get(self, quote_id: str, for_update: bool = False) -> Quote | None:
        quote = self._quotes.get(quote_id)
        return self._hydrate(quote) if quote else None

    async def create_draft(self, quote: Quote) -> Quote:
        existing = await self.get_draft(quote.user_id)
        if existing is not None:
            return existing
        stored = copy.deepcopy(quote)
        stored.items = []
        self._quotes[quote.id] = stored
        return self._hydrate(stored)

    async def save(self, quote: Quote) -> None:
        stored = copy.deepcopy(quote)
        stored.items = []
        self._quotes[quote.id] = stored

    async def add_item(self, item: QuoteItem) -> QuoteItem:
        self._items[item.id] = copy.deepcopy(item)
        return item

    async def remove_item(self, quote_id: str, item_id: str) -> bool:
        item = self._items.get(item_id)
        if item is None or item.quote_id != quote_id:
            return False
        del self._items[item_id]
        return True
