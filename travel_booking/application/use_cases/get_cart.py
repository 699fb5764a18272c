import logging
from datetime import timedelta
from decimal import Decimal

from travel_booking.application.interfaces.clock import Clock
from travel_booking.application.interfaces.id_generator import IdGenerator
from travel_booking.application.interfaces.quote_repo import QuoteRepo
from travel_booking.application.interfaces.transaction_manager import TransactionManager
from travel_booking.domain.entities.quote import Quote, QuoteStatus

logger = logging.getLogger(__name__)


class DraftQuoteLoader:
    """
    Obtiene el borrador del usuario dentro de la transacción en curso.

    Lo crea si no existe; si el borrador venció lo marca expired y crea
    uno nuevo. Debe llamarse dentro de `TransactionManager.start()`.
    """

    def __init__(
        self,
        quote_repo: QuoteRepo,
        clock: Clock,
        id_generator: IdGenerator,
        currency: str,
        quote_ttl: timedelta | None = None,
    ) -> None:
        self._quote_repo = quote_repo
        self._clock = clock
        self._id_generator = id_generator
        self._currency = currency
        self._quote_ttl = quote_ttl

    async def load(self, user_id: str, for_update: bool = True) -> Quote:
        now = self._clock.now()
        quote = await self._quote_repo.get_draft(user_id, for_update=for_update)

        if quote is not None and quote.is_expired(now):
            quote.mark_expired()
            quote.updated_at = now
            await self._quote_repo.save(quote)
            logger.info("Draft quote expired", extra={"quote_id": quote.id, "user_id": user_id})
            quote = None

        if quote is None:
            quote = await self._quote_repo.create_draft(
                Quote(
                    id=self._id_generator.new_id(),
                    user_id=user_id,
                    status=QuoteStatus.DRAFT,
                    currency=self._currency,
                    expires_at=now + self._quote_ttl if self._quote_ttl else None,
                    created_at=now,
                    updated_at=now,
                )
            )
        return quote


class CartMutation:
    """Base de las operaciones que modifican el carrito y lo recalculan."""

    def __init__(
        self,
        quote_repo: QuoteRepo,
        draft_loader: DraftQuoteLoader,
        transaction_manager: TransactionManager,
        clock: Clock,
        tax_rate: Decimal,
    ) -> None:
        self._quote_repo = quote_repo
        self._draft_loader = draft_loader
        self._transaction_manager = transaction_manager
        self._clock = clock
        self._tax_rate = tax_rate
        self._logger = logging.getLogger(self.__class__.__module__)

    async def _recalculate_and_save(self, quote: Quote) -> Quote:
        quote.recalculate(self._tax_rate)
        quote.updated_at = self._clock.now()
        await self._quote_repo.save(quote)
        return quote


class GetCartUseCase:
    def __init__(
        self,
        draft_loader: DraftQuoteLoader,
        transaction_manager: TransactionManager,
    ) -> None:
        self._draft_loader = draft_loader
        self._transaction_manager = transaction_manager

    async def execute(self, user_id: str) -> Quote:
        async with self._transaction_manager.start():
            return await self._draft_loader.load(user_id, for_update=False)
