from collections.abc import AsyncGenerator
from datetime import timedelta
from functools import lru_cache
from typing import Any

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from travel_booking.api.deps import get_sessionmaker
from travel_booking.application.interfaces.clock import Clock, SystemClock
from travel_booking.application.interfaces.id_generator import IdGenerator, RealIdGenerator
from travel_booking.application.interfaces.payment_catalog import PaymentCatalog
from travel_booking.application.use_cases.add_cart_item import AddCartItemUseCase
from travel_booking.application.use_cases.apply_cart_promo import ApplyCartPromoUseCase
from travel_booking.application.use_cases.cancel_order import CancelOrderUseCase
from travel_booking.application.use_cases.checkout_cart import CheckoutCartUseCase
from travel_booking.application.use_cases.create_order import CreateOrderUseCase
from travel_booking.application.use_cases.get_cart import DraftQuoteLoader, GetCartUseCase
from travel_booking.application.use_cases.get_orders import (
    GetOrderUseCase,
    GetSubBookingUseCase,
    ListOrdersUseCase,
)
from travel_booking.application.use_cases.get_payment import GetPaymentUseCase
from travel_booking.application.use_cases.handle_payment_callback import (
    HandlePaymentCallbackUseCase,
)
from travel_booking.application.use_cases.initiate_payment import InitiatePaymentUseCase
from travel_booking.application.use_cases.list_payment_options import (
    ListBankAccountsUseCase,
    ListPaymentMethodsUseCase,
)
from travel_booking.application.use_cases.manage_promo_codes import (
    CreatePromoCodeUseCase,
    DeactivatePromoCodeUseCase,
    ListActivePromoCodesUseCase,
    UpdatePromoCodeUseCase,
)
from travel_booking.application.use_cases.redeem_promo_code import RedeemPromoCodeUseCase
from travel_booking.application.use_cases.refund_payment import RefundPaymentUseCase
from travel_booking.application.use_cases.remove_cart_item import RemoveCartItemUseCase
from travel_booking.application.use_cases.remove_cart_promo import RemoveCartPromoUseCase
from travel_booking.application.use_cases.search_offers import SearchOffersUseCase
from travel_booking.application.use_cases.update_order_status import UpdateOrderStatusUseCase
from travel_booking.application.use_cases.validate_promo_code import ValidatePromoCodeUseCase
from travel_booking.config import Settings, get_settings
from travel_booking.domain.constants import SEARCH_KIND_FLIGHTS, SEARCH_KIND_HOTELS
from travel_booking.infrastructure.cache.redis_cache import RedisCache
from travel_booking.infrastructure.db.repositories import (
    OrderRepoSQL,
    OutboxRepoSQL,
    PaymentRepoSQL,
    PromoCodeRepoSQL,
    QuoteRepoSQL,
)
from travel_booking.infrastructure.db.transaction_manager import SQLAlchemyTransactionManager
from travel_booking.infrastructure.gateways.mock_search_provider import (
    MockFlightSearchProvider,
    MockHotelSearchProvider,
)
from travel_booking.infrastructure.gateways.notification_dispatcher_http import (
    WebhookNotificationDispatcher,
)
from travel_booking.infrastructure.gateways.search_provider_http import HttpSearchProvider
from travel_booking.infrastructure.in_memory import (
    InMemoryCache,
    InMemoryOrderRepo,
    InMemoryOutboxRepo,
    InMemoryPaymentRepo,
    InMemoryPromoCodeRepo,
    InMemoryQuoteRepo,
    InMemoryTransactionManager,
    RecordingNotificationDispatcher,
)
from travel_booking.infrastructure.messaging.outbox_worker import OutboxWorker
from travel_booking.infrastructure.payment_catalog import StaticPaymentCatalog


async def get_session(
    settings: Settings = Depends(get_settings),
) -> AsyncGenerator[AsyncSession | None, None]:
    if settings.use_in_memory:
        yield None
        return
    async with get_sessionmaker()() as session:
        yield session


def get_current_user_id(
    user_id: str | None = Header(default=None, alias="X-User-Id"),
) -> str:
    """El servicio de identidad upstream inyecta el usuario autenticado."""
    if not user_id or not user_id.strip():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="X-User-Id header is required",
        )
    return user_id.strip()


@lru_cache(maxsize=1)
def _in_memory_bundle() -> dict[str, Any]:
    clock = SystemClock()
    quote_repo = InMemoryQuoteRepo()
    promo_code_repo = InMemoryPromoCodeRepo()
    order_repo = InMemoryOrderRepo()
    payment_repo = InMemoryPaymentRepo()
    outbox_repo = InMemoryOutboxRepo(clock)
    tx_manager = InMemoryTransactionManager(
        quote_repo, promo_code_repo, order_repo, payment_repo, outbox_repo
    )
    return {
        "clock": clock,
        "id_generator": RealIdGenerator(),
        "quote_repo": quote_repo,
        "promo_code_repo": promo_code_repo,
        "order_repo": order_repo,
        "payment_repo": payment_repo,
        "outbox_repo": outbox_repo,
        "tx_manager": tx_manager,
        "cache": InMemoryCache(),
        "dispatcher": RecordingNotificationDispatcher(),
    }


@lru_cache(maxsize=1)
def _shared_cache(redis_url: str) -> RedisCache:
    return RedisCache(redis_url)


def _search_providers(settings: Settings) -> dict[str, Any]:
    providers: dict[str, Any] = {}
    if settings.flight_search_base_url:
        providers[SEARCH_KIND_FLIGHTS] = HttpSearchProvider(
            name="flights",
            base_url=settings.flight_search_base_url,
            path=settings.flight_search_path,
            api_key=settings.search_api_key,
            timeout_seconds=settings.search_timeout_seconds,
        )
    if settings.hotel_search_base_url:
        providers[SEARCH_KIND_HOTELS] = HttpSearchProvider(
            name="hotels",
            base_url=settings.hotel_search_base_url,
            path=settings.hotel_search_path,
            api_key=settings.search_api_key,
            timeout_seconds=settings.search_timeout_seconds,
        )
    return providers


def build_use_cases(
    settings: Settings,
    *,
    clock: Clock,
    id_generator: IdGenerator,
    quote_repo,
    promo_code_repo,
    order_repo,
    payment_repo,
    outbox_repo,
    tx_manager,
    cache,
    dispatcher,
    payment_catalog: PaymentCatalog | None = None,
) -> dict[str, Any]:
    """Arma los casos de uso sobre un conjunto de repositorios (SQL o in-memory)."""
    payment_catalog = payment_catalog or StaticPaymentCatalog.from_settings(settings)
    tax_rate = settings.tax_rate
    currency = settings.default_currency.upper()
    quote_ttl = timedelta(hours=settings.quote_ttl_hours) if settings.quote_ttl_hours else None

    draft_loader = DraftQuoteLoader(
        quote_repo=quote_repo,
        clock=clock,
        id_generator=id_generator,
        currency=currency,
        quote_ttl=quote_ttl,
    )
    cart_deps = {
        "quote_repo": quote_repo,
        "draft_loader": draft_loader,
        "transaction_manager": tx_manager,
        "clock": clock,
        "tax_rate": tax_rate,
    }
    validator = ValidatePromoCodeUseCase(
        promo_code_repo=promo_code_repo, order_repo=order_repo, clock=clock
    )
    redeemer = RedeemPromoCodeUseCase(
        promo_code_repo=promo_code_repo,
        validator=validator,
        transaction_manager=tx_manager,
        clock=clock,
        id_generator=id_generator,
    )

    worker = OutboxWorker(
        outbox_repo=outbox_repo,
        transaction_manager=tx_manager,
        clock=clock,
        batch_size=settings.outbox_batch_size,
        lock_duration_seconds=settings.outbox_lock_seconds,
        max_retries=settings.outbox_max_retries,
    )
    worker.register_dispatcher(dispatcher)

    return {
        # Carrito
        "get_cart": GetCartUseCase(draft_loader=draft_loader, transaction_manager=tx_manager),
        "add_cart_item": AddCartItemUseCase(id_generator=id_generator, **cart_deps),
        "remove_cart_item": RemoveCartItemUseCase(**cart_deps),
        "apply_cart_promo": ApplyCartPromoUseCase(
            promo_code_repo=promo_code_repo, validator=validator, **cart_deps
        ),
        "remove_cart_promo": RemoveCartPromoUseCase(**cart_deps),
        "checkout_cart": CheckoutCartUseCase(**cart_deps),
        # Códigos promocionales
        "validate_promo": validator,
        "list_active_promos": ListActivePromoCodesUseCase(
            promo_code_repo=promo_code_repo, clock=clock
        ),
        "create_promo": CreatePromoCodeUseCase(
            promo_code_repo=promo_code_repo,
            transaction_manager=tx_manager,
            clock=clock,
            id_generator=id_generator,
        ),
        "update_promo": UpdatePromoCodeUseCase(
            promo_code_repo=promo_code_repo, transaction_manager=tx_manager, clock=clock
        ),
        "deactivate_promo": DeactivatePromoCodeUseCase(
            promo_code_repo=promo_code_repo, transaction_manager=tx_manager, clock=clock
        ),
        # Órdenes
        "create_order": CreateOrderUseCase(
            order_repo=order_repo,
            quote_repo=quote_repo,
            promo_code_repo=promo_code_repo,
            outbox_repo=outbox_repo,
            validator=validator,
            redeemer=redeemer,
            transaction_manager=tx_manager,
            clock=clock,
            id_generator=id_generator,
            tax_rate=tax_rate,
            default_currency=currency,
            max_attempts=settings.order_number_max_attempts,
        ),
        "list_orders": ListOrdersUseCase(order_repo=order_repo),
        "get_order": GetOrderUseCase(order_repo=order_repo),
        "get_sub_booking": GetSubBookingUseCase(order_repo=order_repo),
        "cancel_order": CancelOrderUseCase(
            order_repo=order_repo, transaction_manager=tx_manager, clock=clock
        ),
        "update_order_status": UpdateOrderStatusUseCase(
            order_repo=order_repo,
            outbox_repo=outbox_repo,
            transaction_manager=tx_manager,
            clock=clock,
        ),
        # Pagos
        "initiate_payment": InitiatePaymentUseCase(
            payment_repo=payment_repo,
            order_repo=order_repo,
            transaction_manager=tx_manager,
            clock=clock,
            id_generator=id_generator,
            payment_catalog=payment_catalog,
        ),
        "get_payment": GetPaymentUseCase(payment_repo=payment_repo),
        "list_payment_methods": ListPaymentMethodsUseCase(payment_catalog=payment_catalog),
        "list_bank_accounts": ListBankAccountsUseCase(payment_catalog=payment_catalog),
        "payment_callback": HandlePaymentCallbackUseCase(
            payment_repo=payment_repo,
            order_repo=order_repo,
            outbox_repo=outbox_repo,
            transaction_manager=tx_manager,
            clock=clock,
        ),
        "refund_payment": RefundPaymentUseCase(
            payment_repo=payment_repo,
            order_repo=order_repo,
            transaction_manager=tx_manager,
            clock=clock,
        ),
        # Búsqueda
        "search_offers": SearchOffersUseCase(
            providers=_search_providers(settings),
            fallback_providers={
                SEARCH_KIND_FLIGHTS: MockFlightSearchProvider(currency),
                SEARCH_KIND_HOTELS: MockHotelSearchProvider(currency),
            },
            cache=cache,
            cache_ttl_seconds=settings.search_cache_ttl_seconds,
        ),
        # Outbox
        "process_outbox": worker,
    }


def get_use_cases(
    settings: Settings = Depends(get_settings),
    session: AsyncSession | None = Depends(get_session),
) -> dict[str, Any]:
    if settings.use_in_memory:
        bundle = _in_memory_bundle()
        return build_use_cases(
            settings,
            clock=bundle["clock"],
            id_generator=bundle["id_generator"],
            quote_repo=bundle["quote_repo"],
            promo_code_repo=bundle["promo_code_repo"],
            order_repo=bundle["order_repo"],
            payment_repo=bundle["payment_repo"],
            outbox_repo=bundle["outbox_repo"],
            tx_manager=bundle["tx_manager"],
            cache=bundle["cache"],
            dispatcher=bundle["dispatcher"],
        )

    if not session:
        raise RuntimeError("DB session not available")

    clock = SystemClock()
    if settings.notifications_webhook_url:
        dispatcher = WebhookNotificationDispatcher(
            webhook_url=settings.notifications_webhook_url,
            timeout_seconds=settings.notifications_timeout_seconds,
        )
    else:
        dispatcher = RecordingNotificationDispatcher()

    return build_use_cases(
        settings,
        clock=clock,
        id_generator=RealIdGenerator(),
        quote_repo=QuoteRepoSQL(session),
        promo_code_repo=PromoCodeRepoSQL(session),
        order_repo=OrderRepoSQL(session),
        payment_repo=PaymentRepoSQL(session),
        outbox_repo=OutboxRepoSQL(session, clock),
        tx_manager=SQLAlchemyTransactionManager(session),
        cache=_shared_cache(settings.redis_url),
        dispatcher=dispatcher,
    )
