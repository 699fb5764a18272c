"""
Fixtures compartidas de la suite.

Este módulo provee:
- Reloj e identificadores deterministas (FakeClock, FakeIdGenerator)
- Repositorios in-memory y los casos de uso armados sobre ellos
- Engine SQLite in-memory (aiosqlite) para los repositorios SQL
- Cliente HTTP de prueba (FastAPI TestClient) en modo in-memory
"""

from collections.abc import AsyncGenerator, Generator
from datetime import datetime, timezone
from decimal import Decimal

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

from travel_booking.api.dependencies import _in_memory_bundle, build_use_cases
from travel_booking.application.interfaces.clock import FakeClock
from travel_booking.application.interfaces.id_generator import FakeIdGenerator
from travel_booking.config import Settings, get_settings
from travel_booking.domain.entities.promo_code import PromoCode
from travel_booking.domain.value_objects.promo_type import PromoCodeType
from travel_booking.infrastructure.circuit_breaker import notification_breaker, search_breaker
from travel_booking.infrastructure.db.engine import build_engine, build_sessionmaker, create_schema
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

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"
NOW = datetime(2025, 1, 15, 12, 0, tzinfo=timezone.utc)
USER_ID = "user-1"


# ============================================================================
# CONFIGURACIÓN
# ============================================================================

@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        use_in_memory=True,
        tax_rate=Decimal("0.15"),
        default_currency="SAR",
        quote_ttl_hours=24,
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(NOW)


@pytest.fixture
def id_generator() -> FakeIdGenerator:
    return FakeIdGenerator()


# ============================================================================
# REPOSITORIOS IN-MEMORY
# ============================================================================

@pytest.fixture
def quote_repo() -> InMemoryQuoteRepo:
    return InMemoryQuoteRepo()


@pytest.fixture
def promo_code_repo() -> InMemoryPromoCodeRepo:
    return InMemoryPromoCodeRepo()


@pytest.fixture
def order_repo() -> InMemoryOrderRepo:
    return InMemoryOrderRepo()


@pytest.fixture
def payment_repo() -> InMemoryPaymentRepo:
    return InMemoryPaymentRepo()


@pytest.fixture
def outbox_repo(clock) -> InMemoryOutboxRepo:
    return InMemoryOutboxRepo(clock)


@pytest.fixture
def tx_manager(quote_repo, promo_code_repo, order_repo, payment_repo, outbox_repo):
    return InMemoryTransactionManager(
        quote_repo, promo_code_repo, order_repo, payment_repo, outbox_repo
    )


@pytest.fixture
def cache() -> InMemoryCache:
    return InMemoryCache()


@pytest.fixture
def dispatcher() -> RecordingNotificationDispatcher:
    return RecordingNotificationDispatcher()


@pytest.fixture
def use_cases(
    settings,
    clock,
    id_generator,
    quote_repo,
    promo_code_repo,
    order_repo,
    payment_repo,
    outbox_repo,
    tx_manager,
    cache,
    dispatcher,
) -> dict:
    """Todos los casos de uso armados sobre los repositorios in-memory del test."""
    return build_use_cases(
        settings,
        clock=clock,
        id_generator=id_generator,
        quote_repo=quote_repo,
        promo_code_repo=promo_code_repo,
        order_repo=order_repo,
        payment_repo=payment_repo,
        outbox_repo=outbox_repo,
        tx_manager=tx_manager,
        cache=cache,
        dispatcher=dispatcher,
    )


# ============================================================================
# DATOS DE PRUEBA
# ============================================================================

@pytest.fixture
def seed_promo(promo_code_repo, clock):
    """
    Inserta un código directamente en el repositorio.

    Por defecto: TRAVEL20, 20% con tope de 200, un uso por usuario.
    """

    async def _seed(code: str = "TRAVEL20", **overrides) -> PromoCode:
        data = {
            "id": f"promo-{code.lower()}",
            "code": code,
            "name": code.title(),
            "type": PromoCodeType.PERCENTAGE,
            "value": Decimal("20"),
            "max_discount_amount": Decimal("200.00"),
            "per_user_limit": 1,
            "created_at": clock.now(),
            "updated_at": clock.now(),
        }
        data.update(overrides)
        return await promo_code_repo.create(PromoCode(**data))

    return _seed


@pytest.fixture
def flight_item_payload() -> dict:
    return {
        "service_type": "flight",
        "service_id": "offer-ruh-jed-001",
        "service_name": "Riyadh to Jeddah",
        "service_details": {"airline": "Saudia", "flight_number": "SV1020"},
        "travelers": [
            {"first_name": "Sara", "last_name": "Ali", "date_of_birth": "1990-04-02"},
        ],
        "price": "1000.00",
        "currency": "SAR",
    }


# ============================================================================
# BASE DE DATOS (SQLite in-memory)
# ============================================================================

@pytest_asyncio.fixture
async def sql_engine() -> AsyncGenerator[AsyncEngine, None]:
    engine = build_engine(Settings(_env_file=None, database_url=TEST_DATABASE_URL, use_in_memory=False))
    await create_schema(engine)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(sql_engine) -> AsyncGenerator[AsyncSession, None]:
    async with build_sessionmaker(sql_engine)() as session:
        yield session


# ============================================================================
# CLIENTE HTTP
# ============================================================================

@pytest.fixture
def client(monkeypatch) -> Generator[TestClient, None, None]:
    """TestClient sobre la app en modo in-memory, con estado limpio por test."""
    from travel_booking.main import app

    monkeypatch.setenv("USE_IN_MEMORY", "true")
    monkeypatch.delenv("DATABASE_URL", raising=False)
    monkeypatch.delenv("FLIGHT_SEARCH_BASE_URL", raising=False)
    monkeypatch.delenv("HOTEL_SEARCH_BASE_URL", raising=False)
    get_settings.cache_clear()
    _in_memory_bundle.cache_clear()

    with TestClient(app) as test_client:
        yield test_client

    _in_memory_bundle.cache_clear()
    get_settings.cache_clear()


@pytest.fixture
def auth_headers() -> dict:
    return {"X-User-Id": USER_ID}


# ============================================================================
# HOOKS
# ============================================================================

@pytest.fixture(autouse=True)
def reset_circuit_breakers():
    """Evita que un breaker abierto por un test afecte al siguiente."""
    search_breaker.close()
    notification_breaker.close()
    yield
    search_breaker.close()
    notification_breaker.close()
