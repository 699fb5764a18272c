"""
Repositorios SQL sobre SQLite in-memory (aiosqlite).

Cada paso abre su propia sesión, igual que un request HTTP.
"""

from contextlib import asynccontextmanager
from decimal import Decimal
from unittest.mock import AsyncMock

import pytest
from sqlalchemy import func, select

from travel_booking.api.dependencies import build_use_cases
from travel_booking.application.interfaces.outbox_repo import OUTBOX_IN_PROGRESS
from travel_booking.application.use_cases.add_cart_item import AddCartItemCommand
from travel_booking.application.use_cases.create_order import CreateOrderCommand, OrderItemInput
from travel_booking.application.use_cases.handle_payment_callback import PaymentOutcome
from travel_booking.application.use_cases.manage_promo_codes import PromoCodeInput
from travel_booking.domain.constants import EVENT_PAYMENT_COMPLETED
from travel_booking.domain.entities.order import OrderStatus
from travel_booking.domain.entities.payment import PaymentMethod, PaymentStatus
from travel_booking.domain.entities.promo_code import PromoCode, PromoCodeUsage
from travel_booking.domain.entities.quote import Quote, QuoteStatus, ServiceType
from travel_booking.domain.errors import DuplicatePromoCodeError, PromoCodeNotApplicableError
from travel_booking.domain.value_objects.promo_type import PromoCodeType
from travel_booking.infrastructure.db.engine import build_sessionmaker
from travel_booking.infrastructure.db.repositories import (
    OrderRepoSQL,
    OutboxRepoSQL,
    PaymentRepoSQL,
    PromoCodeRepoSQL,
    QuoteRepoSQL,
)
from travel_booking.infrastructure.db.tables import orders, promo_code_usages
from travel_booking.infrastructure.db.transaction_manager import SQLAlchemyTransactionManager
from travel_booking.infrastructure.in_memory import InMemoryCache

USER = "user-1"


@pytest.fixture
def step(sql_engine, settings, clock, id_generator, dispatcher):
    """Abre una sesión nueva y arma los casos de uso SQL sobre ella."""
    sessionmaker = build_sessionmaker(sql_engine)
    cache = InMemoryCache()

    @asynccontextmanager
    async def _step():
        async with sessionmaker() as session:
            yield build_use_cases(
                settings,
                clock=clock,
                id_generator=id_generator,
                quote_repo=QuoteRepoSQL(session),
                promo_code_repo=PromoCodeRepoSQL(session),
                order_repo=OrderRepoSQL(session),
                payment_repo=PaymentRepoSQL(session),
                outbox_repo=OutboxRepoSQL(session, clock),
                tx_manager=SQLAlchemyTransactionManager(session),
                cache=cache,
                dispatcher=dispatcher,
            )

    return _step


def _promo_input(code: str = "TRAVEL20", **overrides) -> PromoCodeInput:
    data = {
        "code": code,
        "name": "Travel 20",
        "type": PromoCodeType.PERCENTAGE,
        "value": Decimal("20"),
        "max_discount_amount": Decimal("200.00"),
    }
    data.update(overrides)
    return PromoCodeInput(**data)


async def _count(sql_engine, table) -> int:
    async with build_sessionmaker(sql_engine)() as session:
        return int((await session.execute(select(func.count()).select_from(table))).scalar_one())


class TestCheckoutToPaymentFlow:
    async def test_full_flow(self, step, sql_engine, dispatcher):
        async with step() as uc:
            await uc["create_promo"].execute(_promo_input())
        async with step() as uc:
            await uc["add_cart_item"].execute(
                USER,
                AddCartItemCommand(
                    service_type=ServiceType.HOTEL,
                    service_id="htl-1",
                    service_name="Al Haram View Suites",
                    service_details={"nights": 3},
                    travelers=[{"first_name": "Sara", "last_name": "Ali"}],
                    price=Decimal("3000.00"),
                ),
            )
        async with step() as uc:
            quote = await uc["apply_cart_promo"].execute(USER, "travel20")
        assert quote.discount == Decimal("200.00")
        assert quote.total == Decimal("3220.00")

        async with step() as uc:
            checkout = await uc["checkout_cart"].execute(USER)
        async with step() as uc:
            order = await uc["create_order"].execute(
                CreateOrderCommand(user_id=USER, quote_id=checkout.quote.id)
            )
        assert order.total == Decimal("3220.00")

        async with step() as uc:
            payment = await uc["initiate_payment"].execute(
                USER, order.id, order.total, "SAR", PaymentMethod.MADA, "idem-flow"
            )
        async with step() as uc:
            await uc["payment_callback"].execute(payment.id, PaymentOutcome.SUCCESS, "gw-1")

        async with step() as uc:
            stored = await uc["get_order"].execute(USER, order.id)
            paid = await uc["get_payment"].execute(USER, payment.id)
        async with build_sessionmaker(sql_engine)() as session:
            paid_quote = await QuoteRepoSQL(session).get(checkout.quote.id)
        assert stored.paid_at is not None
        assert stored.bookings[0].details["nights"] == 3
        assert paid.status == PaymentStatus.COMPLETED
        assert paid_quote.status == QuoteStatus.PAID
        assert await _count(sql_engine, promo_code_usages) == 1

        async with step() as uc:
            result = await uc["process_outbox"].process_batch()
        assert result.succeeded == 1
        assert dispatcher.sent[0][0] == EVENT_PAYMENT_COMPLETED

    async def test_order_number_collision_is_retried(self, step, id_generator):
        item = OrderItemInput(service_type=ServiceType.FLIGHT, title="RUH - JED", price=Decimal("100.00"))
        id_generator.queue_order_numbers("ORD-DUP-0001", "ORD-DUP-0001")

        async with step() as uc:
            first = await uc["create_order"].execute(CreateOrderCommand(user_id=USER, items=[item]))
        async with step() as uc:
            second = await uc["create_order"].execute(CreateOrderCommand(user_id=USER, items=[item]))

        assert first.order_number == "ORD-DUP-0001"
        assert second.order_number == "ORD-TEST-0001"
        async with step() as uc:
            page = await uc["list_orders"].execute(USER)
        assert page.total == 2

    async def test_failed_redemption_rolls_back_order(self, step, sql_engine, monkeypatch):
        async with step() as uc:
            await uc["create_promo"].execute(_promo_input())
        monkeypatch.setattr(PromoCodeRepoSQL, "increment_usage", AsyncMock(return_value=False))

        async with step() as uc:
            with pytest.raises(PromoCodeNotApplicableError):
                await uc["create_order"].execute(
                    CreateOrderCommand(
                        user_id=USER,
                        promo_code="TRAVEL20",
                        items=[
                            OrderItemInput(
                                service_type=ServiceType.FLIGHT, title="RUH - JED", price=Decimal("1000.00")
                            )
                        ],
                    )
                )

        assert await _count(sql_engine, orders) == 0
        assert await _count(sql_engine, promo_code_usages) == 0

    async def test_payment_replay(self, step):
        item = OrderItemInput(service_type=ServiceType.FLIGHT, title="RUH - JED", price=Decimal("100.00"))
        async with step() as uc:
            order = await uc["create_order"].execute(CreateOrderCommand(user_id=USER, items=[item]))

        payments = []
        for _ in range(2):
            async with step() as uc:
                payments.append(
                    await uc["initiate_payment"].execute(
                        USER, order.id, Decimal("115.00"), "SAR", PaymentMethod.CARD, "idem-replay"
                    )
                )

        assert payments[0].id == payments[1].id


class TestRepositories:
    async def test_one_draft_per_user(self, db_session, clock):
        repo = QuoteRepoSQL(db_session)
        async with db_session.begin():
            first = await repo.create_draft(
                Quote(id="quote-1", user_id=USER, currency="SAR", created_at=clock.now(), updated_at=clock.now())
            )
            second = await repo.create_draft(
                Quote(id="quote-2", user_id=USER, currency="SAR", created_at=clock.now(), updated_at=clock.now())
            )

        assert first.id == second.id == "quote-1"

    async def test_duplicate_promo_code(self, db_session, clock):
        repo = PromoCodeRepoSQL(db_session)
        promo = PromoCode(
            id="promo-1",
            code="SAVE50",
            name="Save 50",
            type=PromoCodeType.FIXED,
            value=Decimal("50.00"),
            created_at=clock.now(),
            updated_at=clock.now(),
        )
        async with db_session.begin():
            await repo.create(promo)
            with pytest.raises(DuplicatePromoCodeError):
                await repo.create(PromoCode(**{**promo.__dict__, "id": "promo-2"}))

    async def test_increment_respects_usage_limit(self, db_session, clock):
        repo = PromoCodeRepoSQL(db_session)
        async with db_session.begin():
            await repo.create(
                PromoCode(
                    id="promo-1",
                    code="ONCE",
                    name="Once",
                    type=PromoCodeType.PERCENTAGE,
                    value=Decimal("10"),
                    usage_limit=1,
                    created_at=clock.now(),
                    updated_at=clock.now(),
                )
            )
            assert await repo.increment_usage("promo-1") is True
            assert await repo.increment_usage("promo-1") is False

            await repo.add_usage(
                PromoCodeUsage(
                    id="usage-1",
                    user_id=USER,
                    promo_code_id="promo-1",
                    order_id="order-1",
                    discount_amount=Decimal("10.00"),
                    order_amount=Decimal("100.00"),
                    currency="SAR",
                    applied_at=clock.now(),
                )
            )
            assert await repo.count_user_usages(USER, "promo-1") == 1
            stored = await repo.get("promo-1")

        assert stored.usage_count == 1

    async def test_list_active_filters_window(self, db_session, clock):
        repo = PromoCodeRepoSQL(db_session)
        now = clock.now()
        async with db_session.begin():
            for code, valid_from in (("NOW", None), ("LATER", now.replace(year=2026))):
                await repo.create(
                    PromoCode(
                        id=f"promo-{code}",
                        code=code,
                        name=code,
                        type=PromoCodeType.PERCENTAGE,
                        value=Decimal("5"),
                        valid_from=valid_from,
                        created_at=now,
                        updated_at=now,
                    )
                )
            active = await repo.list_active(now)

        assert [p.code for p in active] == ["NOW"]

    async def test_outbox_claim_and_mark(self, db_session, clock):
        repo = OutboxRepoSQL(db_session, clock)
        async with db_session.begin():
            event = await repo.enqueue("order.confirmed", "order", "ORD-1", {"order_number": "ORD-1"})

        async with db_session.begin():
            claimed = await repo.claim_ready(limit=10, locked_by="worker-a", now=clock.now())
        assert [e.id for e in claimed] == [event.id]
        assert claimed[0].status == OUTBOX_IN_PROGRESS
        assert claimed[0].payload == {"order_number": "ORD-1"}

        async with db_session.begin():
            assert await repo.claim_ready(limit=10, locked_by="worker-b", now=clock.now()) == []
            await repo.mark_done(event.id)

        async with db_session.begin():
            assert await repo.claim_ready(limit=10, locked_by="worker-b", now=clock.now()) == []

    async def test_has_previous_orders_ignores_cancelled(self, step, sql_engine):
        item = OrderItemInput(service_type=ServiceType.FLIGHT, title="RUH - JED", price=Decimal("100.00"))
        async with step() as uc:
            order = await uc["create_order"].execute(CreateOrderCommand(user_id=USER, items=[item]))
        async with step() as uc:
            cancelled = await uc["cancel_order"].execute(USER, order.id)
        assert cancelled.status == OrderStatus.CANCELLED

        async with build_sessionmaker(sql_engine)() as session:
            repo = OrderRepoSQL(session)
            assert await repo.has_previous_orders(USER) is False

        async with step() as uc:
            second = await uc["create_order"].execute(CreateOrderCommand(user_id=USER, items=[item]))

        async with build_sessionmaker(sql_engine)() as session:
            repo = OrderRepoSQL(session)
            assert await repo.has_previous_orders(USER) is True
            assert await repo.has_previous_orders(USER, exclude_order_id=second.id) is False
