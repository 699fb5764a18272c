import logging
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any

from travel_booking.application.interfaces.clock import Clock
from travel_booking.application.interfaces.id_generator import IdGenerator
from travel_booking.application.interfaces.order_repo import OrderRepo
from travel_booking.application.interfaces.outbox_repo import OutboxRepo
from travel_booking.application.interfaces.promo_code_repo import PromoCodeRepo
from travel_booking.application.interfaces.quote_repo import QuoteRepo
from travel_booking.application.interfaces.transaction_manager import TransactionManager
from travel_booking.application.use_cases.redeem_promo_code import RedeemPromoCodeUseCase
from travel_booking.application.use_cases.validate_promo_code import ValidatePromoCodeUseCase
from travel_booking.domain.constants import EVENT_ORDER_CONFIRMED
from travel_booking.domain.entities.order import Order, OrderStatus, OrderStatusIntent
from travel_booking.domain.entities.promo_code import normalize_code
from travel_booking.domain.entities.quote import QuoteStatus, ServiceType
from travel_booking.domain.entities.sub_booking import BookingStatus, SubBooking
from travel_booking.domain.errors import (
    InvalidQuoteStatusError,
    OrderNumberConflictError,
    PromoCodeNotApplicableError,
    QuoteNotFoundError,
    ValidationError,
)
from travel_booking.domain.services.pricing import PriceBreakdown, PromoTerms, calculate_breakdown
from travel_booking.domain.value_objects.money import round_money


@dataclass
class OrderItemInput:
    service_type: ServiceType
    title: str
    price: Decimal
    details: dict[str, Any] = field(default_factory=dict)
    travelers: list[dict[str, Any]] | None = None
    service_date: datetime | None = None
    provider_booking_reference: str | None = None
    documents: list[dict[str, Any]] | None = None


@dataclass
class CreateOrderCommand:
    user_id: str
    items: list[OrderItemInput] = field(default_factory=list)
    payment_method: str | None = None
    payment_reference: str | None = None
    status_intent: OrderStatusIntent = OrderStatusIntent.PENDING
    currency: str | None = None
    promo_code: str | None = None
    quote_id: str | None = None


def order_notification_payload(order: Order) -> dict[str, Any]:
    return {
        "order_id": order.id,
        "order_number": order.order_number,
        "user_id": order.user_id,
        "total": str(order.total),
        "currency": order.currency,
        "bookings": [
            {"service_type": b.service_type, "reference": b.provider_booking_reference}
            for b in order.bookings
        ],
    }


class CreateOrderUseCase:
    """
    Crea una orden con sus sub-reservas en una sola transacción.

    Dos caminos:
    - desde una cotización en pending_payment (la cotización pasa a paid);
    - directo con ítems y código opcional.

    Los totales siempre se recalculan aquí. La orden, sus sub-reservas, la
    redención del código, el evento outbox y el cierre de la cotización se
    confirman juntos. Si el número de orden colisiona se reintenta toda la
    transacción con un número nuevo.
    """

    def __init__(
        self,
        order_repo: OrderRepo,
        quote_repo: QuoteRepo,
        promo_code_repo: PromoCodeRepo,
        outbox_repo: OutboxRepo,
        validator: ValidatePromoCodeUseCase,
        redeemer: RedeemPromoCodeUseCase,
        transaction_manager: TransactionManager,
        clock: Clock,
        id_generator: IdGenerator,
        tax_rate: Decimal,
        default_currency: str,
        max_attempts: int = 3,
    ) -> None:
        self._order_repo = order_repo
        self._quote_repo = quote_repo
        self._promo_code_repo = promo_code_repo
        self._outbox_repo = outbox_repo
        self._validator = validator
        self._redeemer = redeemer
        self._transaction_manager = transaction_manager
        self._clock = clock
        self._id_generator = id_generator
        self._tax_rate = tax_rate
        self._default_currency = default_currency
        self._max_attempts = max(1, max_attempts)
        self._logger = logging.getLogger(__name__)

    async def execute(self, command: CreateOrderCommand) -> Order:
        last_error: OrderNumberConflictError | None = None
        for attempt in range(1, self._max_attempts + 1):
            try:
                return await self._create(command)
            except OrderNumberConflictError as exc:
                last_error = exc
                self._logger.warning(
                    "Order number collision, retrying",
                    extra={
                        "order_number": exc.order_number,
                        "attempt": attempt,
                        "max_attempts": self._max_attempts,
                    },
                )
        raise last_error

    async def _create(self, command: CreateOrderCommand) -> Order:
        async with self._transaction_manager.start():
            now = self._clock.now()
            timestamp_ms = self._clock.now_ms()

            quote = None
            if command.quote_id:
                quote = await self._quote_repo.get(command.quote_id, for_update=True)
                if quote is None or quote.user_id != command.user_id:
                    raise QuoteNotFoundError(command.quote_id)
                if quote.status != QuoteStatus.PENDING_PAYMENT:
                    raise InvalidQuoteStatusError(
                        current_status=QuoteStatus(quote.status).value,
                        expected_status=QuoteStatus.PENDING_PAYMENT.value,
                        operation="create order",
                    )
                items = [
                    OrderItemInput(
                        service_type=item.service_type,
                        title=item.service_name,
                        price=item.price,
                        details={"service_id": item.service_id, **item.service_details},
                        travelers=item.travelers,
                    )
                    for item in quote.items
                ]
                currency = quote.currency
                promo_code = quote.promo_code
                quote.recalculate(self._tax_rate)
                breakdown = PriceBreakdown(
                    subtotal=quote.subtotal,
                    discount=quote.discount,
                    taxes=quote.taxes,
                    total=quote.total,
                )
            else:
                items = command.items
                currency = (command.currency or self._default_currency).upper()
                promo_code = normalize_code(command.promo_code) if command.promo_code else None
                breakdown = await self._price_direct(command.user_id, items, currency, promo_code)

            if not items:
                raise ValidationError("items", "At least one item is required")

            status = OrderStatusIntent(command.status_intent).to_status()
            order = Order(
                id=self._id_generator.new_id(),
                user_id=command.user_id,
                quote_id=quote.id if quote else None,
                order_number=self._id_generator.order_number(timestamp_ms),
                status=status,
                subtotal=breakdown.subtotal,
                discount=breakdown.discount,
                taxes=breakdown.taxes,
                total=breakdown.total,
                currency=currency,
                promo_code=promo_code,
                payment_method=command.payment_method,
                payment_reference=command.payment_reference,
                created_at=now,
                updated_at=now,
            )
            await self._order_repo.create(order)

            booking_status = (
                BookingStatus.CONFIRMED if status == OrderStatus.CONFIRMED else BookingStatus.PENDING
            )
            order.bookings = [
                SubBooking(
                    id=self._id_generator.new_id(),
                    order_id=order.id,
                    service_type=ServiceType(item.service_type).value,
                    title=item.title,
                    provider_booking_reference=item.provider_booking_reference
                    or self._id_generator.booking_reference(
                        ServiceType(item.service_type).value, timestamp_ms
                    ),
                    status=booking_status,
                    details=dict(item.details or {}),
                    travelers=item.travelers,
                    price=round_money(item.price),
                    currency=currency,
                    service_date=item.service_date,
                    documents=item.documents,
                    confirmed_at=now if booking_status == BookingStatus.CONFIRMED else None,
                    created_at=now,
                )
                for item in items
            ]
            await self._order_repo.add_sub_bookings(order.id, order.bookings)

            if promo_code:
                await self._redeemer.execute(
                    code=promo_code,
                    user_id=command.user_id,
                    order_id=order.id,
                    subtotal=order.subtotal,
                    currency=currency,
                    service_types=sorted({b.service_type for b in order.bookings}),
                    discount_amount=order.discount,
                )

            if quote is not None:
                quote.mark_paid()
                quote.updated_at = now
                await self._quote_repo.save(quote)

            if status == OrderStatus.CONFIRMED:
                await self._outbox_repo.enqueue(
                    event_type=EVENT_ORDER_CONFIRMED,
                    aggregate_type="order",
                    aggregate_code=order.order_number,
                    payload=order_notification_payload(order),
                )

        self._logger.info(
            "Order created",
            extra={
                "order_id": order.id,
                "order_number": order.order_number,
                "user_id": order.user_id,
                "status": order.status.value,
                "total": str(order.total),
                "bookings": len(order.bookings),
            },
        )
        return order

    async def _price_direct(
        self,
        user_id: str,
        items: list[OrderItemInput],
        currency: str,
        promo_code: str | None,
    ) -> PriceBreakdown:
        for index, item in enumerate(items):
            if item.price is None or item.price < 0:
                raise ValidationError(f"items[{index}].price", "Price must be 0 or greater")

        prices = [item.price for item in items]
        terms = None
        if promo_code:
            subtotal = round_money(sum(prices, Decimal("0")))
            promo = await self._promo_code_repo.get_by_code(promo_code)
            evaluation = await self._validator.evaluate_loaded(
                promo,
                subtotal=subtotal,
                currency=currency,
                service_types=sorted({ServiceType(i.service_type).value for i in items}),
                user_id=user_id,
            )
            if not evaluation.valid:
                raise PromoCodeNotApplicableError(evaluation.reason, evaluation.min_order_amount)
            terms = PromoTerms(
                type=promo.type,
                value=promo.value,
                max_discount_amount=promo.max_discount_amount,
            )
        return calculate_breakdown(prices, self._tax_rate, terms)
