import logging
from decimal import Decimal

from travel_booking.application.interfaces.clock import Clock
from travel_booking.application.interfaces.id_generator import IdGenerator
from travel_booking.application.interfaces.order_repo import OrderRepo
from travel_booking.application.interfaces.payment_catalog import PaymentCatalog
from travel_booking.application.interfaces.payment_repo import PaymentRepo
from travel_booking.application.interfaces.transaction_manager import TransactionManager
from travel_booking.domain.entities.payment import Payment, PaymentMethod, PaymentStatus
from travel_booking.domain.errors import (
    DuplicateIdempotencyKeyError,
    IdempotencyConflictError,
    OrderAlreadyPaidError,
    OrderNotFoundError,
    OrderNotPayableError,
    ValidationError,
)
from travel_booking.domain.value_objects.money import round_money


class InitiatePaymentUseCase:
    """
    Registra un intento de pago idempotente.

    La misma idempotency key retorna siempre el mismo pago. Si dos requests
    concurrentes insertan la misma key, el índice único decide al ganador y
    el perdedor lo relee.
    """

    def __init__(
        self,
        payment_repo: PaymentRepo,
        order_repo: OrderRepo,
        transaction_manager: TransactionManager,
        clock: Clock,
        id_generator: IdGenerator,
        payment_catalog: PaymentCatalog | None = None,
    ) -> None:
        self._payment_repo = payment_repo
        self._order_repo = order_repo
        self._transaction_manager = transaction_manager
        self._clock = clock
        self._id_generator = id_generator
        self._payment_catalog = payment_catalog
        self._logger = logging.getLogger(__name__)

    async def execute(
        self,
        user_id: str,
        order_id: str,
        amount: Decimal,
        currency: str,
        method: PaymentMethod | str,
        idempotency_key: str | None = None,
    ) -> Payment:
        try:
            method = PaymentMethod(method)
        except ValueError:
            raise ValidationError("method", f"Unsupported payment method: {method}") from None
        idem_key = idempotency_key or self._id_generator.idempotency_key()

        async with self._transaction_manager.start():
            existing = await self._payment_repo.get_by_idempotency_key(idem_key)
            if existing:
                return self._replay(existing, user_id, order_id)

            order = await self._order_repo.get(order_id, user_id=user_id)
            if order is None:
                raise OrderNotFoundError(order_id)
            if not order.is_payable:
                raise OrderNotPayableError(order.id, order.status.value)
            if order.paid_at is not None:
                raise OrderAlreadyPaidError(order.id)

            amount = round_money(amount)
            currency = currency.upper()
            if currency != order.currency:
                raise ValidationError(
                    "currency", f"Payment currency {currency} does not match order currency {order.currency}"
                )
            if amount != order.total:
                raise ValidationError(
                    "amount", f"Payment amount {amount} does not match order total {order.total}"
                )
            await self._check_method(method, amount)

            payment = Payment(
                id=self._id_generator.new_id(),
                user_id=user_id,
                order_id=order.id,
                idempotency_key=idem_key,
                amount=amount,
                currency=currency,
                method=method,
                status=PaymentStatus.PENDING,
                created_at=self._clock.now(),
            )
            try:
                payment = await self._payment_repo.create(payment)
            except DuplicateIdempotencyKeyError:
                winner = await self._payment_repo.get_by_idempotency_key(idem_key)
                if winner is None:
                    raise
                return self._replay(winner, user_id, order_id)

        self._logger.info(
            "Payment initiated",
            extra={
                "payment_id": payment.id,
                "order_id": order_id,
                "amount": str(payment.amount),
                "method": payment.method.value,
            },
        )
        return payment

    def _replay(self, payment: Payment, user_id: str, order_id: str) -> Payment:
        if payment.user_id != user_id or payment.order_id != order_id:
            raise IdempotencyConflictError(payment.idempotency_key)
        self._logger.info(
            "Payment replayed for idempotency key",
            extra={"payment_id": payment.id, "idempotency_key": payment.idempotency_key},
        )
        return payment

    async def _check_method(self, method: PaymentMethod, amount: Decimal) -> None:
        if self._payment_catalog is None:
            return
        config = await self._payment_catalog.get_method(method)
        if config is None or not config.enabled:
            raise ValidationError("method", f"Payment method {method.value} is not available")
        config.check_amount(amount)
