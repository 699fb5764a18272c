"""Entidad Order - orden confirmada con sus sub-reservas."""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum

from travel_booking.domain.entities.sub_booking import SubBooking
from travel_booking.domain.errors import InvalidOrderTransitionError


class OrderStatus(str, Enum):
    """Estados posibles de una orden."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    PROCESSING = "processing"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"


class OrderStatusIntent(str, Enum):
    """Estado inicial solicitado por quien crea la orden."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    UNDER_REVIEW = "under_review"

    def to_status(self) -> OrderStatus:
        if self == OrderStatusIntent.UNDER_REVIEW:
            return OrderStatus.PROCESSING
        return OrderStatus(self.value)


# Máquina de estados: origen -> destinos permitidos
ORDER_TRANSITIONS: dict[OrderStatus, frozenset[OrderStatus]] = {
    OrderStatus.PENDING: frozenset(
        {OrderStatus.CONFIRMED, OrderStatus.PROCESSING, OrderStatus.CANCELLED}
    ),
    OrderStatus.CONFIRMED: frozenset(
        {OrderStatus.PROCESSING, OrderStatus.COMPLETED, OrderStatus.CANCELLED}
    ),
    OrderStatus.PROCESSING: frozenset({OrderStatus.COMPLETED, OrderStatus.CANCELLED}),
    OrderStatus.COMPLETED: frozenset({OrderStatus.REFUNDED}),
    OrderStatus.CANCELLED: frozenset({OrderStatus.REFUNDED}),
    OrderStatus.REFUNDED: frozenset(),
}

PAYABLE_STATUSES = frozenset(
    {OrderStatus.PENDING, OrderStatus.CONFIRMED, OrderStatus.PROCESSING}
)


@dataclass
class Order:
    """
    Orden de compra del usuario.

    Nunca se persiste sin al menos una sub-reserva; la creación de la orden,
    sus sub-reservas y la redención del código ocurren en una sola transacción.
    """

    # Identificadores
    id: str | None = None
    user_id: str = ""
    quote_id: str | None = None
    order_number: str = ""

    # Estado
    status: OrderStatus = OrderStatus.PENDING

    # Financieros
    subtotal: Decimal = Decimal("0.00")
    discount: Decimal = Decimal("0.00")
    taxes: Decimal = Decimal("0.00")
    total: Decimal = Decimal("0.00")
    currency: str = "SAR"
    promo_code: str | None = None

    # Pago
    payment_method: str | None = None
    payment_reference: str | None = None
    paid_at: datetime | None = None

    # Cancelación
    cancelled_at: datetime | None = None
    cancellation_reason: str | None = None

    created_at: datetime | None = None
    updated_at: datetime | None = None

    bookings: list[SubBooking] = field(default_factory=list)

    # === Propiedades ===

    @property
    def is_payable(self) -> bool:
        return self.status in PAYABLE_STATUSES

    def can_transition_to(self, target: OrderStatus) -> bool:
        return OrderStatus(target) in ORDER_TRANSITIONS[OrderStatus(self.status)]

    # === Métodos de negocio ===

    def transition_to(self, target: OrderStatus) -> None:
        """Aplica una transición validando la máquina de estados."""
        target = OrderStatus(target)
        if not self.can_transition_to(target):
            raise InvalidOrderTransitionError(
                message=f"Cannot move order from {OrderStatus(self.status).value} to {target.value}",
                current_status=OrderStatus(self.status).value,
                target_status=target.value,
            )
        self.status = target

    def cancel(self, cancelled_at: datetime, reason: str | None = None) -> None:
        """Cancela la orden y todas sus sub-reservas."""
        if self.status == OrderStatus.CANCELLED:
            raise InvalidOrderTransitionError(
                message="Order is already cancelled",
                current_status=self.status.value,
                target_status=OrderStatus.CANCELLED.value,
            )
        if self.status == OrderStatus.COMPLETED:
            raise InvalidOrderTransitionError(
                message="Completed orders cannot be cancelled",
                current_status=self.status.value,
                target_status=OrderStatus.CANCELLED.value,
            )
        self.transition_to(OrderStatus.CANCELLED)
        self.cancelled_at = cancelled_at
        self.cancellation_reason = reason
        for booking in self.bookings:
            booking.cancel(cancelled_at)

    def record_payment(self, paid_at: datetime, reference: str | None) -> None:
        self.paid_at = paid_at
        if reference:
            self.payment_reference = reference

    def refund(self) -> None:
        """Reverso total de pago: solo desde completed o cancelled."""
        self.transition_to(OrderStatus.REFUNDED)
        for booking in self.bookings:
            booking.refund()
