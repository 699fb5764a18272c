"""Entidad Payment - intento de pago asociado a una orden."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum

from travel_booking.domain.errors import PaymentAlreadyProcessedError, ValidationError
from travel_booking.domain.value_objects.money import round_money


class PaymentStatus(str, Enum):
    """Estados posibles de un pago."""

    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"
    REFUNDED = "refunded"
    PARTIALLY_REFUNDED = "partially_refunded"


class PaymentMethod(str, Enum):
    """Métodos de pago soportados."""

    CARD = "card"
    APPLE_PAY = "apple_pay"
    GOOGLE_PAY = "google_pay"
    MADA = "mada"
    STC_PAY = "stc_pay"
    TABBY = "tabby"
    TAMARA = "tamara"
    BANK_TRANSFER = "bank_transfer"
    IPN = "ipn"


THREE_DS_METHODS = frozenset({PaymentMethod.CARD})


@dataclass
class Payment:
    """
    Intento de pago de una orden.

    El pago real lo resuelve un gateway externo; aquí solo se registra el
    ciclo de vida: pending -> completed | failed, y reembolsos posteriores.
    """

    # Identificadores
    id: str | None = None
    user_id: str = ""
    order_id: str = ""
    idempotency_key: str = ""

    # Monto
    amount: Decimal = Decimal("0.00")
    currency: str = "SAR"
    method: PaymentMethod = PaymentMethod.CARD

    # Estado
    status: PaymentStatus = PaymentStatus.PENDING
    gateway_reference: str | None = None
    failure_reason: str | None = None
    refunded_amount: Decimal = Decimal("0.00")

    # Timestamps
    created_at: datetime | None = None
    completed_at: datetime | None = None
    failed_at: datetime | None = None

    # === Propiedades ===

    @property
    def is_final(self) -> bool:
        """Verifica si el callback del gateway ya no puede cambiar el pago."""
        return self.status not in (PaymentStatus.PENDING, PaymentStatus.PROCESSING)

    @property
    def requires_3ds(self) -> bool:
        return PaymentMethod(self.method) in THREE_DS_METHODS

    @property
    def redirect_url(self) -> str:
        return f"/payment/3ds/{self.id}"

    # === Métodos de negocio ===

    def complete(self, completed_at: datetime, gateway_reference: str | None = None) -> None:
        if self.is_final:
            raise PaymentAlreadyProcessedError(str(self.id), PaymentStatus(self.status).value)
        self.status = PaymentStatus.COMPLETED
        self.completed_at = completed_at
        if gateway_reference:
            self.gateway_reference = gateway_reference

    def fail(
        self,
        failed_at: datetime,
        reason: str | None = None,
        gateway_reference: str | None = None,
    ) -> None:
        if self.is_final:
            raise PaymentAlreadyProcessedError(str(self.id), PaymentStatus(self.status).value)
        self.status = PaymentStatus.FAILED
        self.failed_at = failed_at
        self.failure_reason = reason
        if gateway_reference:
            self.gateway_reference = gateway_reference

    def refund(self, amount: Decimal | None = None) -> bool:
        """
        Registra un reembolso sobre un pago completado.

        Returns:
            True si el pago quedó totalmente reembolsado.
        """
        if self.status not in (PaymentStatus.COMPLETED, PaymentStatus.PARTIALLY_REFUNDED):
            raise PaymentAlreadyProcessedError(str(self.id), PaymentStatus(self.status).value)

        remaining = self.amount - self.refunded_amount
        refund_amount = remaining if amount is None else round_money(amount)
        if refund_amount <= 0 or refund_amount > remaining:
            raise ValidationError("amount", f"Refund amount must be between 0.01 and {remaining}")

        self.refunded_amount = round_money(self.refunded_amount + refund_amount)
        if self.refunded_amount >= self.amount:
            self.status = PaymentStatus.REFUNDED
            return True
        self.status = PaymentStatus.PARTIALLY_REFUNDED
        return False
