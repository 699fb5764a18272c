"""Excepciones de dominio para el núcleo de reservas de viaje."""

from collections.abc import Sequence
from decimal import Decimal


class DomainError(Exception):
    """Clase base para todos los errores de dominio."""

    def __init__(self, message: str, code: str | None = None):
        self.message = message
        self.code = code or self.__class__.__name__
        super().__init__(self.message)


class NotFoundError(DomainError):
    """Recurso inexistente o perteneciente a otro usuario."""


class BusinessRuleError(DomainError):
    """Regla de negocio violada; el mensaje es visible para el usuario."""


class ConflictError(DomainError):
    """Conflicto de unicidad o concurrencia."""

    retryable: bool = False


# === Errores de Validación ===


class ValidationError(DomainError):
    """Error de validación de datos de entrada."""

    def __init__(self, field: str, message: str):
        super().__init__(
            message=f"Validation failed for '{field}': {message}",
            code="VALIDATION_ERROR",
        )
        self.field = field


# === Errores de Carrito ===


class QuoteNotFoundError(NotFoundError):
    def __init__(self, quote_id: str):
        super().__init__(message="Quote not found", code="QUOTE_NOT_FOUND")
        self.quote_id = quote_id


class QuoteItemNotFoundError(NotFoundError):
    def __init__(self, item_id: str):
        super().__init__(message="Item not found in cart", code="QUOTE_ITEM_NOT_FOUND")
        self.item_id = item_id


class EmptyCartError(BusinessRuleError):
    def __init__(self) -> None:
        super().__init__(message="Cart is empty", code="EMPTY_CART")


class ExpiredCartItemsError(BusinessRuleError):
    """Hay ítems cuya oferta del proveedor ya expiró."""

    def __init__(self, item_names: Sequence[str]):
        names = ", ".join(item_names)
        super().__init__(
            message=f"Some items in cart have expired: {names}. Remove them and search again.",
            code="EXPIRED_CART_ITEMS",
        )
        self.item_names = list(item_names)


class InvalidQuoteStatusError(BusinessRuleError):
    def __init__(self, current_status: str, expected_status: str | list[str], operation: str):
        expected = expected_status if isinstance(expected_status, str) else ", ".join(expected_status)
        super().__init__(
            message=f"Cannot {operation}: quote is '{current_status}', expected '{expected}'",
            code="INVALID_QUOTE_STATUS",
        )
        self.current_status = current_status
        self.expected_status = expected_status


# === Errores de Códigos Promocionales ===


class PromoCodeNotFoundError(NotFoundError):
    def __init__(self, identifier: str):
        super().__init__(message="Promo code not found", code="PROMO_CODE_NOT_FOUND")
        self.identifier = identifier


class PromoCodeNotApplicableError(BusinessRuleError):
    """El código no pasa la evaluación; message es la razón para el usuario."""

    def __init__(self, reason: str, min_order_amount: Decimal | None = None):
        super().__init__(message=reason, code="PROMO_CODE_NOT_APPLICABLE")
        self.reason = reason
        self.min_order_amount = min_order_amount


class DuplicatePromoCodeError(ConflictError):
    def __init__(self, code: str):
        super().__init__(
            message=f"Promo code already exists: {code}",
            code="DUPLICATE_PROMO_CODE",
        )
        self.promo_code = code


# === Errores de Órdenes ===


class OrderNotFoundError(NotFoundError):
    def __init__(self, order_id: str):
        super().__init__(message="Order not found", code="ORDER_NOT_FOUND")
        self.order_id = order_id


class SubBookingNotFoundError(NotFoundError):
    def __init__(self, booking_id: str):
        super().__init__(message="Booking not found", code="SUB_BOOKING_NOT_FOUND")
        self.booking_id = booking_id


class InvalidOrderTransitionError(BusinessRuleError):
    """El estado actual de la orden no permite la operación."""

    def __init__(self, message: str, current_status: str, target_status: str):
        super().__init__(message=message, code="INVALID_ORDER_TRANSITION")
        self.current_status = current_status
        self.target_status = target_status


class OrderNotPayableError(BusinessRuleError):
    def __init__(self, order_id: str, current_status: str):
        super().__init__(
            message=f"Order cannot be paid in status: {current_status}",
            code="ORDER_NOT_PAYABLE",
        )
        self.order_id = order_id
        self.current_status = current_status


class OrderAlreadyPaidError(BusinessRuleError):
    def __init__(self, order_id: str):
        super().__init__(
            message=f"Order {order_id} already has a completed payment",
            code="ORDER_ALREADY_PAID",
        )
        self.order_id = order_id


class OrderNumberConflictError(ConflictError):
    """Colisión del número de orden; el cliente puede reintentar."""

    retryable = True

    def __init__(self, order_number: str):
        super().__init__(
            message=f"Order number collision: {order_number}. Please retry.",
            code="ORDER_NUMBER_CONFLICT",
        )
        self.order_number = order_number


# === Errores de Pago ===


class PaymentNotFoundError(NotFoundError):
    def __init__(self, payment_id: str):
        super().__init__(message="Payment not found", code="PAYMENT_NOT_FOUND")
        self.payment_id = payment_id


class PaymentAlreadyProcessedError(BusinessRuleError):
    """El pago ya fue procesado (completado, fallido o reembolsado)."""

    def __init__(self, payment_id: str, current_status: str):
        super().__init__(
            message=f"Payment {payment_id} was already processed with status: {current_status}",
            code="PAYMENT_ALREADY_PROCESSED",
        )
        self.payment_id = payment_id
        self.current_status = current_status


class DuplicateIdempotencyKeyError(ConflictError):
    """Violación del índice único de idempotency_key (se resuelve leyendo el ganador)."""

    def __init__(self, idem_key: str):
        super().__init__(
            message=f"Payment already exists for idempotency key: {idem_key}",
            code="DUPLICATE_IDEMPOTENCY_KEY",
        )
        self.idem_key = idem_key


class IdempotencyConflictError(ConflictError):
    """La misma key fue usada para otra orden o por otro usuario."""

    def __init__(self, idem_key: str):
        super().__init__(
            message="Idempotency conflict: key already used for a different payment request",
            code="IDEMPOTENCY_CONFLICT",
        )
        self.idem_key = idem_key
