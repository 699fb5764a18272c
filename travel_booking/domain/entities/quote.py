"""Entidad Quote - carrito (cotización) del usuario con sus ítems."""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any

from travel_booking.domain.value_objects.promo_type import PromoCodeType
from travel_booking.domain.services.pricing import PromoTerms, calculate_breakdown


class ServiceType(str, Enum):
    """Tipos de servicio que se pueden reservar."""

    FLIGHT = "flight"
    HOTEL = "hotel"
    VISA = "visa"
    HAJJ = "hajj"
    PACKAGE = "package"


class QuoteStatus(str, Enum):
    """Estados posibles de una cotización."""

    DRAFT = "draft"
    PENDING_PAYMENT = "pending_payment"
    PAID = "paid"
    EXPIRED = "expired"
    CANCELLED = "cancelled"


@dataclass
class QuoteItem:
    """
    Ítem del carrito.

    Las ofertas retenidas por el proveedor pueden expirar antes que la cotización.
    """

    id: str | None = None
    quote_id: str | None = None
    service_type: ServiceType = ServiceType.FLIGHT
    service_id: str = ""
    service_name: str = ""
    service_details: dict[str, Any] = field(default_factory=dict)
    travelers: list[dict[str, Any]] | None = None
    price: Decimal = Decimal("0")
    currency: str = "SAR"
    expires_at: datetime | None = None
    created_at: datetime | None = None

    def is_expired(self, now: datetime) -> bool:
        return self.expires_at is not None and self.expires_at < now


@dataclass
class Quote:
    """
    Agregado raíz del carrito.

    Invariante: total == (subtotal - discount) * (1 + tax_rate), siempre
    recalculado en el servidor después de cada mutación.
    """

    # Identificadores
    id: str | None = None
    user_id: str = ""

    # Estado
    status: QuoteStatus = QuoteStatus.DRAFT

    # Financieros
    subtotal: Decimal = Decimal("0.00")
    discount: Decimal = Decimal("0.00")
    taxes: Decimal = Decimal("0.00")
    total: Decimal = Decimal("0.00")
    currency: str = "SAR"

    # Código promocional aplicado
    promo_code: str | None = None
    promo_type: PromoCodeType | None = None
    promo_value: Decimal | None = None
    promo_max_discount: Decimal | None = None

    expires_at: datetime | None = None

    # Control de concurrencia
    lock_version: int = 0

    # Timestamps
    created_at: datetime | None = None
    updated_at: datetime | None = None

    # Relaciones
    items: list[QuoteItem] = field(default_factory=list)

    # === Propiedades calculadas ===

    @property
    def is_draft(self) -> bool:
        return self.status == QuoteStatus.DRAFT

    @property
    def promo_terms(self) -> PromoTerms | None:
        if self.promo_code and self.promo_type and self.promo_value is not None:
            return PromoTerms(
                type=self.promo_type,
                value=self.promo_value,
                max_discount_amount=self.promo_max_discount,
            )
        return None

    @property
    def service_types(self) -> list[str]:
        """Tipos de servicio distintos en el carrito, en orden de inserción."""
        seen: list[str] = []
        for item in self.items:
            value = ServiceType(item.service_type).value
            if value not in seen:
                seen.append(value)
        return seen

    def is_expired(self, now: datetime) -> bool:
        return self.expires_at is not None and self.expires_at < now

    def expired_items(self, now: datetime) -> list[QuoteItem]:
        return [item for item in self.items if item.is_expired(now)]

    # === Métodos de negocio ===

    def recalculate(self, tax_rate: Decimal) -> None:
        """Recalcula todos los montos desde los ítems y los términos del código."""
        breakdown = calculate_breakdown(
            (item.price for item in self.items), tax_rate, self.promo_terms
        )
        self.subtotal = breakdown.subtotal
        self.discount = breakdown.discount
        self.taxes = breakdown.taxes
        self.total = breakdown.total

    def attach_promo(
        self,
        code: str,
        promo_type: PromoCodeType,
        value: Decimal,
        max_discount: Decimal | None = None,
    ) -> None:
        self.promo_code = code
        self.promo_type = PromoCodeType(promo_type)
        self.promo_value = value
        self.promo_max_discount = max_discount

    def clear_promo(self) -> None:
        """Quita el código y fuerza descuento cero antes del recálculo."""
        self.promo_code = None
        self.promo_type = None
        self.promo_value = None
        self.promo_max_discount = None
        self.discount = Decimal("0.00")

    def mark_pending_payment(self) -> None:
        self.status = QuoteStatus.PENDING_PAYMENT
        self.lock_version += 1

    def mark_paid(self) -> None:
        self.status = QuoteStatus.PAID
        self.lock_version += 1

    def mark_expired(self) -> None:
        self.status = QuoteStatus.EXPIRED
        self.lock_version += 1
