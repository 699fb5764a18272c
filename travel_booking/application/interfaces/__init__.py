"""Interfaces (Puertos) de la capa de aplicación."""

from travel_booking.application.interfaces.cache import Cache
from travel_booking.application.interfaces.clock import Clock, FakeClock, SystemClock
from travel_booking.application.interfaces.id_generator import (
    FakeIdGenerator,
    IdGenerator,
    RealIdGenerator,
)
from travel_booking.application.interfaces.notification_dispatcher import NotificationDispatcher
from travel_booking.application.interfaces.order_repo import OrderRepo
from travel_booking.application.interfaces.outbox_repo import OutboxEvent, OutboxRepo
from travel_booking.application.interfaces.payment_catalog import PaymentCatalog
from travel_booking.application.interfaces.payment_repo import PaymentRepo
from travel_booking.application.interfaces.promo_code_repo import PromoCodeRepo
from travel_booking.application.interfaces.quote_repo import QuoteRepo
from travel_booking.application.interfaces.search_provider import (
    SearchProvider,
    SearchProviderError,
)
from travel_booking.application.interfaces.transaction_manager import TransactionManager

__all__ = [
    # Repositories
    "QuoteRepo",
    "PromoCodeRepo",
    "OrderRepo",
    "PaymentRepo",
    "OutboxRepo",
    "OutboxEvent",
    # Gateways
    "Cache",
    "NotificationDispatcher",
    "PaymentCatalog",
    "SearchProvider",
    "SearchProviderError",
    # Infrastructure
    "TransactionManager",
    # Utilities
    "Clock",
    "SystemClock",
    "FakeClock",
    "IdGenerator",
    "RealIdGenerator",
    "FakeIdGenerator",
]
