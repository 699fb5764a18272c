"""Implementaciones in-memory para testing y desarrollo local."""

from travel_booking.infrastructure.in_memory.cache import InMemoryCache
from travel_booking.infrastructure.in_memory.notification_dispatcher import (
    RecordingNotificationDispatcher,
)
from travel_booking.infrastructure.in_memory.order_repo import InMemoryOrderRepo
from travel_booking.infrastructure.in_memory.outbox_repo import InMemoryOutboxRepo
from travel_booking.infrastructure.in_memory.payment_repo import InMemoryPaymentRepo
from travel_booking.infrastructure.in_memory.promo_code_repo import InMemoryPromoCodeRepo
from travel_booking.infrastructure.in_memory.quote_repo import InMemoryQuoteRepo
from travel_booking.infrastructure.in_memory.store import SnapshotStore
from travel_booking.infrastructure.in_memory.transaction_manager import InMemoryTransactionManager

__all__ = [
    # Repositories
    "InMemoryQuoteRepo",
    "InMemoryPromoCodeRepo",
    "InMemoryOrderRepo",
    "InMemoryPaymentRepo",
    "InMemoryOutboxRepo",
    "SnapshotStore",
    # Gateways
    "InMemoryCache",
    "RecordingNotificationDispatcher",
    # Infrastructure
    "InMemoryTransactionManager",
]
