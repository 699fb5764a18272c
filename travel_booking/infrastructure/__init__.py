"""
Capa de Infraestructura - Travel Booking.

Implementaciones concretas de los puertos (interfaces) de la aplicación.

Estructura:
- db/: Tablas, repositorios SQL, transacciones y reintentos
- gateways/: Proveedores de búsqueda y webhook de notificaciones (httpx)
- cache/: Cache compartido en Redis
- in_memory/: Implementaciones in-memory para testing y desarrollo
- messaging/: Worker del outbox
- payment_catalog.py: Métodos de pago y cuentas bancarias desde Settings
"""

from travel_booking.infrastructure.cache.redis_cache import RedisCache
from travel_booking.infrastructure.db.repositories import (
    OrderRepoSQL,
    OutboxRepoSQL,
    PaymentRepoSQL,
    PromoCodeRepoSQL,
    QuoteRepoSQL,
)
from travel_booking.infrastructure.db.transaction_manager import SQLAlchemyTransactionManager
from travel_booking.infrastructure.gateways.mock_search_provider import (
    MockFlightSearchProvider,
    MockHotelSearchProvider,
)
from travel_booking.infrastructure.gateways.notification_dispatcher_http import (
    WebhookNotificationDispatcher,
)
from travel_booking.infrastructure.gateways.search_provider_http import HttpSearchProvider
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
from travel_booking.infrastructure.messaging.outbox_worker import OutboxWorker

__all__ = [
    # Database - Repositories SQL
    "QuoteRepoSQL",
    "PromoCodeRepoSQL",
    "OrderRepoSQL",
    "PaymentRepoSQL",
    "OutboxRepoSQL",
    "SQLAlchemyTransactionManager",
    # Gateways
    "HttpSearchProvider",
    "MockFlightSearchProvider",
    "MockHotelSearchProvider",
    "WebhookNotificationDispatcher",
    "RedisCache",
    # In-Memory Implementations
    "InMemoryQuoteRepo",
    "InMemoryPromoCodeRepo",
    "InMemoryOrderRepo",
    "InMemoryPaymentRepo",
    "InMemoryOutboxRepo",
    "InMemoryCache",
    "RecordingNotificationDispatcher",
    "InMemoryTransactionManager",
    # Messaging
    "OutboxWorker",
]
