"""Constantes del dominio."""

# Eventos del outbox
EVENT_ORDER_CONFIRMED = "order.confirmed"
EVENT_PAYMENT_COMPLETED = "payment.completed"

NOTIFICATION_EVENTS = (EVENT_ORDER_CONFIRMED, EVENT_PAYMENT_COMPLETED)

# Paginación de órdenes
DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100

# Tipos de búsqueda soportados
SEARCH_KIND_FLIGHTS = "flights"
SEARCH_KIND_HOTELS = "hotels"
