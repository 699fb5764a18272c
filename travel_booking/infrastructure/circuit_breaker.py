"""
Circuit breakers para llamadas a servicios externos.

- search_breaker: proveedores de búsqueda de vuelos/hoteles.
- notification_breaker: webhook de notificaciones del outbox.

Estados: CLOSED (normal), OPEN (falla inmediato), HALF_OPEN (probando
recuperación). Un breaker abierto hace que la búsqueda use ofertas de
respaldo y que el outbox reprograme el evento.
"""

import logging

from pybreaker import CircuitBreaker, CircuitBreakerError, CircuitBreakerListener

logger = logging.getLogger(__name__)


class StateChangeLogger(CircuitBreakerListener):
    """Registra los cambios de estado para monitoreo."""

    def __init__(self, name: str) -> None:
        self.name = name

    def state_change(self, cb, old_state, new_state) -> None:
        logger.warning(
            "Circuit breaker state changed",
            extra={
                "breaker_name": self.name,
                "old_state": old_state.name if old_state else None,
                "new_state": new_state.name,
            },
        )


search_breaker = CircuitBreaker(
    fail_max=5,
    reset_timeout=60,
    name="search_circuit_breaker",
    listeners=[StateChangeLogger("search")],
)

notification_breaker = CircuitBreaker(
    fail_max=5,
    reset_timeout=30,
    name="notification_circuit_breaker",
    listeners=[StateChangeLogger("notifications")],
)


__all__ = [
    "search_breaker",
    "notification_breaker",
    "StateChangeLogger",
    "CircuitBreakerError",
]
