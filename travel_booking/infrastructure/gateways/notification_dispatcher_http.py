import logging
from typing import Any

import httpx
from pybreaker import CircuitBreaker

from travel_booking.infrastructure.circuit_breaker import notification_breaker

logger = logging.getLogger(__name__)


class WebhookNotificationDispatcher:
    """
    Publica eventos del outbox en un webhook del servicio de notificaciones.

    Los errores se propagan: el worker del outbox reprograma el evento.
    """

    def __init__(
        self,
        webhook_url: str,
        timeout_seconds: float = 5.0,
        breaker: CircuitBreaker = notification_breaker,
    ) -> None:
        self._webhook_url = webhook_url
        self._timeout = timeout_seconds
        self._breaker = breaker

    async def dispatch(self, event_type: str, payload: dict[str, Any]) -> None:
        body = {"event_type": event_type, "payload": payload}
        with self._breaker.calling():
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                response = await client.post(self._webhook_url, json=body)
            response.raise_for_status()
        logger.info(
            "Notification dispatched",
            extra={"event_type": event_type, "http_status": response.status_code},
        )
