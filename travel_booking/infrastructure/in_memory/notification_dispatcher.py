import copy
import logging
from typing import Any

logger = logging.getLogger(__name__)


class RecordingNotificationDispatcher:
    """Dispatcher in-memory: guarda las notificaciones en lugar de enviarlas."""

    def __init__(self) -> None:
        self.sent: list[tuple[str, dict[str, Any]]] = []
        self.fail_next = 0

    async def dispatch(self, event_type: str, payload: dict[str, Any]) -> None:
        if self.fail_next > 0:
            self.fail_next -= 1
            raise RuntimeError(f"Simulated notification failure for {event_type}")
        self.sent.append((event_type, copy.deepcopy(payload)))
        logger.info("Notification recorded", extra={"event_type": event_type})
