from typing import Any, Protocol


class NotificationDispatcher(Protocol):
    """Entrega de notificaciones (email, push, webhook) fuera de la transacción."""

    async def dispatch(self, event_type: str, payload: dict[str, Any]) -> None:
        """Raises en caso de fallo para que el outbox reintente."""
        ...
