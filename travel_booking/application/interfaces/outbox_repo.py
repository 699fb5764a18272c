"""Puerto del outbox transaccional: eventos que se escriben junto a la orden o el pago."""

from dataclasses import dataclass
from datetime import datetime
from typing import Any

OUTBOX_NEW = "NEW"
OUTBOX_RETRY = "RETRY"
OUTBOX_IN_PROGRESS = "IN_PROGRESS"
OUTBOX_DONE = "DONE"
OUTBOX_FAILED = "FAILED"


@dataclass
class OutboxEvent:
    id: int
    event_type: str
    aggregate_type: str
    aggregate_code: str
    payload: dict[str, Any]
    status: str
    attempts: int = 0
    next_attempt_at: datetime | None = None
    locked_by: str | None = None
    lock_expires_at: datetime | None = None
    error_code: str | None = None
    error_message: str | None = None


class OutboxRepo:
    """
    Cola persistente de eventos de notificación.

    enqueue corre dentro de la transacción del caso de uso que origina el
    evento. claim_ready toma hasta `limit` eventos NEW/RETRY vencidos y sin
    lock vigente, y los deja IN_PROGRESS a nombre de `locked_by`.
    FAILED es terminal (dead letter).
    """

    async def enqueue(
        self,
        event_type: str,
        aggregate_type: str,
        aggregate_code: str,
        payload: dict[str, Any],
    ) -> OutboxEvent:
        raise NotImplementedError

    async def claim_ready(
        self,
        limit: int,
        locked_by: str,
        now: datetime,
        lock_ttl_seconds: int = 30,
    ) -> list[OutboxEvent]:
        raise NotImplementedError

    async def mark_done(self, event_id: int) -> None:
        raise NotImplementedError

    async def mark_retry(
        self,
        event_id: int,
        attempts: int,
        next_attempt_at: datetime,
        error_code: str | None,
        error_message: str | None,
    ) -> None:
        raise NotImplementedError

    async def mark_failed(
        self,
        event_id: int,
        attempts: int,
        error_code: str | None,
        error_message: str | None,
    ) -> None:
        raise NotImplementedError
