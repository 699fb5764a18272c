import copy
from datetime import datetime, timedelta
from typing import Any

from travel_booking.application.interfaces.clock import Clock
from travel_booking.application.interfaces.outbox_repo import (
    OUTBOX_DONE,
    OUTBOX_FAILED,
    OUTBOX_IN_PROGRESS,
    OUTBOX_NEW,
    OUTBOX_RETRY,
    OutboxEvent,
    OutboxRepo,
)
from travel_booking.infrastructure.in_memory.store import SnapshotStore


class InMemoryOutboxRepo(SnapshotStore, OutboxRepo):
    _state_attrs = ("_events", "_next_id")

    def __init__(self, clock: Clock) -> None:
        self._clock = clock
        self._events: dict[int, OutboxEvent] = {}
        self._next_id = 1

    async def enqueue(
        self,
        event_type: str,
        aggregate_type: str,
        aggregate_code: str,
        payload: dict[str, Any],
    ) -> OutboxEvent:
        event = OutboxEvent(
            id=self._next_id,
            event_type=event_type,
            aggregate_type=aggregate_type,
            aggregate_code=aggregate_code,
            payload=copy.deepcopy(payload),
            status=OUTBOX_NEW,
            attempts=0,
            next_attempt_at=self._clock.now(),
        )
        self._events[event.id] = event
        self._next_id += 1
        return event

    async def claim_ready(
        self,
        limit: int,
        locked_by: str,
        now: datetime,
        lock_ttl_seconds: int = 30,
    ) -> list[OutboxEvent]:
        claimed = []
        for event in self._events.values():
            if len(claimed) >= limit:
                break
            if event.status not in {OUTBOX_NEW, OUTBOX_RETRY}:
                continue
            if event.next_attempt_at and event.next_attempt_at > now:
                continue
            if event.lock_expires_at and event.lock_expires_at > now:
                continue
            event.locked_by = locked_by
            event.lock_expires_at = now + timedelta(seconds=lock_ttl_seconds)
            event.status = OUTBOX_IN_PROGRESS
            claimed.append(copy.deepcopy(event))
        return claimed

    async def mark_done(self, event_id: int) -> None:
        self._release(event_id, status=OUTBOX_DONE)

    async def mark_retry(
        self,
        event_id: int,
        attempts: int,
        next_attempt_at: datetime,
        error_code: str | None,
        error_message: str | None,
    ) -> None:
        self._release(
            event_id,
            status=OUTBOX_RETRY,
            attempts=attempts,
            next_attempt_at=next_attempt_at,
            error_code=error_code,
            error_message=error_message,
        )

    async def mark_failed(
        self,
        event_id: int,
        attempts: int,
        error_code: str | None,
        error_message: str | None,
    ) -> None:
        self._release(
            event_id,
            status=OUTBOX_FAILED,
            attempts=attempts,
            error_code=error_code,
            error_message=error_message,
        )

    def _release(self, event_id: int, **changes: Any) -> None:
        event = self._events.get(event_id)
        if event is None:
            return
        for name, value in changes.items():
            setattr(event, name, value)
        event.locked_by = None
        event.lock_expires_at = None

    # Helpers para tests
    def events(self, event_type: str | None = None) -> list[OutboxEvent]:
        return [
            copy.deepcopy(e)
            for e in self._events.values()
            if event_type is None or e.event_type == event_type
        ]
