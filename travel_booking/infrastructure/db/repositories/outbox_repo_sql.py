from datetime import datetime, timedelta
from typing import Any

from sqlalchemy import insert, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

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
from travel_booking.infrastructure.db.mapping import as_utc
from travel_booking.infrastructure.db.tables import outbox_events

ERROR_MESSAGE_MAX = 500


class OutboxRepoSQL(OutboxRepo):
    def __init__(self, session: AsyncSession, clock: Clock) -> None:
        self._session = session
        self._clock = clock

    async def enqueue(
        self,
        event_type: str,
        aggregate_type: str,
        aggregate_code: str,
        payload: dict[str, Any],
    ) -> OutboxEvent:
        now = self._clock.now()
        stmt = insert(outbox_events).values(
            event_type=event_type,
            aggregate_type=aggregate_type,
            aggregate_code=aggregate_code,
            payload=payload,
            status=OUTBOX_NEW,
            attempts=0,
            next_attempt_at=now,
            created_at=now,
            updated_at=now,
        )
        result = await self._session.execute(stmt)
        return OutboxEvent(
            id=result.inserted_primary_key[0],
            event_type=event_type,
            aggregate_type=aggregate_type,
            aggregate_code=aggregate_code,
            payload=payload,
            status=OUTBOX_NEW,
            attempts=0,
            next_attempt_at=now,
        )

    async def claim_ready(
        self,
        limit: int,
        locked_by: str,
        now: datetime,
        lock_ttl_seconds: int = 30,
    ) -> list[OutboxEvent]:
        ready = (
            select(outbox_events.c.id)
            .where(
                outbox_events.c.status.in_((OUTBOX_NEW, OUTBOX_RETRY)),
                or_(
                    outbox_events.c.next_attempt_at.is_(None),
                    outbox_events.c.next_attempt_at <= now,
                ),
                or_(
                    outbox_events.c.lock_expires_at.is_(None),
                    outbox_events.c.lock_expires_at <= now,
                ),
            )
            .order_by(outbox_events.c.id)
            .limit(limit)
            .with_for_update(skip_locked=True)
        )
        ids = [row[0] for row in (await self._session.execute(ready)).all()]
        if not ids:
            return []

        # El update repite el filtro de estado: otro worker pudo reclamar entre medio
        stmt = (
            update(outbox_events)
            .where(
                outbox_events.c.id.in_(ids),
                outbox_events.c.status.in_((OUTBOX_NEW, OUTBOX_RETRY)),
            )
            .values(
                locked_by=locked_by,
                locked_at=now,
                lock_expires_at=now + timedelta(seconds=lock_ttl_seconds),
                updated_at=now,
                status=OUTBOX_IN_PROGRESS,
            )
            .returning(outbox_events)
        )
        result = await self._session.execute(stmt)
        events = [self._map_event(row) for row in result.mappings().all()]
        return sorted(events, key=lambda e: e.id)

    async def mark_done(self, event_id: int) -> None:
        await self._release(event_id, status=OUTBOX_DONE)

    async def mark_retry(
        self,
        event_id: int,
        attempts: int,
        next_attempt_at: datetime,
        error_code: str | None,
        error_message: str | None,
    ) -> None:
        await self._release(
            event_id,
            status=OUTBOX_RETRY,
            attempts=attempts,
            next_attempt_at=next_attempt_at,
            error_code=error_code,
            error_message=_truncate(error_message),
        )

    async def mark_failed(
        self,
        event_id: int,
        attempts: int,
        error_code: str | None,
        error_message: str | None,
    ) -> None:
        await self._release(
            event_id,
            status=OUTBOX_FAILED,
            attempts=attempts,
            error_code=error_code,
            error_message=_truncate(error_message),
        )

    async def _release(self, event_id: int, **values: Any) -> None:
        """Cierra el intento actual: libera el lock y guarda el nuevo estado."""
        await self._session.execute(
            update(outbox_events)
            .where(outbox_events.c.id == event_id)
            .values(locked_by=None, lock_expires_at=None, updated_at=self._clock.now(), **values)
        )

    def _map_event(self, row) -> OutboxEvent:
        return OutboxEvent(
            id=row["id"],
            event_type=row["event_type"],
            aggregate_type=row["aggregate_type"],
            aggregate_code=row["aggregate_code"],
            payload=row["payload"],
            status=row["status"],
            attempts=row["attempts"] or 0,
            next_attempt_at=as_utc(row["next_attempt_at"]),
            locked_by=row["locked_by"],
            lock_expires_at=as_utc(row["lock_expires_at"]),
            error_code=row["error_code"],
            error_message=row["error_message"],
        )


def _truncate(message: str | None) -> str | None:
    return (message or "")[:ERROR_MESSAGE_MAX] or None
