"""Worker que entrega los eventos del outbox al servicio de notificaciones."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import timedelta
from uuid import uuid4

from travel_booking.application.interfaces.clock import Clock
from travel_booking.application.interfaces.notification_dispatcher import NotificationDispatcher
from travel_booking.application.interfaces.outbox_repo import OutboxEvent, OutboxRepo
from travel_booking.application.interfaces.transaction_manager import TransactionManager
from travel_booking.domain.constants import NOTIFICATION_EVENTS

logger = logging.getLogger(__name__)

EventHandler = Callable[[OutboxEvent], Awaitable[None]]


@dataclass
class BatchResult:
    claimed: int = 0
    succeeded: int = 0
    retried: int = 0
    failed: int = 0


class OutboxWorker:
    """
    Procesa eventos del outbox de forma asíncrona.

    El reclamo y cada marca de resultado son transacciones cortas e
    independientes; el handler corre fuera de ellas. Un fallo del handler
    nunca afecta la orden o el pago que originó el evento: se reprograma con
    backoff exponencial y, al agotar max_retries, queda en FAILED (dead letter).
    """

    def __init__(
        self,
        outbox_repo: OutboxRepo,
        transaction_manager: TransactionManager,
        clock: Clock,
        worker_id: str | None = None,
        poll_interval_seconds: float = 5.0,
        batch_size: int = 10,
        lock_duration_seconds: int = 300,
        max_retries: int = 5,
        base_backoff_seconds: int = 30,
    ) -> None:
        self._outbox_repo = outbox_repo
        self._transaction_manager = transaction_manager
        self._clock = clock
        self._worker_id = worker_id or f"worker-{uuid4().hex[:8]}"
        self._poll_interval = poll_interval_seconds
        self._batch_size = batch_size
        self._lock_duration = lock_duration_seconds
        self._max_retries = max_retries
        self._base_backoff = base_backoff_seconds
        self._running = False
        self._handlers: dict[str, EventHandler] = {}

    @property
    def worker_id(self) -> str:
        return self._worker_id

    @property
    def is_running(self) -> bool:
        return self._running

    def register_handler(self, event_type: str, handler: EventHandler) -> None:
        self._handlers[event_type] = handler
        logger.info("Outbox handler registered", extra={"event_type": event_type})

    def register_dispatcher(self, dispatcher: NotificationDispatcher) -> None:
        """Registra el dispatcher para todos los eventos de notificación."""

        async def _dispatch(event: OutboxEvent) -> None:
            await dispatcher.dispatch(event.event_type, event.payload)

        for event_type in NOTIFICATION_EVENTS:
            self.register_handler(event_type, _dispatch)

    async def start(self) -> None:
        """Polling hasta que se llame a stop()."""
        self._running = True
        logger.info("Outbox worker started", extra={"worker_id": self._worker_id})

        while self._running:
            try:
                result = await self.process_batch()
                if result.claimed == 0:
                    await asyncio.sleep(self._poll_interval)
            except Exception:
                logger.exception("Outbox worker cycle failed", extra={"worker_id": self._worker_id})
                await asyncio.sleep(self._poll_interval)

    async def stop(self) -> None:
        self._running = False
        logger.info("Outbox worker stopped", extra={"worker_id": self._worker_id})

    async def process_batch(self) -> BatchResult:
        async with self._transaction_manager.start():
            events = await self._outbox_repo.claim_ready(
                limit=self._batch_size,
                locked_by=self._worker_id,
                now=self._clock.now(),
                lock_ttl_seconds=self._lock_duration,
            )

        result = BatchResult(claimed=len(events))
        for event in events:
            outcome = await self._process_event(event)
            if outcome == "done":
                result.succeeded += 1
            elif outcome == "retry":
                result.retried += 1
            else:
                result.failed += 1
        return result

    async def _process_event(self, event: OutboxEvent) -> str:
        handler = self._handlers.get(event.event_type)
        if handler is None:
            logger.warning("No outbox handler for event", extra={"event_type": event.event_type})
            async with self._transaction_manager.start():
                await self._outbox_repo.mark_done(event.id)
            return "done"

        try:
            await handler(event)
        except Exception as exc:
            logger.exception(
                "Outbox handler failed",
                extra={"event_id": event.id, "event_type": event.event_type},
            )
            return await self._handle_failure(event, exc)

        async with self._transaction_manager.start():
            await self._outbox_repo.mark_done(event.id)
        logger.info(
            "Outbox event processed",
            extra={"event_id": event.id, "event_type": event.event_type},
        )
        return "done"

    async def _handle_failure(self, event: OutboxEvent, exc: Exception) -> str:
        attempts = event.attempts + 1
        error_code = type(exc).__name__
        error_message = str(exc)

        if attempts >= self._max_retries:
            logger.error(
                "Outbox event exceeded max retries",
                extra={
                    "event_id": event.id,
                    "event_type": event.event_type,
                    "attempts": attempts,
                    "error_code": error_code,
                },
            )
            async with self._transaction_manager.start():
                await self._outbox_repo.mark_failed(
                    event.id,
                    attempts=attempts,
                    error_code=error_code,
                    error_message=error_message,
                )
            return "failed"

        # Backoff exponencial: 30s, 60s, 120s, 240s...
        backoff_seconds = self._base_backoff * (2 ** (attempts - 1))
        next_attempt = self._clock.now() + timedelta(seconds=backoff_seconds)
        logger.info(
            "Outbox event scheduled for retry",
            extra={
                "event_id": event.id,
                "attempts": attempts,
                "max_retries": self._max_retries,
                "next_attempt_at": next_attempt.isoformat(),
            },
        )
        async with self._transaction_manager.start():
            await self._outbox_repo.mark_retry(
                event.id,
                attempts=attempts,
                next_attempt_at=next_attempt,
                error_code=error_code,
                error_message=error_message,
            )
        return "retry"
