import asyncio
import contextvars
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from travel_booking.application.interfaces.transaction_manager import TransactionManager
from travel_booking.infrastructure.in_memory.store import SnapshotStore


class InMemoryTransactionManager(TransactionManager):
    """
    Unidad de trabajo para el modo in-memory.

    Serializa las unidades de trabajo con un asyncio.Lock (equivalente al
    bloqueo de filas en SQL) y, si la unidad falla, restaura el estado de
    todos los repositorios registrados. Las llamadas anidadas dentro de la
    misma tarea reutilizan la transacción exterior.
    """

    def __init__(self, *stores: SnapshotStore) -> None:
        self._stores: list[SnapshotStore] = list(stores)
        self._lock = asyncio.Lock()
        self._active = contextvars.ContextVar(f"in_memory_tx_{id(self)}", default=False)

    def register(self, *stores: SnapshotStore) -> None:
        self._stores.extend(stores)

    @asynccontextmanager
    async def start(self) -> AsyncIterator[None]:
        if self._active.get():
            yield
            return

        async with self._lock:
            snapshots = [(store, store.snapshot()) for store in self._stores]
            token = self._active.set(True)
            try:
                yield
            except BaseException:
                for store, state in snapshots:
                    store.restore(state)
                raise
            finally:
                self._active.reset(token)
