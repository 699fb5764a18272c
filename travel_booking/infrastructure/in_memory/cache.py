import copy
import time
from typing import Any

DEFAULT_MAX_ENTRIES = 1024


class InMemoryCache:
    """
    Cache TTL local al proceso.

    Solo para tests y el modo in-memory de desarrollo: no se comparte entre
    instancias. En producción se usa RedisCache.

    Al llegar a max_entries, set() descarta primero las entradas vencidas y
    luego las más antiguas.
    """

    def __init__(self, time_func=time.monotonic, max_entries: int = DEFAULT_MAX_ENTRIES) -> None:
        self._time = time_func
        self._max_entries = max(1, max_entries)
        self._entries: dict[str, tuple[float, Any]] = {}

    def __len__(self) -> int:
        return len(self._entries)

    async def get(self, key: str) -> Any | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        expires_at, value = entry
        if expires_at <= self._time():
            del self._entries[key]
            return None
        return copy.deepcopy(value)

    async def set(self, key: str, value: Any, ttl_seconds: int) -> None:
        now = self._time()
        # Reinsertar para que el orden del dict refleje la última escritura
        self._entries.pop(key, None)
        if len(self._entries) >= self._max_entries:
            self._evict(now)
        self._entries[key] = (now + ttl_seconds, copy.deepcopy(value))

    async def invalidate(self, key: str) -> None:
        self._entries.pop(key, None)

    def _evict(self, now: float) -> None:
        expired = [k for k, (expires_at, _) in self._entries.items() if expires_at <= now]
        for key in expired:
            del self._entries[key]
        while len(self._entries) >= self._max_entries:
            del self._entries[next(iter(self._entries))]
