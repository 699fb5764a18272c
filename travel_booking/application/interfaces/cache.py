from typing import Any, Protocol


class Cache(Protocol):
    """Cache compartido entre instancias (Redis en producción)."""

    async def get(self, key: str) -> Any | None:
        ...

    async def set(self, key: str, value: Any, ttl_seconds: int) -> None:
        ...

    async def invalidate(self, key: str) -> None:
        ...
