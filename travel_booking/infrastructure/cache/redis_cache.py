import json
import logging
from typing import Any

import redis.asyncio as aioredis

logger = logging.getLogger(__name__)


class RedisCache:
    """
    Cache compartido entre instancias, valores serializados como JSON.

    La conexión se abre perezosamente en el primer uso.
    """

    def __init__(self, redis_url: str, client: aioredis.Redis | None = None) -> None:
        self._redis_url = redis_url
        self._redis = client

    async def _client(self) -> aioredis.Redis:
        if self._redis is None:
            self._redis = aioredis.from_url(self._redis_url, decode_responses=True)
        return self._redis

    async def get(self, key: str) -> Any | None:
        redis = await self._client()
        raw = await redis.get(key)
        if raw is None:
            return None
        return json.loads(raw)

    async def set(self, key: str, value: Any, ttl_seconds: int) -> None:
        redis = await self._client()
        await redis.set(key, json.dumps(value, default=str), ex=ttl_seconds)

    async def invalidate(self, key: str) -> None:
        redis = await self._client()
        await redis.delete(key)

    async def close(self) -> None:
        if self._redis is not None:
            await self._redis.aclose()
            self._redis = None
