import hashlib
import json
import logging
from dataclasses import dataclass
from typing import Any

from travel_booking.application.interfaces.cache import Cache
from travel_booking.application.interfaces.search_provider import (
    SearchProvider,
    SearchProviderError,
)
from travel_booking.domain.errors import ValidationError

SOURCE_CACHE = "cache"
SOURCE_LIVE = "live"
SOURCE_FALLBACK = "fallback"


def search_cache_key(kind: str, criteria: dict[str, Any]) -> str:
    normalized = json.dumps(criteria, sort_keys=True, separators=(",", ":"), default=str)
    return f"search:{kind}:{hashlib.sha256(normalized.encode()).hexdigest()}"


@dataclass
class SearchResult:
    kind: str
    offers: list[dict[str, Any]]
    source: str


class SearchOffersUseCase:
    """
    Búsqueda de ofertas: cache -> proveedor en vivo -> ofertas de respaldo.

    Ningún fallo del proveedor ni del cache llega al cliente.
    """

    def __init__(
        self,
        providers: dict[str, SearchProvider],
        fallback_providers: dict[str, SearchProvider],
        cache: Cache,
        cache_ttl_seconds: int = 300,
    ) -> None:
        self._providers = providers
        self._fallback_providers = fallback_providers
        self._cache = cache
        self._cache_ttl = cache_ttl_seconds
        self._logger = logging.getLogger(__name__)

    async def execute(self, kind: str, criteria: dict[str, Any]) -> SearchResult:
        if kind not in self._fallback_providers:
            raise ValidationError("kind", f"Unsupported search kind: {kind}")

        key = search_cache_key(kind, criteria)
        cached = await self._cache_get(key)
        if cached is not None:
            return SearchResult(kind=kind, offers=cached, source=SOURCE_CACHE)

        provider = self._providers.get(kind)
        if provider is not None:
            try:
                offers = await provider.search_offers(criteria)
            except SearchProviderError as exc:
                self._logger.warning(
                    "Search provider failed, using fallback offers",
                    extra={
                        "provider": exc.provider,
                        "error_code": exc.error_code,
                        "error": str(exc),
                        "kind": kind,
                    },
                )
            else:
                await self._cache_set(key, offers)
                return SearchResult(kind=kind, offers=offers, source=SOURCE_LIVE)
        else:
            self._logger.info("No live search provider configured", extra={"kind": kind})

        offers = await self._fallback_providers[kind].search_offers(criteria)
        return SearchResult(kind=kind, offers=offers, source=SOURCE_FALLBACK)

    async def _cache_get(self, key: str) -> list[dict[str, Any]] | None:
        try:
            return await self._cache.get(key)
        except Exception as exc:
            self._logger.warning("Search cache read failed", extra={"key": key, "error": str(exc)})
            return None

    async def _cache_set(self, key: str, offers: list[dict[str, Any]]) -> None:
        try:
            await self._cache.set(key, offers, self._cache_ttl)
        except Exception as exc:
            self._logger.warning("Search cache write failed", extra={"key": key, "error": str(exc)})
