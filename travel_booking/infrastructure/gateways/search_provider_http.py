import json
import logging
from typing import Any

import httpx
from pybreaker import CircuitBreaker

from travel_booking.application.interfaces.search_provider import SearchProviderError
from travel_booking.infrastructure.circuit_breaker import CircuitBreakerError, search_breaker

logger = logging.getLogger(__name__)

# Claves donde los proveedores devuelven la lista de ofertas
RESULT_KEYS = ("offers", "itineraries", "hotels", "results", "data")


def extract_offers(body: Any) -> list[dict[str, Any]] | None:
    """Busca la lista de ofertas en el cuerpo, hasta dos niveles de anidación."""
    if isinstance(body, list):
        return [item for item in body if isinstance(item, dict)]
    if not isinstance(body, dict):
        return None
    for key in RESULT_KEYS:
        value = body.get(key)
        if isinstance(value, list):
            return [item for item in value if isinstance(item, dict)]
        if isinstance(value, dict):
            nested = extract_offers(value)
            if nested is not None:
                return nested
    return None


class HttpSearchProvider:
    """
    Proveedor de búsqueda HTTP (APIs tipo RapidAPI), protegido por circuit breaker.

    Cualquier fallo (breaker abierto, timeout, error HTTP, respuesta no 2xx o
    sin lista de ofertas) se traduce a SearchProviderError; el caso de uso
    decide usar ofertas de respaldo.
    """

    def __init__(
        self,
        name: str,
        base_url: str,
        path: str,
        api_key: str | None = None,
        timeout_seconds: float = 10.0,
        breaker: CircuitBreaker = search_breaker,
    ) -> None:
        self.name = name
        self._base_url = base_url.rstrip("/")
        self._path = "/" + path.lstrip("/")
        self._api_key = api_key
        self._timeout = timeout_seconds
        self._breaker = breaker

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self._api_key:
            headers["x-rapidapi-key"] = self._api_key
            headers["x-rapidapi-host"] = httpx.URL(self._base_url).host
        return headers

    async def search_offers(self, criteria: dict[str, Any]) -> list[dict[str, Any]]:
        url = f"{self._base_url}{self._path}"
        params = {k: v for k, v in criteria.items() if v is not None}

        try:
            with self._breaker.calling():
                async with httpx.AsyncClient(timeout=self._timeout) as client:
                    response = await client.get(url, params=params, headers=self._headers())
                response.raise_for_status()
        except CircuitBreakerError as exc:
            logger.error(
                "Search circuit breaker is open - provider unavailable",
                extra={"provider": self.name, "circuit_state": str(exc)},
            )
            raise SearchProviderError(
                self.name, "CIRCUIT_OPEN", "Search provider temporarily unavailable"
            ) from exc
        except httpx.TimeoutException as exc:
            logger.warning(
                "Search provider timeout",
                extra={"provider": self.name, "timeout": self._timeout},
            )
            raise SearchProviderError(self.name, "TIMEOUT", str(exc)) from exc
        except httpx.HTTPStatusError as exc:
            logger.warning(
                "Search provider returned non-2xx",
                extra={"provider": self.name, "http_status": exc.response.status_code},
            )
            raise SearchProviderError(self.name, "NON_2XX", exc.response.text) from exc
        except httpx.HTTPError as exc:
            logger.error("Search provider HTTP error", exc_info=exc, extra={"provider": self.name})
            raise SearchProviderError(self.name, "HTTP_ERROR", str(exc)) from exc

        try:
            body = response.json()
        except json.JSONDecodeError as exc:
            raise SearchProviderError(self.name, "INVALID_BODY", "Response is not JSON") from exc

        offers = extract_offers(body)
        if offers is None:
            raise SearchProviderError(self.name, "INVALID_BODY", "Response has no offers list")
        return offers
