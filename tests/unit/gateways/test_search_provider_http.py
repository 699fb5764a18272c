import json
import unittest
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
from pybreaker import CircuitBreaker

from travel_booking.application.interfaces.search_provider import SearchProviderError
from travel_booking.infrastructure.gateways.search_provider_http import (
    HttpSearchProvider,
    extract_offers,
)


def _mock_client(mock_client_cls, response=None, side_effect=None):
    mock_client = AsyncMock()
    mock_client.__aenter__.return_value = mock_client
    if side_effect is not None:
        mock_client.get.side_effect = side_effect
    else:
        mock_client.get.return_value = response
    mock_client_cls.return_value = mock_client
    return mock_client


class TestHttpSearchProvider(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.breaker = CircuitBreaker(fail_max=5, reset_timeout=60, name="test_search")
        self.provider = HttpSearchProvider(
            name="flights",
            base_url="https://flights.example.com/",
            path="api/v1/searchFlights",
            api_key="secret",
            timeout_seconds=2.0,
            breaker=self.breaker,
        )
        self.criteria = {"origin": "RUH", "destination": "JED", "date": "2025-03-01", "cabin": None}

    @patch("httpx.AsyncClient")
    async def test_search_success(self, mock_client_cls):
        mock_resp = MagicMock()
        mock_resp.status_code = 200
        mock_resp.json.return_value = {"data": {"itineraries": [{"id": "it-1"}, {"id": "it-2"}, "noise"]}}
        mock_client = _mock_client(mock_client_cls, response=mock_resp)

        offers = await self.provider.search_offers(self.criteria)

        self.assertEqual(offers, [{"id": "it-1"}, {"id": "it-2"}])
        args, kwargs = mock_client.get.call_args
        self.assertEqual(args[0], "https://flights.example.com/api/v1/searchFlights")
        self.assertNotIn("cabin", kwargs["params"])
        self.assertEqual(kwargs["headers"]["x-rapidapi-key"], "secret")
        self.assertEqual(kwargs["headers"]["x-rapidapi-host"], "flights.example.com")

    @patch("httpx.AsyncClient")
    async def test_search_non_2xx(self, mock_client_cls):
        mock_resp = MagicMock()
        mock_resp.status_code = 503
        mock_resp.text = "Service Unavailable"
        mock_resp.raise_for_status.side_effect = httpx.HTTPStatusError(
            "503", request=MagicMock(), response=mock_resp
        )
        _mock_client(mock_client_cls, response=mock_resp)

        with self.assertRaises(SearchProviderError) as ctx:
            await self.provider.search_offers(self.criteria)

        self.assertEqual(ctx.exception.error_code, "NON_2XX")
        self.assertEqual(ctx.exception.provider, "flights")

    @patch("httpx.AsyncClient")
    async def test_search_timeout(self, mock_client_cls):
        _mock_client(mock_client_cls, side_effect=httpx.ReadTimeout("timed out"))

        with self.assertRaises(SearchProviderError) as ctx:
            await self.provider.search_offers(self.criteria)

        self.assertEqual(ctx.exception.error_code, "TIMEOUT")

    @patch("httpx.AsyncClient")
    async def test_search_connection_error(self, mock_client_cls):
        _mock_client(mock_client_cls, side_effect=httpx.ConnectError("refused"))

        with self.assertRaises(SearchProviderError) as ctx:
            await self.provider.search_offers(self.criteria)

        self.assertEqual(ctx.exception.error_code, "HTTP_ERROR")

    @patch("httpx.AsyncClient")
    async def test_search_invalid_json(self, mock_client_cls):
        mock_resp = MagicMock()
        mock_resp.status_code = 200
        mock_resp.json.side_effect = json.JSONDecodeError("Expecting value", "<html>", 0)
        _mock_client(mock_client_cls, response=mock_resp)

        with self.assertRaises(SearchProviderError) as ctx:
            await self.provider.search_offers(self.criteria)

        self.assertEqual(ctx.exception.error_code, "INVALID_BODY")

    @patch("httpx.AsyncClient")
    async def test_search_body_without_offers(self, mock_client_cls):
        mock_resp = MagicMock()
        mock_resp.status_code = 200
        mock_resp.json.return_value = {"status": "ok"}
        _mock_client(mock_client_cls, response=mock_resp)

        with self.assertRaises(SearchProviderError) as ctx:
            await self.provider.search_offers(self.criteria)

        self.assertEqual(ctx.exception.error_code, "INVALID_BODY")

    @patch("httpx.AsyncClient")
    async def test_open_breaker_skips_request(self, mock_client_cls):
        mock_client = _mock_client(mock_client_cls, response=MagicMock())
        self.breaker.open()

        with self.assertRaises(SearchProviderError) as ctx:
            await self.provider.search_offers(self.criteria)

        self.assertEqual(ctx.exception.error_code, "CIRCUIT_OPEN")
        mock_client.get.assert_not_called()


class TestExtractOffers(unittest.TestCase):
    def test_top_level_list(self):
        self.assertEqual(extract_offers([{"id": 1}, 2]), [{"id": 1}])

    def test_known_keys(self):
        self.assertEqual(extract_offers({"hotels": [{"id": "h"}]}), [{"id": "h"}])
        self.assertEqual(extract_offers({"results": []}), [])

    def test_unusable_body(self):
        self.assertIsNone(extract_offers({"message": "quota exceeded"}))
        self.assertIsNone(extract_offers("not json"))
