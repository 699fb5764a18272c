"""Ofertas de respaldo cuando no hay proveedor en vivo o el proveedor falla."""

import hashlib
from decimal import Decimal
from typing import Any

from travel_booking.domain.value_objects.money import round_money

PLACEHOLDER_AIRLINES = ("Saudia", "flynas", "Emirates")
PLACEHOLDER_HOTELS = ("Grand Plaza Hotel", "Al Haram View Suites", "City Center Inn")


def _seed(criteria: dict[str, Any]) -> int:
    key = "|".join(f"{k}={criteria[k]}" for k in sorted(criteria))
    return int(hashlib.sha256(key.encode()).hexdigest()[:8], 16)


class MockFlightSearchProvider:
    name = "mock-flights"

    def __init__(self, currency: str = "SAR") -> None:
        self._currency = currency

    async def search_offers(self, criteria: dict[str, Any]) -> list[dict[str, Any]]:
        seed = _seed(criteria)
        origin = criteria.get("origin", "RUH")
        destination = criteria.get("destination", "JED")
        offers = []
        for index, airline in enumerate(PLACEHOLDER_AIRLINES):
            price = round_money(Decimal(350 + (seed + index * 97) % 900))
            offers.append(
                {
                    "id": f"mock-flt-{seed % 100000}-{index + 1}",
                    "airline": airline,
                    "origin": origin,
                    "destination": destination,
                    "departure_date": criteria.get("date"),
                    "stops": index % 2,
                    "price": str(price),
                    "currency": criteria.get("currency", self._currency),
                    "is_placeholder": True,
                }
            )
        return offers


class MockHotelSearchProvider:
    name = "mock-hotels"

    def __init__(self, currency: str = "SAR") -> None:
        self._currency = currency

    async def search_offers(self, criteria: dict[str, Any]) -> list[dict[str, Any]]:
        seed = _seed(criteria)
        offers = []
        for index, hotel in enumerate(PLACEHOLDER_HOTELS):
            price = round_money(Decimal(250 + (seed + index * 61) % 1200))
            offers.append(
                {
                    "id": f"mock-htl-{seed % 100000}-{index + 1}",
                    "name": hotel,
                    "city": criteria.get("city", "Makkah"),
                    "check_in": criteria.get("check_in"),
                    "check_out": criteria.get("check_out"),
                    "stars": 5 - index,
                    "price_per_night": str(price),
                    "currency": criteria.get("currency", self._currency),
                    "is_placeholder": True,
                }
            )
        return offers
