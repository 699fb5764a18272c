from typing import Any

from fastapi import APIRouter, Body, Depends

from travel_booking.api.dependencies import get_use_cases
from travel_booking.api.schemas.search import SearchResponse

router = APIRouter()


@router.post("/search/{kind}", response_model=SearchResponse)
async def search_offers(
    kind: str,
    criteria: dict[str, Any] = Body(default_factory=dict),
    use_cases=Depends(get_use_cases),
):
    """Búsqueda de vuelos u hoteles; nunca falla por el proveedor (usa respaldo)."""
    return await use_cases["search_offers"].execute(kind=kind, criteria=criteria)
