from typing import Annotated

from fastapi import APIRouter, Depends, status

from travel_booking.api.dependencies import get_use_cases
from travel_booking.infrastructure.db.retry import retry_on_deadlock

router = APIRouter()


@router.post("/workers/outbox/process", status_code=status.HTTP_200_OK)
async def process_outbox(
    use_cases: Annotated[dict, Depends(get_use_cases)],
) -> dict:
    """Procesa un batch de eventos del outbox (invocado por un scheduler externo)."""
    result = await retry_on_deadlock(use_cases["process_outbox"].process_batch)
    return {
        "claimed": result.claimed,
        "succeeded": result.succeeded,
        "retried": result.retried,
        "failed": result.failed,
    }
