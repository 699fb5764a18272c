"""
Health checks para orquestadores (K8s, Docker, etc.)

- /health y /health/live: liveness, siempre 200
- /health/db: conectividad con la base de datos
- /health/ready: readiness (todas las dependencias sanas)

En modo in-memory no hay base de datos y los checks reportan "in_memory".
"""

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from travel_booking.api.dependencies import get_session

logger = logging.getLogger(__name__)

router = APIRouter()

SERVICE_NAME = "travel-booking-api"


async def _database_healthy(session: AsyncSession) -> bool:
    try:
        result = await session.execute(text("SELECT 1"))
        result.scalar()
        return True
    except Exception as e:
        logger.error("Database health check failed", exc_info=e)
        return False


@router.get("/health")
async def health_check():
    return {"status": "ok", "service": SERVICE_NAME}


@router.get("/health/live")
async def health_check_live():
    """Alias de /health para el liveness probe."""
    return {"status": "ok", "service": SERVICE_NAME}


@router.get("/health/db")
async def health_check_db(session: AsyncSession | None = Depends(get_session)):
    """Retorna 503 si la base de datos no responde."""
    if session is None:
        return {"status": "healthy", "component": "database", "mode": "in_memory"}

    if await _database_healthy(session):
        return {"status": "healthy", "component": "database"}
    return JSONResponse(
        status_code=503,
        content={
            "status": "unhealthy",
            "component": "database",
            "error": "Database connection failed",
        },
    )


@router.get("/health/ready")
async def health_check_ready(session: AsyncSession | None = Depends(get_session)):
    health_status = {"status": "ready", "checks": {}}

    if session is None:
        health_status["checks"]["database"] = "in_memory"
        return health_status

    if not await _database_healthy(session):
        health_status["status"] = "not_ready"
        health_status["checks"]["database"] = "unhealthy"
        return JSONResponse(status_code=503, content=health_status)

    health_status["checks"]["database"] = "healthy"
    return health_status
