import logging
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from travel_booking.api.deps import get_engine
from travel_booking.api.routers.cart import router as cart_router
from travel_booking.api.routers.health import router as health_router
from travel_booking.api.routers.orders import router as orders_router
from travel_booking.api.routers.payments import router as payments_router
from travel_booking.api.routers.promo_codes import router as promo_codes_router
from travel_booking.api.routers.search import router as search_router
from travel_booking.api.routers.worker import router as worker_router
from travel_booking.config import get_settings
from travel_booking.domain.errors import (
    ConflictError,
    DomainError,
    NotFoundError,
    ValidationError,
)
from travel_booking.infrastructure.db.engine import create_schema

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    if settings.use_in_memory:
        logger.info("Starting with in-memory repositories")
        yield
        return

    # Crea las tablas si no existen (dev/demo)
    engine = get_engine()
    await create_schema(engine)
    yield
    await engine.dispose()


app = FastAPI(
    title="Travel Booking API",
    version="0.1.0",
    lifespan=lifespan
)


def _status_for(exc: DomainError) -> int:
    if isinstance(exc, ValidationError):
        return 422
    if isinstance(exc, NotFoundError):
        return 404
    if isinstance(exc, ConflictError):
        return 409
    return 400


@app.exception_handler(DomainError)
async def domain_exception_handler(request: Request, exc: DomainError):
    status_code = _status_for(exc)
    logger.info(
        "Domain error",
        extra={
            "code": exc.code,
            "status_code": status_code,
            "path": request.url.path,
            "method": request.method,
        }
    )
    return JSONResponse(
        status_code=status_code,
        content={"detail": exc.message, "code": exc.code},
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Oculta el stack trace al cliente; el error_id permite rastrearlo en los logs."""
    error_id = str(uuid.uuid4())

    logger.error(
        "Unhandled exception occurred",
        exc_info=exc,
        extra={
            "error_id": error_id,
            "path": request.url.path,
            "method": request.method,
            "client_host": request.client.host if request.client else None,
        }
    )

    return JSONResponse(
        status_code=500,
        content={
            "detail": "Internal server error",
            "error_id": error_id,
            "message": "An unexpected error occurred. Please contact support with the error_id if the issue persists."
        }
    )


app.include_router(health_router, tags=["Health"])
app.include_router(search_router, prefix="/api/v1", tags=["Search"])
app.include_router(cart_router, prefix="/api/v1", tags=["Cart"])
app.include_router(promo_codes_router, prefix="/api/v1", tags=["Promo Codes"])
app.include_router(orders_router, prefix="/api/v1", tags=["Orders"])
app.include_router(payments_router, prefix="/api/v1", tags=["Payments"])
app.include_router(worker_router, prefix="/api/v1", tags=["Worker"])
