"""
Reintentos ante errores transitorios de base de datos.

Deadlocks y timeouts de lock se reintentan con backoff exponencial; cualquier
otro error se propaga de inmediato.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from functools import wraps
from typing import TypeVar

from sqlalchemy.exc import DBAPIError, OperationalError

logger = logging.getLogger(__name__)

T = TypeVar("T")

# MySQL
MYSQL_DEADLOCK_ERROR = "1213"
MYSQL_LOCK_WAIT_TIMEOUT = "1205"
# PostgreSQL (SQLSTATE)
PG_DEADLOCK_DETECTED = "40P01"
PG_SERIALIZATION_FAILURE = "40001"
PG_LOCK_NOT_AVAILABLE = "55P03"
# SQLite
SQLITE_LOCKED = "database is locked"

TRANSIENT_MARKERS = (
    MYSQL_DEADLOCK_ERROR,
    MYSQL_LOCK_WAIT_TIMEOUT,
    PG_DEADLOCK_DETECTED,
    PG_SERIALIZATION_FAILURE,
    PG_LOCK_NOT_AVAILABLE,
    SQLITE_LOCKED,
)


def is_deadlock_error(error: Exception) -> bool:
    if not isinstance(error, (OperationalError, DBAPIError)):
        return False
    sqlstate = getattr(getattr(error, "orig", None), "sqlstate", None)
    if sqlstate in (PG_DEADLOCK_DETECTED, PG_SERIALIZATION_FAILURE, PG_LOCK_NOT_AVAILABLE):
        return True
    error_str = str(error)
    return any(marker in error_str for marker in TRANSIENT_MARKERS)


async def retry_on_deadlock(
    func: Callable[[], Awaitable[T]],
    max_attempts: int = 3,
    base_delay: float = 0.1,
) -> T:
    """
    Ejecuta `func` reintentando si falla por deadlock.

    Backoff: base_delay * (2 ** attempt). `func` debe abrir su propia
    transacción para que cada intento empiece limpio.
    """
    for attempt in range(max_attempts):
        try:
            return await func()
        except Exception as e:
            if not is_deadlock_error(e):
                raise

            if attempt < max_attempts - 1:
                delay = base_delay * (2 ** attempt)
                logger.warning(
                    "Database deadlock detected, retrying",
                    extra={
                        "attempt": attempt + 1,
                        "max_attempts": max_attempts,
                        "retry_delay": delay,
                        "error": str(e),
                    },
                )
                await asyncio.sleep(delay)
            else:
                logger.error(
                    "Database deadlock persists after max retries",
                    extra={"attempts": max_attempts, "error": str(e)},
                )
                raise

    raise RuntimeError("retry_on_deadlock requires max_attempts >= 1")


def with_deadlock_retry(max_attempts: int = 3, base_delay: float = 0.1):
    """Decorador equivalente a `retry_on_deadlock` para funciones async."""

    def decorator(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
        @wraps(func)
        async def wrapper(*args, **kwargs) -> T:
            async def execute():
                return await func(*args, **kwargs)

            return await retry_on_deadlock(execute, max_attempts, base_delay)

        return wrapper

    return decorator
