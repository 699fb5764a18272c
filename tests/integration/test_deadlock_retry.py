"""
Reintentos ante deadlocks y timeouts de lock.

- Detecta MySQL 1213/1205, SQLSTATE de PostgreSQL y "database is locked" de SQLite
- Reintenta con backoff exponencial
- Se rinde después de max_attempts
"""

from unittest.mock import Mock

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError

from travel_booking.infrastructure.db.retry import (
    is_deadlock_error,
    retry_on_deadlock,
    with_deadlock_retry,
)


def _operational(message: str) -> OperationalError:
    return OperationalError("statement", "params", message, connection_invalidated=False)


def _deadlock() -> OperationalError:
    return _operational("(pymysql.err.OperationalError) (1213, 'Deadlock found')")


class TestDeadlockDetection:
    @pytest.mark.parametrize(
        "message",
        [
            "(pymysql.err.OperationalError) (1213, 'Deadlock found when trying to get lock')",
            "(pymysql.err.OperationalError) (1205, 'Lock wait timeout exceeded')",
            "(sqlite3.OperationalError) database is locked",
        ],
    )
    def test_detects_transient_errors(self, message):
        assert is_deadlock_error(_operational(message))

    def test_detects_postgres_sqlstate(self):
        orig = Mock()
        orig.sqlstate = "40P01"
        error = OperationalError("statement", "params", orig, connection_invalidated=False)

        assert is_deadlock_error(error)

    def test_ignores_other_errors(self):
        assert not is_deadlock_error(Exception("Generic error"))
        assert not is_deadlock_error(_operational("(2013, 'Lost connection to MySQL server')"))
        assert not is_deadlock_error(IntegrityError("statement", "params", "UNIQUE constraint failed"))


class TestRetryLogic:
    async def test_success_without_retry(self):
        calls = 0

        async def func():
            nonlocal calls
            calls += 1
            return "ok"

        assert await retry_on_deadlock(func) == "ok"
        assert calls == 1

    async def test_retries_until_success(self):
        calls = 0

        async def func():
            nonlocal calls
            calls += 1
            if calls <= 2:
                raise _deadlock()
            return "ok"

        assert await retry_on_deadlock(func, max_attempts=3, base_delay=0.001) == "ok"
        assert calls == 3

    async def test_gives_up_after_max_attempts(self):
        calls = 0

        async def func():
            nonlocal calls
            calls += 1
            raise _deadlock()

        with pytest.raises(OperationalError):
            await retry_on_deadlock(func, max_attempts=3, base_delay=0.001)
        assert calls == 3

    async def test_non_deadlock_is_not_retried(self):
        calls = 0

        async def func():
            nonlocal calls
            calls += 1
            raise ValueError("Not a deadlock")

        with pytest.raises(ValueError, match="Not a deadlock"):
            await retry_on_deadlock(func)
        assert calls == 1


class TestDecorator:
    async def test_decorated_function_is_retried(self):
        calls = []

        @with_deadlock_retry(max_attempts=2, base_delay=0.001)
        async def update_order(order_id: str, status: str) -> str:
            calls.append(order_id)
            if len(calls) == 1:
                raise _deadlock()
            return f"{order_id}:{status}"

        assert await update_order("order-1", status="confirmed") == "order-1:confirmed"
        assert calls == ["order-1", "order-1"]
        assert update_order.__name__ == "update_order"
