"""Tests for the asyncpg pool wrapper."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from src.storage.database import Database


def _async_cm(value):
    cm = MagicMock()
    cm.__aenter__ = AsyncMock(return_value=value)
    cm.__aexit__ = AsyncMock(return_value=False)
    return cm


@pytest.fixture
def conn():
    c = MagicMock()
    c.fetchval = AsyncMock(return_value=1)
    c.transaction = MagicMock(return_value=_async_cm(None))
    return c


@pytest.fixture
def db(conn):
    database = Database(database_url="postgresql://localhost/test", min_size=1, max_size=2)
    pool = MagicMock()
    pool.acquire = MagicMock(return_value=_async_cm(conn))
    database._pool = pool
    return database


class TestDatabase:
    def test_pool_requires_connect(self):
        database = Database(database_url="postgresql://localhost/test", min_size=1, max_size=2)
        with pytest.raises(RuntimeError, match="not connected"):
            database.pool

    async def test_transaction_wraps_one_connection(self, db, conn):
        async with db.transaction() as tx_conn:
            assert tx_conn is conn

        conn.transaction.assert_called_once()
        tx = conn.transaction.return_value
        tx.__aenter__.assert_awaited_once()
        tx.__aexit__.assert_awaited_once()

    async def test_transaction_exit_sees_error(self, db, conn):
        with pytest.raises(ValueError):
            async with db.transaction():
                raise ValueError("rollback")

        exc_type = conn.transaction.return_value.__aexit__.await_args.args[0]
        assert exc_type is ValueError

    async def test_health_check(self, db, conn):
        assert await db.health_check() is True
        conn.fetchval.side_effect = OSError("gone")
        assert await db.health_check() is False
