"""
PostgreSQL database connection management.

Uses asyncpg for async database operations against the newsletter store.
Provides connection pooling and transactions; the schema itself lives in
``src.storage.schema``.
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

import asyncpg

from src.config.settings import get_settings

logger = logging.getLogger(__name__)


class Database:
    """
    Async PostgreSQL database connection manager.

    Every statement runs on a pooled connection and commits on its own
    unless wrapped in ``transaction()``.

    Usage:
        db = Database()
        await db.connect()

        async with db.transaction() as conn:
            group_id = await conn.fetchval("INSERT INTO ... RETURNING id")
            await conn.executemany("INSERT INTO ...", rows)

        await db.close()
    """

    def __init__(
        self,
        database_url: str | None = None,
        min_size: int | None = None,
        max_size: int | None = None,
    ):
        """
        Initialize database connection manager.

        Args:
            database_url: PostgreSQL connection URL (default: DATABASE_URL)
            min_size: Minimum pool size (default: DB_POOL_MIN_SIZE)
            max_size: Maximum pool size (default: DB_POOL_MAX_SIZE)
        """
        settings = get_settings()

        self._database_url = database_url or str(settings.database_url)
        self._min_size = min_size or settings.db_pool_min_size
        self._max_size = max_size or settings.db_pool_max_size
        self._command_timeout = settings.db_command_timeout

        self._pool: asyncpg.Pool | None = None

    async def connect(self) -> None:
        """
        Establish the database connection pool.

        Statements that run longer than DB_COMMAND_TIMEOUT seconds are
        cancelled by asyncpg.

        Raises:
            Exception: The pool could not be created (logged, then re-raised).
        """
        try:
            self._pool = await asyncpg.create_pool(
                self._database_url,
                min_size=self._min_size,
                max_size=self._max_size,
                command_timeout=self._command_timeout,
            )
            logger.info(
                "Database connected (pool: %d-%d)", self._min_size, self._max_size
            )
        except Exception as e:
            logger.error("Failed to connect to database: %s", e)
            raise

    async def close(self) -> None:
        """Close database connection pool."""
        if self._pool:
            await self._pool.close()
            self._pool = None
            logger.info("Database connection closed")

    @property
    def pool(self) -> asyncpg.Pool:
        """Get connection pool, raising if not connected."""
        if self._pool is None:
            raise RuntimeError("Database not connected. Call connect() first.")
        return self._pool

    @asynccontextmanager
    async def acquire(self) -> AsyncIterator[asyncpg.Connection]:
        """
        Acquire a connection from the pool.

        The connection goes back to the pool when the block exits.

        Usage:
            async with db.acquire() as conn:
                await conn.fetch("SELECT ...")
        """
        async with self.pool.acquire() as conn:
            yield conn

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[asyncpg.Connection]:
        """
        Run several statements atomically on one connection.

        Commits when the block exits normally and rolls back if it raises.

        Usage:
            async with db.transaction() as conn:
                await conn.execute("INSERT INTO duplicate_groups ...")
                await conn.executemany("INSERT INTO duplicate_posts ...", rows)
        """
        async with self.pool.acquire() as conn:
            async with conn.transaction():
                yield conn

    async def execute(self, query: str, *args: Any) -> str:
        """
        Execute a query without returning rows.

        Args:
            query: SQL query with ``$n`` placeholders
            *args: Query parameters

        Returns:
            PostgreSQL status string, e.g. ``"UPDATE 3"``
        """
        async with self.acquire() as conn:
            return await conn.execute(query, *args)

    async def fetch(self, query: str, *args: Any) -> list[asyncpg.Record]:
        """
        Execute a query and fetch all results.

        Args:
            query: SQL query with ``$n`` placeholders
            *args: Query parameters

        Returns:
            List of records (empty when nothing matches)
        """
        async with self.acquire() as conn:
            return await conn.fetch(query, *args)

    async def fetchrow(self, query: str, *args: Any) -> asyncpg.Record | None:
        """
        Execute a query and fetch the first row.

        Args:
            query: SQL query with ``$n`` placeholders
            *args: Query parameters

        Returns:
            First record, or None when the query returned no rows
        """
        async with self.acquire() as conn:
            return await conn.fetchrow(query, *args)

    async def fetchval(self, query: str, *args: Any) -> Any:
        """
        Execute a query and fetch a single value.

        Args:
            query: SQL query with ``$n`` placeholders
            *args: Query parameters

        Returns:
            First column of the first row, or None when there is no row
        """
        async with self.acquire() as conn:
            return await conn.fetchval(query, *args)

    async def health_check(self) -> bool:
        """
        Check whether the database answers queries.

        Returns:
            True if ``SELECT 1`` succeeds, False on any error
        """
        try:
            result = await self.fetchval("SELECT 1")
            return result == 1
        except Exception:
            return False


# Global database instance
_database: Database | None = None


async def get_database() -> Database:
    """
    Get global database instance.

    Creates and connects if not already connected.

    Returns:
        Connected Database shared by the API process
    """
    global _database

    if _database is None:
        _database = Database()
        await _database.connect()

    return _database


async def close_database() -> None:
    """Close global database connection."""
    global _database

    if _database is not None:
        await _database.close()
        _database = None
