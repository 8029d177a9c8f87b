"""
PostgreSQL Client for shiptrack services

Thin wrapper over an asyncpg connection pool. One instance is created per
service by its factory, opened in the FastAPI lifespan and passed explicitly
to the repository.

Usage:
    from core.postgres_client import PostgresClient

    db = PostgresClient(dsn, service_name="shipment_service")
    await db.connect()

    rows = await db.query("SELECT * FROM shipments WHERE status = $1", ["pending"])

    async with db.transaction() as conn:
        row = await conn.fetchrow("SELECT ... FOR UPDATE", shipment_id)
        ...
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, List, Optional

import asyncpg

logger = logging.getLogger(__name__)


class PostgresClient:
    """
    asyncpg pool wrapper.

    Provides:
    - Lazy pool creation (connect() or first use)
    - Dict rows for query/query_row
    - Transaction context manager yielding the raw connection
    """

    def __init__(
        self,
        dsn: str,
        service_name: str = "shiptrack",
        min_size: int = 1,
        max_size: int = 10,
        command_timeout: int = 60,
    ):
        """
        Initialize PostgreSQL client.

        Args:
            dsn: postgres connection string
            service_name: Name of the service using this client (for logs)
            min_size: Minimum pool size
            max_size: Maximum pool size
            command_timeout: Per-statement timeout in seconds
        """
        self.dsn = dsn
        self.service_name = service_name
        self.min_size = min_size
        self.max_size = max_size
        self.command_timeout = command_timeout
        self._pool: Optional[asyncpg.Pool] = None

    async def connect(self) -> asyncpg.Pool:
        """Create the pool if needed"""
        if self._pool is None:
            self._pool = await asyncpg.create_pool(
                self.dsn,
                min_size=self.min_size,
                max_size=self.max_size,
                command_timeout=self.command_timeout,
            )
            logger.info(f"PostgreSQL pool opened for {self.service_name}")
        return self._pool

    async def close(self) -> None:
        """Close the pool"""
        if self._pool is not None:
            await self._pool.close()
            self._pool = None
            logger.info(f"PostgreSQL pool closed for {self.service_name}")

    async def health_check(self) -> bool:
        """True if a trivial query succeeds"""
        try:
            pool = await self.connect()
            async with pool.acquire() as conn:
                await conn.fetchval("SELECT 1")
            return True
        except Exception as e:
            logger.warning(f"PostgreSQL health check failed: {e}")
            return False

    async def query(self, sql: str, params: Optional[List[Any]] = None) -> List[Dict[str, Any]]:
        """Execute query and return all rows as dicts"""
        pool = await self.connect()
        async with pool.acquire() as conn:
            rows = await conn.fetch(sql, *(params or []))
        return [dict(row) for row in rows]

    async def query_row(self, sql: str, params: Optional[List[Any]] = None) -> Optional[Dict[str, Any]]:
        """Execute query and return a single row as dict"""
        pool = await self.connect()
        async with pool.acquire() as conn:
            row = await conn.fetchrow(sql, *(params or []))
        return dict(row) if row else None

    async def query_value(self, sql: str, params: Optional[List[Any]] = None) -> Any:
        """Execute query and return the first column of the first row"""
        pool = await self.connect()
        async with pool.acquire() as conn:
            return await conn.fetchval(sql, *(params or []))

    async def execute(self, sql: str, params: Optional[List[Any]] = None) -> str:
        """Execute a statement and return the status tag (e.g. 'DELETE 1')"""
        pool = await self.connect()
        async with pool.acquire() as conn:
            return await conn.execute(sql, *(params or []))

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[asyncpg.Connection]:
        """Acquire a connection and run the block inside a transaction"""
        pool = await self.connect()
        async with pool.acquire() as conn:
            async with conn.transaction():
                yield conn


def rows_affected(status: str) -> int:
    """Parse the row count out of an asyncpg status tag like 'UPDATE 3'"""
    try:
        return int(status.split()[-1])
    except (AttributeError, IndexError, ValueError):
        return 0


__all__ = ["PostgresClient", "rows_affected"]
