"""
PostgreSQL Client Wrapper for the Campaign Review Console

asyncpg pool wrapper providing the query/query_row/execute access pattern used
by repositories.

Usage:
    from core.postgres_client import PostgresClientWrapper

    db = PostgresClientWrapper("campaign_review_service")

    async with db:
        rows = await db.query("SELECT * FROM campaigns WHERE status = $1", ["active"])
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, List, Optional

import asyncpg

from core.config import InfraConfig, get_settings

logger = logging.getLogger(__name__)


class PostgresClientWrapper:
    """
    PostgreSQL client wrapper around an asyncpg connection pool.

    The pool is created lazily on first use (``async with db:``) and kept open
    until ``close()``.
    """

    def __init__(self, service_name: str, config: Optional[InfraConfig] = None):
        self.service_name = service_name
        self.config = config or get_settings().infrastructure
        self._pool: Optional[asyncpg.Pool] = None

        logger.info(
            f"PostgreSQL client initialized for {service_name}: "
            f"{self.config.postgres_host}:{self.config.postgres_port}/{self.config.postgres_db}"
        )

    @property
    def pool(self) -> Optional[asyncpg.Pool]:
        return self._pool

    async def connect(self) -> None:
        if self._pool is not None:
            return
        self._pool = await asyncpg.create_pool(
            dsn=self.config.postgres_dsn,
            min_size=self.config.postgres_min_pool,
            max_size=self.config.postgres_max_pool,
        )

    async def __aenter__(self):
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        return False

    async def health_check(self) -> bool:
        """Check database health"""
        try:
            async with self:
                value = await self._pool.fetchval("SELECT 1")
            return value == 1
        except Exception as e:
            logger.warning(f"PostgreSQL health check failed: {e}")
            return False

    async def query(self, sql: str, params: Optional[List[Any]] = None) -> List[Dict[str, Any]]:
        """Execute query and return results"""
        rows = await self._pool.fetch(sql, *(params or []))
        return [dict(row) for row in rows]

    async def query_row(self, sql: str, params: Optional[List[Any]] = None) -> Optional[Dict[str, Any]]:
        """Execute query and return single row"""
        row = await self._pool.fetchrow(sql, *(params or []))
        return dict(row) if row is not None else None

    async def execute(self, sql: str, params: Optional[List[Any]] = None) -> str:
        """Execute SQL statement, returning the command status tag"""
        return await self._pool.execute(sql, *(params or []))

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[asyncpg.Connection]:
        """Yield a connection with an open transaction"""
        async with self._pool.acquire() as conn:
            async with conn.transaction():
                yield conn

    async def close(self):
        """Close connection pool"""
        if self._pool is not None:
            await self._pool.close()
            self._pool = None

