"""
Redis connection pool.

The pool is provisioned and health-checked at startup but no feature reads or
writes it yet. Handlers do not lease a cache connection per request.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import redis.asyncio as aioredis
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import TimeoutError as RedisTimeoutError

from .errors import StoreConnectionError

logger = logging.getLogger(__name__)


class Cache:
    def __init__(self, url: str, *, max_connections: int = 10) -> None:
        self.url = url
        self.max_connections = max_connections
        self._pool: aioredis.ConnectionPool | None = None

    async def connect(self) -> None:
        if self._pool is not None:
            return None
        self._pool = aioredis.ConnectionPool.from_url(self.url, max_connections=self.max_connections)
        try:
            async with self.acquire() as client:
                await client.ping()
        except StoreConnectionError:
            await self.close()
            raise
        logger.info("redis_pool_ready max_connections=%s", self.max_connections)

    async def close(self) -> None:
        if self._pool is None:
            return None
        await self._pool.disconnect()
        self._pool = None

    @asynccontextmanager
    async def acquire(self) -> AsyncIterator[aioredis.Redis]:
        """
        Lease a client pinned to one pooled connection.
        """
        if self._pool is None:
            raise StoreConnectionError("Redis pool is not initialized. Call connect() on startup.")

        client = aioredis.Redis(connection_pool=self._pool, single_connection_client=True)
        try:
            yield client
        except (RedisConnectionError, RedisTimeoutError, OSError) as exc:
            raise StoreConnectionError(f"Redis connection failed: {exc}") from exc
        finally:
            await client.aclose()
