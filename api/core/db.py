"""
Async database access helpers (raw SQL) using asyncpg.

`Postgres` owns one connection pool. `main.create_app` builds it on startup,
keeps it on `app.state` and closes it on shutdown; request handlers receive it
through the `core.dependencies.get_postgres` dependency.

Every helper leases one connection, runs one statement and hands the
connection back, on success and on failure alike.

SQL parameter style:
- asyncpg uses positional placeholders: $1, $2, $3, ...
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

import asyncpg

from .errors import QueryError, StoreConnectionError

logger = logging.getLogger(__name__)

# Failures that mean "no usable connection", as opposed to a bad statement.
_CONNECTION_ERRORS = (
    OSError,
    asyncio.TimeoutError,
    asyncpg.PostgresConnectionError,
    asyncpg.ConnectionDoesNotExistError,
    asyncpg.CannotConnectNowError,
    asyncpg.TooManyConnectionsError,
)


def _sanitize_database_url(url: str) -> str:
    parts = urlsplit(url)
    if not parts.query:
        return url

    params = [(k, v) for (k, v) in parse_qsl(parts.query, keep_blank_values=True) if k != "sslmode"]
    query = urlencode(params)
    return urlunsplit((parts.scheme, parts.netloc, parts.path, query, parts.fragment))


def _record_to_dict(record: asyncpg.Record) -> dict[str, Any]:
    return dict(record)


def affected_rows(command_status: str) -> int:
    """
    Parse the row count out of a command status tag.

    "UPDATE 3" -> 3, "DELETE 0" -> 0, "INSERT 0 1" -> 1.
    """
    tail = (command_status or "").rsplit(" ", 1)[-1]
    try:
        return int(tail)
    except ValueError:
        return 0


class Postgres:
    def __init__(
        self,
        dsn: str,
        *,
        min_size: int = 10,
        max_size: int = 10,
        acquire_timeout_s: float = 10.0,
        command_timeout_s: float = 30.0,
    ) -> None:
        self.dsn = _sanitize_database_url(dsn)
        self.min_size = min_size
        self.max_size = max_size
        self.acquire_timeout_s = acquire_timeout_s
        self.command_timeout_s = command_timeout_s
        self._pool: asyncpg.Pool | None = None

    async def connect(self) -> None:
        if self._pool is not None:
            return None
        try:
            self._pool = await asyncpg.create_pool(
                dsn=self.dsn,
                min_size=self.min_size,
                max_size=self.max_size,
                command_timeout=self.command_timeout_s,
            )
        except _CONNECTION_ERRORS as exc:
            raise StoreConnectionError(f"Failed to create Postgres pool: {exc}") from exc
        logger.info("postgres_pool_ready min_size=%s max_size=%s", self.min_size, self.max_size)

    async def close(self) -> None:
        if self._pool is None:
            return None
        await self._pool.close()
        self._pool = None

    def pool(self) -> asyncpg.Pool:
        if self._pool is None:
            raise StoreConnectionError("Postgres pool is not initialized. Call connect() on startup.")
        return self._pool

    @asynccontextmanager
    async def acquire(self) -> AsyncIterator[asyncpg.Connection]:
        """
        Lease one connection; it goes back to the pool when the block exits.
        """
        pool = self.pool()
        try:
            conn = await pool.acquire(timeout=self.acquire_timeout_s)
        except _CONNECTION_ERRORS as exc:
            raise StoreConnectionError(f"Failed to get a Postgres connection: {exc!r}") from exc

        try:
            yield conn
        except _CONNECTION_ERRORS as exc:
            raise StoreConnectionError(f"Postgres connection lost: {exc!r}") from exc
        except (asyncpg.PostgresError, asyncpg.InterfaceError) as exc:
            raise QueryError(str(exc)) from exc
        finally:
            await pool.release(conn)

    async def fetch_one(self, sql: str, *args: Any) -> dict[str, Any] | None:
        """
        Run a query and return a single row as a dict (or None).
        """
        async with self.acquire() as conn:
            row = await conn.fetchrow(sql, *args)
        return _record_to_dict(row) if row is not None else None

    async def fetch_all(self, sql: str, *args: Any) -> list[dict[str, Any]]:
        """
        Run a query and return all rows as a list of dicts.
        """
        async with self.acquire() as conn:
            rows = await conn.fetch(sql, *args)
        return [_record_to_dict(r) for r in rows]

    async def execute(self, sql: str, *args: Any) -> int:
        """
        Run a statement (INSERT/UPDATE/DELETE/DDL) and return the affected-row count.
        """
        async with self.acquire() as conn:
            command_status = await conn.execute(sql, *args)
        return affected_rows(command_status)
