"""
Plain-SQL schema migrations.

Files named `NNNN_description.sql` in the migrations directory are applied in
lexical order. Each file runs in its own transaction together with the row
that records it in `schema_migrations`, so a failed file leaves no trace.
"""

from __future__ import annotations

import logging
from pathlib import Path

from .db import Postgres
from .errors import MigrationError, QueryError, StoreConnectionError

logger = logging.getLogger(__name__)

_CREATE_VERSIONS_TABLE = """
CREATE TABLE IF NOT EXISTS schema_migrations (
  version text PRIMARY KEY,
  applied_at timestamptz NOT NULL DEFAULT now()
)
"""


def migration_files(directory: Path) -> list[Path]:
    if not directory.is_dir():
        raise MigrationError(f"Migrations directory not found: {directory}")
    return sorted(directory.glob("*.sql"))


async def apply_pending(postgres: Postgres, directory: Path) -> list[str]:
    """
    Apply every migration not yet recorded. Returns the versions applied now.
    """
    files = migration_files(directory)
    applied_now: list[str] = []

    try:
        async with postgres.acquire() as conn:
            await conn.execute(_CREATE_VERSIONS_TABLE)
            rows = await conn.fetch("SELECT version FROM schema_migrations")
            already_applied = {str(r["version"]) for r in rows}

            for path in files:
                version = path.stem
                if version in already_applied:
                    continue
                sql = path.read_text(encoding="utf-8")
                async with conn.transaction():
                    await conn.execute(sql)
                    await conn.execute(
                        "INSERT INTO schema_migrations (version) VALUES ($1)",
                        version,
                    )
                logger.info("migration_applied version=%s", version)
                applied_now.append(version)
    except (QueryError, StoreConnectionError, OSError) as exc:
        raise MigrationError(f"Failed to apply migrations: {exc}") from exc

    return applied_now
