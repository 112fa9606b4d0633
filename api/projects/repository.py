"""
Project persistence (raw SQL).

One statement per function. Absence is reported as `None` or an affected-row
count of 0, never as an exception.
"""

from __future__ import annotations

from typing import Any

from core.db import Postgres

# Timestamps are stored as UTC wall-clock time in `timestamp` columns.
_NOW_UTC = "(now() AT TIME ZONE 'utc')"


async def list_projects(postgres: Postgres) -> list[dict[str, Any]]:
    return await postgres.fetch_all(
        """
        SELECT id, name
        FROM projects
        ORDER BY id ASC
        """
    )


async def get_project_by_id(postgres: Postgres, project_id: int) -> dict[str, Any] | None:
    return await postgres.fetch_one(
        """
        SELECT id, name, description, created_at, updated_at
        FROM projects
        WHERE id = $1
        """,
        project_id,
    )


async def get_project_by_name(postgres: Postgres, name: str) -> dict[str, Any] | None:
    # Names are not unique; the oldest project with the name wins.
    return await postgres.fetch_one(
        """
        SELECT id, name, description, created_at, updated_at
        FROM projects
        WHERE name = $1
        ORDER BY id ASC
        LIMIT 1
        """,
        name,
    )


async def insert_project(postgres: Postgres, *, name: str, description: str) -> int:
    # now() is fixed for the whole statement, so both timestamps are equal.
    return await postgres.execute(
        f"""
        INSERT INTO projects (name, description, created_at, updated_at)
        VALUES ($1, $2, {_NOW_UTC}, {_NOW_UTC})
        """,
        name,
        description,
    )


async def update_project(postgres: Postgres, project_id: int, *, name: str, description: str) -> int:
    # now() is the transaction start time; updated_at must still move past its stored value.
    return await postgres.execute(
        f"""
        UPDATE projects
        SET name = $2,
            description = $3,
            updated_at = GREATEST({_NOW_UTC}, updated_at + interval '1 microsecond')
        WHERE id = $1
        """,
        project_id,
        name,
        description,
    )


async def delete_project(postgres: Postgres, project_id: int) -> int:
    return await postgres.execute(
        """
        DELETE FROM projects
        WHERE id = $1
        """,
        project_id,
    )
