"""
Project business logic.

Each function maps one repository call onto a result the router can turn into
a response directly: data, `None` (not found) or a found/not-found flag.
Store failures propagate as `StoreConnectionError` / `QueryError`.
"""

from __future__ import annotations

import logging

from core.db import Postgres

from . import repository, schemas

logger = logging.getLogger(__name__)


def _to_project_response(row: dict) -> schemas.ProjectResponse:
    return schemas.ProjectResponse(
        id=int(row["id"]),
        name=str(row["name"]),
        description=str(row["description"]),
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


async def list_projects(postgres: Postgres) -> list[schemas.ProjectSummary]:
    rows = await repository.list_projects(postgres)
    return [schemas.ProjectSummary(id=int(row["id"]), name=str(row["name"])) for row in rows]


async def get_project_by_id(postgres: Postgres, project_id: int) -> schemas.ProjectResponse | None:
    row = await repository.get_project_by_id(postgres, project_id)
    if row is None:
        return None
    return _to_project_response(row)


async def get_project_by_name(postgres: Postgres, name: str) -> schemas.ProjectResponse | None:
    row = await repository.get_project_by_name(postgres, name)
    if row is None:
        return None
    return _to_project_response(row)


async def create_project(postgres: Postgres, payload: schemas.ProjectRequest) -> None:
    await repository.insert_project(
        postgres,
        name=payload.name,
        description=payload.description,
    )
    logger.info("project_created name=%r", payload.name)


async def update_project(postgres: Postgres, project_id: int, payload: schemas.ProjectRequest) -> bool:
    """
    Replace name and description. False when no project has `project_id`.
    """
    count = await repository.update_project(
        postgres,
        project_id,
        name=payload.name,
        description=payload.description,
    )
    if count:
        logger.info("project_updated id=%s", project_id)
    return count > 0


async def delete_project(postgres: Postgres, project_id: int) -> bool:
    count = await repository.delete_project(postgres, project_id)
    if count:
        logger.info("project_deleted id=%s", project_id)
    return count > 0
