"""
Project CRUD endpoints under /projects.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Response, status

from core.db import Postgres
from core.dependencies import get_postgres

from . import schemas, service

router = APIRouter(prefix="/projects")

# `projects.id` is a Postgres int4 (serial); larger ids cannot match a row.
_INT4_MIN = -(2**31)
_INT4_MAX = 2**31 - 1


def _not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Project not found.")


def _storable_id(project_id: int) -> bool:
    return _INT4_MIN <= project_id <= _INT4_MAX


@router.get("")
async def list_projects(
    postgres: Postgres = Depends(get_postgres),
) -> list[schemas.ProjectSummary]:
    return await service.list_projects(postgres)


@router.get("/name/{name}")
async def get_project_by_name(
    name: str,
    postgres: Postgres = Depends(get_postgres),
) -> schemas.ProjectResponse:
    # Postgres text cannot hold NUL, so no stored name contains one.
    if "\x00" in name:
        raise _not_found()
    project = await service.get_project_by_name(postgres, name)
    if project is None:
        raise _not_found()
    return project


@router.get("/{project_id}")
async def get_project_by_id(
    project_id: int,
    postgres: Postgres = Depends(get_postgres),
) -> schemas.ProjectResponse:
    if not _storable_id(project_id):
        raise _not_found()
    project = await service.get_project_by_id(postgres, project_id)
    if project is None:
        raise _not_found()
    return project


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_project(
    request: schemas.ProjectRequest,
    postgres: Postgres = Depends(get_postgres),
) -> Response:
    await service.create_project(postgres, request)
    return Response(status_code=status.HTTP_201_CREATED)


@router.put("/{project_id}")
async def update_project(
    project_id: int,
    request: schemas.ProjectRequest,
    postgres: Postgres = Depends(get_postgres),
) -> Response:
    if not _storable_id(project_id):
        raise _not_found()
    if not await service.update_project(postgres, project_id, request):
        raise _not_found()
    return Response(status_code=status.HTTP_200_OK)


@router.delete("/{project_id}")
async def delete_project(
    project_id: int,
    postgres: Postgres = Depends(get_postgres),
) -> Response:
    if not _storable_id(project_id):
        raise _not_found()
    if not await service.delete_project(postgres, project_id):
        raise _not_found()
    return Response(status_code=status.HTTP_200_OK)
