"""
Portfolio API endpoints.

Reads are public. Every route on `admin_router` requires a valid admin
bearer token through the router-level dependency.
"""

from __future__ import annotations

import asyncpg
from typing import Annotated

from fastapi import APIRouter, Depends, Path, Query, status

from auth import dependencies as auth_dependencies
from core import db
from core.errors import NotFoundError

from . import schemas, service

router = APIRouter()
admin_router = APIRouter(dependencies=[Depends(auth_dependencies.get_current_admin)])

# portfolio.id is a bigserial.
MAX_PROJECT_ID = 2**63 - 1


def project_id_path(project_id: int = Path()) -> int:
    # An id the column cannot hold cannot exist.
    if not 1 <= project_id <= MAX_PROJECT_ID:
        raise NotFoundError("Project not found")
    return project_id


ProjectId = Annotated[int, Depends(project_id_path)]


@router.get("/projects")
async def list_projects(
    conn: asyncpg.Connection = Depends(db.get_connection),
) -> list[schemas.ProjectResponse]:
    return await service.list_projects(conn)


@router.get("/categories")
async def list_categories(
    conn: asyncpg.Connection = Depends(db.get_connection),
) -> list[str]:
    return await service.list_categories(conn)


@router.get("/skills")
async def list_skills(
    grouped: bool = Query(default=False),
    conn: asyncpg.Connection = Depends(db.get_connection),
) -> list[schemas.TagResponse] | dict[str, list[schemas.TagResponse]]:
    """
    All tags ordered by skill_category then name; `grouped=true` returns
    them keyed by skill_category instead.
    """
    skills = await service.list_skills(conn)
    if grouped:
        return service.group_skills(skills)
    return skills


@router.get("/projects/{project_id}")
async def get_project(
    project_id: ProjectId,
    conn: asyncpg.Connection = Depends(db.get_connection),
) -> schemas.ProjectDetailResponse:
    return await service.project_detail(conn, project_id)


@router.get("/projects/{project_id}/images")
async def get_project_images(
    project_id: ProjectId,
    conn: asyncpg.Connection = Depends(db.get_connection),
) -> list[schemas.ImageResponse]:
    return await service.project_images(conn, project_id)


@router.get("/projects/{project_id}/tags")
async def get_project_tags(
    project_id: ProjectId,
    conn: asyncpg.Connection = Depends(db.get_connection),
) -> list[schemas.TagResponse]:
    return await service.project_tags(conn, project_id)


@admin_router.post("/addProject", status_code=status.HTTP_201_CREATED)
async def add_project(
    request: schemas.ProjectCreate,
    conn: asyncpg.Connection = Depends(db.get_connection),
) -> schemas.ProjectCreatedResponse:
    return await service.create_project(conn, request)


@admin_router.put("/updateProject/{project_id}")
async def update_project(
    project_id: ProjectId,
    request: schemas.ProjectUpdate,
    conn: asyncpg.Connection = Depends(db.get_connection),
) -> schemas.MessageResponse:
    return await service.update_project(conn, project_id, request)


@admin_router.delete("/deleteProject/{project_id}")
async def delete_project(
    project_id: ProjectId,
    conn: asyncpg.Connection = Depends(db.get_connection),
) -> schemas.MessageResponse:
    return await service.delete_project(conn, project_id)
