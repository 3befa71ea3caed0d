"""
Portfolio business logic.

Scope:
- shaping partial request payloads into column values for the repository
- read projections (project detail, categories, grouped skills)
- translating absent rows into NotFoundError
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

import asyncpg

from core.errors import NotFoundError, ValidationError

from . import repository, schemas

logger = logging.getLogger(__name__)

# Optional links/labels: an empty value means "unset" and is stored as NULL.
NULL_WHEN_EMPTY = frozenset({"img", "category", "github_link", "demo_link"})

UNCATEGORIZED_SKILL = "Other"


def _normalize_name(value: str | None) -> str:
    name = (value or "").strip()
    if not name:
        raise ValidationError("Project name is required")
    return name


def _normalize_field(field: str, value: Any) -> Any:
    if field == "name":
        return _normalize_name(value)
    if field in NULL_WHEN_EMPTY:
        return (value or "").strip() or None
    return "" if value is None else value


def _normalize_image_urls(urls: Iterable[str]) -> list[str]:
    cleaned: list[str] = []
    for url in urls:
        url = (url or "").strip()
        if not url:
            raise ValidationError("Image URLs must be non-empty strings")
        cleaned.append(url)
    return cleaned


def _to_project_response(row: dict) -> schemas.ProjectResponse:
    return schemas.ProjectResponse(**{column: row.get(column) for column in repository.PROJECT_COLUMNS})


def _to_image_response(row: dict) -> schemas.ImageResponse:
    return schemas.ImageResponse(
        id=int(row["id"]),
        image_url=str(row["image_url"]),
        sort_order=int(row["sort_order"]),
        caption=row.get("caption"),
    )


def _to_tag_response(row: dict) -> schemas.TagResponse:
    return schemas.TagResponse(
        id=int(row["id"]),
        name=str(row["name"]),
        skill_category=row.get("skill_category"),
    )


def update_fields(payload: schemas.ProjectUpdate) -> dict[str, Any]:
    """
    Column values for exactly the fields the caller sent.
    """
    return {
        field: _normalize_field(field, getattr(payload, field))
        for field in repository.UPDATABLE_COLUMNS
        if field in payload.model_fields_set
    }


def replacement_images(payload: schemas.ProjectUpdate) -> list[str] | None:
    """
    The new image set, or None when the caller did not ask to replace it.
    """
    if "additional_images" not in payload.model_fields_set or payload.additional_images is None:
        return None
    return _normalize_image_urls(payload.additional_images)


async def list_projects(conn: asyncpg.Connection) -> list[schemas.ProjectResponse]:
    rows = await repository.list_projects(conn)
    return [_to_project_response(row) for row in rows]


async def list_categories(conn: asyncpg.Connection) -> list[str]:
    values = await repository.list_categories(conn)
    return sorted({value for value in values if value is not None and value.strip()})


async def list_skills(conn: asyncpg.Connection) -> list[schemas.TagResponse]:
    rows = await repository.list_skills(conn)
    return [_to_tag_response(row) for row in rows]


def group_skills(skills: Iterable[schemas.TagResponse]) -> dict[str, list[schemas.TagResponse]]:
    grouped: dict[str, list[schemas.TagResponse]] = {}
    for skill in skills:
        key = (skill.skill_category or "").strip() or UNCATEGORIZED_SKILL
        grouped.setdefault(key, []).append(skill)
    return grouped


async def project_images(conn: asyncpg.Connection, project_id: int) -> list[schemas.ImageResponse]:
    rows = await repository.list_project_images(conn, project_id)
    return [_to_image_response(row) for row in rows]


async def project_tags(conn: asyncpg.Connection, project_id: int) -> list[schemas.TagResponse]:
    rows = await repository.list_project_tags(conn, project_id)
    return [_to_tag_response(row) for row in rows]


async def project_detail(conn: asyncpg.Connection, project_id: int) -> schemas.ProjectDetailResponse:
    # Three independent reads; a concurrent update may land between them.
    row = await repository.get_project(conn, project_id)
    if row is None:
        raise NotFoundError("Project not found")

    project = _to_project_response(row)
    return schemas.ProjectDetailResponse(
        **project.model_dump(),
        images=await project_images(conn, project_id),
        tags=await project_tags(conn, project_id),
    )


async def create_project(
    conn: asyncpg.Connection,
    payload: schemas.ProjectCreate,
) -> schemas.ProjectCreatedResponse:
    fields = {
        field: _normalize_field(field, getattr(payload, field))
        for field in repository.UPDATABLE_COLUMNS
    }
    image_urls = _normalize_image_urls(payload.additional_images or [])

    project_id = await repository.insert_project(conn, fields=fields, image_urls=image_urls)
    logger.info("project_created id=%s images=%s", project_id, len(image_urls))
    return schemas.ProjectCreatedResponse(
        id=project_id,
        message=f"{fields['name']} has been added successfully",
    )


async def update_project(
    conn: asyncpg.Connection,
    project_id: int,
    payload: schemas.ProjectUpdate,
) -> schemas.MessageResponse:
    fields = update_fields(payload)
    image_urls = replacement_images(payload)
    if not fields and image_urls is None:
        raise ValidationError("No updates were found")

    existing = await repository.update_project(
        conn,
        project_id,
        fields=fields,
        image_urls=image_urls,
    )
    if existing is None:
        raise NotFoundError("Project not found")

    display_name = fields.get("name") or existing["name"]
    logger.info(
        "project_updated id=%s fields=%s images_replaced=%s",
        project_id,
        ",".join(sorted(fields)) or "-",
        image_urls is not None,
    )
    return schemas.MessageResponse(message=f"{display_name} was updated successfully")


async def delete_project(conn: asyncpg.Connection, project_id: int) -> schemas.MessageResponse:
    deleted = await repository.delete_project(conn, project_id)
    if deleted is None:
        raise NotFoundError("Project not found")

    logger.info("project_deleted id=%s", project_id)
    return schemas.MessageResponse(message=f"{deleted['name']} has been deleted")
