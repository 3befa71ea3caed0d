"""
Portfolio persistence (raw SQL).

Tables:
- portfolio(id, name, module_code, module_name, description, img, category,
  github_link, demo_link)
- portfolio_images(id, portfolio_id, image_url, sort_order, caption)
- tags(id, name, skill_category)
- portfolio_tags(portfolio_id, tag_id)

Every function takes the request's connection explicitly. Multi-statement
mutations run inside one transaction on that connection.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

import asyncpg

from core import db

PROJECT_COLUMNS = (
    "id",
    "name",
    "module_code",
    "module_name",
    "description",
    "img",
    "category",
    "github_link",
    "demo_link",
)

# Request field -> column. The only source of column names in dynamic SQL.
UPDATABLE_COLUMNS: dict[str, str] = {
    "name": "name",
    "module_code": "module_code",
    "module_name": "module_name",
    "description": "description",
    "img": "img",
    "category": "category",
    "github_link": "github_link",
    "demo_link": "demo_link",
}

_SELECT_PROJECT = f"SELECT {', '.join(PROJECT_COLUMNS)} FROM portfolio"


def build_update_statement(project_id: int, fields: Mapping[str, Any]) -> tuple[str, list[Any]]:
    """
    Compose `UPDATE portfolio SET ... WHERE id = $n` for exactly the given fields.

    Field names must come from `UPDATABLE_COLUMNS`; anything else is a
    programming error, not user input to be escaped.
    """
    if not fields:
        raise ValueError("No fields to update.")

    assignments: list[str] = []
    args: list[Any] = []
    for field, value in fields.items():
        column = UPDATABLE_COLUMNS.get(field)
        if column is None:
            raise ValueError(f"Field is not updatable: {field!r}")
        args.append(value)
        assignments.append(f"{column} = ${len(args)}")

    args.append(project_id)
    sql = f"UPDATE portfolio SET {', '.join(assignments)} WHERE id = ${len(args)}"
    return sql, args


def _image_records(project_id: int, image_urls: Sequence[str]) -> list[tuple[int, str, int]]:
    # sort_order is the 1-based position in the submitted list.
    return [(project_id, url, position) for position, url in enumerate(image_urls, start=1)]


async def _insert_images(conn: asyncpg.Connection, project_id: int, image_urls: Sequence[str]) -> None:
    await db.execute_many(
        conn,
        "INSERT INTO portfolio_images (portfolio_id, image_url, sort_order) VALUES ($1, $2, $3)",
        _image_records(project_id, image_urls),
    )


async def list_projects(conn: asyncpg.Connection) -> list[dict[str, Any]]:
    return await db.fetch_all(conn, _SELECT_PROJECT)


async def get_project(conn: asyncpg.Connection, project_id: int) -> dict[str, Any] | None:
    return await db.fetch_one(conn, f"{_SELECT_PROJECT} WHERE id = $1", project_id)


async def list_categories(conn: asyncpg.Connection) -> list[str | None]:
    rows = await db.fetch_all(
        conn,
        """
        SELECT DISTINCT category
        FROM portfolio
        WHERE category IS NOT NULL
          AND btrim(category) <> ''
        ORDER BY category
        """,
    )
    return [row["category"] for row in rows]


async def list_skills(conn: asyncpg.Connection) -> list[dict[str, Any]]:
    return await db.fetch_all(
        conn,
        """
        SELECT id, name, skill_category
        FROM tags
        ORDER BY skill_category, name
        """,
    )


async def list_project_images(conn: asyncpg.Connection, project_id: int) -> list[dict[str, Any]]:
    return await db.fetch_all(
        conn,
        """
        SELECT id, image_url, sort_order, caption
        FROM portfolio_images
        WHERE portfolio_id = $1
        ORDER BY sort_order, id
        """,
        project_id,
    )


async def list_project_tags(conn: asyncpg.Connection, project_id: int) -> list[dict[str, Any]]:
    return await db.fetch_all(
        conn,
        """
        SELECT t.id, t.name, t.skill_category
        FROM tags t
        INNER JOIN portfolio_tags pt ON pt.tag_id = t.id
        WHERE pt.portfolio_id = $1
        ORDER BY t.name
        """,
        project_id,
    )


async def insert_project(
    conn: asyncpg.Connection,
    *,
    fields: Mapping[str, Any],
    image_urls: Sequence[str] = (),
) -> int:
    """
    Insert a project + its ordered images in a single transaction.

    Returns the generated project id.
    """
    columns = [UPDATABLE_COLUMNS[field] for field in fields]
    placeholders = [f"${i}" for i in range(1, len(columns) + 1)]

    async with db.transaction(conn):
        row = await db.fetch_one(
            conn,
            f"INSERT INTO portfolio ({', '.join(columns)}) VALUES ({', '.join(placeholders)}) RETURNING id",
            *fields.values(),
        )
        if row is None or "id" not in row:
            raise RuntimeError("Failed to insert project.")

        project_id = int(row["id"])
        await _insert_images(conn, project_id, image_urls)
        return project_id


async def update_project(
    conn: asyncpg.Connection,
    project_id: int,
    *,
    fields: Mapping[str, Any],
    image_urls: Sequence[str] | None = None,
) -> dict[str, Any] | None:
    """
    Apply a sparse column update and/or replace the image set, atomically.

    `image_urls=None` leaves images alone; any sequence (even empty) replaces
    them. Returns the row as it was before the update (id, name), or None
    when the project does not exist.
    """
    async with db.transaction(conn):
        existing = await db.fetch_one(
            conn,
            "SELECT id, name FROM portfolio WHERE id = $1 FOR UPDATE",
            project_id,
        )
        if existing is None:
            return None

        if fields:
            sql, args = build_update_statement(project_id, fields)
            await db.execute(conn, sql, *args)

        if image_urls is not None:
            await db.execute(conn, "DELETE FROM portfolio_images WHERE portfolio_id = $1", project_id)
            await _insert_images(conn, project_id, image_urls)

        return existing


async def delete_project(conn: asyncpg.Connection, project_id: int) -> dict[str, Any] | None:
    """
    Delete a project together with its images and tag associations.

    Returns the deleted row (id, name), or None when it did not exist.
    """
    async with db.transaction(conn):
        existing = await db.fetch_one(
            conn,
            "SELECT id, name FROM portfolio WHERE id = $1 FOR UPDATE",
            project_id,
        )
        if existing is None:
            return None

        await db.execute(conn, "DELETE FROM portfolio_tags WHERE portfolio_id = $1", project_id)
        await db.execute(conn, "DELETE FROM portfolio_images WHERE portfolio_id = $1", project_id)
        await db.execute(conn, "DELETE FROM portfolio WHERE id = $1", project_id)
        return existing
