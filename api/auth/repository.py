"""
Admin persistence helpers.

The `admin` table is read-only from the API: rows are seeded out of band
(see `auth/cli.py` for producing a password hash).
"""

from __future__ import annotations

import asyncpg

from core import db


def normalize_username(username: str) -> str:
    return (username or "").strip()


async def get_admin_by_username(conn: asyncpg.Connection, username: str) -> dict | None:
    return await db.fetch_one(
        conn,
        """
        SELECT id, username, password_hash
        FROM admin
        WHERE username = $1
        """,
        normalize_username(username),
    )
