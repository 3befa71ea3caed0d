"""
Auth API endpoints.
"""

from __future__ import annotations

import asyncpg
from fastapi import APIRouter, Depends

from core import db

from . import schemas, service

router = APIRouter()


@router.post("/login")
async def login(
    request: schemas.LoginRequest,
    conn: asyncpg.Connection = Depends(db.get_connection),
) -> schemas.TokenResponse:
    return await service.login(conn, request)
