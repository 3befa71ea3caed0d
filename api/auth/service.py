"""
Auth business logic.
"""

from __future__ import annotations

import logging

import asyncpg

from core.errors import ExpiredOrInvalidCredentialError, InvalidCredentialsError, ValidationError

from . import repository, schemas, security

logger = logging.getLogger(__name__)


async def login(conn: asyncpg.Connection, payload: schemas.LoginRequest) -> schemas.TokenResponse:
    username = repository.normalize_username(payload.username)
    if not username or not payload.password:
        raise ValidationError("Username and password are required.")

    admin_row = await repository.get_admin_by_username(conn, username)
    if admin_row is None:
        # Burn the same bcrypt cost as a real comparison.
        security.verify_password(payload.password, security.dummy_password_hash())
        logger.info("login_failed username=%s", username)
        raise InvalidCredentialsError()

    is_valid = security.verify_password(payload.password, str(admin_row.get("password_hash") or ""))
    if not is_valid:
        logger.info("login_failed username=%s", username)
        raise InvalidCredentialsError()

    admin_id = int(admin_row["id"])
    expires_in = security.access_token_expire_minutes() * 60
    token = security.build_access_token(admin_id=admin_id, expires_in_s=expires_in)
    logger.info("login_succeeded admin_id=%s", admin_id)
    return schemas.TokenResponse(token=token, expires_in=expires_in)


def authorize(access_token: str) -> schemas.AdminPrincipal:
    try:
        payload = security.decode_access_token(access_token)
    except security.AuthSecurityError as exc:
        raise ExpiredOrInvalidCredentialError(str(exc)) from exc
    return schemas.AdminPrincipal(admin_id=int(payload["sub"]))
