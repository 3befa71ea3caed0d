"""
Auth dependencies for protected FastAPI routes.
"""

from __future__ import annotations

from fastapi import Depends, Header

from core.errors import MalformedCredentialError, MissingCredentialError

from . import schemas, service


def _extract_bearer_token(authorization: str | None) -> str:
    raw = (authorization or "").strip()
    if not raw:
        raise MissingCredentialError()

    parts = raw.split(" ", 1)
    if len(parts) != 2:
        raise MalformedCredentialError("Invalid Authorization header format.")

    scheme, token = parts[0].strip().lower(), parts[1].strip()
    if scheme != "bearer" or not token:
        raise MalformedCredentialError()
    return token


async def get_bearer_token(authorization: str | None = Header(default=None)) -> str:
    return _extract_bearer_token(authorization)


async def get_current_admin(access_token: str = Depends(get_bearer_token)) -> schemas.AdminPrincipal:
    return service.authorize(access_token)
