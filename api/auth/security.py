"""
Auth security helpers.
"""

from __future__ import annotations

import functools
import os
import time
from typing import Any

import bcrypt
import jwt


class AuthSecurityError(RuntimeError):
    pass


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def jwt_secret() -> str:
    # Local default keeps development simple.
    # In production, set JWT_SECRET in environment.
    return os.environ.get("JWT_SECRET", "dev-change-this-secret").strip() or "dev-change-this-secret"


def jwt_algorithm() -> str:
    return os.environ.get("JWT_ALG", "HS256").strip() or "HS256"


def access_token_expire_minutes() -> int:
    return _env_int("ACCESS_TOKEN_EXPIRE_MIN", 60)


def now_epoch_s() -> int:
    return int(time.time())


# bcrypt only looks at the first 72 bytes of a password.
MAX_PASSWORD_BYTES = 72


def hash_password(plain_password: str) -> str:
    password = (plain_password or "").encode("utf-8")
    if not password:
        raise AuthSecurityError("Password is empty.")
    if len(password) > MAX_PASSWORD_BYTES:
        raise AuthSecurityError(f"Password is longer than {MAX_PASSWORD_BYTES} bytes.")
    try:
        return bcrypt.hashpw(password, bcrypt.gensalt()).decode("utf-8")
    except ValueError as exc:
        raise AuthSecurityError("Password cannot be hashed.") from exc


def verify_password(plain_password: str, password_hash: str) -> bool:
    password = (plain_password or "").encode("utf-8")
    hashed = (password_hash or "").encode("utf-8")
    if not password or not hashed:
        return False
    if len(password) > MAX_PASSWORD_BYTES:
        return False
    try:
        return bcrypt.checkpw(password, hashed)
    except ValueError:
        return False


@functools.lru_cache(maxsize=1)
def dummy_password_hash() -> str:
    """
    Hash compared against when the username is unknown, so a miss costs the
    same bcrypt round as a wrong password.
    """
    return hash_password("portfolio-login-placeholder")


def build_access_token(*, admin_id: int, expires_in_s: int | None = None) -> str:
    issued_at = now_epoch_s()
    ttl = expires_in_s if expires_in_s is not None else access_token_expire_minutes() * 60
    payload = {
        "sub": str(admin_id),
        "type": "access",
        "iat": issued_at,
        "exp": issued_at + ttl,
    }
    return jwt.encode(payload, jwt_secret(), algorithm=jwt_algorithm())


def decode_access_token(token: str) -> dict[str, Any]:
    raw = (token or "").strip()
    if not raw:
        raise AuthSecurityError("Access token is empty.")

    try:
        payload = jwt.decode(
            raw,
            jwt_secret(),
            algorithms=[jwt_algorithm()],
            options={"require": ["exp", "sub"]},
        )
    except jwt.ExpiredSignatureError as exc:
        raise AuthSecurityError("Access token has expired.") from exc
    except jwt.InvalidTokenError as exc:
        raise AuthSecurityError("Invalid access token.") from exc

    token_type = str(payload.get("type") or "").strip().lower()
    if token_type != "access":
        raise AuthSecurityError("Token is not an access token.")

    subject = str(payload.get("sub") or "").strip()
    if not subject.isdigit():
        raise AuthSecurityError("Invalid access token subject.")

    return payload
