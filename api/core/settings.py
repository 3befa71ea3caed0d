"""
Shared settings read from the environment.

Feature-specific knobs (JWT, mail transport) live next to the code that uses
them; only values several modules need belong here.
"""

from __future__ import annotations

import os

DEFAULT_CORS_ORIGINS = (
    "http://localhost:3000",
    "http://localhost:5000",
    "http://localhost:5173",
    "http://127.0.0.1:5173",
    "https://ethantjh-portfolio.vercel.app",
)


def _env_str(name: str, default: str) -> str:
    return os.environ.get(name, default).strip() or default


def env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_list(name: str, default: tuple[str, ...]) -> list[str]:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return list(default)
    return [item.strip() for item in raw.split(",") if item.strip()]


def app_name() -> str:
    return _env_str("APP_NAME", "portfolio-api")


def cors_allowed_origins() -> list[str]:
    # Browsers send the origin without a trailing slash.
    return [origin.rstrip("/") for origin in _env_list("CORS_ALLOWED_ORIGINS", DEFAULT_CORS_ORIGINS)]


def log_level() -> str:
    return _env_str("LOG_LEVEL", "INFO").upper()


def log_format() -> str:
    return _env_str("LOG_FORMAT", "%(asctime)s %(levelname)s %(name)s %(message)s")


def db_pool_min_size() -> int:
    return max(0, env_int("DB_POOL_MIN_SIZE", 1))


def db_pool_max_size() -> int:
    return max(1, env_int("DB_POOL_MAX_SIZE", 10))


def db_command_timeout_s() -> float:
    return _env_float("DB_COMMAND_TIMEOUT_S", 30.0)


def db_acquire_timeout_s() -> float:
    return _env_float("DB_ACQUIRE_TIMEOUT_S", 5.0)


def db_acquire_attempts() -> int:
    return max(1, env_int("DB_ACQUIRE_ATTEMPTS", 3))


def db_retry_backoff_s() -> float:
    return max(0.0, _env_float("DB_RETRY_BACKOFF_S", 0.2))
