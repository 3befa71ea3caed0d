"""
Async database access helpers (raw SQL) using asyncpg.

This module owns the connection pool. FastAPI initializes it on startup and
closes it on shutdown (see `api/main.py`). Request handlers never touch the
pool directly: they receive one pooled connection through the
`get_connection` dependency and pass it explicitly to repository functions.

SQL parameter style:
- asyncpg uses positional placeholders: $1, $2, $3, ...
"""

from __future__ import annotations

import asyncio
import logging
import os
from collections.abc import AsyncIterator, Iterable, Iterator
from contextlib import asynccontextmanager, contextmanager
from typing import Any
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

import asyncpg

from . import settings
from .errors import ConnectivityError, ConstraintError, QueryError

logger = logging.getLogger(__name__)

_pool: asyncpg.Pool | None = None

# Failures worth another acquire attempt.
_TRANSIENT_ERRORS: tuple[type[BaseException], ...] = (
    OSError,
    asyncio.TimeoutError,
    asyncpg.exceptions.PostgresConnectionError,
    asyncpg.exceptions.CannotConnectNowError,
    asyncpg.exceptions.TooManyConnectionsError,
)


def _sanitize_database_url(url: str) -> str:
    parts = urlsplit(url)
    if not parts.query:
        return url

    params = [(k, v) for (k, v) in parse_qsl(parts.query, keep_blank_values=True) if k != "sslmode"]
    query = urlencode(params)
    return urlunsplit((parts.scheme, parts.netloc, parts.path, query, parts.fragment))


def database_url() -> str:
    url = os.environ.get("DATABASE_URL", "").strip()
    if not url:
        raise RuntimeError("DATABASE_URL is not set.")
    return _sanitize_database_url(url)


async def init_pool() -> None:
    global _pool
    if _pool is not None:
        return None
    _pool = await asyncpg.create_pool(
        dsn=database_url(),
        min_size=settings.db_pool_min_size(),
        max_size=settings.db_pool_max_size(),
        command_timeout=settings.db_command_timeout_s(),
    )


async def close_pool() -> None:
    global _pool
    if _pool is None:
        return None
    await _pool.close()
    _pool = None


def pool() -> asyncpg.Pool:
    if _pool is None:
        raise RuntimeError("DB pool is not initialized. Call init_pool() on startup.")
    return _pool


@contextmanager
def _translate_errors() -> Iterator[None]:
    """
    Map driver exceptions onto the persistence error taxonomy.
    """
    try:
        yield
    except asyncpg.exceptions.IntegrityConstraintViolationError as exc:
        raise ConstraintError(f"Constraint violated: {exc.__class__.__name__}.") from exc
    except _TRANSIENT_ERRORS as exc:
        raise ConnectivityError() from exc
    except (asyncpg.exceptions.PostgresError, asyncpg.exceptions.InterfaceError) as exc:
        raise QueryError() from exc


async def acquire_connection() -> asyncpg.Connection:
    """
    Acquire one pooled connection, retrying transient connectivity failures.
    """
    attempts = settings.db_acquire_attempts()
    backoff_s = settings.db_retry_backoff_s()
    last_exc: BaseException | None = None

    for attempt in range(1, attempts + 1):
        try:
            return await pool().acquire(timeout=settings.db_acquire_timeout_s())
        except _TRANSIENT_ERRORS as exc:
            last_exc = exc
            logger.warning(
                "db_acquire_failed attempt=%s attempts=%s error=%s",
                attempt,
                attempts,
                exc.__class__.__name__,
            )
            if attempt < attempts and backoff_s > 0:
                await asyncio.sleep(backoff_s * attempt)

    raise ConnectivityError() from last_exc


async def get_connection() -> AsyncIterator[asyncpg.Connection]:
    """
    FastAPI dependency: one pooled connection for the lifetime of a request.
    """
    conn = await acquire_connection()
    try:
        yield conn
    finally:
        await pool().release(conn)


def _record_to_dict(record: asyncpg.Record) -> dict[str, Any]:
    return dict(record)


def _rows_affected(status: str) -> int:
    # asyncpg returns the command tag, e.g. "UPDATE 3" or "INSERT 0 1".
    tail = (status or "").rsplit(" ", 1)[-1]
    return int(tail) if tail.isdigit() else 0


async def fetch_one(conn: asyncpg.Connection, sql: str, *args: Any) -> dict[str, Any] | None:
    """
    Run a query and return a single row as a dict (or None).
    """
    with _translate_errors():
        row = await conn.fetchrow(sql, *args)
    return _record_to_dict(row) if row is not None else None


async def fetch_all(conn: asyncpg.Connection, sql: str, *args: Any) -> list[dict[str, Any]]:
    """
    Run a query and return all rows as a list of dicts.
    """
    with _translate_errors():
        rows = await conn.fetch(sql, *args)
    return [_record_to_dict(r) for r in rows]


async def execute(conn: asyncpg.Connection, sql: str, *args: Any) -> int:
    """
    Run a statement (INSERT/UPDATE/DELETE/DDL) and return the affected row count.
    """
    with _translate_errors():
        status = await conn.execute(sql, *args)
    return _rows_affected(status)


async def execute_many(conn: asyncpg.Connection, sql: str, records: Iterable[tuple[Any, ...]]) -> None:
    records = list(records)
    if not records:
        return
    with _translate_errors():
        await conn.executemany(sql, records)


@asynccontextmanager
async def transaction(conn: asyncpg.Connection) -> AsyncIterator[asyncpg.Connection]:
    """
    Commit on normal exit, roll back if the block raises.
    """
    with _translate_errors():
        async with conn.transaction():
            yield conn
