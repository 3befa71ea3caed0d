from __future__ import annotations

import itertools
from typing import Any

import pytest
from fastapi.testclient import TestClient

from auth import security
from core import db
from projects import repository


class FakeTransaction:
    def __init__(self, conn: "FakeConnection") -> None:
        self.conn = conn

    async def __aenter__(self) -> "FakeTransaction":
        self.conn.calls.append(("begin", "BEGIN", ()))
        return self

    async def __aexit__(self, exc_type, exc, tb) -> bool:
        if exc_type is None:
            self.conn.committed += 1
        else:
            self.conn.rolled_back += 1
        return False


class FakeConnection:
    """
    Scripted stand-in for asyncpg.Connection.

    `fetchrow` / `fetch` pop queued results in order; every call is recorded
    with whitespace-collapsed SQL so tests can assert on statements.
    """

    def __init__(
        self,
        *,
        fetchrow_results: list[Any] | None = None,
        fetch_results: list[Any] | None = None,
        execute_status: str = "UPDATE 1",
    ) -> None:
        self.calls: list[tuple[str, str, Any]] = []
        self._fetchrow = list(fetchrow_results or [])
        self._fetch = list(fetch_results or [])
        self.execute_status = execute_status
        self.committed = 0
        self.rolled_back = 0
        self.fail_on: tuple[str, BaseException] | None = None

    def _record(self, method: str, sql: str, args: Any) -> None:
        normalized = " ".join(sql.split())
        self.calls.append((method, normalized, args))
        if self.fail_on is not None and self.fail_on[0] in normalized:
            raise self.fail_on[1]

    async def fetchrow(self, sql: str, *args: Any) -> Any:
        self._record("fetchrow", sql, args)
        return self._fetchrow.pop(0) if self._fetchrow else None

    async def fetch(self, sql: str, *args: Any) -> list[Any]:
        self._record("fetch", sql, args)
        return self._fetch.pop(0) if self._fetch else []

    async def execute(self, sql: str, *args: Any) -> str:
        self._record("execute", sql, args)
        return self.execute_status

    async def executemany(self, sql: str, records: Any) -> None:
        self._record("executemany", sql, list(records))

    def transaction(self) -> FakeTransaction:
        return FakeTransaction(self)

    def statements(self) -> list[str]:
        return [sql for _, sql, _ in self.calls]


class InMemoryPortfolio:
    """
    Dict-backed replacement for the `projects.repository` functions, with
    the same return conventions (None for absent rows).
    """

    def __init__(self) -> None:
        self.projects: dict[int, dict[str, Any]] = {}
        self.images: list[dict[str, Any]] = []
        self.tags: dict[int, dict[str, Any]] = {}
        self.links: set[tuple[int, int]] = set()
        self._project_ids = itertools.count(1)
        self._image_ids = itertools.count(1)

    def add_tag(self, tag_id: int, name: str, skill_category: str | None) -> None:
        self.tags[tag_id] = {"id": tag_id, "name": name, "skill_category": skill_category}

    def _replace_images(self, project_id: int, image_urls) -> None:
        self.images = [img for img in self.images if img["portfolio_id"] != project_id]
        for position, url in enumerate(image_urls, start=1):
            self.images.append(
                {
                    "id": next(self._image_ids),
                    "portfolio_id": project_id,
                    "image_url": url,
                    "sort_order": position,
                    "caption": None,
                }
            )

    async def list_projects(self, conn):
        return [dict(row) for row in self.projects.values()]

    async def get_project(self, conn, project_id):
        row = self.projects.get(project_id)
        return dict(row) if row is not None else None

    async def list_categories(self, conn):
        return sorted({row["category"] for row in self.projects.values() if row["category"]})

    async def list_skills(self, conn):
        return sorted(self.tags.values(), key=lambda t: ((t["skill_category"] or ""), t["name"]))

    async def list_project_images(self, conn, project_id):
        rows = [img for img in self.images if img["portfolio_id"] == project_id]
        return sorted(rows, key=lambda img: (img["sort_order"], img["id"]))

    async def list_project_tags(self, conn, project_id):
        rows = [self.tags[tag_id] for (pid, tag_id) in self.links if pid == project_id]
        return sorted(rows, key=lambda t: t["name"])

    async def insert_project(self, conn, *, fields, image_urls=()):
        project_id = next(self._project_ids)
        self.projects[project_id] = {"id": project_id, **fields}
        self._replace_images(project_id, image_urls)
        return project_id

    async def update_project(self, conn, project_id, *, fields, image_urls=None):
        row = self.projects.get(project_id)
        if row is None:
            return None
        existing = {"id": project_id, "name": row["name"]}
        row.update(fields)
        if image_urls is not None:
            self._replace_images(project_id, image_urls)
        return existing

    async def delete_project(self, conn, project_id):
        row = self.projects.pop(project_id, None)
        if row is None:
            return None
        self.images = [img for img in self.images if img["portfolio_id"] != project_id]
        self.links = {(pid, tid) for (pid, tid) in self.links if pid != project_id}
        return {"id": project_id, "name": row["name"]}


@pytest.fixture(autouse=True)
def _auth_env(monkeypatch):
    monkeypatch.setenv("JWT_SECRET", "test-secret")
    monkeypatch.setenv("JWT_ALG", "HS256")
    monkeypatch.delenv("ACCESS_TOKEN_EXPIRE_MIN", raising=False)


@pytest.fixture
def fake_conn() -> FakeConnection:
    return FakeConnection()


@pytest.fixture
def portfolio(monkeypatch) -> InMemoryPortfolio:
    store = InMemoryPortfolio()
    for name in (
        "list_projects",
        "get_project",
        "list_categories",
        "list_skills",
        "list_project_images",
        "list_project_tags",
        "insert_project",
        "update_project",
        "delete_project",
    ):
        monkeypatch.setattr(repository, name, getattr(store, name))
    return store


@pytest.fixture
def client(fake_conn):
    from main import app

    async def override_get_connection():
        yield fake_conn

    app.dependency_overrides[db.get_connection] = override_get_connection
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def admin_headers() -> dict[str, str]:
    token = security.build_access_token(admin_id=1)
    return {"Authorization": f"Bearer {token}"}
