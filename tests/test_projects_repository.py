import asyncio

import asyncpg
import pytest

from core.errors import ConstraintError
from projects import repository

from conftest import FakeConnection


def test_build_update_statement_uses_only_supplied_columns():
    sql, args = repository.build_update_statement(7, {"category": "Web", "img": None})

    assert sql == "UPDATE portfolio SET category = $1, img = $2 WHERE id = $3"
    assert args == ["Web", None, 7]


def test_build_update_statement_rejects_unknown_fields():
    with pytest.raises(ValueError):
        repository.build_update_statement(1, {"name": "x", "id; DROP TABLE portfolio": "y"})

    with pytest.raises(ValueError):
        repository.build_update_statement(1, {})


def test_insert_project_writes_row_and_ordered_images_in_one_transaction():
    conn = FakeConnection(fetchrow_results=[{"id": 42}])
    fields = {"name": "X", "module_code": "", "category": None}

    project_id = asyncio.run(
        repository.insert_project(conn, fields=fields, image_urls=["a.png", "b.png", "c.png"])
    )

    assert project_id == 42
    method, sql, args = conn.calls[1]
    assert method == "fetchrow"
    assert sql == "INSERT INTO portfolio (name, module_code, category) VALUES ($1, $2, $3) RETURNING id"
    assert args == ("X", "", None)

    method, sql, records = conn.calls[2]
    assert method == "executemany"
    assert sql.startswith("INSERT INTO portfolio_images")
    assert records == [(42, "a.png", 1), (42, "b.png", 2), (42, "c.png", 3)]
    assert conn.committed == 1
    assert conn.rolled_back == 0


def test_insert_project_without_images_skips_image_insert():
    conn = FakeConnection(fetchrow_results=[{"id": 5}])

    asyncio.run(repository.insert_project(conn, fields={"name": "Solo"}))

    assert [method for method, _, _ in conn.calls] == ["begin", "fetchrow"]


def test_insert_project_rolls_back_when_image_insert_fails():
    conn = FakeConnection(fetchrow_results=[{"id": 9}])
    conn.fail_on = ("INSERT INTO portfolio_images", asyncpg.exceptions.ForeignKeyViolationError("fk"))

    with pytest.raises(ConstraintError):
        asyncio.run(repository.insert_project(conn, fields={"name": "X"}, image_urls=["a.png"]))

    assert conn.committed == 0
    assert conn.rolled_back == 1


def test_update_project_returns_none_for_missing_row():
    conn = FakeConnection(fetchrow_results=[None])

    result = asyncio.run(
        repository.update_project(conn, 99, fields={"category": "Web"}, image_urls=["a.png"])
    )

    assert result is None
    assert not any(sql.startswith("UPDATE") for sql in conn.statements())
    assert not any(sql.startswith("DELETE") for sql in conn.statements())


def test_update_project_applies_fields_then_replaces_images():
    conn = FakeConnection(fetchrow_results=[{"id": 3, "name": "Old"}])

    existing = asyncio.run(
        repository.update_project(conn, 3, fields={"category": "Web"}, image_urls=["x.png"])
    )

    assert existing == {"id": 3, "name": "Old"}
    statements = conn.statements()
    assert statements[1] == "SELECT id, name FROM portfolio WHERE id = $1 FOR UPDATE"
    assert statements[2] == "UPDATE portfolio SET category = $1 WHERE id = $2"
    assert statements[3] == "DELETE FROM portfolio_images WHERE portfolio_id = $1"
    assert conn.calls[4][2] == [(3, "x.png", 1)]
    assert conn.committed == 1


def test_update_project_with_empty_image_list_clears_images():
    conn = FakeConnection(fetchrow_results=[{"id": 3, "name": "Old"}])

    asyncio.run(repository.update_project(conn, 3, fields={}, image_urls=[]))

    statements = conn.statements()
    assert "DELETE FROM portfolio_images WHERE portfolio_id = $1" in statements
    assert not any(sql.startswith("UPDATE") for sql in statements)
    assert not any(sql.startswith("INSERT") for sql in statements)


def test_update_project_without_images_leaves_images_alone():
    conn = FakeConnection(fetchrow_results=[{"id": 3, "name": "Old"}])

    asyncio.run(repository.update_project(conn, 3, fields={"name": "New"}))

    assert not any("portfolio_images" in sql for sql in conn.statements())


def test_delete_project_cascades_children_before_row():
    conn = FakeConnection(fetchrow_results=[{"id": 4, "name": "Gone"}])

    deleted = asyncio.run(repository.delete_project(conn, 4))

    assert deleted == {"id": 4, "name": "Gone"}
    assert conn.statements()[2:] == [
        "DELETE FROM portfolio_tags WHERE portfolio_id = $1",
        "DELETE FROM portfolio_images WHERE portfolio_id = $1",
        "DELETE FROM portfolio WHERE id = $1",
    ]
    assert conn.committed == 1


def test_delete_project_missing_row_deletes_nothing():
    conn = FakeConnection(fetchrow_results=[None])

    assert asyncio.run(repository.delete_project(conn, 4)) is None
    assert not any(sql.startswith("DELETE") for sql in conn.statements())


def test_read_queries_order_images_and_tags():
    conn = FakeConnection(fetch_results=[[], []])

    asyncio.run(repository.list_project_images(conn, 1))
    asyncio.run(repository.list_project_tags(conn, 1))

    images_sql, tags_sql = conn.statements()
    assert images_sql.endswith("WHERE portfolio_id = $1 ORDER BY sort_order, id")
    assert tags_sql.endswith("WHERE pt.portfolio_id = $1 ORDER BY t.name")
