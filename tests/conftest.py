"""
Shared fixtures: an in-memory stand-in for the asyncpg pool, wired into the
app through the `get_pool` dependency.
"""

from __future__ import annotations

from dataclasses import replace
from pathlib import Path
from typing import Any

import asyncpg
import pytest
from fastapi.testclient import TestClient

from core.config import Settings, load_settings
from core.db import get_pool
from main import create_app

COLUMNS = ("ts", "lang", "gender", "q1", "q2", "q3", "q4", "q5")


def missing_table() -> asyncpg.exceptions.UndefinedTableError:
    return asyncpg.exceptions.UndefinedTableError('relation "responses" does not exist')


class FakePool:
    """
    Understands exactly the statements issued by `survey.repository`.
    """

    def __init__(self, *, table_exists: bool = True):
        self.table_exists = table_exists
        self.rows: list[dict[str, Any]] = []
        self.next_id = 1
        self.create_calls = 0
        self.insert_calls = 0
        self.list_calls = 0
        self.down = False
        self.create_error: Exception | None = None
        self.insert_errors: list[Exception] = []

    def drop_table(self) -> None:
        self.table_exists = False
        self.rows = []
        self.next_id = 1

    def _require_table(self) -> None:
        if not self.table_exists:
            raise missing_table()

    async def execute(self, sql: str, *args: Any) -> str:
        if "CREATE TABLE IF NOT EXISTS responses" in sql:
            self.create_calls += 1
            if self.create_error is not None:
                raise self.create_error
            self.table_exists = True
            return "CREATE TABLE"
        if sql.startswith("TRUNCATE TABLE responses"):
            self._require_table()
            self.rows = []
            self.next_id = 1
            return "TRUNCATE TABLE"
        raise AssertionError(f"unexpected statement: {sql}")

    async def fetchrow(self, sql: str, *args: Any) -> dict[str, Any] | None:
        if "INSERT INTO responses" in sql:
            self.insert_calls += 1
            if self.insert_errors:
                raise self.insert_errors.pop(0)
            self._require_table()
            row = {"id": self.next_id, **dict(zip(COLUMNS, args))}
            self.next_id += 1
            self.rows.append(row)
            return dict(row)
        if sql.startswith("SELECT 1"):
            if self.down:
                raise ConnectionRefusedError("connection refused")
            return {"ok": 1}
        if "COUNT(*)" in sql:
            self._require_table()
            return {"n": len(self.rows)}
        raise AssertionError(f"unexpected query: {sql}")

    async def fetch(self, sql: str, *args: Any) -> list[dict[str, Any]]:
        if "FROM responses ORDER BY id DESC" in sql:
            self.list_calls += 1
            self._require_table()
            return [dict(r) for r in sorted(self.rows, key=lambda r: r["id"], reverse=True)]
        raise AssertionError(f"unexpected query: {sql}")


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def fake_pool() -> FakePool:
    return FakePool()


def make_settings(frontend_dir: Path) -> Settings:
    return replace(load_settings(), frontend_dir=frontend_dir)


@pytest.fixture
def client(fake_pool: FakePool, tmp_path: Path) -> TestClient:
    app = create_app(make_settings(tmp_path / "frontend"))
    app.dependency_overrides[get_pool] = lambda: fake_pool
    return TestClient(app)


def valid_payload(**overrides: Any) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "ts": "2024-01-01T00:00:00Z",
        "lang": "en",
        "gender": "f",
        "q1": 3,
        "q2": "a",
        "q3": "b",
        "q4": "c",
        "q5": 4,
    }
    payload.update(overrides)
    return payload
