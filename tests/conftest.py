from __future__ import annotations

import copy
from typing import Any

import pytest


class _FakeResponse:
    def __init__(self, *, data=None, error=None):  # noqa: ANN001
        self.data = data or []
        self.error = error


class _FakeQuery:
    """Minimal PostgREST query builder over an in-memory table."""

    def __init__(self, db: "FakeWatchlistDb", table: str) -> None:
        self._db = db
        self._table = table
        self._op = "select"
        self._payload: dict[str, Any] | None = None
        self._filters: list[tuple[str, Any]] = []
        self._limit: int | None = None

    def select(self, *_args, **_kwargs):  # noqa: ANN002, ANN003
        self._op = "select"
        return self

    def insert(self, payload: dict):  # noqa: ANN001
        self._op = "insert"
        self._payload = dict(payload)
        return self

    def delete(self):
        self._op = "delete"
        return self

    def eq(self, column: str, value):  # noqa: ANN001
        self._filters.append((column, value))
        return self

    def limit(self, n: int):
        self._limit = n
        return self

    def _matches(self, row: dict[str, Any]) -> bool:
        return all(row.get(col) == val for col, val in self._filters)

    def execute(self) -> _FakeResponse:
        self._db.executed.append((self._table, self._op, list(self._filters)))
        if self._db.fail_with is not None:
            raise self._db.fail_with

        rows = self._db.tables.setdefault(self._table, [])
        if self._op == "insert":
            rows.append(copy.deepcopy(self._payload))
            return _FakeResponse(data=[copy.deepcopy(self._payload)])
        matched = [row for row in rows if self._matches(row)]
        if self._op == "delete":
            self._db.tables[self._table] = [row for row in rows if not self._matches(row)]
            return _FakeResponse(data=copy.deepcopy(matched))
        if self._limit is not None:
            matched = matched[: self._limit]
        return _FakeResponse(data=copy.deepcopy(matched))


class FakeWatchlistDb:
    """Fake Supabase client supporting the calls the watchlist repository makes."""

    def __init__(self) -> None:
        self.tables: dict[str, list[dict[str, Any]]] = {}
        self.executed: list[tuple[str, str, list[tuple[str, Any]]]] = []
        self.fail_with: Exception | None = None
        self._schema = "public"

    def schema(self, name: str):
        self._schema = name
        return self

    def table(self, name: str) -> _FakeQuery:
        return _FakeQuery(self, f"{self._schema}.{name}")

    def rows(self) -> list[dict[str, Any]]:
        return self.tables.get("core.watchlist_entries", [])


@pytest.fixture
def fake_db() -> FakeWatchlistDb:
    return FakeWatchlistDb()
