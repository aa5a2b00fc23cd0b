"""
Pytest configuration and fixtures for Artwalls tests.
"""

import os
from typing import Any

import pytest

# Set test environment before importing artwalls modules
os.environ["ARTWALLS_ENV"] = "development"
os.environ["ANALYTICS_ENABLED"] = "false"


# ---------------------------------------------------------------------------
# Fake PostgREST client
# ---------------------------------------------------------------------------


class FakeResult:
    def __init__(self, data: list[dict], count: int | None = None):
        self.data = data
        self.count = count


class FakeQuery:
    """Query builder matching the subset of the PostgREST API the stores use."""

    def __init__(self, db: "FakeDB", table: str):
        self._db = db
        self._table = table
        self._op = "select"
        self._payload: Any = None
        self._filters: list[tuple[str, Any]] = []
        self._limit: int | None = None
        self._count: str | None = None
        self._head = False
        self._on_conflict: str | None = None

    def select(self, columns: str = "*", count: str | None = None, head: bool = False):
        self._op = "select"
        self._count = count
        self._head = head
        return self

    def insert(self, rows):
        self._op = "insert"
        self._payload = rows
        return self

    def upsert(self, rows, on_conflict: str | None = None):
        self._op = "upsert"
        self._payload = rows
        self._on_conflict = on_conflict
        return self

    def update(self, row):
        self._op = "update"
        self._payload = row
        return self

    def eq(self, column: str, value: Any):
        self._filters.append((column, value))
        return self

    def limit(self, n: int):
        self._limit = n
        return self

    def _matches(self, row: dict) -> bool:
        return all(row.get(col) == value for col, value in self._filters)

    def execute(self) -> FakeResult:
        self._db.calls.append((self._table, self._op))
        failure = self._db.failures.get((self._table, self._op))
        if failure is not None:
            raise failure

        rows = self._db.tables.setdefault(self._table, [])

        if self._op == "select":
            found = [dict(r) for r in rows if self._matches(r)]
            count = len(found) if self._count else None
            if self._limit is not None:
                found = found[: self._limit]
            return FakeResult([] if self._head else found, count)

        if self._op == "insert":
            new_rows = self._payload if isinstance(self._payload, list) else [self._payload]
            inserted = []
            for row in new_rows:
                row = dict(row)
                row.setdefault("id", f"{self._table}-{len(rows) + 1}")
                rows.append(row)
                inserted.append(dict(row))
            return FakeResult(inserted)

        if self._op == "upsert":
            row = dict(self._payload)
            key = self._on_conflict or "id"
            for existing in rows:
                if existing.get(key) == row.get(key):
                    existing.update(row)
                    return FakeResult([dict(existing)])
            rows.append(row)
            return FakeResult([dict(row)])

        if self._op == "update":
            updated = []
            for existing in rows:
                if self._matches(existing):
                    existing.update(self._payload)
                    updated.append(dict(existing))
            return FakeResult(updated)

        raise AssertionError(f"unsupported op {self._op}")


class FakeDB:
    """
    In-memory stand-in for a supabase Client.

    tables: table name -> rows
    calls: (table, op) for every execute(), in order
    failures: (table, op) -> exception raised by execute()
    """

    def __init__(self, tables: dict[str, list[dict]] | None = None):
        self.tables: dict[str, list[dict]] = tables or {}
        self.calls: list[tuple[str, str]] = []
        self.failures: dict[tuple[str, str], Exception] = {}

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)


class RecordingSink:
    """Analytics sink that records events (and logs them into a shared call list)."""

    def __init__(self, calls: list | None = None):
        self.events: list[tuple[str, str, dict]] = []
        self._calls = calls

    def emit(self, event_name: str, actor_id: str, properties: dict | None = None) -> None:
        self.events.append((event_name, actor_id, dict(properties or {})))
        if self._calls is not None:
            self._calls.append(("event", event_name))

    def names(self) -> list[str]:
        return [name for name, _, _ in self.events]


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def fake_db():
    """Fake database seeded with one empty artist profile."""
    return FakeDB({"artists": [{"id": "artist-1", "name": "", "email": "jane@example.com"}]})


@pytest.fixture
def sink(fake_db):
    return RecordingSink(fake_db.calls)


@pytest.fixture
def jane_basics():
    return {
        "display_name": "Jane",
        "city": "Portland",
        "bio": "I paint urban landscapes in oil.",
    }


@pytest.fixture
def artwork_draft():
    return {
        "title": "Hawthorne Bridge at Dusk",
        "price": "240.00",
        "width": 24,
        "height": 36,
        "unit": "in",
        "image_url": "https://cdn.example.com/art/hawthorne.jpg",
    }
