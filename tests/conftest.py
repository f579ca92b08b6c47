"""Shared fixtures: an app client and an in-memory stand-in for the Supabase query builder."""

from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient

from main import app
from vani.database import CurrentUser, get_current_user
from vani.middleware.rate_limiter import get_rate_limiter


@pytest.fixture(autouse=True)
def reset_rate_limits():
    get_rate_limiter().reset_all()
    yield
    get_rate_limiter().reset_all()


@pytest.fixture
def client():
    return TestClient(app)


class FakeQuery:
    """Records the chained PostgREST calls and returns canned rows."""

    def __init__(self, table: "FakeTable"):
        self.table = table
        self.filters = []
        self.order_by = None
        self.limit_to = None
        self.payload = None
        self.operation = "select"

    def select(self, columns="*"):
        self.operation = "select"
        self.columns = columns
        return self

    def insert(self, row):
        self.operation = "insert"
        self.payload = row
        return self

    def update(self, changes):
        self.operation = "update"
        self.payload = changes
        return self

    def eq(self, column, value):
        self.filters.append((column, value))
        return self

    def order(self, column, desc=False):
        self.order_by = (column, desc)
        return self

    def limit(self, count):
        self.limit_to = count
        return self

    def _matches(self, row):
        return all(row.get(column) == value for column, value in self.filters)

    def execute(self):
        self.table.queries.append(self)
        if self.operation == "insert":
            row = {"id": f"row-{len(self.table.rows) + 1}", **self.payload}
            self.table.rows.append(row)
            return SimpleNamespace(data=[row])

        matched = [row for row in self.table.rows if self._matches(row)]
        if self.operation == "update":
            for row in matched:
                row.update(self.payload)
            return SimpleNamespace(data=matched)

        if self.order_by:
            column, desc = self.order_by
            matched = sorted(matched, key=lambda row: row.get(column) or "", reverse=desc)
        if self.limit_to is not None:
            matched = matched[: self.limit_to]
        return SimpleNamespace(data=matched)


class FakeTable:
    def __init__(self, rows=None):
        self.rows = list(rows or [])
        self.queries = []


class FakeSupabase:
    def __init__(self, tables=None):
        self.tables = {name: FakeTable(rows) for name, rows in (tables or {}).items()}

    def table(self, name):
        return FakeQuery(self.tables.setdefault(name, FakeTable()))


@pytest.fixture
def fake_supabase():
    return FakeSupabase()


@pytest.fixture
def signed_in(fake_supabase):
    """Authenticate every request as user-1 against the fake database."""
    user = CurrentUser(id="user-1", email="asha@example.com", client=fake_supabase)
    app.dependency_overrides[get_current_user] = lambda: user
    yield user
    app.dependency_overrides.pop(get_current_user, None)
