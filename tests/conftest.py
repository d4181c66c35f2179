"""
Shared fixtures: an in-memory stand-in for the Supabase table client.
"""

import sys
import os

import pytest

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))


class FakeResponse:
    def __init__(self, data):
        self.data = data


class FakeQuery:
    """Supports the select/eq/insert/update/delete chains the services use."""

    def __init__(self, client, table):
        self.client = client
        self.table = table
        self.filters = []
        self.action = "select"
        self.payload = None

    def select(self, columns="*"):
        self.action = "select"
        return self

    def eq(self, column, value):
        self.filters.append((column, value))
        return self

    def insert(self, row):
        self.action = "insert"
        self.payload = row
        return self

    def update(self, values):
        self.action = "update"
        self.payload = values
        return self

    def delete(self):
        self.action = "delete"
        return self

    def _matches(self, row):
        return all(str(row.get(column)) == str(value) for column, value in self.filters)

    def execute(self):
        rows = self.client.tables.setdefault(self.table, [])
        if self.action == "insert":
            row = dict(self.payload)
            row.setdefault("id", f"{self.table}-{len(rows) + 1}")
            rows.append(row)
            return FakeResponse([row])
        if self.action == "update":
            for row in rows:
                if self._matches(row):
                    row.update(self.payload)
            return FakeResponse([r for r in rows if self._matches(r)])
        if self.action == "delete":
            removed = [r for r in rows if self._matches(r)]
            self.client.tables[self.table] = [r for r in rows if not self._matches(r)]
            return FakeResponse(removed)
        return FakeResponse([dict(r) for r in rows if self._matches(r)])


class FakeSupabaseClient:
    def __init__(self, tables=None):
        self.tables = tables or {}

    def table(self, name):
        return FakeQuery(self, name)


@pytest.fixture
def fake_client():
    return FakeSupabaseClient({
        "fields": [{"id": "F"}, {"id": "G"}],
        "teams": [{"id": "teamA", "name": "Lions U12"}, {"id": "teamB", "name": "Hawks U12"}],
        "permits": [
            {"id": "p1", "field_id": "F", "start": "2026-11-07T09:00:00", "end": "2026-11-07T12:00:00"},
        ],
        "matches": [],
        "blackouts": [],
        "availability": [],
    })
