"""
Unit tests for the SQLite store.
"""

import sqlite3

import pytest

from pet_provider.core.errors import StoreFailure
from pet_provider.store import SQLiteStore


def pets(store):
    return list(store.query("pets", None, None, None, "id"))


class TestSQLiteStore:
    """Tests for SQLiteStore"""

    def test_connects_lazily_and_creates_table(self, sqlite_store):
        assert sqlite_store.conn is None
        assert pets(sqlite_store) == []
        assert sqlite_store.conn is not None

    def test_insert_returns_row_id(self, sqlite_store):
        assert sqlite_store.insert("pets", {"name": "Rex", "gender": 1}) == 1
        assert sqlite_store.insert("pets", {"name": "Luna", "gender": 2}) == 2

    def test_insert_refused_returns_none(self, sqlite_store, caplog):
        with caplog.at_level("ERROR", logger="pet-provider"):
            assert sqlite_store.insert("no_such_table", {"name": "Rex"}) is None
        assert any("Error inserting row" in r.getMessage() for r in caplog.records)

    def test_insert_default_values(self, sqlite_store):
        row_id = sqlite_store.insert("pets", {})
        assert pets(sqlite_store) == [
            {"id": row_id, "name": None, "breed": None, "gender": None, "weight": None}
        ]

    def test_schema_has_no_field_constraints(self, sqlite_store):
        """The provider's rules are the only gate on pet fields"""
        assert sqlite_store.insert("pets", {"name": None, "gender": 9, "weight": -4}) is not None

    def test_query_is_lazy(self, sqlite_store):
        for name in ("a", "b", "c"):
            sqlite_store.insert("pets", {"name": name, "gender": 0})

        rows = sqlite_store.query("pets", ["name"], "gender = ?", [0], "name DESC")
        assert next(rows) == {"name": "c"}
        assert list(rows) == [{"name": "b"}, {"name": "a"}]

    def test_query_failure_raised_before_iteration(self, sqlite_store):
        with pytest.raises(StoreFailure) as exc_info:
            sqlite_store.query("pets", ["nope"], None, None, None)
        assert exc_info.value.operation == "query"
        assert isinstance(exc_info.value.__cause__, sqlite3.Error)

    def test_update_and_delete_counts(self, sqlite_store):
        for name in ("a", "b", "c"):
            sqlite_store.insert("pets", {"name": name, "gender": 0})

        assert sqlite_store.update("pets", {"weight": 2}, "name <> ?", ["a"]) == 2
        assert sqlite_store.update("pets", {"weight": 2}, "name = ?", ["zzz"]) == 0
        assert sqlite_store.delete("pets", "name = ?", ["a"]) == 1
        assert sqlite_store.delete("pets", None, None) == 2
        assert pets(sqlite_store) == []

    def test_empty_update_rejected(self, sqlite_store):
        with pytest.raises(StoreFailure):
            sqlite_store.update("pets", {}, None, None)

    def test_closed_store_reconnects(self, tmp_path):
        path = str(tmp_path / "pets.db")
        with SQLiteStore(path) as store:
            store.insert("pets", {"name": "Rex", "gender": 1})

        with SQLiteStore(path) as store:
            assert [row["name"] for row in pets(store)] == ["Rex"]

    def test_schema_version_change_recreates_table(self, tmp_path):
        path = str(tmp_path / "pets.db")
        with SQLiteStore(path) as store:
            store.insert("pets", {"name": "Rex", "gender": 1})

        conn = sqlite3.connect(path)
        conn.execute("PRAGMA user_version = 99")
        conn.close()

        with SQLiteStore(path) as store:
            assert pets(store) == []
            assert store.conn.execute("PRAGMA user_version").fetchone()[0] == 1
