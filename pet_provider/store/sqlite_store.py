"""
SQLite backing store for the pets table.
"""

import sqlite3
from typing import Any, Iterator, Sequence

from pet_provider.core.errors import StoreFailure
from pet_provider.observability.logger import get_logger

from .base import BaseStore
from .schema import ensure_sqlite_schema

logger = get_logger(__name__)


def _quote(identifier: str) -> str:
    return '"' + identifier.replace('"', '""') + '"'


class SQLiteStore(BaseStore):
    """
    Store backed by a single sqlite3 connection.

    The connection is opened, and the schema created, on first use.
    SQLite serializes writers itself; no extra locking is done here.
    Integers outside the signed 64-bit range are refused by the driver with
    OverflowError and are handled like any other database error.
    """

    def __init__(self, db_path: str = ":memory:"):
        self.db_path = db_path
        self.conn: sqlite3.Connection | None = None

    def connect(self) -> "SQLiteStore":
        """Open the database and make sure the pets table exists."""
        if self.conn is None:
            conn = sqlite3.connect(self.db_path, check_same_thread=False)
            conn.row_factory = sqlite3.Row
            ensure_sqlite_schema(conn)
            self.conn = conn
            logger.debug("Opened SQLite store", extra={"db_path": self.db_path})
        return self

    def close(self) -> None:
        if self.conn:
            self.conn.close()
            self.conn = None

    def _connection(self) -> sqlite3.Connection:
        if self.conn is None:
            self.connect()
        return self.conn

    def query(
        self,
        table: str,
        columns: Sequence[str] | None,
        selection: str | None,
        selection_args: Sequence[Any] | None,
        sort_order: str | None,
    ) -> Iterator[dict[str, Any]]:
        # Projection entries are passed through as SQL, like the selection
        column_sql = ", ".join(columns) if columns else "*"
        statement = f"SELECT {column_sql} FROM {_quote(table)}"
        if selection:
            statement += f" WHERE {selection}"
        if sort_order:
            statement += f" ORDER BY {sort_order}"

        try:
            cursor = self._connection().execute(statement, tuple(selection_args or ()))
        except (sqlite3.Error, OverflowError) as e:
            raise StoreFailure("query", str(e)) from e
        return self._rows(cursor)

    @staticmethod
    def _rows(cursor: sqlite3.Cursor) -> Iterator[dict[str, Any]]:
        try:
            for row in cursor:
                yield dict(row)
        except sqlite3.Error as e:
            raise StoreFailure("query", str(e)) from e
        finally:
            cursor.close()

    def insert(self, table: str, values: dict[str, Any]) -> int | None:
        if values:
            columns = ", ".join(_quote(c) for c in values)
            placeholders = ", ".join("?" for _ in values)
            statement = f"INSERT INTO {_quote(table)} ({columns}) VALUES ({placeholders})"
        else:
            statement = f"INSERT INTO {_quote(table)} DEFAULT VALUES"

        conn = self._connection()
        try:
            with conn:
                cursor = conn.execute(statement, tuple(values.values()))
        except (sqlite3.Error, OverflowError) as e:
            logger.error(
                "Error inserting row",
                extra={"table": table, "error_type": type(e).__name__, "error_message": str(e)},
            )
            return None
        return cursor.lastrowid

    def update(
        self,
        table: str,
        values: dict[str, Any],
        selection: str | None,
        selection_args: Sequence[Any] | None,
    ) -> int:
        if not values:
            raise StoreFailure("update", "Empty values")

        assignments = ", ".join(f"{_quote(c)} = ?" for c in values)
        statement = f"UPDATE {_quote(table)} SET {assignments}"
        if selection:
            statement += f" WHERE {selection}"
        params = tuple(values.values()) + tuple(selection_args or ())

        conn = self._connection()
        try:
            with conn:
                cursor = conn.execute(statement, params)
        except (sqlite3.Error, OverflowError) as e:
            raise StoreFailure("update", str(e)) from e
        return cursor.rowcount

    def delete(
        self,
        table: str,
        selection: str | None,
        selection_args: Sequence[Any] | None,
    ) -> int:
        # "WHERE 1" keeps the affected-row count accurate when deleting everything
        statement = f"DELETE FROM {_quote(table)} WHERE {selection or '1'}"

        conn = self._connection()
        try:
            with conn:
                cursor = conn.execute(statement, tuple(selection_args or ()))
        except (sqlite3.Error, OverflowError) as e:
            raise StoreFailure("delete", str(e)) from e
        return cursor.rowcount
