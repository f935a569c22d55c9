"""
PostgreSQL backing store for the pets table.

Uses psycopg 3 through DatabaseConnectionPool. Table and column names are
composed with psycopg.sql; selections keep the "?" placeholder style of the
store contract and are rewritten to psycopg's "%s" before execution.
"""

from contextlib import ExitStack
from typing import Any, Iterator, Sequence

import psycopg
from psycopg import sql

from pet_provider.contract import COLUMN_ID
from pet_provider.core.errors import StoreFailure
from pet_provider.observability.logger import get_logger

from .base import BaseStore
from .connection import DatabaseConnectionPool
from .schema import ensure_postgres_schema

logger = get_logger(__name__)


def to_pyformat(fragment: str) -> str:
    """Rewrite a "?"-placeholder SQL fragment for psycopg."""
    return fragment.replace("%", "%%").replace("?", "%s")


class PostgresStore(BaseStore):
    """
    Store backed by a PostgreSQL connection pool.

    The pool is opened, and the schema created, on first use.
    """

    def __init__(self, pool: DatabaseConnectionPool):
        self.pool = pool

    def connect(self) -> "PostgresStore":
        if not self.pool.is_open:
            self.pool.open()
            ensure_postgres_schema(self.pool)
        return self

    def close(self) -> None:
        self.pool.close()

    def _where(self, selection: str | None) -> sql.Composable:
        if not selection:
            return sql.SQL("")
        return sql.SQL(" WHERE ") + sql.SQL(to_pyformat(selection))

    def query(
        self,
        table: str,
        columns: Sequence[str] | None,
        selection: str | None,
        selection_args: Sequence[Any] | None,
        sort_order: str | None,
    ) -> Iterator[dict[str, Any]]:
        self.connect()

        # Projection entries are passed through as SQL, like the selection
        if columns:
            column_sql = sql.SQL(", ").join(sql.SQL(to_pyformat(c)) for c in columns)
        else:
            column_sql = sql.SQL("*")
        statement = sql.SQL("SELECT {} FROM {}").format(column_sql, sql.Identifier(table))
        statement += self._where(selection)
        if sort_order:
            statement += sql.SQL(" ORDER BY ") + sql.SQL(to_pyformat(sort_order))

        stack = ExitStack()
        try:
            conn = stack.enter_context(self.pool.get_connection())
            cursor = stack.enter_context(conn.cursor())
            cursor.execute(statement, tuple(selection_args or ()))
        except psycopg.Error as e:
            stack.__exit__(type(e), e, e.__traceback__)
            raise StoreFailure("query", str(e)) from e
        return self._rows(stack, cursor)

    @staticmethod
    def _rows(stack: ExitStack, cursor) -> Iterator[dict[str, Any]]:
        # The connection goes back to the pool once the rows are exhausted
        # or the iterator is closed
        with stack:
            try:
                for row in cursor:
                    yield dict(row)
            except psycopg.Error as e:
                raise StoreFailure("query", str(e)) from e

    def insert(self, table: str, values: dict[str, Any]) -> int | None:
        self.connect()

        if values:
            statement = sql.SQL("INSERT INTO {} ({}) VALUES ({}) RETURNING {}").format(
                sql.Identifier(table),
                sql.SQL(", ").join(sql.Identifier(c) for c in values),
                sql.SQL(", ").join(sql.Placeholder() for _ in values),
                sql.Identifier(COLUMN_ID),
            )
        else:
            statement = sql.SQL("INSERT INTO {} DEFAULT VALUES RETURNING {}").format(
                sql.Identifier(table), sql.Identifier(COLUMN_ID)
            )

        try:
            with self.pool.get_connection() as conn:
                with conn.cursor() as cur:
                    cur.execute(statement, tuple(values.values()))
                    row = cur.fetchone()
        except psycopg.Error as e:
            logger.error(
                "Error inserting row",
                extra={"table": table, "error_type": type(e).__name__, "error_message": str(e)},
            )
            return None
        return int(row[COLUMN_ID]) if row else None

    def update(
        self,
        table: str,
        values: dict[str, Any],
        selection: str | None,
        selection_args: Sequence[Any] | None,
    ) -> int:
        if not values:
            raise StoreFailure("update", "Empty values")
        self.connect()

        statement = sql.SQL("UPDATE {} SET {}").format(
            sql.Identifier(table),
            sql.SQL(", ").join(
                sql.SQL("{} = {}").format(sql.Identifier(c), sql.Placeholder()) for c in values
            ),
        )
        statement += self._where(selection)
        params = tuple(values.values()) + tuple(selection_args or ())

        try:
            return self.pool.execute_command(statement, params)
        except psycopg.Error as e:
            raise StoreFailure("update", str(e)) from e

    def delete(
        self,
        table: str,
        selection: str | None,
        selection_args: Sequence[Any] | None,
    ) -> int:
        self.connect()

        statement = sql.SQL("DELETE FROM {}").format(sql.Identifier(table))
        statement += self._where(selection)

        try:
            return self.pool.execute_command(statement, tuple(selection_args or ()))
        except psycopg.Error as e:
            raise StoreFailure("delete", str(e)) from e
