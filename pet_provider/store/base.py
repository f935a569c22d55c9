"""
Store contract used by the pet provider.

Selections are SQL WHERE fragments with "?" placeholders, bound to
selection_args in order on every backend.
"""

from abc import ABC, abstractmethod
from typing import Any, Iterator, Sequence


class BaseStore(ABC):
    """
    Abstract relational store holding the pets table.

    Implementations connect lazily on first use. Errors reported by the
    database are raised as StoreFailure, except by insert(), which reports
    failure by returning None.
    """

    @abstractmethod
    def query(
        self,
        table: str,
        columns: Sequence[str] | None,
        selection: str | None,
        selection_args: Sequence[Any] | None,
        sort_order: str | None,
    ) -> Iterator[dict[str, Any]]:
        """
        Run a SELECT and return a lazy iterator of row dicts.

        The statement is executed before this returns, so malformed
        selections fail here and not on first iteration.
        """

    @abstractmethod
    def insert(self, table: str, values: dict[str, Any]) -> int | None:
        """Insert one row and return its id, or None if the store refused it."""

    @abstractmethod
    def update(
        self,
        table: str,
        values: dict[str, Any],
        selection: str | None,
        selection_args: Sequence[Any] | None,
    ) -> int:
        """Update matching rows and return the affected row count."""

    @abstractmethod
    def delete(
        self,
        table: str,
        selection: str | None,
        selection_args: Sequence[Any] | None,
    ) -> int:
        """Delete matching rows and return the affected row count."""

    @abstractmethod
    def close(self) -> None:
        """Release the connection or pool."""

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
