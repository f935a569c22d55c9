"""
Lazy, forward-only query results.
"""

from typing import Any, Callable, Iterator

from pet_provider.core.addressing import Address


class ResultSet:
    """
    Rows returned by PetProvider.query().

    Rows are read from the store as the result set is iterated. While open,
    the result set observes the address it was queried with: a change on an
    overlapping address marks it stale and calls its change listeners, which
    typically re-run the query.
    """

    def __init__(self, rows: Iterator[dict[str, Any]], address: Address):
        self._rows = rows
        self.address = address
        self._stale = False
        self._closed = False
        self._listeners: list[Callable[["ResultSet"], Any]] = []
        self._subscription = None

    def attach(self, subscription) -> None:
        """Keep the notification subscription so close() can cancel it."""
        self._subscription = subscription

    @property
    def notification_uri(self) -> str:
        return self.address.uri

    @property
    def is_stale(self) -> bool:
        return self._stale

    @property
    def closed(self) -> bool:
        return self._closed

    def add_listener(self, listener: Callable[["ResultSet"], Any]) -> None:
        self._listeners.append(listener)

    def on_change(self, changed: Address) -> None:
        """Called by the change bus when an overlapping address changes."""
        self._stale = True
        for listener in list(self._listeners):
            listener(self)

    def __iter__(self) -> "ResultSet":
        return self

    def __next__(self) -> dict[str, Any]:
        if self._closed:
            raise StopIteration
        return next(self._rows)

    def fetchone(self) -> dict[str, Any] | None:
        return next(self, None)

    def fetchall(self) -> list[dict[str, Any]]:
        return list(self)

    def close(self) -> None:
        """Stop reading rows and stop observing changes."""
        if self._closed:
            return
        self._closed = True
        close = getattr(self._rows, "close", None)
        if close is not None:
            close()
        if self._subscription is not None:
            self._subscription.cancel()
            self._subscription = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
