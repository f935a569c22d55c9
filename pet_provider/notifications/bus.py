"""
Change notification bus.

The provider publishes the address a mutation touched and returns at once.
Delivery to observers happens later, either on the bus's dispatcher thread
or when drain() is called, in publication order.

Matching follows content-URI observer rules: a notification on the
collection reaches every observer, a notification on an item reaches
observers of that item and observers of the collection that asked for
descendant changes.
"""

import queue
import threading
import weakref
from typing import Any, Callable

from pet_provider.core.addressing import (
    PET_URI_MATCHER,
    Address,
    CollectionAddress,
    ItemAddress,
    UriMatcher,
)
from pet_provider.observability import metrics
from pet_provider.observability.logger import get_logger

logger = get_logger(__name__)

ChangeCallback = Callable[[Address], Any]

# Queue sentinel that stops the dispatcher thread
_STOP = object()


class Subscription:
    """An observer registered on an address."""

    def __init__(
        self,
        bus: "ChangeBus",
        address: Address,
        callback: ChangeCallback | None = None,
        notify_for_descendants: bool = True,
        weak_method=None,
    ):
        self._bus = bus
        self.address = address
        self.notify_for_descendants = notify_for_descendants
        self._callback = callback
        self._weak_method = weak_method
        self._finalizer: weakref.finalize | None = None
        self.active = True

    def matches(self, changed: Address) -> bool:
        """Return True if a change on the given address concerns this observer."""
        if isinstance(self.address, CollectionAddress):
            if isinstance(changed, ItemAddress):
                return self.notify_for_descendants
            return True
        return self.address.overlaps(changed)

    def callback(self) -> ChangeCallback | None:
        """Return the callback, or None if a weakly held observer is gone."""
        if self._weak_method is not None:
            return self._weak_method()
        return self._callback

    def cancel(self) -> None:
        self.active = False
        if self._finalizer is not None:
            self._finalizer.detach()
        self._bus._remove(self)


class ChangeBus:
    """
    Fire-and-forget channel from the provider to change observers.

    Usage:
        bus = ChangeBus()
        bus.subscribe(CONTENT_URI, on_change)
        bus.start()         # deliver on a background thread
        ...
        bus.stop()

    Tests and single-threaded callers can skip start() and call drain().
    """

    def __init__(self, matcher: UriMatcher = PET_URI_MATCHER):
        self.matcher = matcher
        self._queue: queue.Queue = queue.Queue()
        self._subscriptions: list[Subscription] = []
        # Reentrant: a finalizer may remove a subscription while the lock is held
        self._lock = threading.RLock()
        self._thread: threading.Thread | None = None

    def _address(self, address: Address | str) -> Address:
        if isinstance(address, str):
            return self.matcher.resolve(address)
        return address

    def notify(self, address: Address | str) -> None:
        """
        Publish a change on an address. Never blocks on observers.

        Raises:
            UnrecognizedAddress: If given a URI string that does not resolve
        """
        resolved = self._address(address)
        self._queue.put(resolved)
        metrics.increment_counter(
            metrics.change_notifications_total,
            shape="item" if isinstance(resolved, ItemAddress) else "collection",
        )

    def subscribe(
        self,
        address: Address | str,
        callback: ChangeCallback,
        notify_for_descendants: bool = True,
    ) -> Subscription:
        """
        Register a callback for changes on an address.

        Args:
            address: Address or content URI to observe
            callback: Called with the changed Address
            notify_for_descendants: For a collection address, also observe
                                    changes on individual items

        Returns:
            Subscription; call cancel() to stop observing
        """
        subscription = Subscription(
            self, self._address(address), callback=callback,
            notify_for_descendants=notify_for_descendants,
        )
        with self._lock:
            self._subscriptions.append(subscription)
        return subscription

    def register(self, address: Address | str, result_set) -> Subscription:
        """
        Register a query result for invalidation on changes to its address.

        The result set is held weakly. Its subscription is removed as soon
        as it is garbage collected, whether or not it was closed.
        """
        subscription = Subscription(
            self, self._address(address),
            weak_method=weakref.WeakMethod(result_set.on_change),
        )
        with self._lock:
            self._subscriptions.append(subscription)
        subscription._finalizer = weakref.finalize(result_set, self._remove, subscription)
        return subscription

    def _remove(self, subscription: Subscription) -> None:
        with self._lock:
            if subscription in self._subscriptions:
                self._subscriptions.remove(subscription)

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscriptions)

    def _deliver(self, changed: Address) -> None:
        with self._lock:
            subscriptions = list(self._subscriptions)

        for subscription in subscriptions:
            if not subscription.active or not subscription.matches(changed):
                continue
            callback = subscription.callback()
            if callback is None:
                self._remove(subscription)
                continue
            try:
                callback(changed)
            except Exception:
                # One failing observer must not starve the others
                metrics.increment_counter(metrics.observer_errors_total)
                logger.exception("Change observer raised", extra={"uri": changed.uri})

    def drain(self) -> int:
        """
        Deliver every pending notification on the calling thread.

        Returns:
            Number of notifications delivered
        """
        delivered = 0
        while True:
            try:
                item = self._queue.get_nowait()
            except queue.Empty:
                return delivered
            if item is _STOP:
                continue
            self._deliver(item)
            delivered += 1

    def start(self) -> "ChangeBus":
        """Start delivering notifications on a daemon thread."""
        if self._thread is None or not self._thread.is_alive():
            self._thread = threading.Thread(
                target=self._run, name="pet-provider-change-bus", daemon=True
            )
            self._thread.start()
        return self

    def stop(self, timeout: float | None = 5.0) -> None:
        """Deliver what is queued, then stop the dispatcher thread."""
        if self._thread is not None:
            self._queue.put(_STOP)
            self._thread.join(timeout)
            self._thread = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def _run(self) -> None:
        while True:
            item = self._queue.get()
            if item is _STOP:
                return
            self._deliver(item)

    def __enter__(self):
        return self.start()

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.stop()
        return False
