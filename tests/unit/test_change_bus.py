"""
Unit tests for the change notification bus and result set invalidation.
"""

import gc
import threading

import pytest

from pet_provider.contract import CONTENT_URI
from pet_provider.core.addressing import CollectionAddress, ItemAddress
from pet_provider.core.errors import UnrecognizedAddress
from pet_provider.core.models import Gender
from pet_provider.notifications import ChangeBus

ITEM_1 = f"{CONTENT_URI}/1"
ITEM_2 = f"{CONTENT_URI}/2"


class TestChangeBus:
    """Tests for ChangeBus delivery rules"""

    def test_notify_is_deferred_until_drain(self, bus):
        seen = []
        bus.subscribe(CONTENT_URI, seen.append)

        bus.notify(CONTENT_URI)
        assert seen == []

        assert bus.drain() == 1
        assert seen == [CollectionAddress(CONTENT_URI)]

    def test_delivery_order_is_fifo(self, bus):
        seen = []
        bus.subscribe(CONTENT_URI, lambda a: seen.append(a.uri))

        for uri in (ITEM_1, CONTENT_URI, ITEM_2):
            bus.notify(uri)
        bus.drain()

        assert seen == [ITEM_1, CONTENT_URI, ITEM_2]

    def test_collection_observer_without_descendants(self, bus):
        seen = []
        bus.subscribe(CONTENT_URI, seen.append, notify_for_descendants=False)

        bus.notify(ITEM_1)
        bus.notify(CONTENT_URI)
        bus.drain()

        assert seen == [CollectionAddress(CONTENT_URI)]

    def test_item_observer(self, bus):
        seen = []
        bus.subscribe(ITEM_1, lambda a: seen.append(a.uri))

        bus.notify(ITEM_2)
        bus.notify(ITEM_1)
        bus.notify(CONTENT_URI)
        bus.drain()

        assert seen == [ITEM_1, CONTENT_URI]

    def test_cancelled_subscription_gets_nothing(self, bus):
        seen = []
        subscription = bus.subscribe(CONTENT_URI, seen.append)
        subscription.cancel()

        bus.notify(CONTENT_URI)
        bus.drain()

        assert seen == []
        assert bus.subscriber_count == 0

    def test_failing_observer_does_not_block_others(self, bus, caplog):
        seen = []

        def broken(address):
            raise RuntimeError("observer bug")

        bus.subscribe(CONTENT_URI, broken)
        bus.subscribe(CONTENT_URI, seen.append)

        with caplog.at_level("ERROR", logger="pet-provider"):
            bus.notify(CONTENT_URI)
            bus.drain()

        assert len(seen) == 1
        assert any("Change observer raised" in r.getMessage() for r in caplog.records)

    def test_unknown_uri_rejected(self, bus):
        with pytest.raises(UnrecognizedAddress):
            bus.notify("content://elsewhere/pets")
        with pytest.raises(UnrecognizedAddress):
            bus.subscribe("content://elsewhere/pets", print)

    def test_dispatcher_thread_delivers(self):
        delivered = threading.Event()
        seen = []

        def observer(address):
            seen.append(address)
            delivered.set()

        with ChangeBus() as bus:
            assert bus.running
            bus.subscribe(CONTENT_URI, observer)
            bus.notify(ItemAddress(ITEM_1, 1))
            assert delivered.wait(timeout=5)

        assert not bus.running
        assert seen == [ItemAddress(ITEM_1, 1)]

    def test_stop_delivers_pending(self):
        seen = []
        bus = ChangeBus()
        bus.subscribe(CONTENT_URI, seen.append)
        bus.start()
        for _ in range(20):
            bus.notify(CONTENT_URI)
        bus.stop()

        assert len(seen) == 20


class TestResultSetInvalidation:
    """Tests for query results observing their URI"""

    def test_mutation_marks_result_stale(self, bus_provider, bus):
        bus_provider.insert(CONTENT_URI, {"name": "Rex", "gender": Gender.MALE})
        bus.drain()

        result = bus_provider.query(CONTENT_URI)
        refreshed = []
        result.add_listener(refreshed.append)
        assert not result.is_stale

        bus_provider.update(f"{CONTENT_URI}/1", {"weight": 3})
        bus.drain()

        assert result.is_stale
        assert refreshed == [result]
        result.close()

    def test_unrelated_item_change_leaves_result_fresh(self, bus_provider, bus):
        bus_provider.insert(CONTENT_URI, {"name": "Rex", "gender": Gender.MALE})
        bus_provider.insert(CONTENT_URI, {"name": "Luna", "gender": Gender.FEMALE})
        bus.drain()

        result = bus_provider.query(ITEM_1)
        bus_provider.delete(ITEM_2)
        bus.drain()

        assert not result.is_stale
        result.close()

    def test_closed_result_unregisters(self, bus_provider, bus):
        result = bus_provider.query(CONTENT_URI)
        assert bus.subscriber_count == 1

        result.close()
        assert result.closed
        assert bus.subscriber_count == 0
        assert result.fetchone() is None

    def test_collected_result_is_dropped(self, bus_provider, bus):
        bus_provider.query(CONTENT_URI)
        gc.collect()

        bus.notify(CONTENT_URI)
        bus.drain()

        assert bus.subscriber_count == 0

    def test_dropped_results_unregister_without_notifications(self, bus_provider, bus):
        """Read-only traffic must not accumulate subscriptions"""
        bus_provider.insert(CONTENT_URI, {"name": "Rex", "gender": Gender.MALE})
        bus.drain()

        for _ in range(200):
            bus_provider.query(f"{CONTENT_URI}/1")
        gc.collect()

        assert bus.subscriber_count == 0

    def test_open_result_stays_registered_until_closed(self, bus_provider, bus):
        result = bus_provider.query(CONTENT_URI)
        gc.collect()
        assert bus.subscriber_count == 1

        result.close()
        del result
        gc.collect()
        assert bus.subscriber_count == 0
