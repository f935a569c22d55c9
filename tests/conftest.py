"""
Pytest configuration and fixtures for pet-provider tests

This module provides shared fixtures for unit and integration tests.
"""
from typing import Any, Generator, Sequence

import pytest

from pet_provider.notifications import ChangeBus
from pet_provider.provider import PetProvider
from pet_provider.store import BaseStore, SQLiteStore


# =======================
# PYTEST CONFIGURATION
# =======================

def pytest_configure(config):
    """Configure pytest with custom markers"""
    config.addinivalue_line(
        "markers", "unit: Unit tests that don't require external services"
    )
    config.addinivalue_line(
        "markers", "integration: Integration tests that require Docker containers"
    )


# =======================
# TEST DOUBLES
# =======================

class CountingStore(BaseStore):
    """Store wrapper that records every call made to the wrapped store."""

    def __init__(self, inner: BaseStore):
        self.inner = inner
        self.calls: list[str] = []

    def query(self, table, columns, selection, selection_args, sort_order):
        self.calls.append("query")
        return self.inner.query(table, columns, selection, selection_args, sort_order)

    def insert(self, table, values):
        self.calls.append("insert")
        return self.inner.insert(table, values)

    def update(self, table, values, selection, selection_args):
        self.calls.append("update")
        return self.inner.update(table, values, selection, selection_args)

    def delete(self, table, selection, selection_args):
        self.calls.append("delete")
        return self.inner.delete(table, selection, selection_args)

    def close(self):
        self.inner.close()

    def row_count(self) -> int:
        return len(list(self.inner.query("pets", None, None, None, None)))


class RefusingInsertStore(CountingStore):
    """Store whose inserts always fail the way a database refusal does."""

    def insert(self, table, values):
        self.calls.append("insert")
        return None


class RecordingNotifier:
    """Notifier that keeps every published address instead of delivering it."""

    class _Registration:
        def __init__(self, notifier, address):
            self.notifier = notifier
            self.address = address

        def cancel(self):
            self.notifier.registrations.remove(self)

    def __init__(self):
        self.notified: list[Any] = []
        self.registrations: list[RecordingNotifier._Registration] = []

    def notify(self, address):
        self.notified.append(address)

    def register(self, address, result_set):
        registration = self._Registration(self, address)
        self.registrations.append(registration)
        return registration

    @property
    def notified_uris(self) -> Sequence[str]:
        return [address.uri for address in self.notified]


# =======================
# STORE AND PROVIDER FIXTURES
# =======================

@pytest.fixture
def sqlite_store() -> Generator[SQLiteStore, None, None]:
    """In-memory SQLite store, closed after the test"""
    store = SQLiteStore(":memory:")
    yield store
    store.close()


@pytest.fixture
def counting_store(sqlite_store) -> CountingStore:
    return CountingStore(sqlite_store)


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def provider(counting_store, notifier) -> Generator[PetProvider, None, None]:
    """Provider over an in-memory store with a recording notifier"""
    provider = PetProvider(store_factory=lambda: counting_store, notifier=notifier)
    provider.on_create()
    yield provider
    provider.shutdown()


@pytest.fixture
def refusing_provider(sqlite_store, notifier) -> Generator[PetProvider, None, None]:
    """Provider whose store refuses every insert"""
    store = RefusingInsertStore(sqlite_store)
    provider = PetProvider(store_factory=lambda: store, notifier=notifier)
    provider.on_create()
    yield provider
    provider.shutdown()


@pytest.fixture
def bus() -> Generator[ChangeBus, None, None]:
    """Change bus without a dispatcher thread; tests call drain()"""
    bus = ChangeBus()
    yield bus
    bus.stop()


@pytest.fixture
def bus_provider(sqlite_store, bus) -> Generator[PetProvider, None, None]:
    """Provider over an in-memory store publishing to a real change bus"""
    provider = PetProvider(store_factory=lambda: sqlite_store, notifier=bus)
    provider.on_create()
    yield provider
    provider.shutdown()


# =======================
# DATABASE FIXTURES (Testcontainers)
# =======================

@pytest.fixture(scope="session")
def postgres_container():
    """
    Start PostgreSQL container for integration tests

    Skips the requesting tests when Docker is not available.
    """
    try:
        from testcontainers.postgres import PostgresContainer

        container = PostgresContainer(
            image="postgres:16.2-alpine",
            username="test_pets",
            password="test_password",
            dbname="test_pets",
        )
        container.start()
    except Exception as e:
        pytest.skip(f"PostgreSQL container unavailable: {e}")

    yield container

    container.stop()


@pytest.fixture
def pg_pool(postgres_container):
    """Connection pool on the test container, pets table dropped after use"""
    from pet_provider.store import DatabaseConnectionPool

    pool = DatabaseConnectionPool(
        host=postgres_container.get_container_host_ip(),
        port=int(postgres_container.get_exposed_port(5432)),
        database="test_pets",
        user="test_pets",
        password="test_password",
    )
    yield pool

    if pool.is_open:
        pool.execute_command("DROP TABLE IF EXISTS pets")
        pool.execute_command("DROP TABLE IF EXISTS pet_provider_metadata")
    pool.close()
