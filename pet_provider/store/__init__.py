"""
Backing stores for the pets table.

The provider talks to a store through the BaseStore contract; SQLiteStore
and PostgresStore are the two implementations.
"""

from pet_provider.config import GatewaySettings

from .base import BaseStore
from .connection import DatabaseConnectionPool
from .postgres_store import PostgresStore
from .sqlite_store import SQLiteStore


def create_store(settings: GatewaySettings) -> BaseStore:
    """
    Build the store selected by settings.backend.

    The store is not connected yet; it connects on first use.
    """
    if settings.backend == "postgres":
        pool = DatabaseConnectionPool(
            host=settings.db_host,
            port=settings.db_port,
            database=settings.db_name,
            user=settings.db_user,
            password=settings.db_password,
            min_size=settings.pool_min_size,
            max_size=settings.pool_max_size,
        )
        return PostgresStore(pool)
    return SQLiteStore(settings.sqlite_path)


__all__ = [
    "BaseStore",
    "DatabaseConnectionPool",
    "PostgresStore",
    "SQLiteStore",
    "create_store",
]
