"""SQLite storage implementations."""

from src.infrastructure.storage.sqlite.connection import (
    ConnectionPool,
    close_pool,
    get_pool,
)
from src.infrastructure.storage.sqlite.kv_store import SQLiteKeyValueStore

# Singleton instance
_kv_store: SQLiteKeyValueStore | None = None


async def get_kv_store() -> SQLiteKeyValueStore:
    """Get singleton key-value store instance."""
    global _kv_store
    if _kv_store is None:
        _kv_store = SQLiteKeyValueStore()
    return _kv_store


def reset_kv_store() -> None:
    """Drop the singleton (for testing)."""
    global _kv_store
    _kv_store = None


__all__ = [
    # Connection
    "ConnectionPool",
    "get_pool",
    "close_pool",
    # Store
    "SQLiteKeyValueStore",
    "get_kv_store",
    "reset_kv_store",
]
