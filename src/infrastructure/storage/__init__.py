"""Storage infrastructure implementations."""

from src.config import get_settings
from src.core.interfaces.key_value_store import IKeyValueStore
from src.infrastructure.storage.memory_store import InMemoryKeyValueStore
from src.infrastructure.storage.sqlite import (
    SQLiteKeyValueStore,
    close_pool,
    get_kv_store,
    get_pool,
)


async def get_key_value_store() -> IKeyValueStore:
    """Store for the configured backend (settings.storage.backend)."""
    if get_settings().storage.backend == "memory":
        return InMemoryKeyValueStore()
    return await get_kv_store()


__all__ = [
    "InMemoryKeyValueStore",
    "SQLiteKeyValueStore",
    "get_key_value_store",
    "get_kv_store",
    "get_pool",
    "close_pool",
]
