"""Tests for the in-memory key-value store and backend selection."""

from src.infrastructure.storage import InMemoryKeyValueStore, get_key_value_store


class TestInMemoryKeyValueStore:
    async def test_basic_operations(self):
        store = InMemoryKeyValueStore({"cash_balance": "10.0"})

        assert await store.get("cash_balance") == "10.0"
        await store.set("scrap_weight", "2.5")
        assert await store.keys() == ["cash_balance", "scrap_weight"]
        assert await store.delete("cash_balance") is True
        assert await store.delete("cash_balance") is False
        assert store.dump() == {"scrap_weight": "2.5"}

    async def test_default_bulk_helpers(self):
        store = InMemoryKeyValueStore()
        await store.set_many({"a": "1", "b": "2"})
        assert await store.get_many(["a", "z"]) == {"a": "1", "z": None}

    async def test_initial_data_is_copied(self):
        initial = {"a": "1"}
        store = InMemoryKeyValueStore(initial)
        await store.set("a", "2")
        assert initial == {"a": "1"}


class TestGetKeyValueStore:
    async def test_memory_backend_from_settings(self):
        # Tests run with STORAGE_BACKEND=memory
        store = await get_key_value_store()
        assert isinstance(store, InMemoryKeyValueStore)
