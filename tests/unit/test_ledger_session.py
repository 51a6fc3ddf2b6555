"""Tests for LedgerSession persistence."""

import json
from unittest.mock import AsyncMock

import pytest

from src.application.ledger_session import LedgerSession
from src.core.entities import Brand
from src.core.exceptions import DatabaseError, SnapshotDecodeError
from src.infrastructure.storage.memory_store import InMemoryKeyValueStore


class TestLoad:
    async def test_empty_store_starts_empty(self, session: LedgerSession):
        assert session.is_loaded
        assert session.engine.inventory == []
        assert session.engine.scrap.price_per_kg == 4.20
        assert session.engine.cash_balance == 0.0

    def test_engine_before_load_raises(self, memory_store: InMemoryKeyValueStore):
        session = LedgerSession(memory_store, default_scrap_price=4.20)
        assert session.is_loaded is False
        with pytest.raises(RuntimeError):
            session.engine

    async def test_default_price_from_settings(self, memory_store: InMemoryKeyValueStore):
        session = LedgerSession(memory_store)
        await session.load()
        assert session.engine.scrap.price_per_kg == 4.20

    async def test_malformed_store_raises(self):
        store = InMemoryKeyValueStore({"battery_inventory": "not json"})
        with pytest.raises(SnapshotDecodeError):
            await LedgerSession(store).load()


class TestFlush:
    async def test_each_operation_writes_its_keys(
        self, session: LedgerSession, memory_store: InMemoryKeyValueStore
    ):
        await session.add_battery(Brand.MOURA, 60, quantity=3, price=450.0)
        assert sorted(memory_store.dump()) == ["battery_inventory", "battery_movements"]

        await session.set_scrap_price(5.0)
        assert memory_store.dump()["scrap_price"] == "5.0"
        assert "cash_balance" not in memory_store.dump()

    async def test_only_dirty_keys_are_written(self, memory_store: InMemoryKeyValueStore):
        session = LedgerSession(memory_store, default_scrap_price=4.20)
        await session.load()
        battery = await session.add_battery(Brand.MOURA, 60, quantity=3)

        memory_store.set_many = AsyncMock(wraps=memory_store.set_many)
        await session.toggle_alert(battery.id)

        memory_store.set_many.assert_awaited_once()
        written = memory_store.set_many.await_args.args[0]
        assert list(written) == ["battery_inventory"]

    async def test_failed_write_is_retried_next_flush(self, memory_store: InMemoryKeyValueStore):
        session = LedgerSession(memory_store, default_scrap_price=4.20)
        await session.load()
        write = memory_store.set_many
        memory_store.set_many = AsyncMock(side_effect=DatabaseError("set_many", "disk full"))

        with pytest.raises(DatabaseError):
            await session.buy_scrap(42.0, 10.0)
        assert memory_store.dump() == {}

        memory_store.set_many = write
        written = await session.flush()

        assert written == ["cash_balance", "cash_transactions", "scrap_weight"]
        assert float(memory_store.dump()["scrap_weight"]) == 10.0
        assert float(memory_store.dump()["cash_balance"]) == -42.0

    async def test_noop_writes_nothing(self, session: LedgerSession):
        await session.adjust_quantity("missing", 1)
        assert await session.flush() == []
        assert await session.store.keys() == []

    async def test_sale_writes_all_four_keys(
        self, session: LedgerSession, memory_store: InMemoryKeyValueStore
    ):
        battery = await session.add_battery(Brand.HELIAR, 45, quantity=2, price=380.0)
        await session.sell_battery(battery.id, 380.0)

        stored = memory_store.dump()
        assert json.loads(stored["battery_inventory"])[0]["quantity"] == 1
        assert float(stored["cash_balance"]) == 380.0
        assert len(json.loads(stored["cash_transactions"])) == 1
        assert [m["type"] for m in json.loads(stored["battery_movements"])] == ["CREATE", "SALE"]

    async def test_save_all_writes_every_key(
        self, session: LedgerSession, memory_store: InMemoryKeyValueStore
    ):
        await session.save_all()
        assert len(memory_store.dump()) == 6
        assert memory_store.dump()["cash_balance"] == "0.0"


class TestReload:
    async def test_state_survives_reload(self, memory_store: InMemoryKeyValueStore):
        first = LedgerSession(memory_store, default_scrap_price=4.20)
        await first.load()
        battery = await first.add_battery(Brand.MOURA, 60, quantity=5, min_stock=2, price=450.0)
        await first.sell_battery(battery.id, 450.0, 2)
        await first.buy_scrap(42.0, 10)
        await first.adjust_scrap(-2.5)
        await first.toggle_alert(battery.id)

        second = LedgerSession(memory_store)
        await second.load()

        assert second.stats() == first.stats()
        assert second.engine.inventory == first.engine.inventory
        assert second.engine.movements == first.engine.movements
        assert second.engine.transactions == first.engine.transactions
        assert second.engine.scrap.price_per_kg == 4.20

    async def test_reload_rebases_drifted_balance(self, memory_store: InMemoryKeyValueStore):
        first = LedgerSession(memory_store, default_scrap_price=4.20)
        await first.load()
        await first.buy_scrap(10.0, 1.0)
        await memory_store.set("cash_balance", "999.0")

        second = LedgerSession(memory_store)
        await second.load()

        assert second.engine.cash_balance == -10.0


class TestImportExport:
    async def test_export_then_import_into_new_store(self, session: LedgerSession):
        battery = await session.add_battery(Brand.MOURA, 60, quantity=4, price=450.0)
        await session.sell_battery(battery.id, 450.0)
        exported = session.export_raw()

        target = LedgerSession(InMemoryKeyValueStore(), default_scrap_price=4.20)
        await target.load()
        await target.import_raw(exported)

        assert target.stats() == session.stats()
        assert await target.store.keys() == sorted(exported)

    async def test_import_removes_keys_absent_from_input(
        self, session: LedgerSession, memory_store: InMemoryKeyValueStore
    ):
        await session.add_battery(Brand.MOURA, 60, quantity=4)
        await session.buy_scrap(5.0, 1.0)

        await session.import_raw({"scrap_price": "3.0", "extra": "ignored"})

        assert memory_store.dump() == {"scrap_price": "3.0"}
        assert session.engine.inventory == []
        assert session.engine.cash_balance == 0.0

    async def test_invalid_import_leaves_store_untouched(
        self, session: LedgerSession, memory_store: InMemoryKeyValueStore
    ):
        await session.add_battery(Brand.MOURA, 60, quantity=4)
        before = memory_store.dump()

        with pytest.raises(SnapshotDecodeError):
            await session.import_raw({"battery_inventory": "[{]"})

        assert memory_store.dump() == before
        assert len(session.engine.inventory) == 1
