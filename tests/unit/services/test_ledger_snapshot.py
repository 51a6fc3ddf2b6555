"""Tests for the ledger snapshot codec."""

import json
from datetime import UTC, datetime

import pytest

from src.core.entities import Brand, MovementType, TransactionType
from src.core.exceptions import SnapshotDecodeError
from src.core.services import LedgerEngine, LedgerKey, decode_snapshot, encode_snapshot


class TestRoundTrip:
    def test_full_ledger_survives_encode_decode(self, stocked_engine: LedgerEngine):
        battery = stocked_engine.inventory[0]
        stocked_engine.sell_battery(battery.id, 430.0)
        stocked_engine.set_scrap_price(4.2)
        stocked_engine.buy_scrap(21.0, 5)
        original = stocked_engine.snapshot()

        decoded = decode_snapshot(encode_snapshot(original))

        assert decoded == original
        rebuilt = LedgerEngine.from_snapshot(decoded)
        assert rebuilt.stats() == stocked_engine.stats()

    def test_encodes_only_requested_keys(self, stocked_engine: LedgerEngine):
        values = encode_snapshot(stocked_engine.snapshot(), {LedgerKey.SCRAP_PRICE})
        assert list(values) == ["scrap_price"]

    def test_stored_form_uses_camel_case_and_epoch_ms(self, stocked_engine: LedgerEngine):
        values = encode_snapshot(stocked_engine.snapshot())

        battery = json.loads(values["battery_inventory"])[0]
        assert battery["minStock"] == 2
        assert battery["alertEnabled"] is True
        movement = json.loads(values["battery_movements"])[0]
        assert movement["batteryId"] == "id-1"
        assert movement["quantityDelta"] == 3
        assert movement["timestamp"] == int(datetime(2024, 3, 1, 9, 0, tzinfo=UTC).timestamp() * 1000)

    def test_transactions_omit_absent_optionals(self, engine: LedgerEngine):
        engine.buy_scrap(10.0, 2.0)
        tx = json.loads(encode_snapshot(engine.snapshot())["cash_transactions"])[0]
        assert "relatedBatteryId" not in tx
        assert tx["scrapWeight"] == 2.0
        assert tx["amount"] == -10.0


class TestDecoding:
    def test_empty_store_gives_empty_ledger(self):
        snapshot = decode_snapshot({}, default_scrap_price=4.20)

        assert snapshot.inventory == []
        assert snapshot.movements == []
        assert snapshot.transactions == []
        assert snapshot.cash_balance is None
        assert snapshot.scrap.weight == 0.0
        assert snapshot.scrap.price_per_kg == 4.20

    def test_none_values_count_as_missing(self):
        raw = {key.value: None for key in LedgerKey}
        snapshot = decode_snapshot(raw, default_scrap_price=4.20)
        assert snapshot.scrap.price_per_kg == 4.20
        assert snapshot.inventory == []

    def test_stored_price_wins_over_default(self):
        snapshot = decode_snapshot({"scrap_price": "5.5"}, default_scrap_price=4.20)
        assert snapshot.scrap.price_per_kg == 5.5

    def test_legacy_battery_without_alert_flag(self):
        raw = {
            "battery_inventory": json.dumps(
                [
                    {"id": "a", "brand": "Moura", "amperage": 60, "quantity": 1, "minStock": 3},
                    {"id": "b", "brand": "Heliar", "amperage": 45, "quantity": 1, "minStock": 3,
                     "alertEnabled": None},
                ]
            )
        }
        inventory = decode_snapshot(raw).inventory
        assert [b.alert_enabled for b in inventory] == [True, True]
        assert inventory[0].price is None
        assert inventory[0].is_low_stock is True

    def test_movement_timestamps_from_epoch_ms(self):
        raw = {
            "battery_movements": json.dumps(
                [
                    {
                        "id": "m1",
                        "batteryId": "a",
                        "brand": "Moura",
                        "amperage": 60,
                        "type": "SALE",
                        "quantityDelta": -1,
                        "timestamp": 1709283600123,
                    }
                ]
            )
        }
        movement = decode_snapshot(raw).movements[0]
        assert movement.type == MovementType.SALE
        assert movement.brand == Brand.MOURA
        assert movement.timestamp == datetime(2024, 3, 1, 9, 0, 0, 123000, tzinfo=UTC)

    def test_scalars_parse_and_clamp(self):
        raw = {
            "cash_transactions": json.dumps(
                [{"id": "t1", "type": "SALE", "amount": 100, "description": "Venda", "timestamp": 0}]
            ),
            "cash_balance": " 100 ",
            "scrap_weight": "-3",
        }
        snapshot = decode_snapshot(raw)
        assert snapshot.transactions[0].type == TransactionType.SALE
        assert snapshot.cash_balance == 100.0
        assert snapshot.scrap.weight == 0.0

    @pytest.mark.parametrize(
        "key,value",
        [
            ("battery_inventory", "{not json"),
            ("battery_inventory", json.dumps([{"id": "x", "brand": "Acme", "amperage": 60}])),
            ("battery_movements", json.dumps({"id": "x"})),
            ("cash_transactions", json.dumps([{"type": "REFUND", "amount": 1}])),
            ("cash_balance", "ten"),
            ("scrap_price", "4,20"),
            ("cash_balance", "nan"),
            ("scrap_weight", "inf"),
            ("cash_transactions", '[{"type": "SALE", "amount": NaN}]'),
        ],
    )
    def test_malformed_values_raise(self, key, value):
        with pytest.raises(SnapshotDecodeError) as exc_info:
            decode_snapshot({key: value})

        assert exc_info.value.code == "SNAPSHOT_DECODE_ERROR"
        assert exc_info.value.details["key"] == key
