"""Unit tests for inventory entities."""

from datetime import UTC, datetime

import pytest
from pydantic import ValidationError

from src.core.entities import (
    COMMON_AMPERAGES,
    SUPPORTED_BRANDS,
    Battery,
    Brand,
    MovementType,
    StockMovement,
)


class TestBrand:
    def test_supported_brands(self):
        assert [b.value for b in SUPPORTED_BRANDS] == [
            "Eloforte",
            "Pioneiro",
            "Heliar",
            "Moura",
            "Outros",
        ]

    def test_unknown_brand_rejected(self):
        with pytest.raises(ValidationError):
            Battery(brand="Acme", amperage=60)

    def test_common_amperages_sorted(self):
        assert COMMON_AMPERAGES == sorted(COMMON_AMPERAGES)
        assert 60 in COMMON_AMPERAGES


class TestBattery:
    def test_defaults(self):
        battery = Battery(brand=Brand.MOURA, amperage=60)
        assert battery.id
        assert battery.quantity == 0
        assert battery.min_stock == 0
        assert battery.price is None
        assert battery.alert_enabled is True

    def test_label(self):
        assert Battery(brand=Brand.HELIAR, amperage=45).label == "Heliar 45Ah"

    @pytest.mark.parametrize(
        "quantity,min_stock,alert,expected",
        [
            (2, 2, True, True),
            (1, 2, True, True),
            (3, 2, True, False),
            (0, 0, True, True),
            (0, 5, False, False),
        ],
    )
    def test_is_low_stock(self, quantity, min_stock, alert, expected):
        battery = Battery(
            brand=Brand.MOURA,
            amperage=60,
            quantity=quantity,
            min_stock=min_stock,
            alert_enabled=alert,
        )
        assert battery.is_low_stock is expected

    def test_stock_value(self):
        assert Battery(brand=Brand.MOURA, amperage=60, quantity=3, price=450.0).stock_value == 1350.0
        assert Battery(brand=Brand.MOURA, amperage=60, quantity=3).stock_value == 0

    def test_accepts_camel_case_and_backfills_alert(self):
        battery = Battery.model_validate(
            {"id": "x", "brand": "Moura", "amperage": 60, "minStock": 4, "alertEnabled": None}
        )
        assert battery.min_stock == 4
        assert battery.alert_enabled is True

    def test_dumps_camel_case(self):
        data = Battery(id="x", brand=Brand.MOURA, amperage=60).model_dump(by_alias=True)
        assert "minStock" in data
        assert "alertEnabled" in data

    def test_to_stock_line(self):
        line = Battery(brand=Brand.MOURA, amperage=60, quantity=1, min_stock=2).to_stock_line()
        assert (line.brand, line.amperage, line.quantity, line.min_stock) == (Brand.MOURA, 60, 1, 2)


class TestStockMovement:
    def test_timestamp_truncated_to_ms(self):
        movement = StockMovement(
            battery_id="b", brand=Brand.MOURA, amperage=60, type=MovementType.IN, quantity_delta=1
        )
        assert movement.timestamp.microsecond % 1000 == 0
        assert movement.timestamp.tzinfo is not None

    def test_json_timestamp_is_epoch_ms(self):
        movement = StockMovement(
            id="m",
            battery_id="b",
            brand=Brand.MOURA,
            amperage=60,
            type=MovementType.SALE,
            quantity_delta=-1,
            timestamp=datetime(2024, 3, 1, 9, 0, 0, 123000, tzinfo=UTC),
        )
        data = movement.model_dump(mode="json", by_alias=True)
        assert data["timestamp"] == 1709283600123
        assert data["quantityDelta"] == -1
        assert data["type"] == "SALE"

    def test_frozen(self):
        movement = StockMovement(
            battery_id="b", brand=Brand.MOURA, amperage=60, type=MovementType.IN, quantity_delta=1
        )
        with pytest.raises(ValidationError):
            movement.quantity_delta = 5
