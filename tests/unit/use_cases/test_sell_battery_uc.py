"""Unit tests for SellBatteryUseCase."""

import pytest

from src.application.dto.requests import SellBatteryRequest
from src.application.ledger_session import LedgerSession
from src.application.use_cases.sell_battery import SellBatteryUseCase
from src.core.entities import Brand, MovementType, TransactionType
from src.core.exceptions import BatteryNotFoundError


@pytest.fixture
async def battery(session: LedgerSession):
    return await session.add_battery(Brand.MOURA, 60, quantity=5, min_stock=2, price=450.0)


class TestSellBatteryUseCase:
    async def test_explicit_final_price(self, session: LedgerSession, battery):
        use_case = SellBatteryUseCase(session)

        result = await use_case.execute(
            SellBatteryRequest(battery_id=battery.id, qty=1, final_price=420.0)
        )

        assert result.battery.quantity == 4
        assert result.transaction.amount == 420.0
        assert result.transaction.type == TransactionType.SALE
        assert result.movement.type == MovementType.SALE
        assert session.engine.cash_balance == 420.0

    async def test_price_defaults_to_list_price_times_qty(self, session: LedgerSession, battery):
        result = await SellBatteryUseCase(session).execute(
            SellBatteryRequest(battery_id=battery.id, qty=2)
        )
        assert result.transaction.amount == 900.0
        assert result.movement.quantity_delta == -2

    async def test_discount_and_unit_override(self, session: LedgerSession, battery):
        use_case = SellBatteryUseCase(session)

        discounted = await use_case.execute(
            SellBatteryRequest(battery_id=battery.id, discount=50.0)
        )
        overridden = await use_case.execute(
            SellBatteryRequest(battery_id=battery.id, qty=2, unit_price=400.0, discount=10.0)
        )

        assert discounted.transaction.amount == 400.0
        assert overridden.transaction.amount == 780.0
        assert session.engine.cash_balance == 1180.0

    async def test_unknown_battery_raises(self, session: LedgerSession):
        with pytest.raises(BatteryNotFoundError) as exc_info:
            await SellBatteryUseCase(session).execute(SellBatteryRequest(battery_id="missing"))

        assert exc_info.value.code == "BATTERY_NOT_FOUND"
        assert session.engine.transactions == ()

    async def test_sale_is_persisted(self, session: LedgerSession, battery):
        await SellBatteryUseCase(session).execute(SellBatteryRequest(battery_id=battery.id))

        assert await session.store.get("cash_balance") == "450.0"

    async def test_to_response(self, session: LedgerSession, battery):
        use_case = SellBatteryUseCase(session)
        result = await use_case.execute(SellBatteryRequest(battery_id=battery.id))

        response = use_case.to_response(result)

        assert response.battery.id == battery.id
        assert response.battery.quantity == 4
        assert response.movement.quantity_delta == -1
        assert response.transaction.description == "Venda: Moura 60Ah"
        assert response.cash_balance == 450.0
