"""Sell Battery Use Case: price the sale and record it in stock and cash."""

from src.application.dto.requests import SellBatteryRequest
from src.application.dto.responses import (
    BatteryResponse,
    SaleResponse,
    StockMovementResponse,
    TransactionResponse,
)
from src.application.ledger_session import LedgerSession
from src.config import get_logger
from src.core.exceptions import BatteryNotFoundError
from src.core.services.ledger_engine import SaleResult, final_sale_price

logger = get_logger(__name__)


class SellBatteryUseCase:
    """Record a sale; the total defaults to (list price - discount) * qty."""

    def __init__(self, session: LedgerSession):
        self._session = session

    async def execute(self, request: SellBatteryRequest) -> SaleResult:
        """Execute sale use case."""
        battery = self._session.engine.get_battery(request.battery_id)
        if battery is None:
            raise BatteryNotFoundError(request.battery_id)

        if request.final_price is not None:
            total = request.final_price
        else:
            total = final_sale_price(battery, request.unit_price, request.discount) * max(0, request.qty)

        result = await self._session.sell_battery(request.battery_id, total, request.qty)
        if result is None:
            # Deleted between the lookup and the sale
            raise BatteryNotFoundError(request.battery_id)

        logger.info(
            "sale_recorded",
            battery_id=request.battery_id,
            qty=request.qty,
            total=total,
        )
        return result

    def to_response(self, result: SaleResult) -> SaleResponse:
        """Convert result to API response."""
        return SaleResponse(
            battery=BatteryResponse.from_entity(result.battery),
            movement=StockMovementResponse.from_entity(result.movement),
            transaction=TransactionResponse.from_entity(result.transaction),
            cash_balance=self._session.engine.cash_balance,
        )
