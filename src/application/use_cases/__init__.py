"""Application use cases."""

from src.application.use_cases.generate_stock_analysis import (
    EMPTY_INVENTORY_MESSAGE,
    GenerateStockAnalysisUseCase,
)
from src.application.use_cases.sell_battery import SellBatteryUseCase

__all__ = [
    "GenerateStockAnalysisUseCase",
    "EMPTY_INVENTORY_MESSAGE",
    "SellBatteryUseCase",
]
