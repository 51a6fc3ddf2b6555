"""Core domain entities."""

from src.core.entities.cash import ScrapState, Transaction, TransactionType
from src.core.entities.inventory import (
    COMMON_AMPERAGES,
    SUPPORTED_BRANDS,
    Battery,
    Brand,
    MovementType,
    StockLine,
    StockMovement,
)
from src.core.entities.stats import InventoryStats

__all__ = [
    # Inventory entities
    "Battery",
    "Brand",
    "MovementType",
    "StockMovement",
    "StockLine",
    "SUPPORTED_BRANDS",
    "COMMON_AMPERAGES",
    # Cash entities
    "Transaction",
    "TransactionType",
    "ScrapState",
    # Derived
    "InventoryStats",
]
