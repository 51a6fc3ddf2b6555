"""Derived ledger statistics."""

from pydantic import BaseModel


class InventoryStats(BaseModel):
    """Dashboard figures, recomputed on demand from the ledger."""

    total_units: int = 0
    low_stock_count: int = 0
    inventory_value: float = 0.0
    scrap_weight: float = 0.0
    scrap_value: float = 0.0
    cash_balance: float = 0.0
