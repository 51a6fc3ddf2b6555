"""
Core business logic services.

Layer-pure services that depend only on:
- src/core/entities/*
- src/core/interfaces/*
- src/core/exceptions.py

NO infrastructure imports. All dependencies injected via constructor.
"""

from src.core.services.formatting import format_currency, format_weight
from src.core.services.inventory_search import ALL_BRANDS, filter_inventory
from src.core.services.ledger_engine import LedgerEngine, SaleResult, final_sale_price
from src.core.services.ledger_snapshot import (
    LedgerKey,
    LedgerSnapshot,
    decode_snapshot,
    encode_snapshot,
)
from src.core.services.stock_analysis import StockAnalysis, StockAnalysisService

__all__ = [
    # Ledger
    "LedgerEngine",
    "SaleResult",
    "final_sale_price",
    # Snapshot codec
    "LedgerKey",
    "LedgerSnapshot",
    "encode_snapshot",
    "decode_snapshot",
    # Search
    "filter_inventory",
    "ALL_BRANDS",
    # Advisory
    "StockAnalysisService",
    "StockAnalysis",
    # Display
    "format_currency",
    "format_weight",
]
