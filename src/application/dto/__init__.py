"""Data Transfer Objects for API layer.

Request DTOs: Validate and parse incoming API requests.
Response DTOs: Structure and serialize API responses.

These are the ONLY contracts between API handlers and use cases.
"""

from src.application.dto.requests import (
    AdjustQuantityRequest,
    CreateBatteryRequest,
    ScrapAdjustRequest,
    ScrapPriceRequest,
    ScrapPurchaseRequest,
    SellBatteryRequest,
)
from src.application.dto.responses import (
    BatteryResponse,
    CashSummaryResponse,
    ErrorResponse,
    HealthResponse,
    InventoryListResponse,
    ProviderHealthResponse,
    SaleResponse,
    ScrapResponse,
    StatsResponse,
    StockAnalysisResponse,
    StockMovementResponse,
    TransactionResponse,
)

__all__ = [
    # Requests
    "CreateBatteryRequest",
    "AdjustQuantityRequest",
    "SellBatteryRequest",
    "ScrapPurchaseRequest",
    "ScrapAdjustRequest",
    "ScrapPriceRequest",
    # Responses
    "BatteryResponse",
    "InventoryListResponse",
    "StockMovementResponse",
    "TransactionResponse",
    "SaleResponse",
    "ScrapResponse",
    "CashSummaryResponse",
    "StatsResponse",
    "StockAnalysisResponse",
    "HealthResponse",
    "ProviderHealthResponse",
    "ErrorResponse",
]
