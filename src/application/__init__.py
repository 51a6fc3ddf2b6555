"""
Application layer - Ledger session, use cases, DTOs, and service factories.

This layer orchestrates business logic by:
1. Keeping the store in step with the ledger engine (LedgerSession)
2. Implementing use cases that coordinate core services
3. Defining request/response DTOs for API contracts
4. Providing factory functions for dependency injection
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
from src.application.ledger_session import LedgerSession
from src.application.services import (
    get_ledger_session,
    get_stock_analysis_service,
    reset_services,
)
from src.application.use_cases import GenerateStockAnalysisUseCase, SellBatteryUseCase

__all__ = [
    # Session
    "LedgerSession",
    # Request DTOs
    "CreateBatteryRequest",
    "AdjustQuantityRequest",
    "SellBatteryRequest",
    "ScrapPurchaseRequest",
    "ScrapAdjustRequest",
    "ScrapPriceRequest",
    # Response DTOs
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
    # Use Cases
    "GenerateStockAnalysisUseCase",
    "SellBatteryUseCase",
    # Service factories
    "get_ledger_session",
    "get_stock_analysis_service",
    "reset_services",
]
