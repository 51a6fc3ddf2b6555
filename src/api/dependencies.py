"""
Dependency injection container for FastAPI.

Provides service instances to route handlers.
"""

from functools import lru_cache

from fastapi import Depends

from src.application.ledger_session import LedgerSession
from src.application.services import get_ledger_session
from src.application.use_cases import GenerateStockAnalysisUseCase, SellBatteryUseCase
from src.config import Settings, get_settings
from src.core.interfaces import ILLMProvider
from src.infrastructure.llm import get_llm_provider

# Reused while the session stays the same, so concurrent requests share one analysis lock
_analysis_use_case: GenerateStockAnalysisUseCase | None = None


@lru_cache
def get_app_settings() -> Settings:
    """Get cached application settings."""
    return get_settings()


# Session dependency
async def get_session() -> LedgerSession:
    """Get the loaded ledger session."""
    return await get_ledger_session()


# Use case dependencies
def get_sell_battery_use_case(
    session: LedgerSession = Depends(get_session),
) -> SellBatteryUseCase:
    """Get sell battery use case."""
    return SellBatteryUseCase(session)


def get_stock_analysis_use_case(
    session: LedgerSession = Depends(get_session),
) -> GenerateStockAnalysisUseCase:
    """Get stock analysis use case (one per session)."""
    global _analysis_use_case
    if _analysis_use_case is None or _analysis_use_case.session is not session:
        _analysis_use_case = GenerateStockAnalysisUseCase(session)
    return _analysis_use_case


# LLM dependency
def get_llm() -> ILLMProvider:
    """Get LLM provider."""
    return get_llm_provider()
