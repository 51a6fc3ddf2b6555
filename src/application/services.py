"""
Service factory functions for dependency injection.

This module provides factory functions that wire infrastructure
implementations to core services. Use cases should import from here.

Clean Architecture: Application layer orchestrates DI, not core layer.
"""

from typing import TYPE_CHECKING

from src.application.ledger_session import LedgerSession
from src.core.services import StockAnalysisService

if TYPE_CHECKING:
    from src.core.interfaces import IKeyValueStore, ILLMProvider


# Singleton service instances
_ledger_session: LedgerSession | None = None
_stock_analysis_service: StockAnalysisService | None = None


async def get_ledger_session(store: "IKeyValueStore | None" = None) -> LedgerSession:
    """
    Get or create the loaded LedgerSession.

    The first call reads the whole ledger from the configured store.

    Args:
        store: Optional key-value store override (not cached)

    Returns:
        LedgerSession with its engine loaded
    """
    global _ledger_session

    if _ledger_session is not None and store is None:
        return _ledger_session

    # Lazy import infrastructure to avoid circular imports
    from src.infrastructure.storage import get_key_value_store

    session = LedgerSession(store or await get_key_value_store())
    await session.load()

    if store is None:
        _ledger_session = session

    return session


def get_stock_analysis_service(
    llm_provider: "ILLMProvider | None" = None,
) -> StockAnalysisService:
    """
    Get or create StockAnalysisService instance.

    Args:
        llm_provider: Optional LLM provider override (not cached)

    Returns:
        Configured StockAnalysisService
    """
    global _stock_analysis_service

    if _stock_analysis_service is not None and llm_provider is None:
        return _stock_analysis_service

    # Lazy import infrastructure
    from src.infrastructure.llm import get_llm_provider

    service = StockAnalysisService(llm_provider or get_llm_provider())

    if llm_provider is None:
        _stock_analysis_service = service

    return service


def reset_services() -> None:
    """Reset all singleton services (for testing)."""
    global _ledger_session, _stock_analysis_service

    _ledger_session = None
    _stock_analysis_service = None
