"""Generate Stock Analysis Use Case: restocking advice for the current inventory."""

import asyncio

from src.application.dto.responses import StockAnalysisResponse
from src.application.ledger_session import LedgerSession
from src.config import get_logger
from src.core.interfaces import ILLMProvider
from src.core.services.stock_analysis import StockAnalysis, StockAnalysisService

logger = get_logger(__name__)

EMPTY_INVENTORY_MESSAGE = "Nenhuma bateria cadastrada para analisar."


class GenerateStockAnalysisUseCase:
    """Send the inventory to the advisory service and return its report."""

    def __init__(
        self,
        session: LedgerSession,
        llm: ILLMProvider | None = None,
        service: StockAnalysisService | None = None,
    ):
        self._session = session
        self._llm = llm
        self._service = service
        # One advisory request in flight at a time
        self._lock = asyncio.Lock()

    @property
    def session(self) -> LedgerSession:
        return self._session

    def _get_service(self) -> StockAnalysisService:
        if self._service is None:
            from src.application.services import get_stock_analysis_service

            self._service = get_stock_analysis_service(self._llm)
        return self._service

    async def execute(self) -> StockAnalysis:
        """Execute the analysis. Never raises for advisory failures."""
        lines = [battery.to_stock_line() for battery in self._session.engine.inventory]

        if not lines:
            logger.info("stock_analysis_skipped", reason="empty_inventory")
            return StockAnalysis(
                report=EMPTY_INVENTORY_MESSAGE,
                succeeded=False,
                error="EMPTY_INVENTORY",
            )

        if self._lock.locked():
            logger.info("stock_analysis_queued")

        async with self._lock:
            logger.info("stock_analysis_started", rows=len(lines))
            return await self._get_service().analyze(lines)

    def to_response(self, result: StockAnalysis) -> StockAnalysisResponse:
        """Convert result to API response."""
        return StockAnalysisResponse(
            report=result.report,
            succeeded=result.succeeded,
            model=result.model,
            error=result.error,
        )
