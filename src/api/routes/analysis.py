"""Stock analysis endpoint."""

from fastapi import APIRouter, Depends

from src.api.dependencies import get_stock_analysis_use_case
from src.application.dto.responses import StockAnalysisResponse
from src.application.use_cases.generate_stock_analysis import GenerateStockAnalysisUseCase

router = APIRouter(prefix="/api/analysis", tags=["analysis"])


@router.post("", response_model=StockAnalysisResponse)
async def generate_analysis(
    use_case: GenerateStockAnalysisUseCase = Depends(get_stock_analysis_use_case),
) -> StockAnalysisResponse:
    """
    Ask the LLM for a restocking report on the current inventory.

    Always answers 200: provider failures come back as a fixed message
    with ``succeeded=false``.
    """
    result = await use_case.execute()
    return use_case.to_response(result)
