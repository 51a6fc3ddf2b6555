"""Dashboard statistics endpoint."""

from fastapi import APIRouter, Depends

from src.api.dependencies import get_app_settings, get_session
from src.application.dto.responses import StatsResponse
from src.application.ledger_session import LedgerSession
from src.config import Settings

router = APIRouter(prefix="/api/stats", tags=["stats"])


@router.get("", response_model=StatsResponse)
async def get_stats(
    session: LedgerSession = Depends(get_session),
    settings: Settings = Depends(get_app_settings),
) -> StatsResponse:
    """Units on hand, low-stock count, stock and scrap value, cash balance."""
    return StatsResponse.from_entity(session.stats(), settings.ledger.currency_symbol)
