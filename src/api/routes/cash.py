"""Cash ledger and scrap endpoints."""

from fastapi import APIRouter, Depends, status

from src.api.dependencies import get_app_settings, get_session
from src.application.dto.requests import (
    ScrapAdjustRequest,
    ScrapPriceRequest,
    ScrapPurchaseRequest,
)
from src.application.dto.responses import (
    CashSummaryResponse,
    ScrapResponse,
    TransactionResponse,
)
from src.application.ledger_session import LedgerSession
from src.config import Settings
from src.core.entities import TransactionType
from src.core.services.formatting import format_currency

router = APIRouter(prefix="/api/cash", tags=["cash"])


@router.get("/transactions", response_model=list[TransactionResponse])
async def list_transactions(
    type: TransactionType | None = None,
    limit: int = 100,
    session: LedgerSession = Depends(get_session),
) -> list[TransactionResponse]:
    """Cash transactions, newest first, optionally of one type."""
    transactions = session.engine.transaction_history(type)[: max(0, limit)]
    return [TransactionResponse.from_entity(tx) for tx in transactions]


@router.get("/summary", response_model=CashSummaryResponse)
async def cash_summary(
    session: LedgerSession = Depends(get_session),
    settings: Settings = Depends(get_app_settings),
) -> CashSummaryResponse:
    """Current cash balance and scrap holdings."""
    balance = session.engine.cash_balance
    return CashSummaryResponse(
        cash_balance=balance,
        cash_balance_display=format_currency(balance, settings.ledger.currency_symbol),
        scrap=ScrapResponse.from_entity(session.engine.scrap),
    )


@router.post(
    "/scrap/purchase",
    response_model=TransactionResponse,
    status_code=status.HTTP_201_CREATED,
)
async def buy_scrap(
    request: ScrapPurchaseRequest,
    session: LedgerSession = Depends(get_session),
) -> TransactionResponse:
    """Pay for scrap: the cost leaves the till and the weight is added."""
    tx = await session.buy_scrap(request.cost, request.weight, request.description)
    return TransactionResponse.from_entity(tx)


@router.post(
    "/scrap/adjust",
    response_model=TransactionResponse,
    status_code=status.HTTP_201_CREATED,
)
async def adjust_scrap(
    request: ScrapAdjustRequest,
    session: LedgerSession = Depends(get_session),
) -> TransactionResponse:
    """Correct the scrap weight; logged as a zero-amount adjustment."""
    tx = await session.adjust_scrap(request.weight_delta, request.description)
    return TransactionResponse.from_entity(tx)


@router.put("/scrap/price", response_model=ScrapResponse)
async def set_scrap_price(
    request: ScrapPriceRequest,
    session: LedgerSession = Depends(get_session),
) -> ScrapResponse:
    """Set the per-kg rate used to value scrap."""
    scrap = await session.set_scrap_price(request.price_per_kg)
    return ScrapResponse.from_entity(scrap)
