"""Sales endpoints."""

from fastapi import APIRouter, Depends, status

from src.api.dependencies import get_sell_battery_use_case
from src.application.dto.requests import SellBatteryRequest
from src.application.dto.responses import ErrorResponse, SaleResponse
from src.application.use_cases.sell_battery import SellBatteryUseCase

router = APIRouter(prefix="/api/sales", tags=["sales"])


@router.post(
    "",
    response_model=SaleResponse,
    status_code=status.HTTP_201_CREATED,
    responses={404: {"model": ErrorResponse}},
)
async def sell_battery(
    request: SellBatteryRequest,
    use_case: SellBatteryUseCase = Depends(get_sell_battery_use_case),
) -> SaleResponse:
    """Record a sale: stock goes down, a SALE movement and transaction are logged."""
    result = await use_case.execute(request)
    return use_case.to_response(result)
