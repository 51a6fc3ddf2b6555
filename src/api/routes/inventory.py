"""Inventory management endpoints."""

from fastapi import APIRouter, Depends, status

from src.api.dependencies import get_session
from src.application.dto.requests import AdjustQuantityRequest, CreateBatteryRequest
from src.application.dto.responses import (
    BatteryResponse,
    ErrorResponse,
    InventoryListResponse,
    StockMovementResponse,
)
from src.application.ledger_session import LedgerSession
from src.core.entities import Battery
from src.core.exceptions import BatteryNotFoundError
from src.core.services.inventory_search import ALL_BRANDS, filter_inventory

router = APIRouter(prefix="/api/inventory", tags=["inventory"])


def _found(battery: Battery | None, battery_id: str) -> Battery:
    if battery is None:
        raise BatteryNotFoundError(battery_id)
    return battery


@router.get("", response_model=InventoryListResponse)
async def list_inventory(
    brand: str = ALL_BRANDS,
    q: str = "",
    low_stock_only: bool = False,
    session: LedgerSession = Depends(get_session),
) -> InventoryListResponse:
    """List batteries filtered by brand and search text, sorted by brand then amperage."""
    items = filter_inventory(session.engine.inventory, brand=brand, query=q)
    if low_stock_only:
        items = [b for b in items if b.is_low_stock]
    return InventoryListResponse(
        items=[BatteryResponse.from_entity(b) for b in items],
        total=len(items),
    )


@router.post(
    "",
    response_model=BatteryResponse,
    status_code=status.HTTP_201_CREATED,
    responses={422: {"model": ErrorResponse}},
)
async def add_battery(
    request: CreateBatteryRequest,
    session: LedgerSession = Depends(get_session),
) -> BatteryResponse:
    """Add a battery line and log its opening stock."""
    battery = await session.add_battery(
        request.brand,
        request.amperage,
        quantity=request.quantity,
        min_stock=request.min_stock,
        price=request.price,
        alert_enabled=request.alert_enabled,
    )
    return BatteryResponse.from_entity(battery)


@router.get("/movements", response_model=list[StockMovementResponse])
async def list_movements(
    battery_id: str | None = None,
    limit: int = 100,
    session: LedgerSession = Depends(get_session),
) -> list[StockMovementResponse]:
    """Stock movements, newest first, optionally for one battery."""
    movements = session.engine.movement_history(battery_id)[: max(0, limit)]
    return [StockMovementResponse.from_entity(m) for m in movements]


@router.post(
    "/{battery_id}/adjust",
    response_model=BatteryResponse,
    responses={404: {"model": ErrorResponse}},
)
async def adjust_quantity(
    battery_id: str,
    request: AdjustQuantityRequest,
    session: LedgerSession = Depends(get_session),
) -> BatteryResponse:
    """Move stock in or out; the quantity never drops below zero."""
    battery = await session.adjust_quantity(battery_id, request.delta)
    return BatteryResponse.from_entity(_found(battery, battery_id))


@router.post(
    "/{battery_id}/toggle-alert",
    response_model=BatteryResponse,
    responses={404: {"model": ErrorResponse}},
)
async def toggle_alert(
    battery_id: str,
    session: LedgerSession = Depends(get_session),
) -> BatteryResponse:
    """Switch low-stock alerting on or off."""
    battery = await session.toggle_alert(battery_id)
    return BatteryResponse.from_entity(_found(battery, battery_id))


@router.delete(
    "/{battery_id}",
    response_model=BatteryResponse,
    responses={404: {"model": ErrorResponse}},
)
async def delete_battery(
    battery_id: str,
    session: LedgerSession = Depends(get_session),
) -> BatteryResponse:
    """Remove a battery. Its movement and sale history is kept."""
    battery = await session.delete_battery(battery_id)
    return BatteryResponse.from_entity(_found(battery, battery_id))
