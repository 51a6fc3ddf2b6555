"""Response DTOs for API endpoints.

Pydantic v2 models for API response serialization.
These are the ONLY contracts between use cases and API layer.
"""

from datetime import datetime

from pydantic import BaseModel, Field

from src.core.entities import (
    Battery,
    InventoryStats,
    ScrapState,
    StockMovement,
    Transaction,
)
from src.core.services.formatting import format_currency


class BatteryResponse(BaseModel):
    """Battery response DTO."""

    id: str = Field(..., description="Battery ID")
    brand: str = Field(..., description="Brand name")
    amperage: int = Field(..., description="Capacity in Ah")
    label: str = Field(..., description="Display label, e.g. 'Moura 60Ah'")
    quantity: int = Field(..., description="Units on hand")
    min_stock: int = Field(..., description="Low-stock threshold")
    price: float | None = Field(default=None, description="Unit sale price")
    alert_enabled: bool = Field(..., description="Low-stock alerting on/off")
    is_low_stock: bool = Field(..., description="Alerting on and quantity <= min_stock")
    stock_value: float = Field(..., description="quantity * price")

    @classmethod
    def from_entity(cls, battery: Battery) -> "BatteryResponse":
        return cls(
            id=battery.id,
            brand=battery.brand.value,
            amperage=battery.amperage,
            label=battery.label,
            quantity=battery.quantity,
            min_stock=battery.min_stock,
            price=battery.price,
            alert_enabled=battery.alert_enabled,
            is_low_stock=battery.is_low_stock,
            stock_value=battery.stock_value,
        )


class InventoryListResponse(BaseModel):
    """Filtered inventory listing."""

    items: list[BatteryResponse] = Field(default=[], description="Matching batteries")
    total: int = Field(..., description="Number of matching batteries")


class StockMovementResponse(BaseModel):
    """Stock movement response DTO."""

    id: str
    battery_id: str
    brand: str
    amperage: int
    type: str
    quantity_delta: int
    timestamp: datetime

    @classmethod
    def from_entity(cls, movement: StockMovement) -> "StockMovementResponse":
        return cls(
            id=movement.id,
            battery_id=movement.battery_id,
            brand=movement.brand.value,
            amperage=movement.amperage,
            type=movement.type.value,
            quantity_delta=movement.quantity_delta,
            timestamp=movement.timestamp,
        )


class TransactionResponse(BaseModel):
    """Cash transaction response DTO."""

    id: str
    type: str
    amount: float = Field(..., description="Positive income, negative expense")
    description: str
    timestamp: datetime
    related_battery_id: str | None = None
    scrap_weight: float | None = None

    @classmethod
    def from_entity(cls, tx: Transaction) -> "TransactionResponse":
        return cls(
            id=tx.id,
            type=tx.type.value,
            amount=tx.amount,
            description=tx.description,
            timestamp=tx.timestamp,
            related_battery_id=tx.related_battery_id,
            scrap_weight=tx.scrap_weight,
        )


class SaleResponse(BaseModel):
    """Everything a sale wrote."""

    battery: BatteryResponse
    movement: StockMovementResponse
    transaction: TransactionResponse
    cash_balance: float


class ScrapResponse(BaseModel):
    """Scrap sub-ledger state."""

    weight: float = Field(..., description="Kilograms on hand")
    price_per_kg: float = Field(..., description="Current valuation rate")
    value: float = Field(..., description="weight * price_per_kg")

    @classmethod
    def from_entity(cls, scrap: ScrapState) -> "ScrapResponse":
        return cls(weight=scrap.weight, price_per_kg=scrap.price_per_kg, value=scrap.value)


class CashSummaryResponse(BaseModel):
    """Cash balance and scrap holdings."""

    cash_balance: float
    cash_balance_display: str
    scrap: ScrapResponse


class StatsResponse(BaseModel):
    """Dashboard figures."""

    total_units: int
    low_stock_count: int
    inventory_value: float
    scrap_weight: float
    scrap_value: float
    cash_balance: float
    display: dict[str, str] = Field(
        default={}, description="Currency-formatted values for the shop locale"
    )

    @classmethod
    def from_entity(cls, stats: InventoryStats, currency_symbol: str = "R$") -> "StatsResponse":
        return cls(
            total_units=stats.total_units,
            low_stock_count=stats.low_stock_count,
            inventory_value=stats.inventory_value,
            scrap_weight=stats.scrap_weight,
            scrap_value=stats.scrap_value,
            cash_balance=stats.cash_balance,
            display={
                "inventory_value": format_currency(stats.inventory_value, currency_symbol),
                "scrap_value": format_currency(stats.scrap_value, currency_symbol),
                "cash_balance": format_currency(stats.cash_balance, currency_symbol),
            },
        )


class StockAnalysisResponse(BaseModel):
    """Advisory report (or the fallback message)."""

    report: str = Field(..., description="Markdown report or a fixed fallback message")
    succeeded: bool
    model: str | None = None
    error: str | None = None


class ProviderHealthResponse(BaseModel):
    """Provider health status."""

    name: str
    available: bool
    latency_ms: float | None = None
    error: str | None = None


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str = "1.0.0"
    uptime_seconds: float
    storage: ProviderHealthResponse | None = None
    llm: ProviderHealthResponse | None = None


class ErrorResponse(BaseModel):
    """Standardized error response DTO.

    Every error response includes:
    - error_code: machine-readable code (e.g. BATTERY_NOT_FOUND)
    - message: human-readable description
    - hint: suggested recovery action
    - path: request path that triggered the error
    """

    error_code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error description")
    hint: str | None = Field(default=None, description="Suggested recovery action")
    detail: str | None = Field(default=None, description="Additional details")
    path: str | None = Field(default=None, description="Request path")
    timestamp: datetime = Field(default_factory=datetime.now)
