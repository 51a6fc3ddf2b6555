"""Request DTOs for API endpoints.

Pydantic v2 models for API request validation.
These are the ONLY contracts between API and use cases.

Numeric fields are not range-checked: the ledger clamps quantities and
weights at zero itself, so out-of-range input is accepted and corrected.
Money and weight fields reject NaN and infinity.
"""

from pydantic import BaseModel, Field

from src.core.entities import Brand


class CreateBatteryRequest(BaseModel):
    """Request to add a battery line to the inventory."""

    brand: Brand = Field(..., description="Battery brand", examples=["Moura"])
    amperage: int = Field(..., description="Capacity in Ah", examples=[60])
    quantity: int = Field(default=0, description="Opening stock")
    min_stock: int = Field(default=0, description="Low-stock threshold (inclusive)")
    price: float | None = Field(default=None, allow_inf_nan=False, description="Unit sale price")
    alert_enabled: bool = Field(default=True, description="Flag low stock for this battery")


class AdjustQuantityRequest(BaseModel):
    """Request to move stock in (positive) or out (negative)."""

    delta: int = Field(..., description="Signed quantity change", examples=[5, -2])


class SellBatteryRequest(BaseModel):
    """Request to record a sale.

    ``final_price`` is the total charged. When omitted it is computed as
    max(0, unit_price - discount) * qty, with unit_price defaulting to the
    battery's list price.
    """

    battery_id: str = Field(..., description="Battery being sold")
    qty: int = Field(default=1, description="Units sold")
    final_price: float | None = Field(default=None, allow_inf_nan=False, description="Total amount charged")
    unit_price: float | None = Field(default=None, allow_inf_nan=False, description="Override of the list price")
    discount: float = Field(default=0.0, allow_inf_nan=False, description="Discount per unit")


class ScrapPurchaseRequest(BaseModel):
    """Request to record a scrap purchase."""

    cost: float = Field(..., allow_inf_nan=False, description="Amount paid (recorded as an expense)")
    weight: float = Field(..., allow_inf_nan=False, description="Kilograms received")
    description: str | None = Field(default=None, description="Ledger description")


class ScrapAdjustRequest(BaseModel):
    """Request to correct the scrap weight without moving cash."""

    weight_delta: float = Field(..., allow_inf_nan=False, description="Signed weight change in kg")
    description: str | None = Field(default=None, description="Ledger description")


class ScrapPriceRequest(BaseModel):
    """Request to change the scrap rate."""

    price_per_kg: float = Field(..., allow_inf_nan=False, description="Valuation rate per kg")
