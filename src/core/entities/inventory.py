"""Battery inventory domain entities."""

from datetime import datetime
from enum import Enum

from pydantic import ConfigDict, Field, field_serializer, field_validator

from src.core.entities.base import LedgerModel, new_id, to_epoch_ms, utc_now_ms


class Brand(str, Enum):
    """Battery brands carried by the shop."""

    ELOFORTE = "Eloforte"
    PIONEIRO = "Pioneiro"
    HELIAR = "Heliar"
    MOURA = "Moura"
    OUTROS = "Outros"


SUPPORTED_BRANDS: list[Brand] = list(Brand)

# Catalog amperages offered in forms; not enforced on Battery.amperage.
COMMON_AMPERAGES: list[int] = [40, 45, 48, 50, 60, 70, 75, 80, 90, 100, 150, 180]


class MovementType(str, Enum):
    """Cause of a stock movement."""

    CREATE = "CREATE"
    IN = "IN"
    OUT = "OUT"
    SALE = "SALE"
    DELETE = "DELETE"


class Battery(LedgerModel):
    """One inventory line, identified by brand and amperage."""

    id: str = Field(default_factory=new_id)
    brand: Brand
    amperage: int
    quantity: int = 0
    min_stock: int = 0  # low-stock threshold (inclusive)
    price: float | None = None  # unit sale price
    alert_enabled: bool = True

    @field_validator("alert_enabled", mode="before")
    @classmethod
    def _default_alert(cls, v: object) -> object:
        # Records saved before alerts existed carry null or nothing.
        return True if v is None else v

    @property
    def label(self) -> str:
        """Human label, e.g. 'Moura 60Ah'."""
        return f"{self.brand.value} {self.amperage}Ah"

    @property
    def is_low_stock(self) -> bool:
        """Alerting is on and quantity is at or below the threshold."""
        return self.alert_enabled and self.quantity <= self.min_stock

    @property
    def stock_value(self) -> float:
        return self.quantity * (self.price or 0)

    def to_stock_line(self) -> "StockLine":
        return StockLine(
            brand=self.brand,
            amperage=self.amperage,
            quantity=self.quantity,
            min_stock=self.min_stock,
        )


class StockMovement(LedgerModel):
    """Append-only record of a change in a battery's stock.

    Brand and amperage are copied at write time so the history stays
    readable after the battery is edited or deleted.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=new_id)
    battery_id: str
    brand: Brand
    amperage: int
    type: MovementType
    quantity_delta: int
    timestamp: datetime = Field(default_factory=utc_now_ms)

    @field_serializer("timestamp", when_used="json")
    def _timestamp_ms(self, value: datetime) -> int:
        return to_epoch_ms(value)


class StockLine(LedgerModel):
    """Inventory row handed to the stock advisor."""

    brand: Brand
    amperage: int
    quantity: int
    min_stock: int
