"""Cash ledger and scrap sub-ledger entities."""

from datetime import datetime
from enum import Enum

from pydantic import ConfigDict, Field, field_serializer

from src.core.entities.base import LedgerModel, new_id, to_epoch_ms, utc_now_ms


class TransactionType(str, Enum):
    """Kinds of cash ledger entries."""

    SALE = "SALE"
    SCRAP_PURCHASE = "SCRAP_PURCHASE"
    ADJUSTMENT = "ADJUSTMENT"


class Transaction(LedgerModel):
    """Append-only cash ledger entry. Positive amount is income, negative is expense."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=new_id)
    type: TransactionType
    amount: float
    description: str = ""
    timestamp: datetime = Field(default_factory=utc_now_ms)
    related_battery_id: str | None = None
    scrap_weight: float | None = None  # signed kg delta

    @property
    def is_income(self) -> bool:
        return self.amount > 0

    @field_serializer("timestamp", when_used="json")
    def _timestamp_ms(self, value: datetime) -> int:
        return to_epoch_ms(value)


class ScrapState(LedgerModel):
    """Accumulated scrap weight and its current per-kg rate."""

    weight: float = 0.0
    price_per_kg: float = 0.0

    @property
    def value(self) -> float:
        """Always derived; never stored."""
        return self.weight * self.price_per_kg
