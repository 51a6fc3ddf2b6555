"""
Ledger snapshot codec.

Maps the ledger's collections to and from the flat string values kept in the
key-value store. Decoding tolerates missing keys (empty collection or zero
scalar) and backfills optional fields absent from older records.
"""

import math
from enum import Enum

from pydantic import BaseModel, Field, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from src.config import get_logger
from src.core.entities import Battery, ScrapState, StockMovement, Transaction
from src.core.exceptions import SnapshotDecodeError

logger = get_logger(__name__)


class LedgerKey(str, Enum):
    """Store keys, one per top-level collection or scalar."""

    INVENTORY = "battery_inventory"
    MOVEMENTS = "battery_movements"
    TRANSACTIONS = "cash_transactions"
    CASH_BALANCE = "cash_balance"
    SCRAP_WEIGHT = "scrap_weight"
    SCRAP_PRICE = "scrap_price"


ALL_KEYS: frozenset[LedgerKey] = frozenset(LedgerKey)

_inventory_adapter = TypeAdapter(list[Battery])
_movements_adapter = TypeAdapter(list[StockMovement])
_transactions_adapter = TypeAdapter(list[Transaction])


class LedgerSnapshot(BaseModel):
    """Point-in-time copy of every ledger collection."""

    inventory: list[Battery] = Field(default_factory=list)
    movements: list[StockMovement] = Field(default_factory=list)
    transactions: list[Transaction] = Field(default_factory=list)
    cash_balance: float | None = None  # None: derive from transactions
    scrap: ScrapState = Field(default_factory=ScrapState)


def _format_number(value: float) -> str:
    # repr() of a float is the shortest string that parses back to the same value
    return repr(float(value))


def encode_value(snapshot: LedgerSnapshot, key: LedgerKey) -> str:
    """Serialize one key's value from a snapshot."""
    if key is LedgerKey.INVENTORY:
        return _inventory_adapter.dump_json(snapshot.inventory, by_alias=True).decode()
    if key is LedgerKey.MOVEMENTS:
        return _movements_adapter.dump_json(snapshot.movements, by_alias=True).decode()
    if key is LedgerKey.TRANSACTIONS:
        return _transactions_adapter.dump_json(
            snapshot.transactions, by_alias=True, exclude_none=True
        ).decode()
    if key is LedgerKey.CASH_BALANCE:
        balance = snapshot.cash_balance
        if balance is None:
            balance = sum(tx.amount for tx in snapshot.transactions)
        return _format_number(balance)
    if key is LedgerKey.SCRAP_WEIGHT:
        return _format_number(snapshot.scrap.weight)
    return _format_number(snapshot.scrap.price_per_kg)


def encode_snapshot(
    snapshot: LedgerSnapshot,
    keys: frozenset[LedgerKey] | set[LedgerKey] = ALL_KEYS,
) -> dict[str, str]:
    """Serialize the requested keys (all by default) into store values."""
    return {key.value: encode_value(snapshot, key) for key in LedgerKey if key in keys}


def _decode_list(adapter: TypeAdapter, key: LedgerKey, raw: str | None) -> list:
    if not raw:
        return []
    try:
        return adapter.validate_json(raw)
    except PydanticValidationError as e:
        raise SnapshotDecodeError(key.value, str(e)) from e


def _decode_number(key: LedgerKey, raw: str | None, default: float | None) -> float | None:
    if raw is None or not raw.strip():
        return default
    try:
        value = float(raw.strip())
    except ValueError as e:
        raise SnapshotDecodeError(key.value, f"not a number: {raw[:40]!r}") from e
    if not math.isfinite(value):
        raise SnapshotDecodeError(key.value, f"not a finite number: {raw[:40]!r}")
    return value


def decode_snapshot(
    raw: dict[str, str | None],
    default_scrap_price: float = 0.0,
) -> LedgerSnapshot:
    """
    Rebuild a snapshot from store values.

    Args:
        raw: Store values keyed by LedgerKey value; absent keys may be missing or None
        default_scrap_price: Rate used when no scrap price was ever stored

    Returns:
        LedgerSnapshot

    Raises:
        SnapshotDecodeError: A present value is malformed
    """
    inventory = _decode_list(_inventory_adapter, LedgerKey.INVENTORY, raw.get(LedgerKey.INVENTORY.value))
    movements = _decode_list(_movements_adapter, LedgerKey.MOVEMENTS, raw.get(LedgerKey.MOVEMENTS.value))
    transactions = _decode_list(
        _transactions_adapter, LedgerKey.TRANSACTIONS, raw.get(LedgerKey.TRANSACTIONS.value)
    )

    cash_balance = _decode_number(LedgerKey.CASH_BALANCE, raw.get(LedgerKey.CASH_BALANCE.value), None)
    weight = _decode_number(LedgerKey.SCRAP_WEIGHT, raw.get(LedgerKey.SCRAP_WEIGHT.value), 0.0)
    price = _decode_number(
        LedgerKey.SCRAP_PRICE, raw.get(LedgerKey.SCRAP_PRICE.value), default_scrap_price
    )

    logger.debug(
        "snapshot_decoded",
        batteries=len(inventory),
        movements=len(movements),
        transactions=len(transactions),
    )

    return LedgerSnapshot(
        inventory=inventory,
        movements=movements,
        transactions=transactions,
        cash_balance=cash_balance,
        scrap=ScrapState(weight=max(0.0, weight), price_per_kg=max(0.0, price)),
    )
