"""
Ledger Engine.

Owns the four coupled ledger collections (inventory, stock movements, cash
transactions, scrap state) and is the only code allowed to mutate them.
Every public operation applies all of its writes as one unit under a lock,
then tells subscribers which store keys changed.

Policies:
- Quantities and weights are clamped at zero on commit, never rejected.
- An unknown battery id is a no-op: the operation returns None and logs
  ``battery_not_found``. Callers that need an explicit signal check for None.
- Movements record the requested delta, not the post-clamp change.
- Money and weight amounts must be finite; NaN or infinity raises
  ValidationError before anything is written.
"""

import math
import threading
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import datetime

from src.config import get_logger
from src.core.entities import (
    Battery,
    Brand,
    InventoryStats,
    MovementType,
    ScrapState,
    StockMovement,
    Transaction,
    TransactionType,
)
from src.core.entities.base import new_id, utc_now_ms
from src.core.exceptions import ValidationError
from src.core.services.ledger_snapshot import LedgerKey, LedgerSnapshot

logger = get_logger(__name__)

LedgerListener = Callable[[frozenset[LedgerKey]], None]

SCRAP_PURCHASE_DESCRIPTION = "Compra de Sucata"
SCRAP_ADJUST_IN_DESCRIPTION = "Ajuste Manual (Entrada)"
SCRAP_ADJUST_OUT_DESCRIPTION = "Ajuste Manual (Saída)"

# Tolerance when comparing a stored balance with the transaction log sum
BALANCE_TOLERANCE = 1e-6


def _require_finite(field: str, value: float | None) -> None:
    if value is not None and not math.isfinite(value):
        raise ValidationError(field, "must be a finite number", value)


@dataclass(frozen=True)
class SaleResult:
    """Everything a sale wrote."""

    battery: Battery
    movement: StockMovement
    transaction: Transaction


def final_sale_price(
    battery: Battery,
    unit_price: float | None = None,
    discount: float = 0.0,
) -> float:
    """Price charged for one unit: list (or overridden) price minus discount, floored at 0."""
    price = unit_price if unit_price is not None else (battery.price or 0.0)
    return max(0.0, price - discount)


class LedgerEngine:
    """Single source of truth for stock, cash and scrap."""

    def __init__(
        self,
        inventory: Iterable[Battery] = (),
        movements: Iterable[StockMovement] = (),
        transactions: Iterable[Transaction] = (),
        scrap: ScrapState | None = None,
        cash_balance: float | None = None,
        clock: Callable[[], datetime] = utc_now_ms,
        id_factory: Callable[[], str] = new_id,
    ) -> None:
        self._inventory: dict[str, Battery] = {b.id: b.model_copy() for b in inventory}
        self._movements: list[StockMovement] = list(movements)
        self._transactions: list[Transaction] = list(transactions)
        self._scrap = scrap.model_copy() if scrap else ScrapState()
        self._clock = clock
        self._new_id = id_factory
        self._lock = threading.RLock()
        self._listeners: list[LedgerListener] = []

        logged_total = self.reconciled_balance()
        if cash_balance is None:
            self._cash_balance = logged_total
        elif math.isclose(cash_balance, logged_total, abs_tol=BALANCE_TOLERANCE):
            self._cash_balance = cash_balance
        else:
            logger.warning(
                "cash_balance_drift",
                stored=cash_balance,
                from_transactions=logged_total,
            )
            self._cash_balance = logged_total

    @classmethod
    def from_snapshot(
        cls,
        snapshot: LedgerSnapshot,
        clock: Callable[[], datetime] = utc_now_ms,
        id_factory: Callable[[], str] = new_id,
    ) -> "LedgerEngine":
        """Rehydrate an engine from a decoded snapshot."""
        return cls(
            inventory=snapshot.inventory,
            movements=snapshot.movements,
            transactions=snapshot.transactions,
            scrap=snapshot.scrap,
            cash_balance=snapshot.cash_balance,
            clock=clock,
            id_factory=id_factory,
        )

    def snapshot(self) -> LedgerSnapshot:
        """Copy of the full ledger state."""
        with self._lock:
            return LedgerSnapshot(
                inventory=[b.model_copy() for b in self._inventory.values()],
                movements=list(self._movements),
                transactions=list(self._transactions),
                cash_balance=self._cash_balance,
                scrap=self._scrap.model_copy(),
            )

    # ------------------------------------------------------------------
    # Change notification
    # ------------------------------------------------------------------

    def subscribe(self, listener: LedgerListener) -> Callable[[], None]:
        """Register a change listener. Returns a callable that unsubscribes it."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def _notify(self, *keys: LedgerKey) -> None:
        changed = frozenset(keys)
        for listener in list(self._listeners):
            listener(changed)

    # ------------------------------------------------------------------
    # Internal log writers (caller holds the lock)
    # ------------------------------------------------------------------

    def _log_movement(
        self, battery: Battery, movement_type: MovementType, delta: int
    ) -> StockMovement:
        movement = StockMovement(
            id=self._new_id(),
            battery_id=battery.id,
            brand=battery.brand,
            amperage=battery.amperage,
            type=movement_type,
            quantity_delta=delta,
            timestamp=self._clock(),
        )
        self._movements.append(movement)
        return movement

    def _log_transaction(
        self,
        amount: float,
        tx_type: TransactionType,
        description: str,
        related_battery_id: str | None = None,
        scrap_weight: float | None = None,
    ) -> Transaction:
        tx = Transaction(
            id=self._new_id(),
            type=tx_type,
            amount=amount,
            description=description,
            timestamp=self._clock(),
            related_battery_id=related_battery_id,
            scrap_weight=scrap_weight,
        )
        self._transactions.append(tx)
        self._cash_balance += amount
        return tx

    def _missing(self, operation: str, battery_id: str) -> None:
        logger.warning("battery_not_found", operation=operation, battery_id=battery_id)

    # ------------------------------------------------------------------
    # Inventory operations
    # ------------------------------------------------------------------

    def add_battery(
        self,
        brand: Brand,
        amperage: int,
        quantity: int = 0,
        min_stock: int = 0,
        price: float | None = None,
        alert_enabled: bool = True,
    ) -> Battery:
        """Create a battery and log a CREATE movement for its opening stock."""
        _require_finite("price", price)
        with self._lock:
            battery = Battery(
                id=self._new_id(),
                brand=brand,
                amperage=amperage,
                quantity=max(0, quantity),
                min_stock=max(0, min_stock),
                price=None if price is None else max(0.0, price),
                alert_enabled=alert_enabled,
            )
            self._inventory[battery.id] = battery
            self._log_movement(battery, MovementType.CREATE, battery.quantity)
            result = battery.model_copy()

        logger.info(
            "battery_added",
            battery_id=result.id,
            label=result.label,
            quantity=result.quantity,
        )
        self._notify(LedgerKey.INVENTORY, LedgerKey.MOVEMENTS)
        return result

    def adjust_quantity(self, battery_id: str, delta: int) -> Battery | None:
        """
        Move stock in (delta > 0) or out (delta < 0).

        The new quantity is clamped at zero. A movement is logged only when the
        stored quantity actually changes, and it carries the requested delta.
        """
        with self._lock:
            battery = self._inventory.get(battery_id)
            if battery is None:
                self._missing("adjust_quantity", battery_id)
                return None

            new_quantity = max(0, battery.quantity + delta)
            changed = new_quantity != battery.quantity
            if changed:
                movement_type = MovementType.IN if delta > 0 else MovementType.OUT
                self._log_movement(battery, movement_type, delta)
            battery.quantity = new_quantity
            result = battery.model_copy()

        if changed:
            logger.info(
                "battery_quantity_adjusted",
                battery_id=battery_id,
                delta=delta,
                quantity=result.quantity,
            )
            self._notify(LedgerKey.INVENTORY, LedgerKey.MOVEMENTS)
        return result

    def toggle_alert(self, battery_id: str) -> Battery | None:
        """Flip low-stock alerting for a battery. Not a stock event."""
        with self._lock:
            battery = self._inventory.get(battery_id)
            if battery is None:
                self._missing("toggle_alert", battery_id)
                return None
            battery.alert_enabled = not battery.alert_enabled
            result = battery.model_copy()

        logger.info("battery_alert_toggled", battery_id=battery_id, enabled=result.alert_enabled)
        self._notify(LedgerKey.INVENTORY)
        return result

    def delete_battery(self, battery_id: str) -> Battery | None:
        """Log a DELETE movement for the remaining stock, then drop the battery.

        Existing movements and transactions referencing the id are left as they are.
        """
        with self._lock:
            battery = self._inventory.get(battery_id)
            if battery is None:
                self._missing("delete_battery", battery_id)
                return None
            self._log_movement(battery, MovementType.DELETE, -battery.quantity)
            del self._inventory[battery_id]

        logger.info("battery_deleted", battery_id=battery_id, label=battery.label, quantity=battery.quantity)
        self._notify(LedgerKey.INVENTORY, LedgerKey.MOVEMENTS)
        return battery

    # ------------------------------------------------------------------
    # Sales
    # ------------------------------------------------------------------

    def sell_battery(self, battery_id: str, final_price: float, qty: int = 1) -> SaleResult | None:
        """
        Sell ``qty`` units for ``final_price`` in total.

        Decrements stock (clamped at zero), logs a SALE movement with -qty,
        appends a SALE transaction and credits the cash balance, all as one unit.
        """
        _require_finite("final_price", final_price)
        qty = max(0, qty)
        with self._lock:
            battery = self._inventory.get(battery_id)
            if battery is None:
                self._missing("sell_battery", battery_id)
                return None

            battery.quantity = max(0, battery.quantity - qty)
            movement = self._log_movement(battery, MovementType.SALE, -qty)
            tx = self._log_transaction(
                final_price,
                TransactionType.SALE,
                f"Venda: {battery.label}",
                related_battery_id=battery.id,
            )
            result = SaleResult(battery=battery.model_copy(), movement=movement, transaction=tx)
            balance = self._cash_balance

        logger.info(
            "battery_sold",
            battery_id=battery_id,
            qty=qty,
            amount=final_price,
            quantity=result.battery.quantity,
            cash_balance=balance,
        )
        self._notify(
            LedgerKey.INVENTORY,
            LedgerKey.MOVEMENTS,
            LedgerKey.TRANSACTIONS,
            LedgerKey.CASH_BALANCE,
        )
        return result

    # ------------------------------------------------------------------
    # Scrap and cash
    # ------------------------------------------------------------------

    def buy_scrap(self, cost: float, weight: float, description: str | None = None) -> Transaction:
        """Pay for scrap: cash goes out (whatever the sign of ``cost``), weight comes in."""
        _require_finite("cost", cost)
        _require_finite("weight", weight)
        with self._lock:
            tx = self._log_transaction(
                -abs(cost),
                TransactionType.SCRAP_PURCHASE,
                description or SCRAP_PURCHASE_DESCRIPTION,
                scrap_weight=weight,
            )
            self._scrap.weight = max(0.0, self._scrap.weight + weight)
            scrap_weight = self._scrap.weight

        logger.info("scrap_purchased", cost=abs(cost), weight=weight, scrap_weight=scrap_weight)
        self._notify(LedgerKey.TRANSACTIONS, LedgerKey.CASH_BALANCE, LedgerKey.SCRAP_WEIGHT)
        return tx

    def adjust_scrap(self, weight_delta: float, description: str | None = None) -> Transaction:
        """Correct scrap weight; a zero-amount ADJUSTMENT transaction keeps the audit trail."""
        _require_finite("weight_delta", weight_delta)
        if not description:
            description = (
                SCRAP_ADJUST_IN_DESCRIPTION if weight_delta >= 0 else SCRAP_ADJUST_OUT_DESCRIPTION
            )
        with self._lock:
            tx = self._log_transaction(
                0.0,
                TransactionType.ADJUSTMENT,
                description,
                scrap_weight=weight_delta,
            )
            self._scrap.weight = max(0.0, self._scrap.weight + weight_delta)
            scrap_weight = self._scrap.weight

        logger.info("scrap_adjusted", weight_delta=weight_delta, scrap_weight=scrap_weight)
        self._notify(LedgerKey.TRANSACTIONS, LedgerKey.CASH_BALANCE, LedgerKey.SCRAP_WEIGHT)
        return tx

    def set_scrap_price(self, price_per_kg: float) -> ScrapState:
        """Change the per-kg rate used for future valuations only."""
        _require_finite("price_per_kg", price_per_kg)
        with self._lock:
            self._scrap.price_per_kg = max(0.0, price_per_kg)
            result = self._scrap.model_copy()

        logger.info("scrap_price_set", price_per_kg=result.price_per_kg)
        self._notify(LedgerKey.SCRAP_PRICE)
        return result

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    @property
    def inventory(self) -> list[Battery]:
        """Copies of all batteries, in insertion order."""
        with self._lock:
            return [b.model_copy() for b in self._inventory.values()]

    def get_battery(self, battery_id: str) -> Battery | None:
        with self._lock:
            battery = self._inventory.get(battery_id)
            return battery.model_copy() if battery else None

    @property
    def movements(self) -> tuple[StockMovement, ...]:
        """Movement log in append order."""
        with self._lock:
            return tuple(self._movements)

    @property
    def transactions(self) -> tuple[Transaction, ...]:
        """Transaction log in append order."""
        with self._lock:
            return tuple(self._transactions)

    @property
    def scrap(self) -> ScrapState:
        with self._lock:
            return self._scrap.model_copy()

    def movement_history(self, battery_id: str | None = None) -> list[StockMovement]:
        """Movements newest first, optionally for one battery id."""
        with self._lock:
            items = [m for m in reversed(self._movements) if battery_id is None or m.battery_id == battery_id]
        return sorted(items, key=lambda m: m.timestamp, reverse=True)

    def transaction_history(self, tx_type: TransactionType | None = None) -> list[Transaction]:
        """Transactions newest first, optionally of one type."""
        with self._lock:
            items = [t for t in reversed(self._transactions) if tx_type is None or t.type == tx_type]
        return sorted(items, key=lambda t: t.timestamp, reverse=True)

    # ------------------------------------------------------------------
    # Derived statistics
    # ------------------------------------------------------------------

    @property
    def cash_balance(self) -> float:
        """Running balance, maintained on every append."""
        return self._cash_balance

    def reconciled_balance(self) -> float:
        """Balance recomputed from the full transaction log."""
        return sum(tx.amount for tx in self._transactions)

    @property
    def total_units(self) -> int:
        with self._lock:
            return sum(b.quantity for b in self._inventory.values())

    @property
    def low_stock_count(self) -> int:
        with self._lock:
            return sum(1 for b in self._inventory.values() if b.is_low_stock)

    def low_stock(self) -> list[Battery]:
        with self._lock:
            return [b.model_copy() for b in self._inventory.values() if b.is_low_stock]

    @property
    def inventory_value(self) -> float:
        with self._lock:
            return sum(b.stock_value for b in self._inventory.values())

    @property
    def scrap_value(self) -> float:
        return self._scrap.value

    def stats(self) -> InventoryStats:
        """All dashboard figures from one consistent view."""
        with self._lock:
            return InventoryStats(
                total_units=self.total_units,
                low_stock_count=self.low_stock_count,
                inventory_value=self.inventory_value,
                scrap_weight=self._scrap.weight,
                scrap_value=self.scrap_value,
                cash_balance=self._cash_balance,
            )
