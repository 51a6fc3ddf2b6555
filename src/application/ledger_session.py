"""
Ledger session: the engine plus its persistence side effect.

The engine reports which store keys each operation changed; the session
collects them and writes just those keys back after every operation.
Reads go straight to the engine.
"""

import asyncio

from src.config import get_logger, get_settings
from src.core.entities import Battery, Brand, InventoryStats, ScrapState, Transaction
from src.core.interfaces.key_value_store import IKeyValueStore
from src.core.services.ledger_engine import LedgerEngine, SaleResult
from src.core.services.ledger_snapshot import (
    ALL_KEYS,
    LedgerKey,
    decode_snapshot,
    encode_snapshot,
)

logger = get_logger(__name__)


class LedgerSession:
    """Owns one LedgerEngine and keeps the key-value store in step with it."""

    def __init__(
        self,
        store: IKeyValueStore,
        engine: LedgerEngine | None = None,
        default_scrap_price: float | None = None,
    ):
        self._store = store
        self._default_scrap_price = (
            default_scrap_price
            if default_scrap_price is not None
            else get_settings().ledger.default_scrap_price
        )
        self._dirty: set[LedgerKey] = set()
        self._write_lock = asyncio.Lock()
        self._engine: LedgerEngine | None = None
        self._unsubscribe = None
        if engine is not None:
            self._attach(engine)

    def _attach(self, engine: LedgerEngine) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
        self._engine = engine
        self._unsubscribe = engine.subscribe(self._dirty.update)

    @property
    def engine(self) -> LedgerEngine:
        if self._engine is None:
            raise RuntimeError("LedgerSession.load() has not been called")
        return self._engine

    @property
    def store(self) -> IKeyValueStore:
        return self._store

    @property
    def is_loaded(self) -> bool:
        return self._engine is not None

    async def load(self) -> LedgerEngine:
        """Rehydrate the engine from the store. Missing keys start empty."""
        raw = await self._store.get_many([key.value for key in LedgerKey])
        snapshot = decode_snapshot(raw, default_scrap_price=self._default_scrap_price)
        self._attach(LedgerEngine.from_snapshot(snapshot))
        self._dirty.clear()

        logger.info(
            "snapshot_loaded",
            batteries=len(snapshot.inventory),
            movements=len(snapshot.movements),
            transactions=len(snapshot.transactions),
            cash_balance=self.engine.cash_balance,
        )
        return self.engine

    async def flush(self) -> list[str]:
        """Write every key changed since the last flush. Returns the keys written."""
        if not self._dirty:
            return []
        keys = frozenset(self._dirty)
        self._dirty.clear()
        values = encode_snapshot(self.engine.snapshot(), keys)
        try:
            await self._store.set_many(values)
        except Exception:
            # Keys stay dirty so the next flush retries them
            self._dirty.update(keys)
            raise
        logger.debug("snapshot_flushed", keys=sorted(values))
        return sorted(values)

    async def save_all(self) -> None:
        """Write every key regardless of what changed."""
        self._dirty.update(ALL_KEYS)
        async with self._write_lock:
            await self.flush()

    # ------------------------------------------------------------------
    # Raw snapshot transfer (backup / restore)
    # ------------------------------------------------------------------

    def export_raw(self) -> dict[str, str]:
        """Store values for the whole ledger, as they would be persisted."""
        return encode_snapshot(self.engine.snapshot())

    async def import_raw(self, values: dict[str, str]) -> LedgerEngine:
        """Replace the stored ledger with ``values`` and reload from it."""
        known = {key.value for key in LedgerKey}
        unknown = sorted(set(values) - known)
        if unknown:
            logger.warning("snapshot_import_unknown_keys", keys=unknown)

        # Validate before touching the store
        decode_snapshot(values, default_scrap_price=self._default_scrap_price)

        async with self._write_lock:
            for key in known - set(values):
                await self._store.delete(key)
            await self._store.set_many({k: v for k, v in values.items() if k in known})
        logger.info("snapshot_imported", keys=sorted(known & set(values)))
        return await self.load()

    # ------------------------------------------------------------------
    # Operations: apply on the engine, then persist what changed
    # ------------------------------------------------------------------

    async def add_battery(
        self,
        brand: Brand,
        amperage: int,
        quantity: int = 0,
        min_stock: int = 0,
        price: float | None = None,
        alert_enabled: bool = True,
    ) -> Battery:
        async with self._write_lock:
            battery = self.engine.add_battery(
                brand,
                amperage,
                quantity=quantity,
                min_stock=min_stock,
                price=price,
                alert_enabled=alert_enabled,
            )
            await self.flush()
        return battery

    async def adjust_quantity(self, battery_id: str, delta: int) -> Battery | None:
        async with self._write_lock:
            battery = self.engine.adjust_quantity(battery_id, delta)
            await self.flush()
        return battery

    async def toggle_alert(self, battery_id: str) -> Battery | None:
        async with self._write_lock:
            battery = self.engine.toggle_alert(battery_id)
            await self.flush()
        return battery

    async def delete_battery(self, battery_id: str) -> Battery | None:
        async with self._write_lock:
            battery = self.engine.delete_battery(battery_id)
            await self.flush()
        return battery

    async def sell_battery(
        self, battery_id: str, final_price: float, qty: int = 1
    ) -> SaleResult | None:
        async with self._write_lock:
            result = self.engine.sell_battery(battery_id, final_price, qty)
            await self.flush()
        return result

    async def buy_scrap(
        self, cost: float, weight: float, description: str | None = None
    ) -> Transaction:
        async with self._write_lock:
            tx = self.engine.buy_scrap(cost, weight, description)
            await self.flush()
        return tx

    async def adjust_scrap(
        self, weight_delta: float, description: str | None = None
    ) -> Transaction:
        async with self._write_lock:
            tx = self.engine.adjust_scrap(weight_delta, description)
            await self.flush()
        return tx

    async def set_scrap_price(self, price_per_kg: float) -> ScrapState:
        async with self._write_lock:
            scrap = self.engine.set_scrap_price(price_per_kg)
            await self.flush()
        return scrap

    def stats(self) -> InventoryStats:
        return self.engine.stats()
