"""SQLite implementation of the ledger key-value store."""

import aiosqlite

from src.config import get_logger
from src.core.exceptions import DatabaseError
from src.core.interfaces.key_value_store import IKeyValueStore
from src.infrastructure.storage.sqlite.connection import ConnectionPool, get_pool

logger = get_logger(__name__)


class SQLiteKeyValueStore(IKeyValueStore):
    """Key-value rows in the ``kv_entries`` table."""

    def __init__(self, pool: ConnectionPool | None = None):
        self._pool = pool

    async def _get_pool(self) -> ConnectionPool:
        if self._pool is None:
            self._pool = await get_pool()
        return self._pool

    async def get(self, key: str) -> str | None:
        pool = await self._get_pool()
        try:
            async with pool.acquire() as conn:
                cursor = await conn.execute(
                    "SELECT value FROM kv_entries WHERE key = ?", (key,)
                )
                row = await cursor.fetchone()
        except aiosqlite.Error as e:
            raise DatabaseError("get", str(e)) from e
        return row["value"] if row else None

    async def set(self, key: str, value: str) -> None:
        await self.set_many({key: value})

    async def set_many(self, values: dict[str, str]) -> None:
        """Upsert several keys in one SQLite transaction."""
        if not values:
            return
        pool = await self._get_pool()
        try:
            async with pool.transaction() as conn:
                await conn.executemany(
                    """
                    INSERT INTO kv_entries (key, value, updated_at)
                    VALUES (?, ?, datetime('now'))
                    ON CONFLICT(key) DO UPDATE SET
                        value = excluded.value,
                        updated_at = excluded.updated_at
                    """,
                    list(values.items()),
                )
        except aiosqlite.Error as e:
            raise DatabaseError("set", str(e)) from e
        logger.debug("kv_entries_written", keys=sorted(values))

    async def get_many(self, keys: list[str]) -> dict[str, str | None]:
        result: dict[str, str | None] = {key: None for key in keys}
        if not keys:
            return result
        pool = await self._get_pool()
        placeholders = ", ".join("?" for _ in keys)
        try:
            async with pool.acquire() as conn:
                cursor = await conn.execute(
                    f"SELECT key, value FROM kv_entries WHERE key IN ({placeholders})",
                    tuple(keys),
                )
                rows = await cursor.fetchall()
        except aiosqlite.Error as e:
            raise DatabaseError("get_many", str(e)) from e
        for row in rows:
            result[row["key"]] = row["value"]
        return result

    async def delete(self, key: str) -> bool:
        pool = await self._get_pool()
        try:
            async with pool.transaction() as conn:
                cursor = await conn.execute("DELETE FROM kv_entries WHERE key = ?", (key,))
                deleted = cursor.rowcount > 0
        except aiosqlite.Error as e:
            raise DatabaseError("delete", str(e)) from e
        if deleted:
            logger.info("kv_entry_deleted", key=key)
        return deleted

    async def keys(self) -> list[str]:
        pool = await self._get_pool()
        try:
            async with pool.acquire() as conn:
                cursor = await conn.execute("SELECT key FROM kv_entries ORDER BY key")
                rows = await cursor.fetchall()
        except aiosqlite.Error as e:
            raise DatabaseError("keys", str(e)) from e
        return [row["key"] for row in rows]
