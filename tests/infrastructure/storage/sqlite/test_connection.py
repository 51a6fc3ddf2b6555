"""Unit tests for the SQLite connection pool."""

import asyncio
from pathlib import Path

import aiosqlite
import pytest

from src.config import reset_settings
from src.infrastructure.storage.sqlite.connection import ConnectionPool, close_pool, get_pool


class TestConnectionPoolInit:
    def test_defaults_open_nothing(self, temp_db_path: Path):
        pool = ConnectionPool(temp_db_path)
        assert pool.db_path == temp_db_path
        assert pool.pool_size == 2
        assert pool.busy_timeout == 30000
        assert pool.open_connections == 0
        assert not temp_db_path.exists()

    async def test_creates_parent_directory(self, tmp_path: Path):
        pool = ConnectionPool(tmp_path / "nested" / "dir" / "ledger.db", pool_size=1)
        await pool.ping()
        await pool.close()
        assert (tmp_path / "nested" / "dir").is_dir()


class TestAcquire:
    async def test_connection_uses_wal(self, temp_db_path: Path):
        pool = ConnectionPool(temp_db_path, pool_size=1)
        async with pool.acquire() as conn:
            cursor = await conn.execute("PRAGMA journal_mode")
            row = await cursor.fetchone()
        await pool.close()
        assert row[0] == "wal"

    async def test_idle_connection_is_reused(self, temp_db_path: Path):
        pool = ConnectionPool(temp_db_path, pool_size=2)
        async with pool.acquire() as first:
            pass
        async with pool.acquire() as second:
            pass
        assert first is second
        assert pool.open_connections == 1
        await pool.close()

    async def test_concurrent_readers_capped_at_pool_size(self, temp_db_path: Path):
        pool = ConnectionPool(temp_db_path, pool_size=2)
        release = asyncio.Event()
        active = 0
        peak = 0

        async def reader():
            nonlocal active, peak
            async with pool.acquire():
                active += 1
                peak = max(peak, active)
                await release.wait()
                active -= 1

        tasks = [asyncio.create_task(reader()) for _ in range(4)]
        await asyncio.sleep(0.05)
        release.set()
        await asyncio.gather(*tasks)
        await pool.close()

        assert peak == 2


class TestTransaction:
    async def test_commits_on_success(self, temp_db_path: Path):
        pool = ConnectionPool(temp_db_path, pool_size=1)
        async with pool.transaction() as conn:
            await conn.execute("CREATE TABLE t (v TEXT)")
            await conn.execute("INSERT INTO t VALUES ('x')")
        async with pool.acquire() as conn:
            cursor = await conn.execute("SELECT COUNT(*) FROM t")
            assert (await cursor.fetchone())[0] == 1
        await pool.close()

    async def test_rolls_back_on_error(self, temp_db_path: Path):
        pool = ConnectionPool(temp_db_path, pool_size=1)
        async with pool.transaction() as conn:
            await conn.execute("CREATE TABLE t (v TEXT PRIMARY KEY)")

        with pytest.raises(aiosqlite.IntegrityError):
            async with pool.transaction() as conn:
                await conn.execute("INSERT INTO t VALUES ('x')")
                await conn.execute("INSERT INTO t VALUES ('x')")

        async with pool.acquire() as conn:
            cursor = await conn.execute("SELECT COUNT(*) FROM t")
            assert (await cursor.fetchone())[0] == 0
            assert conn.in_transaction is False
        await pool.close()

    async def test_writers_are_serialized(self, temp_db_path: Path):
        pool = ConnectionPool(temp_db_path, pool_size=2)
        order: list[str] = []

        async def writer(name: str):
            async with pool.transaction():
                order.append(f"{name}-start")
                await asyncio.sleep(0.01)
                order.append(f"{name}-end")

        await asyncio.gather(writer("a"), writer("b"))
        await pool.close()

        assert order == ["a-start", "a-end", "b-start", "b-end"]


class TestClose:
    async def test_close_then_reuse(self, temp_db_path: Path):
        pool = ConnectionPool(temp_db_path, pool_size=2)
        await pool.ping()
        await pool.close()
        assert pool.open_connections == 0

        await pool.ping()
        assert pool.open_connections == 1
        await pool.close()


class TestGlobalPool:
    async def test_shared_until_closed(self, tmp_path: Path, monkeypatch):
        monkeypatch.setenv("STORAGE_DATA_DIR", str(tmp_path))
        monkeypatch.setenv("STORAGE_DB_NAME", "shared.db")
        reset_settings()
        try:
            first = await get_pool()
            assert await get_pool() is first
            assert first.db_path == tmp_path / "shared.db"
            assert first.open_connections == 1

            await close_pool()
            assert await get_pool() is not first
        finally:
            await close_pool()
