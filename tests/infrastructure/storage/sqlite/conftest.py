"""Pytest fixtures for SQLite storage tests."""

from collections.abc import AsyncGenerator
from pathlib import Path

import pytest

from src.infrastructure.storage.sqlite import ConnectionPool, SQLiteKeyValueStore
from src.infrastructure.storage.sqlite.migrations.migrator import initialize_database


@pytest.fixture
def temp_db_path(tmp_path: Path) -> Path:
    """Create a temporary database path."""
    return tmp_path / "test.db"


@pytest.fixture
async def initialized_db(temp_db_path: Path) -> Path:
    """Temporary database with every migration applied."""
    results = await initialize_database(temp_db_path, create_backup_before=False)
    assert all(r.success for r in results)
    return temp_db_path


@pytest.fixture
async def pool(initialized_db: Path) -> AsyncGenerator[ConnectionPool, None]:
    """Connection pool over the migrated database."""
    pool = ConnectionPool(initialized_db, pool_size=2)
    yield pool
    await pool.close()


@pytest.fixture
def kv_store(pool: ConnectionPool) -> SQLiteKeyValueStore:
    return SQLiteKeyValueStore(pool)
