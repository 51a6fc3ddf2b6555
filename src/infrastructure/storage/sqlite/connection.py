"""
SQLite connections for the ledger store.

Reads share up to ``pool_size`` connections, opened on first use. Writes
are serialized by one lock and run inside BEGIN IMMEDIATE, so a flush of
several keys commits together and never hits SQLITE_BUSY halfway through.
"""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

import aiosqlite

from src.config import get_logger, get_settings

logger = get_logger(__name__)


class ConnectionPool:
    """Lazily opened aiosqlite connections over one database file."""

    def __init__(
        self,
        db_path: Path,
        pool_size: int = 2,
        busy_timeout: int = 30000,
    ):
        self.db_path = Path(db_path)
        self.pool_size = pool_size
        self.busy_timeout = busy_timeout

        self._slots = asyncio.Semaphore(pool_size)
        self._write_lock = asyncio.Lock()
        self._idle: list[aiosqlite.Connection] = []
        self._open: list[aiosqlite.Connection] = []

    @property
    def open_connections(self) -> int:
        return len(self._open)

    async def _connect(self) -> aiosqlite.Connection:
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        # Autocommit; transaction() issues its own BEGIN
        conn = await aiosqlite.connect(self.db_path, isolation_level=None)
        conn.row_factory = aiosqlite.Row
        await conn.execute("PRAGMA journal_mode=WAL")
        await conn.execute(f"PRAGMA busy_timeout={self.busy_timeout}")

        self._open.append(conn)
        logger.debug("sqlite_connection_opened", db_path=str(self.db_path), open=len(self._open))
        return conn

    @asynccontextmanager
    async def acquire(self) -> AsyncIterator[aiosqlite.Connection]:
        """
        Borrow a connection for reads.

        Usage:
            async with pool.acquire() as conn:
                cursor = await conn.execute(...)
        """
        async with self._slots:
            conn = self._idle.pop() if self._idle else await self._connect()
            try:
                yield conn
            finally:
                self._idle.append(conn)

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[aiosqlite.Connection]:
        """Borrow a connection inside a write transaction; commit on exit, roll back on error."""
        async with self._write_lock, self.acquire() as conn:
            await conn.execute("BEGIN IMMEDIATE")
            try:
                yield conn
            except BaseException:
                await conn.rollback()
                raise
            await conn.commit()

    async def ping(self) -> None:
        """Open a connection and run a trivial query."""
        async with self.acquire() as conn:
            await conn.execute("SELECT 1")

    async def close(self) -> None:
        count = len(self._open)
        for conn in self._open:
            await conn.close()
        self._open.clear()
        self._idle.clear()
        if count:
            logger.info("connection_pool_closed", db_path=str(self.db_path), connections=count)


_pool: ConnectionPool | None = None


async def get_pool() -> ConnectionPool:
    """Shared pool for the configured database; checked with a ping on creation."""
    global _pool
    if _pool is None:
        settings = get_settings()
        pool = ConnectionPool(
            db_path=settings.storage.db_path,
            pool_size=settings.storage.pool_size,
            busy_timeout=settings.storage.busy_timeout,
        )
        await pool.ping()
        _pool = pool
    return _pool


async def close_pool() -> None:
    global _pool
    if _pool is not None:
        await _pool.close()
        _pool = None
