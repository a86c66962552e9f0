"""
aiosqlite connection pool for the costing database.

Connections are opened eagerly, configured with the pragmas below and handed
out through a queue. Driver errors raised while a connection is checked out
are re-raised as DatabaseError.
"""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

import aiosqlite

from rmc.config import get_logger, get_settings
from rmc.core.exceptions import DatabaseError

logger = get_logger(__name__)

# Applied to every pooled connection; cascading deletes need foreign_keys
CONNECTION_PRAGMAS = (
    "PRAGMA journal_mode=WAL",
    "PRAGMA synchronous=NORMAL",
    "PRAGMA foreign_keys=ON",
)


class ConnectionPool:
    """Fixed-size pool of connections to one SQLite file."""

    def __init__(self, db_path: Path, pool_size: int = 5, busy_timeout: int = 30000):
        self.db_path = db_path
        self.pool_size = pool_size
        self.busy_timeout = busy_timeout

        self._idle: asyncio.Queue[aiosqlite.Connection] = asyncio.Queue()
        self._connections: list[aiosqlite.Connection] = []
        self._initialized = False
        self._init_lock = asyncio.Lock()

    @property
    def idle_count(self) -> int:
        """Connections currently checked in."""
        return self._idle.qsize()

    async def initialize(self) -> None:
        """Open all connections. Safe to call more than once."""
        async with self._init_lock:
            if self._initialized:
                return

            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            try:
                while len(self._connections) < self.pool_size:
                    conn = await self._open()
                    self._connections.append(conn)
                    self._idle.put_nowait(conn)
            except aiosqlite.Error as e:
                await self._close_all()
                raise DatabaseError("connect", str(e)) from e

            self._initialized = True

        logger.info(
            "sqlite_pool_ready",
            db_path=str(self.db_path),
            pool_size=self.pool_size,
            busy_timeout_ms=self.busy_timeout,
        )

    async def _open(self) -> aiosqlite.Connection:
        conn = await aiosqlite.connect(self.db_path)
        conn.row_factory = aiosqlite.Row
        await conn.execute(f"PRAGMA busy_timeout={int(self.busy_timeout)}")
        for pragma in CONNECTION_PRAGMAS:
            await conn.execute(pragma)
        return conn

    @asynccontextmanager
    async def acquire(self) -> AsyncIterator[aiosqlite.Connection]:
        """
        Check a connection out for the duration of the block.

        Usage:
            async with pool.acquire() as conn:
                cursor = await conn.execute("SELECT ...")
        """
        if not self._initialized:
            await self.initialize()

        conn = await self._idle.get()
        try:
            yield conn
        except aiosqlite.Error as e:
            logger.error("sqlite_query_failed", error=str(e), error_type=type(e).__name__)
            raise DatabaseError("query", str(e)) from e
        finally:
            self._idle.put_nowait(conn)

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[aiosqlite.Connection]:
        """
        Check a connection out inside BEGIN IMMEDIATE / COMMIT.

        The write lock is taken when the block starts. Any exception rolls
        the whole block back.
        """
        async with self.acquire() as conn:
            if not conn.in_transaction:
                await conn.execute("BEGIN IMMEDIATE")
            try:
                yield conn
            except BaseException:
                await conn.rollback()
                raise
            await conn.commit()

    async def close(self) -> None:
        """Close every connection; the pool can be initialized again."""
        async with self._init_lock:
            await self._close_all()
            self._initialized = False
        logger.info("sqlite_pool_closed", db_path=str(self.db_path))

    async def _close_all(self) -> None:
        while self._connections:
            await self._connections.pop().close()
        self._idle = asyncio.Queue()


_pool: ConnectionPool | None = None


async def get_pool() -> ConnectionPool:
    """Process-wide pool, built from the storage settings on first use."""
    global _pool
    if _pool is None:
        storage = get_settings().storage
        _pool = ConnectionPool(
            storage.db_path,
            pool_size=storage.pool_size,
            busy_timeout=storage.busy_timeout,
        )
        await _pool.initialize()
    return _pool


async def close_pool() -> None:
    global _pool
    if _pool is not None:
        await _pool.close()
        _pool = None


@asynccontextmanager
async def get_connection() -> AsyncIterator[aiosqlite.Connection]:
    """Read access through the process-wide pool."""
    pool = await get_pool()
    async with pool.acquire() as conn:
        yield conn


@asynccontextmanager
async def get_transaction() -> AsyncIterator[aiosqlite.Connection]:
    """Write access through the process-wide pool, committed as one unit."""
    pool = await get_pool()
    async with pool.transaction() as conn:
        yield conn
