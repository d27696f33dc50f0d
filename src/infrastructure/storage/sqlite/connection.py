"""
Pooled aiosqlite connections for the stock database.

A unit of work borrows one connection for its whole lifetime, so every
statement of an operation shares a single transaction. Writers on
different connections queue on SQLite's write lock for up to
``busy_timeout`` milliseconds; lost updates are prevented by the version
compare-and-swap in the repositories, not here.
"""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass
from pathlib import Path

import aiosqlite

from src.config import get_logger, get_settings
from src.core.exceptions import DatabaseError

logger = get_logger(__name__)

# Applied to every new connection, in order
_PRAGMAS = (
    "PRAGMA journal_mode=WAL",
    "PRAGMA synchronous=NORMAL",
    "PRAGMA foreign_keys=ON",
)


@dataclass(frozen=True)
class PoolStats:
    size: int
    idle: int

    @property
    def in_use(self) -> int:
        return self.size - self.idle


class ConnectionPool:
    """
    Fixed-size pool of SQLite connections.

    Callers wait for a free connection. With ``acquire_timeout`` set the
    wait is bounded and an exhausted pool raises DatabaseError.
    """

    def __init__(
        self,
        db_path: Path,
        pool_size: int = 5,
        busy_timeout: int = 30000,
        acquire_timeout: float | None = None,
    ):
        self.db_path = Path(db_path)
        self.pool_size = pool_size
        self.busy_timeout = busy_timeout
        self.acquire_timeout = acquire_timeout

        self._idle: asyncio.Queue[aiosqlite.Connection] = asyncio.Queue(maxsize=pool_size)
        self._opened: list[aiosqlite.Connection] = []
        self._lock = asyncio.Lock()

    @property
    def initialized(self) -> bool:
        return bool(self._opened)

    @property
    def available(self) -> int:
        """Connections currently idle in the pool."""
        return self._idle.qsize()

    def stats(self) -> PoolStats:
        return PoolStats(size=len(self._opened), idle=self._idle.qsize())

    async def initialize(self) -> None:
        async with self._lock:
            if self._opened:
                return

            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            for _ in range(self.pool_size):
                conn = await self._open()
                self._opened.append(conn)
                self._idle.put_nowait(conn)

        logger.info(
            "connection_pool_initialized",
            db_path=str(self.db_path),
            pool_size=self.pool_size,
        )

    async def _open(self) -> aiosqlite.Connection:
        conn = await aiosqlite.connect(self.db_path, timeout=self.busy_timeout / 1000)
        for pragma in _PRAGMAS:
            await conn.execute(pragma)
        await conn.execute(f"PRAGMA busy_timeout={int(self.busy_timeout)}")
        conn.row_factory = aiosqlite.Row
        return conn

    async def _checkout(self) -> aiosqlite.Connection:
        if self.acquire_timeout is None:
            return await self._idle.get()
        try:
            async with asyncio.timeout(self.acquire_timeout):
                return await self._idle.get()
        except TimeoutError as e:
            logger.warning("connection_pool_exhausted", pool_size=self.pool_size)
            raise DatabaseError(
                "acquire connection",
                f"no connection free after {self.acquire_timeout}s",
            ) from e

    @asynccontextmanager
    async def acquire(self) -> AsyncIterator[aiosqlite.Connection]:
        """
        Borrow a connection for the duration of the block.

        A transaction left open by the borrower is rolled back before the
        connection goes back to the pool.
        """
        if not self._opened:
            await self.initialize()

        conn = await self._checkout()
        try:
            yield conn
        finally:
            if conn.in_transaction:
                await conn.rollback()
            self._idle.put_nowait(conn)

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[aiosqlite.Connection]:
        """Borrow a connection; commit on success, roll back on exception."""
        async with self.acquire() as conn:
            try:
                yield conn
                await conn.commit()
            except Exception:
                await conn.rollback()
                raise

    async def ping(self) -> bool:
        async with self.acquire() as conn:
            async with conn.execute("SELECT 1") as cursor:
                row = await cursor.fetchone()
        return row is not None and row[0] == 1

    async def close(self) -> None:
        async with self._lock:
            opened, self._opened = self._opened, []
            while not self._idle.empty():
                self._idle.get_nowait()
            for conn in opened:
                await conn.close()
        logger.info("connection_pool_closed", db_path=str(self.db_path))


_pool: ConnectionPool | None = None


async def get_pool() -> ConnectionPool:
    """Global pool built from storage settings."""
    global _pool
    if _pool is None:
        storage = get_settings().storage
        _pool = ConnectionPool(
            db_path=storage.db_path,
            pool_size=storage.pool_size,
            busy_timeout=storage.busy_timeout,
            acquire_timeout=storage.acquire_timeout,
        )
        await _pool.initialize()
    return _pool


def set_pool(pool: ConnectionPool | None) -> None:
    """Replace the global pool (tests and custom wiring)."""
    global _pool
    _pool = pool


async def close_pool() -> None:
    global _pool
    if _pool is not None:
        await _pool.close()
        _pool = None
