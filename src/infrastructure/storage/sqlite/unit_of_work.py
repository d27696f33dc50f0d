"""SQLite unit of work: one pooled connection, one transaction."""

from contextlib import AsyncExitStack
from types import TracebackType

import aiosqlite

from src.config import get_logger
from src.core.exceptions import DatabaseError
from src.core.interfaces.storage import IUnitOfWork
from src.infrastructure.storage.sqlite.connection import ConnectionPool
from src.infrastructure.storage.sqlite.movement_repository import (
    SQLiteStockMovementRepository,
)
from src.infrastructure.storage.sqlite.product_repository import SQLiteProductRepository
from src.infrastructure.storage.sqlite.user_repository import SQLiteUserRepository
from src.infrastructure.storage.sqlite.work_order_repository import (
    SQLiteWorkOrderRepository,
)

logger = get_logger(__name__)


class SQLiteUnitOfWork(IUnitOfWork):
    """
    Binds all repositories to a single connection borrowed from the pool.

    Commits on clean exit and rolls back if the block raises, so a
    multi-step operation either lands completely or leaves no trace.
    """

    def __init__(self, pool: ConnectionPool):
        self._pool = pool
        self._stack: AsyncExitStack | None = None
        self._conn: aiosqlite.Connection | None = None

    async def __aenter__(self) -> "SQLiteUnitOfWork":
        if self._stack is not None:
            raise RuntimeError("Unit of work is already active")

        stack = AsyncExitStack()
        self._conn = await stack.enter_async_context(self._pool.acquire())
        self._stack = stack

        self.products = SQLiteProductRepository(self._conn)
        self.work_orders = SQLiteWorkOrderRepository(self._conn)
        self.movements = SQLiteStockMovementRepository(self._conn)
        self.users = SQLiteUserRepository(self._conn)
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        try:
            if exc_type is None:
                await self.commit()
            else:
                await self.rollback()
                logger.debug("unit_of_work_rolled_back", error=type(exc).__name__)
        finally:
            stack, self._stack, self._conn = self._stack, None, None
            if stack is not None:
                await stack.aclose()

    async def commit(self) -> None:
        if self._conn is None:
            raise RuntimeError("Unit of work is not active")
        try:
            await self._conn.commit()
        except aiosqlite.Error as e:
            await self._conn.rollback()
            raise DatabaseError("commit", str(e)) from e

    async def rollback(self) -> None:
        if self._conn is not None:
            await self._conn.rollback()


class SQLiteUnitOfWorkFactory:
    """Callable producing a fresh unit of work per operation."""

    def __init__(self, pool: ConnectionPool):
        self.pool = pool

    def __call__(self) -> SQLiteUnitOfWork:
        return SQLiteUnitOfWork(self.pool)
