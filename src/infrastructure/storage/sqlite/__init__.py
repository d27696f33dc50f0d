"""SQLite storage implementations."""

from src.infrastructure.storage.sqlite.connection import (
    ConnectionPool,
    close_pool,
    get_pool,
    set_pool,
)
from src.infrastructure.storage.sqlite.movement_repository import (
    SQLiteStockMovementRepository,
)
from src.infrastructure.storage.sqlite.product_repository import SQLiteProductRepository
from src.infrastructure.storage.sqlite.unit_of_work import (
    SQLiteUnitOfWork,
    SQLiteUnitOfWorkFactory,
)
from src.infrastructure.storage.sqlite.user_repository import SQLiteUserRepository
from src.infrastructure.storage.sqlite.work_order_repository import (
    SQLiteWorkOrderRepository,
)

# Singleton factory bound to the global pool
_uow_factory: SQLiteUnitOfWorkFactory | None = None


async def get_unit_of_work_factory() -> SQLiteUnitOfWorkFactory:
    """Get singleton unit-of-work factory on the global pool."""
    global _uow_factory
    if _uow_factory is None:
        _uow_factory = SQLiteUnitOfWorkFactory(await get_pool())
    return _uow_factory


def reset_unit_of_work_factory() -> None:
    global _uow_factory
    _uow_factory = None


__all__ = [
    # Connection
    "ConnectionPool",
    "get_pool",
    "set_pool",
    "close_pool",
    # Unit of work
    "SQLiteUnitOfWork",
    "SQLiteUnitOfWorkFactory",
    "get_unit_of_work_factory",
    "reset_unit_of_work_factory",
    # Repositories
    "SQLiteProductRepository",
    "SQLiteWorkOrderRepository",
    "SQLiteStockMovementRepository",
    "SQLiteUserRepository",
]
