"""
Abstract interfaces for persistence.

Repositories are always obtained from a unit of work so that every read
and write in one operation shares a single store transaction.
"""

from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass
from datetime import date, datetime
from types import TracebackType

from src.core.entities.product import Product
from src.core.entities.stock_movement import StockMovement, StockMovementType
from src.core.entities.user import User, UserRole
from src.core.entities.work_order import WorkOrder, WorkOrderPriority, WorkOrderStatus


@dataclass
class ProductQuery:
    """Filters for listing products."""

    category: str | None = None
    search: str | None = None  # matches SKU or name
    low_stock_only: bool = False
    include_deleted: bool = False
    limit: int = 20
    offset: int = 0


@dataclass
class MovementQuery:
    """Filters for listing stock movements."""

    product_id: int | None = None
    movement_type: StockMovementType | None = None
    work_order_id: int | None = None
    from_date: datetime | None = None
    to_date: datetime | None = None
    limit: int = 20
    offset: int = 0


@dataclass
class WorkOrderQuery:
    """Filters for listing work orders."""

    status: WorkOrderStatus | None = None
    priority: WorkOrderPriority | None = None
    assigned_to: int | None = None
    requested_by: int | None = None
    limit: int = 20
    offset: int = 0


class IProductRepository(ABC):
    """Product persistence. Soft-deleted rows are excluded unless asked for."""

    @abstractmethod
    async def add(self, product: Product) -> Product:
        """Insert a product; assigns id and version 1."""
        pass

    @abstractmethod
    async def get(self, product_id: int, include_deleted: bool = False) -> Product | None:
        """Get product by ID."""
        pass

    @abstractmethod
    async def get_by_sku(self, sku: str, include_deleted: bool = False) -> Product | None:
        """Get product by SKU."""
        pass

    @abstractmethod
    async def list_products(self, query: ProductQuery) -> list[Product]:
        """List products matching the query."""
        pass

    @abstractmethod
    async def count_products(self, query: ProductQuery) -> int:
        """Count products matching the query (ignores limit/offset)."""
        pass

    @abstractmethod
    async def update(self, product: Product, expected_version: int) -> Product:
        """
        Write the product if the stored version equals expected_version.

        Raises ConcurrencyConflictError otherwise. Returns the product with
        its new version.
        """
        pass

    @abstractmethod
    async def count_open_references(self, product_id: int) -> int:
        """Count non-terminal work orders with an item for this product."""
        pass


class IWorkOrderRepository(ABC):
    """Work order persistence (header and items together)."""

    @abstractmethod
    async def add(self, work_order: WorkOrder) -> WorkOrder:
        """Insert a work order with its items."""
        pass

    @abstractmethod
    async def get(self, work_order_id: int) -> WorkOrder | None:
        """Get a work order with its items."""
        pass

    @abstractmethod
    async def list_work_orders(self, query: WorkOrderQuery) -> list[WorkOrder]:
        """List work orders with their items."""
        pass

    @abstractmethod
    async def count_work_orders(self, query: WorkOrderQuery) -> int:
        """Count work orders matching the query."""
        pass

    @abstractmethod
    async def count_created_on(self, day: date) -> int:
        """Count work orders created on a UTC calendar day."""
        pass

    @abstractmethod
    async def update(self, work_order: WorkOrder, expected_version: int) -> WorkOrder:
        """
        Write header and item issued quantities if the stored version
        equals expected_version; raises ConcurrencyConflictError otherwise.
        """
        pass


class IStockMovementRepository(ABC):
    """Append-only movement log. There is no update or delete."""

    @abstractmethod
    async def add(self, movement: StockMovement) -> StockMovement:
        """Append a movement."""
        pass

    @abstractmethod
    async def list_movements(self, query: MovementQuery) -> list[StockMovement]:
        """List movements, newest first."""
        pass

    @abstractmethod
    async def count_movements(self, query: MovementQuery) -> int:
        """Count movements matching the query."""
        pass


class IUserRepository(ABC):
    """User persistence."""

    @abstractmethod
    async def add(self, user: User) -> User:
        pass

    @abstractmethod
    async def get(self, user_id: int) -> User | None:
        pass

    @abstractmethod
    async def get_by_email(self, email: str) -> User | None:
        pass

    @abstractmethod
    async def list_users(
        self,
        role: UserRole | None = None,
        active_only: bool = False,
        limit: int = 100,
        offset: int = 0,
    ) -> list[User]:
        pass


class IUnitOfWork(ABC):
    """
    One store transaction.

    Usage:
        async with uow_factory() as uow:
            product = await uow.products.get(1)
            ...
    Commits on clean exit, rolls back if the block raises.
    """

    products: IProductRepository
    work_orders: IWorkOrderRepository
    movements: IStockMovementRepository
    users: IUserRepository

    @abstractmethod
    async def __aenter__(self) -> "IUnitOfWork":
        pass

    @abstractmethod
    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        pass

    @abstractmethod
    async def commit(self) -> None:
        pass

    @abstractmethod
    async def rollback(self) -> None:
        pass


UnitOfWorkFactory = Callable[[], IUnitOfWork]
