"""
Dependency injection container for FastAPI.

Provides service instances to route handlers. Everything that touches
storage hangs off get_uow, so tests can point the whole API at another
database by overriding that one dependency.
"""

from dataclasses import dataclass

from fastapi import Depends, Header, Query

from src.application.services import (
    get_stock_ledger_service,
    get_uow_factory,
    get_work_order_service,
)
from src.application.use_cases import (
    CreateUserUseCase,
    CreateWorkOrderUseCase,
    DeleteProductUseCase,
    IssueWorkOrderItemsUseCase,
    RecordStockMovementUseCase,
    RegisterProductUseCase,
    TransitionWorkOrderUseCase,
    UpdateProductUseCase,
)
from src.config import get_settings
from src.core.exceptions import MissingActingUserError
from src.core.interfaces import UnitOfWorkFactory
from src.core.services import StockLedgerService, WorkOrderLifecycleService


def get_acting_user_id(
    x_user_id: str | None = Header(default=None, alias="X-User-Id"),
) -> int:
    """Acting user for audit fields; authentication happens upstream."""
    if not x_user_id:
        raise MissingActingUserError()
    try:
        return int(x_user_id)
    except ValueError:
        raise MissingActingUserError(x_user_id) from None


@dataclass
class Page:
    limit: int
    offset: int


def get_page(
    limit: int | None = Query(default=None, ge=1, description="Page size; capped by API_MAX_PAGE_SIZE"),
    offset: int = Query(default=0, ge=0),
) -> Page:
    """Resolve pagination against the configured page sizes."""
    api = get_settings().api
    if limit is None:
        limit = api.default_page_size
    return Page(limit=min(limit, api.max_page_size), offset=offset)


# Storage / service dependencies
async def get_uow() -> UnitOfWorkFactory:
    """Get unit-of-work factory."""
    return await get_uow_factory()


async def get_ledger(uow_factory: UnitOfWorkFactory = Depends(get_uow)) -> StockLedgerService:
    """Get stock ledger service."""
    return await get_stock_ledger_service(uow_factory)


async def get_work_orders(
    uow_factory: UnitOfWorkFactory = Depends(get_uow),
) -> WorkOrderLifecycleService:
    """Get work order lifecycle service."""
    return await get_work_order_service(uow_factory)


# Use case dependencies
def get_create_user_use_case(
    uow_factory: UnitOfWorkFactory = Depends(get_uow),
) -> CreateUserUseCase:
    return CreateUserUseCase(uow_factory)


def get_register_product_use_case(
    uow_factory: UnitOfWorkFactory = Depends(get_uow),
    ledger: StockLedgerService = Depends(get_ledger),
) -> RegisterProductUseCase:
    return RegisterProductUseCase(uow_factory, ledger)


def get_update_product_use_case(
    uow_factory: UnitOfWorkFactory = Depends(get_uow),
) -> UpdateProductUseCase:
    return UpdateProductUseCase(uow_factory)


def get_delete_product_use_case(
    uow_factory: UnitOfWorkFactory = Depends(get_uow),
) -> DeleteProductUseCase:
    return DeleteProductUseCase(uow_factory)


def get_record_stock_movement_use_case(
    ledger: StockLedgerService = Depends(get_ledger),
) -> RecordStockMovementUseCase:
    return RecordStockMovementUseCase(ledger)


def get_create_work_order_use_case(
    service: WorkOrderLifecycleService = Depends(get_work_orders),
) -> CreateWorkOrderUseCase:
    return CreateWorkOrderUseCase(service)


def get_transition_work_order_use_case(
    service: WorkOrderLifecycleService = Depends(get_work_orders),
) -> TransitionWorkOrderUseCase:
    return TransitionWorkOrderUseCase(service)


def get_issue_work_order_items_use_case(
    service: WorkOrderLifecycleService = Depends(get_work_orders),
) -> IssueWorkOrderItemsUseCase:
    return IssueWorkOrderItemsUseCase(service)
