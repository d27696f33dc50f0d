"""Stock movement ledger endpoints."""

from datetime import datetime

from fastapi import APIRouter, Depends, status

from src.api.dependencies import (
    Page,
    get_acting_user_id,
    get_page,
    get_record_stock_movement_use_case,
    get_uow,
)
from src.application.dto.mappers import movement_to_response
from src.application.dto.requests import RecordStockMovementRequest
from src.application.dto.responses import (
    ErrorResponse,
    RecordStockMovementResponse,
    StockMovementListResponse,
)
from src.application.use_cases.record_stock_movement import RecordStockMovementUseCase
from src.core.entities.stock_movement import StockMovementType
from src.core.exceptions import ProductNotFoundError
from src.core.interfaces import MovementQuery, UnitOfWorkFactory

router = APIRouter(prefix="/api/stock-movements", tags=["stock-movements"])


async def _list(uow_factory: UnitOfWorkFactory, query: MovementQuery) -> StockMovementListResponse:
    async with uow_factory() as uow:
        movements = await uow.movements.list_movements(query)
        total = await uow.movements.count_movements(query)

    return StockMovementListResponse(
        items=[movement_to_response(m) for m in movements],
        total=total,
        limit=query.limit,
        offset=query.offset,
        has_more=query.offset + len(movements) < total,
    )


@router.post(
    "",
    response_model=RecordStockMovementResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
    },
)
async def record_stock_movement(
    request: RecordStockMovementRequest,
    user_id: int = Depends(get_acting_user_id),
    use_case: RecordStockMovementUseCase = Depends(get_record_stock_movement_use_case),
) -> RecordStockMovementResponse:
    """
    Record a movement.

    409 means the product changed since expected_version (or a racing
    writer won); reload and retry. 422 INSUFFICIENT_STOCK reports the
    amount short in details.
    """
    result = await use_case.execute(request, performed_by=user_id)
    return use_case.to_response(result)


@router.get("", response_model=StockMovementListResponse)
async def list_stock_movements(
    product_id: int | None = None,
    movement_type: StockMovementType | None = None,
    work_order_id: int | None = None,
    from_date: datetime | None = None,
    to_date: datetime | None = None,
    page: Page = Depends(get_page),
    uow_factory: UnitOfWorkFactory = Depends(get_uow),
) -> StockMovementListResponse:
    """List movements, newest first."""
    return await _list(
        uow_factory,
        MovementQuery(
            product_id=product_id,
            movement_type=movement_type,
            work_order_id=work_order_id,
            from_date=from_date,
            to_date=to_date,
            limit=page.limit,
            offset=page.offset,
        ),
    )


@router.get(
    "/product/{product_id}",
    response_model=StockMovementListResponse,
    responses={404: {"model": ErrorResponse}},
)
async def list_product_movements(
    product_id: int,
    page: Page = Depends(get_page),
    uow_factory: UnitOfWorkFactory = Depends(get_uow),
) -> StockMovementListResponse:
    """Movement history of one product (deleted products included)."""
    async with uow_factory() as uow:
        product = await uow.products.get(product_id, include_deleted=True)
    if product is None:
        raise ProductNotFoundError(product_id)

    return await _list(
        uow_factory,
        MovementQuery(product_id=product_id, limit=page.limit, offset=page.offset),
    )
