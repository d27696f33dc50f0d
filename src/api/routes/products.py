"""Product catalog endpoints."""

from fastapi import APIRouter, Depends, Query, Response, status

from src.api.dependencies import (
    Page,
    get_acting_user_id,
    get_delete_product_use_case,
    get_page,
    get_register_product_use_case,
    get_uow,
    get_update_product_use_case,
)
from src.application.dto.mappers import product_to_response
from src.application.dto.requests import RegisterProductRequest, UpdateProductRequest
from src.application.dto.responses import ErrorResponse, ProductListResponse, ProductResponse
from src.application.use_cases.delete_product import DeleteProductUseCase
from src.application.use_cases.register_product import RegisterProductUseCase
from src.application.use_cases.update_product import UpdateProductUseCase
from src.core.exceptions import ProductNotFoundError
from src.core.interfaces import ProductQuery, UnitOfWorkFactory

router = APIRouter(prefix="/api/products", tags=["products"])


@router.post(
    "",
    response_model=ProductResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}},
)
async def register_product(
    request: RegisterProductRequest,
    user_id: int = Depends(get_acting_user_id),
    use_case: RegisterProductUseCase = Depends(get_register_product_use_case),
) -> ProductResponse:
    """Register a product; initial quantity is booked as a receipt."""
    result = await use_case.execute(request, performed_by=user_id)
    return use_case.to_response(result)


@router.get("", response_model=ProductListResponse)
async def list_products(
    category: str | None = None,
    search: str | None = Query(default=None, description="Matches SKU or name"),
    low_stock: bool = False,
    include_deleted: bool = False,
    page: Page = Depends(get_page),
    uow_factory: UnitOfWorkFactory = Depends(get_uow),
) -> ProductListResponse:
    """List products with filters and pagination."""
    query = ProductQuery(
        category=category,
        search=search,
        low_stock_only=low_stock,
        include_deleted=include_deleted,
        limit=page.limit,
        offset=page.offset,
    )
    async with uow_factory() as uow:
        products = await uow.products.list_products(query)
        total = await uow.products.count_products(query)

    return ProductListResponse(
        items=[product_to_response(p) for p in products],
        total=total,
        limit=page.limit,
        offset=page.offset,
        has_more=page.offset + len(products) < total,
    )


@router.get(
    "/{product_id}",
    response_model=ProductResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_product(
    product_id: int,
    include_deleted: bool = False,
    uow_factory: UnitOfWorkFactory = Depends(get_uow),
) -> ProductResponse:
    """Get a product by ID."""
    async with uow_factory() as uow:
        product = await uow.products.get(product_id, include_deleted=include_deleted)
    if product is None:
        raise ProductNotFoundError(product_id)
    return product_to_response(product)


@router.put(
    "/{product_id}",
    response_model=ProductResponse,
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
)
async def update_product(
    product_id: int,
    request: UpdateProductRequest,
    user_id: int = Depends(get_acting_user_id),
    use_case: UpdateProductUseCase = Depends(get_update_product_use_case),
) -> ProductResponse:
    """Update descriptive attributes. Send expected_version to guard against lost updates."""
    product = await use_case.execute(product_id, request, performed_by=user_id)
    return use_case.to_response(product)


@router.delete(
    "/{product_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
    },
)
async def delete_product(
    product_id: int,
    expected_version: int | None = None,
    user_id: int = Depends(get_acting_user_id),
    use_case: DeleteProductUseCase = Depends(get_delete_product_use_case),
) -> Response:
    """Soft-delete a product that no open work order uses."""
    await use_case.execute(product_id, performed_by=user_id, expected_version=expected_version)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
