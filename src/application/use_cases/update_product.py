"""
Update Product Use Case.

Descriptive attributes under a version check.
"""

from datetime import UTC, datetime

from src.application.dto.mappers import product_to_response
from src.application.dto.requests import UpdateProductRequest
from src.application.dto.responses import ProductResponse
from src.config import get_logger
from src.core.entities.product import Product
from src.core.exceptions import ConcurrencyConflictError, ProductNotFoundError
from src.core.interfaces import UnitOfWorkFactory
from src.core.services import validate_product

logger = get_logger(__name__)

# quantity and sku are deliberately absent
UPDATABLE_FIELDS = (
    "name",
    "description",
    "category",
    "reorder_point",
    "reorder_quantity",
    "unit_cost",
    "unit_of_measure",
    "location",
    "costing_method",
)


class UpdateProductUseCase:
    """Change a product's descriptive attributes. Stock never changes here."""

    def __init__(self, uow_factory: UnitOfWorkFactory | None = None):
        self._uow_factory = uow_factory

    async def _get_uow_factory(self) -> UnitOfWorkFactory:
        if self._uow_factory is None:
            from src.application.services import get_uow_factory

            self._uow_factory = await get_uow_factory()
        return self._uow_factory

    async def execute(
        self, product_id: int, request: UpdateProductRequest, performed_by: int
    ) -> Product:
        uow_factory = await self._get_uow_factory()

        async with uow_factory() as uow:
            product = await uow.products.get(product_id)
            if product is None:
                raise ProductNotFoundError(product_id)

            if request.expected_version is not None and request.expected_version != product.version:
                raise ConcurrencyConflictError(
                    "Product",
                    product_id,
                    expected_version=request.expected_version,
                    actual_version=product.version,
                )

            changes = {
                field: getattr(request, field)
                for field in UPDATABLE_FIELDS
                if getattr(request, field) is not None
            }
            updated = validate_product(product.model_copy(update=changes))
            updated.updated_at = datetime.now(UTC)
            updated.updated_by = performed_by

            updated = await uow.products.update(updated, expected_version=product.version)

        logger.info(
            "product_updated",
            product_id=product_id,
            fields=sorted(changes),
            version=updated.version,
        )
        return updated

    def to_response(self, product: Product) -> ProductResponse:
        return product_to_response(product)
