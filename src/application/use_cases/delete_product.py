"""
Delete Product Use Case.

Soft delete.
"""

from datetime import UTC, datetime

from src.config import get_logger
from src.core.exceptions import (
    ConcurrencyConflictError,
    ProductInUseError,
    ProductNotFoundError,
)
from src.core.interfaces import UnitOfWorkFactory

logger = get_logger(__name__)


class DeleteProductUseCase:
    """
    Soft-delete a product.

    Refused while any non-terminal work order still lists the product.
    Movements and completed work orders keep referring to the row.
    """

    def __init__(self, uow_factory: UnitOfWorkFactory | None = None):
        self._uow_factory = uow_factory

    async def _get_uow_factory(self) -> UnitOfWorkFactory:
        if self._uow_factory is None:
            from src.application.services import get_uow_factory

            self._uow_factory = await get_uow_factory()
        return self._uow_factory

    async def execute(
        self, product_id: int, performed_by: int, expected_version: int | None = None
    ) -> None:
        uow_factory = await self._get_uow_factory()

        async with uow_factory() as uow:
            product = await uow.products.get(product_id)
            if product is None:
                raise ProductNotFoundError(product_id)

            if expected_version is not None and expected_version != product.version:
                raise ConcurrencyConflictError(
                    "Product",
                    product_id,
                    expected_version=expected_version,
                    actual_version=product.version,
                )

            open_orders = await uow.products.count_open_references(product_id)
            if open_orders:
                raise ProductInUseError(product_id, open_orders)

            now = datetime.now(UTC)
            deleted = product.model_copy(
                update={
                    "is_deleted": True,
                    "deleted_at": now,
                    "deleted_by": performed_by,
                    "updated_at": now,
                    "updated_by": performed_by,
                }
            )
            await uow.products.update(deleted, expected_version=product.version)

        logger.info("product_deleted", product_id=product_id, sku=product.sku)
