"""
Register Product Use Case.

New product plus opening stock receipt.
"""

from dataclasses import dataclass

from src.application.dto.mappers import product_to_response
from src.application.dto.requests import RegisterProductRequest
from src.application.dto.responses import ProductResponse
from src.config import get_logger
from src.core.entities.product import Product
from src.core.entities.stock_movement import StockMovement, StockMovementType
from src.core.exceptions import DuplicateSkuError, ValidationError
from src.core.interfaces import UnitOfWorkFactory
from src.core.services import MovementRequest, StockLedgerService, validate_product

logger = get_logger(__name__)


@dataclass
class RegisterProductResult:
    product: Product
    opening_movement: StockMovement | None = None


class RegisterProductUseCase:
    """
    Register a product.

    The product is inserted with zero stock and any initial quantity is
    booked through the ledger as a receipt, in the same transaction, so
    the movement log always sums to the product's quantity.
    """

    def __init__(
        self,
        uow_factory: UnitOfWorkFactory | None = None,
        ledger: StockLedgerService | None = None,
    ):
        self._uow_factory = uow_factory
        self._ledger = ledger

    async def _get_uow_factory(self) -> UnitOfWorkFactory:
        if self._uow_factory is None:
            from src.application.services import get_uow_factory

            self._uow_factory = await get_uow_factory()
        return self._uow_factory

    async def _get_ledger(self) -> StockLedgerService:
        if self._ledger is None:
            from src.application.services import get_stock_ledger_service

            self._ledger = await get_stock_ledger_service(self._uow_factory)
        return self._ledger

    async def execute(self, request: RegisterProductRequest, performed_by: int) -> RegisterProductResult:
        if request.initial_quantity < 0:
            raise ValidationError(
                "initial_quantity", "Current stock cannot be negative", request.initial_quantity
            )

        product = validate_product(
            Product(
                sku=request.sku,
                name=request.name,
                description=request.description,
                category=request.category,
                quantity=0,
                reorder_point=request.reorder_point,
                reorder_quantity=request.reorder_quantity,
                unit_cost=request.unit_cost,
                unit_of_measure=request.unit_of_measure,
                location=request.location,
                costing_method=request.costing_method,
                created_by=performed_by,
                updated_by=performed_by,
            )
        )

        uow_factory = await self._get_uow_factory()
        ledger = await self._get_ledger()
        movement = None

        async with uow_factory() as uow:
            # soft-deleted products keep their SKU
            if await uow.products.get_by_sku(product.sku, include_deleted=True) is not None:
                raise DuplicateSkuError(product.sku)

            product = await uow.products.add(product)

            if request.initial_quantity > 0:
                result = await ledger.apply_movement(
                    uow,
                    MovementRequest(
                        product_id=product.id,  # type: ignore[arg-type]
                        movement_type=StockMovementType.RECEIPT,
                        quantity=request.initial_quantity,
                        performed_by=performed_by,
                        destination_location=product.location,
                        reason="Initial stock",
                    ),
                )
                product, movement = result.product, result.movement

        logger.info(
            "product_registered",
            product_id=product.id,
            sku=product.sku,
            quantity=product.quantity,
        )
        return RegisterProductResult(product=product, opening_movement=movement)

    def to_response(self, result: RegisterProductResult) -> ProductResponse:
        return product_to_response(result.product)

