"""
Stock ledger: the single gate for changing a product's quantity.

Every quantity change is a compare-and-swap on the product's version
together with an appended StockMovement, inside one unit of work. A
version mismatch fails the whole operation with ConcurrencyConflictError;
the ledger never retries on its own because the caller has to re-check
its preconditions (stock may now be insufficient) after reloading.
"""

from dataclasses import dataclass
from datetime import UTC, datetime

from src.config import get_logger
from src.core.entities.events import LowStockDetected
from src.core.entities.product import Product
from src.core.entities.stock_movement import StockMovement, StockMovementType
from src.core.exceptions import (
    ConcurrencyConflictError,
    InsufficientStockError,
    ProductNotFoundError,
    ValidationError,
    WorkOrderNotFoundError,
)
from src.core.interfaces.storage import IUnitOfWork, UnitOfWorkFactory
from src.core.services.notification_dispatcher import NotificationDispatcher

logger = get_logger(__name__)


@dataclass
class MovementRequest:
    """Input for one ledger movement."""

    product_id: int
    movement_type: StockMovementType
    quantity: int
    performed_by: int
    increase: bool | None = None  # required for adjustments
    source_location: str = ""
    destination_location: str = ""
    reason: str = ""
    reference: str | None = None
    work_order_id: int | None = None
    expected_version: int | None = None


@dataclass
class MovementResult:
    """Created movement plus the product as stored after the update."""

    movement: StockMovement
    product: Product
    crossed_low_stock: bool = False


def signed_delta(movement_type: StockMovementType, quantity: int, increase: bool | None) -> int:
    """Quantity change a movement applies to the product."""
    if movement_type in (StockMovementType.RECEIPT, StockMovementType.RETURN):
        return quantity
    if movement_type == StockMovementType.ISSUE:
        return -quantity
    if movement_type == StockMovementType.ADJUSTMENT:
        if increase is None:
            raise ValidationError("increase", "Adjustments require an explicit direction")
        return quantity if increase else -quantity
    return 0


class StockLedgerService:
    """Records stock movements under optimistic concurrency."""

    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        dispatcher: NotificationDispatcher | None = None,
        notify_low_stock: bool = True,
    ):
        self._uow_factory = uow_factory
        self._dispatcher = dispatcher
        self._notify_low_stock = notify_low_stock

    async def record_movement(self, request: MovementRequest) -> MovementResult:
        """Apply one movement in its own transaction."""
        async with self._uow_factory() as uow:
            result = await self.apply_movement(uow, request)

        self.notify(result)
        return result

    async def apply_movement(self, uow: IUnitOfWork, request: MovementRequest) -> MovementResult:
        """
        Apply one movement inside the caller's unit of work.

        Nothing is committed here; callers that batch several movements
        (work order issuance) commit or roll back all of them together.
        """
        if request.quantity <= 0:
            raise ValidationError("quantity", "Quantity must be greater than zero", request.quantity)

        delta = signed_delta(request.movement_type, request.quantity, request.increase)

        product = await uow.products.get(request.product_id)
        if product is None:
            raise ProductNotFoundError(request.product_id)

        if request.work_order_id is not None and await uow.work_orders.get(request.work_order_id) is None:
            raise WorkOrderNotFoundError(request.work_order_id)

        if request.expected_version is not None and request.expected_version != product.version:
            logger.info(
                "stale_product_version",
                product_id=product.id,
                expected_version=request.expected_version,
                actual_version=product.version,
            )
            raise ConcurrencyConflictError(
                "Product",
                request.product_id,
                expected_version=request.expected_version,
                actual_version=product.version,
            )

        if delta < 0 and product.quantity < request.quantity:
            raise InsufficientStockError(
                product_id=request.product_id,
                available=product.quantity,
                requested=request.quantity,
            )

        was_low = product.is_low_stock
        read_version = product.version
        source_location = request.source_location or product.location

        product.quantity += delta
        if request.movement_type == StockMovementType.TRANSFER and request.destination_location:
            product.location = request.destination_location
        product.updated_at = datetime.now(UTC)
        product.updated_by = request.performed_by

        product = await uow.products.update(product, expected_version=read_version)

        movement = StockMovement(
            product_id=request.product_id,
            movement_type=request.movement_type,
            quantity=request.quantity,
            increase=request.increase if request.movement_type == StockMovementType.ADJUSTMENT else None,
            source_location=source_location,
            destination_location=request.destination_location,
            reason=request.reason,
            reference=request.reference,
            work_order_id=request.work_order_id,
            performed_by=request.performed_by,
            unit_cost=product.unit_cost,
            quantity_after=product.quantity,
            timestamp=datetime.now(UTC),
        )
        movement = await uow.movements.add(movement)

        logger.info(
            "stock_movement_applied",
            product_id=product.id,
            movement_id=movement.id,
            type=movement.movement_type.value,
            delta=delta,
            quantity=product.quantity,
            version=product.version,
        )

        return MovementResult(
            movement=movement,
            product=product,
            crossed_low_stock=delta < 0 and not was_low and product.is_low_stock,
        )

    def notify(self, result: MovementResult) -> None:
        """Emit low-stock events for a committed movement."""
        if not (self._dispatcher and self._notify_low_stock and result.crossed_low_stock):
            return
        product = result.product
        self._dispatcher.dispatch(
            LowStockDetected(
                product_id=product.id,  # type: ignore[arg-type]
                sku=product.sku,
                name=product.name,
                quantity=product.quantity,
                reorder_point=product.reorder_point,
                reorder_quantity=product.reorder_quantity,
            )
        )
