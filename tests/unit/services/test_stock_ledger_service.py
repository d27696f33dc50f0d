"""Tests for StockLedgerService with mocked repositories."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from src.core.entities.product import Product
from src.core.entities.stock_movement import StockMovementType
from src.core.entities.work_order import WorkOrder
from src.core.exceptions import (
    ConcurrencyConflictError,
    InsufficientStockError,
    ProductNotFoundError,
    ValidationError,
    WorkOrderNotFoundError,
)
from src.core.services import MovementRequest, StockLedgerService, signed_delta


class FakeUnitOfWork:
    """Async context manager exposing AsyncMock repositories."""

    def __init__(self):
        self.products = AsyncMock()
        self.movements = AsyncMock()
        self.work_orders = AsyncMock()
        self.users = AsyncMock()
        self.exits: list[type | None] = []

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        self.exits.append(exc_type)
        return False


@pytest.fixture
def uow():
    uow = FakeUnitOfWork()
    uow.products.update.side_effect = lambda product, expected_version: product.model_copy(
        update={"version": expected_version + 1}
    )
    uow.movements.add.side_effect = lambda movement: movement.model_copy(update={"id": 1})
    return uow


@pytest.fixture
def dispatcher():
    return MagicMock()


@pytest.fixture
def ledger(uow, dispatcher):
    return StockLedgerService(lambda: uow, dispatcher=dispatcher)


def stock(quantity: int, version: int = 7, reorder_point: int = 0) -> Product:
    return Product(
        id=1,
        sku="P-1",
        name="Widget",
        quantity=quantity,
        reorder_point=reorder_point,
        unit_cost=2.0,
        location="A-01",
        version=version,
    )


def request(movement_type=StockMovementType.ISSUE, quantity=5, **kwargs) -> MovementRequest:
    return MovementRequest(
        product_id=1, movement_type=movement_type, quantity=quantity, performed_by=9, **kwargs
    )


class TestSignedDelta:
    def test_directions(self):
        assert signed_delta(StockMovementType.RECEIPT, 3, None) == 3
        assert signed_delta(StockMovementType.RETURN, 3, None) == 3
        assert signed_delta(StockMovementType.ISSUE, 3, None) == -3
        assert signed_delta(StockMovementType.ADJUSTMENT, 3, True) == 3
        assert signed_delta(StockMovementType.ADJUSTMENT, 3, False) == -3
        assert signed_delta(StockMovementType.TRANSFER, 3, None) == 0

    def test_adjustment_needs_direction(self):
        with pytest.raises(ValidationError):
            signed_delta(StockMovementType.ADJUSTMENT, 3, None)


class TestRecordMovement:
    async def test_issue_decrements_and_writes_with_read_version(self, ledger, uow):
        uow.products.get.return_value = stock(40)

        result = await ledger.record_movement(request(quantity=5))

        assert result.product.quantity == 35
        assert result.product.version == 8
        uow.products.update.assert_awaited_once()
        assert uow.products.update.call_args.kwargs["expected_version"] == 7

        movement = uow.movements.add.call_args[0][0]
        assert movement.movement_type == StockMovementType.ISSUE
        assert movement.quantity == 5
        assert movement.quantity_after == 35
        assert movement.source_location == "A-01"
        assert movement.performed_by == 9

    async def test_receipt_increments(self, ledger, uow):
        uow.products.get.return_value = stock(40)
        result = await ledger.record_movement(request(StockMovementType.RECEIPT, 10))
        assert result.product.quantity == 50

    async def test_transfer_moves_location_only(self, ledger, uow):
        uow.products.get.return_value = stock(40)
        result = await ledger.record_movement(
            request(StockMovementType.TRANSFER, 40, destination_location="B-02")
        )
        assert result.product.quantity == 40
        assert result.product.location == "B-02"
        assert result.movement.source_location == "A-01"
        assert result.movement.destination_location == "B-02"

    async def test_insufficient_stock_touches_nothing(self, ledger, uow):
        uow.products.get.return_value = stock(4)

        with pytest.raises(InsufficientStockError) as exc_info:
            await ledger.record_movement(request(quantity=5))

        assert exc_info.value.available == 4
        assert exc_info.value.requested == 5
        uow.products.update.assert_not_awaited()
        uow.movements.add.assert_not_awaited()
        assert uow.exits == [InsufficientStockError]

    async def test_negative_adjustment_checks_stock(self, ledger, uow):
        uow.products.get.return_value = stock(2)
        with pytest.raises(InsufficientStockError):
            await ledger.record_movement(
                request(StockMovementType.ADJUSTMENT, 3, increase=False)
            )

    async def test_issue_to_exactly_zero(self, ledger, uow):
        uow.products.get.return_value = stock(5)
        result = await ledger.record_movement(request(quantity=5))
        assert result.product.quantity == 0

    @pytest.mark.parametrize("quantity", [0, -3])
    async def test_quantity_must_be_positive(self, ledger, uow, quantity):
        with pytest.raises(ValidationError):
            await ledger.record_movement(request(quantity=quantity))
        uow.products.get.assert_not_awaited()

    async def test_unknown_product(self, ledger, uow):
        uow.products.get.return_value = None
        with pytest.raises(ProductNotFoundError):
            await ledger.record_movement(request())

    async def test_unknown_work_order(self, ledger, uow):
        uow.products.get.return_value = stock(40)
        uow.work_orders.get.return_value = None
        with pytest.raises(WorkOrderNotFoundError):
            await ledger.record_movement(request(work_order_id=77))

    async def test_known_work_order_is_linked(self, ledger, uow):
        uow.products.get.return_value = stock(40)
        uow.work_orders.get.return_value = WorkOrder(id=77, title="t", requested_by=1)
        result = await ledger.record_movement(request(work_order_id=77))
        assert result.movement.work_order_id == 77

    async def test_stale_expected_version_conflicts_before_writing(self, ledger, uow):
        uow.products.get.return_value = stock(40, version=8)

        with pytest.raises(ConcurrencyConflictError) as exc_info:
            await ledger.record_movement(request(expected_version=7))

        assert exc_info.value.expected_version == 7
        assert exc_info.value.actual_version == 8
        uow.products.update.assert_not_awaited()

    async def test_conflict_from_store_propagates(self, ledger, uow):
        uow.products.get.return_value = stock(40)
        uow.products.update.side_effect = ConcurrencyConflictError("Product", 1, 7, 8)

        with pytest.raises(ConcurrencyConflictError):
            await ledger.record_movement(request())
        uow.movements.add.assert_not_awaited()


class TestLowStockNotification:
    async def test_crossing_threshold_dispatches(self, ledger, uow, dispatcher):
        uow.products.get.return_value = stock(12, reorder_point=10)

        result = await ledger.record_movement(request(quantity=3))

        assert result.crossed_low_stock
        event = dispatcher.dispatch.call_args[0][0]
        assert event.event_type == "product.low_stock"
        assert event.quantity == 9

    async def test_already_low_does_not_dispatch_again(self, ledger, uow, dispatcher):
        uow.products.get.return_value = stock(8, reorder_point=10)
        await ledger.record_movement(request(quantity=1))
        dispatcher.dispatch.assert_not_called()

    async def test_receipt_never_dispatches(self, ledger, uow, dispatcher):
        uow.products.get.return_value = stock(0, reorder_point=10)
        await ledger.record_movement(request(StockMovementType.RECEIPT, 1))
        dispatcher.dispatch.assert_not_called()

    async def test_disabled(self, uow, dispatcher):
        ledger = StockLedgerService(lambda: uow, dispatcher=dispatcher, notify_low_stock=False)
        uow.products.get.return_value = stock(12, reorder_point=10)
        await ledger.record_movement(request(quantity=3))
        dispatcher.dispatch.assert_not_called()
