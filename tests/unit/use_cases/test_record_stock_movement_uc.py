"""Tests for RecordStockMovementUseCase."""

from unittest.mock import AsyncMock

import pytest

from src.application.dto.requests import RecordStockMovementRequest
from src.application.use_cases.record_stock_movement import RecordStockMovementUseCase
from src.core.entities.product import Product
from src.core.entities.stock_movement import StockMovement, StockMovementType
from src.core.services import MovementResult, StockLedgerService


@pytest.fixture
def mock_ledger():
    ledger = AsyncMock(spec=StockLedgerService)
    ledger.record_movement.return_value = MovementResult(
        movement=StockMovement(
            id=3,
            product_id=1,
            movement_type=StockMovementType.ADJUSTMENT,
            quantity=4,
            increase=False,
            performed_by=7,
            quantity_after=36,
        ),
        product=Product(id=1, sku="P-1", name="Widget", quantity=36, version=8),
    )
    return ledger


@pytest.fixture
def use_case(mock_ledger):
    return RecordStockMovementUseCase(ledger=mock_ledger)


class TestRecordStockMovementUseCase:
    async def test_passes_request_to_ledger(self, use_case, mock_ledger):
        request = RecordStockMovementRequest(
            product_id=1,
            movement_type=StockMovementType.ADJUSTMENT,
            quantity=4,
            increase=False,
            reason="Cycle count",
            expected_version=7,
        )

        await use_case.execute(request, performed_by=7)

        movement_request = mock_ledger.record_movement.call_args[0][0]
        assert movement_request.product_id == 1
        assert movement_request.increase is False
        assert movement_request.performed_by == 7
        assert movement_request.expected_version == 7
        assert movement_request.reason == "Cycle count"

    async def test_response_has_signed_quantity_and_product(self, use_case, mock_ledger):
        result = await use_case.execute(
            RecordStockMovementRequest(
                product_id=1, movement_type=StockMovementType.ADJUSTMENT, quantity=4, increase=False
            ),
            performed_by=7,
        )
        response = use_case.to_response(result)

        assert response.movement.signed_quantity == -4
        assert response.product.quantity == 36
        assert response.product.version == 8
