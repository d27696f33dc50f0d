"""Record Stock Movement Use Case."""

from src.application.dto.mappers import movement_to_response, product_to_response
from src.application.dto.requests import RecordStockMovementRequest
from src.application.dto.responses import RecordStockMovementResponse
from src.config import get_logger
from src.core.services import MovementRequest, MovementResult, StockLedgerService

logger = get_logger(__name__)


class RecordStockMovementUseCase:
    """Apply one receipt, issue, adjustment, transfer or return."""

    def __init__(self, ledger: StockLedgerService | None = None):
        self._ledger = ledger

    async def _get_ledger(self) -> StockLedgerService:
        if self._ledger is None:
            from src.application.services import get_stock_ledger_service

            self._ledger = await get_stock_ledger_service()
        return self._ledger

    async def execute(self, request: RecordStockMovementRequest, performed_by: int) -> MovementResult:
        logger.info(
            "record_stock_movement_started",
            product_id=request.product_id,
            type=request.movement_type.value,
            quantity=request.quantity,
        )

        ledger = await self._get_ledger()
        return await ledger.record_movement(
            MovementRequest(
                product_id=request.product_id,
                movement_type=request.movement_type,
                quantity=request.quantity,
                performed_by=performed_by,
                increase=request.increase,
                source_location=request.source_location,
                destination_location=request.destination_location,
                reason=request.reason,
                reference=request.reference,
                work_order_id=request.work_order_id,
                expected_version=request.expected_version,
            )
        )

    def to_response(self, result: MovementResult) -> RecordStockMovementResponse:
        return RecordStockMovementResponse(
            movement=movement_to_response(result.movement),
            product=product_to_response(result.product),
        )
