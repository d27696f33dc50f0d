"""
Issue Work Order Items Use Case.

All lines or none.
"""

from src.application.dto.mappers import movement_to_response, work_order_to_response
from src.application.dto.requests import IssueItemsRequest
from src.application.dto.responses import IssueItemsResponse
from src.core.services import IssueLine, IssueResult, WorkOrderLifecycleService


class IssueWorkOrderItemsUseCase:
    """Issue stock against an in-progress work order."""

    def __init__(self, work_order_service: WorkOrderLifecycleService | None = None):
        self._service = work_order_service

    async def _get_service(self) -> WorkOrderLifecycleService:
        if self._service is None:
            from src.application.services import get_work_order_service

            self._service = await get_work_order_service()
        return self._service

    async def execute(
        self, work_order_id: int, request: IssueItemsRequest, performed_by: int
    ) -> IssueResult:
        service = await self._get_service()
        return await service.issue_items(
            work_order_id,
            [
                IssueLine(
                    product_id=line.product_id,
                    quantity=line.quantity,
                    from_location=line.from_location,
                    notes=line.notes,
                )
                for line in request.items
            ],
            performed_by=performed_by,
            expected_version=request.expected_version,
        )

    def to_response(self, result: IssueResult) -> IssueItemsResponse:
        return IssueItemsResponse(
            work_order=work_order_to_response(result.work_order),
            movements=[movement_to_response(m) for m in result.movements],
        )
