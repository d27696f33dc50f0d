"""Create Work Order Use Case."""

from src.application.dto.mappers import work_order_to_response
from src.application.dto.requests import CreateWorkOrderRequest
from src.application.dto.responses import WorkOrderResponse
from src.core.entities.work_order import WorkOrder
from src.core.services import NewWorkOrder, NewWorkOrderItem, WorkOrderLifecycleService


class CreateWorkOrderUseCase:
    """Create a draft work order for the acting user."""

    def __init__(self, work_order_service: WorkOrderLifecycleService | None = None):
        self._service = work_order_service

    async def _get_service(self) -> WorkOrderLifecycleService:
        if self._service is None:
            from src.application.services import get_work_order_service

            self._service = await get_work_order_service()
        return self._service

    async def execute(self, request: CreateWorkOrderRequest, requested_by: int) -> WorkOrder:
        service = await self._get_service()
        return await service.create(
            NewWorkOrder(
                title=request.title,
                description=request.description,
                priority=request.priority,
                due_date=request.due_date,
                items=[
                    NewWorkOrderItem(
                        product_id=item.product_id,
                        quantity_requested=item.quantity_requested,
                        notes=item.notes,
                    )
                    for item in request.items
                ],
            ),
            requested_by=requested_by,
        )

    def to_response(self, work_order: WorkOrder) -> WorkOrderResponse:
        return work_order_to_response(work_order)
