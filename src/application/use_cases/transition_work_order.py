"""
Transition Work Order Use Case.

Submit, approve, reject, start, complete, cancel.
"""

from src.application.dto.mappers import work_order_to_response
from src.application.dto.responses import WorkOrderResponse
from src.config import get_logger
from src.core.entities.work_order import WorkOrder, WorkOrderAction
from src.core.services import WorkOrderLifecycleService

logger = get_logger(__name__)


class TransitionWorkOrderUseCase:
    """Apply one status-changing action to a work order."""

    def __init__(self, work_order_service: WorkOrderLifecycleService | None = None):
        self._service = work_order_service

    async def _get_service(self) -> WorkOrderLifecycleService:
        if self._service is None:
            from src.application.services import get_work_order_service

            self._service = await get_work_order_service()
        return self._service

    async def execute(
        self,
        work_order_id: int,
        action: WorkOrderAction,
        performed_by: int,
        expected_version: int | None = None,
        assignee_id: int | None = None,
        reason: str | None = None,
    ) -> WorkOrder:
        if action == WorkOrderAction.ISSUE_ITEMS:
            raise ValueError("issue_items has its own use case")

        logger.info(
            "work_order_transition_requested",
            work_order_id=work_order_id,
            action=action.value,
            performed_by=performed_by,
        )

        service = await self._get_service()
        return await service.transition(
            work_order_id,
            action,
            performed_by,
            expected_version=expected_version,
            assignee_id=assignee_id,
            reason=reason,
        )

    def to_response(self, work_order: WorkOrder) -> WorkOrderResponse:
        return work_order_to_response(work_order)
