"""
Work order endpoints.

One POST per lifecycle action. Every action accepts an optional
expected_version; a stale value is answered with 409 and the current
version in details.
"""

from fastapi import APIRouter, Depends, Query, status

from src.api.dependencies import (
    Page,
    get_acting_user_id,
    get_create_work_order_use_case,
    get_issue_work_order_items_use_case,
    get_page,
    get_transition_work_order_use_case,
    get_uow,
)
from src.application.dto.mappers import work_order_to_response
from src.application.dto.requests import (
    ApproveWorkOrderRequest,
    CreateWorkOrderRequest,
    IssueItemsRequest,
    RejectWorkOrderRequest,
    WorkOrderActionRequest,
)
from src.application.dto.responses import (
    ErrorResponse,
    IssueItemsResponse,
    WorkOrderListResponse,
    WorkOrderResponse,
)
from src.application.use_cases.create_work_order import CreateWorkOrderUseCase
from src.application.use_cases.issue_work_order_items import IssueWorkOrderItemsUseCase
from src.application.use_cases.transition_work_order import TransitionWorkOrderUseCase
from src.core.entities.work_order import (
    WorkOrderAction,
    WorkOrderPriority,
    WorkOrderStatus,
)
from src.core.exceptions import WorkOrderNotFoundError
from src.core.interfaces import UnitOfWorkFactory, WorkOrderQuery

router = APIRouter(prefix="/api/work-orders", tags=["work-orders"])

ACTION_RESPONSES: dict[int | str, dict] = {
    404: {"model": ErrorResponse},
    409: {"model": ErrorResponse},
    422: {"model": ErrorResponse},
}


@router.post(
    "",
    response_model=WorkOrderResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def create_work_order(
    request: CreateWorkOrderRequest,
    user_id: int = Depends(get_acting_user_id),
    use_case: CreateWorkOrderUseCase = Depends(get_create_work_order_use_case),
) -> WorkOrderResponse:
    """Create a draft work order requested by the acting user."""
    work_order = await use_case.execute(request, requested_by=user_id)
    return use_case.to_response(work_order)


@router.get("", response_model=WorkOrderListResponse)
async def list_work_orders(
    status_filter: WorkOrderStatus | None = Query(default=None, alias="status"),
    priority: WorkOrderPriority | None = None,
    assigned_to: int | None = None,
    requested_by: int | None = None,
    page: Page = Depends(get_page),
    uow_factory: UnitOfWorkFactory = Depends(get_uow),
) -> WorkOrderListResponse:
    """List work orders, newest first."""
    query = WorkOrderQuery(
        status=status_filter,
        priority=priority,
        assigned_to=assigned_to,
        requested_by=requested_by,
        limit=page.limit,
        offset=page.offset,
    )
    async with uow_factory() as uow:
        work_orders = await uow.work_orders.list_work_orders(query)
        total = await uow.work_orders.count_work_orders(query)

    return WorkOrderListResponse(
        items=[work_order_to_response(wo) for wo in work_orders],
        total=total,
        limit=page.limit,
        offset=page.offset,
        has_more=page.offset + len(work_orders) < total,
    )


@router.get(
    "/{work_order_id}",
    response_model=WorkOrderResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_work_order(
    work_order_id: int,
    uow_factory: UnitOfWorkFactory = Depends(get_uow),
) -> WorkOrderResponse:
    """Get a work order with its items and the actions currently allowed."""
    async with uow_factory() as uow:
        work_order = await uow.work_orders.get(work_order_id)
    if work_order is None:
        raise WorkOrderNotFoundError(work_order_id)
    return work_order_to_response(work_order)


async def _transition(
    use_case: TransitionWorkOrderUseCase,
    work_order_id: int,
    action: WorkOrderAction,
    user_id: int,
    request: WorkOrderActionRequest | None,
    **kwargs,
) -> WorkOrderResponse:
    work_order = await use_case.execute(
        work_order_id,
        action,
        performed_by=user_id,
        expected_version=request.expected_version if request else None,
        **kwargs,
    )
    return use_case.to_response(work_order)


@router.post("/{work_order_id}/submit", response_model=WorkOrderResponse, responses=ACTION_RESPONSES)
async def submit_work_order(
    work_order_id: int,
    request: WorkOrderActionRequest | None = None,
    user_id: int = Depends(get_acting_user_id),
    use_case: TransitionWorkOrderUseCase = Depends(get_transition_work_order_use_case),
) -> WorkOrderResponse:
    """Draft -> Submitted. The order needs at least one item."""
    return await _transition(use_case, work_order_id, WorkOrderAction.SUBMIT, user_id, request)


@router.post("/{work_order_id}/approve", response_model=WorkOrderResponse, responses=ACTION_RESPONSES)
async def approve_work_order(
    work_order_id: int,
    request: ApproveWorkOrderRequest,
    user_id: int = Depends(get_acting_user_id),
    use_case: TransitionWorkOrderUseCase = Depends(get_transition_work_order_use_case),
) -> WorkOrderResponse:
    """Submitted -> Approved, assigning an active user."""
    return await _transition(
        use_case,
        work_order_id,
        WorkOrderAction.APPROVE,
        user_id,
        request,
        assignee_id=request.assignee_id,
    )


@router.post("/{work_order_id}/reject", response_model=WorkOrderResponse, responses=ACTION_RESPONSES)
async def reject_work_order(
    work_order_id: int,
    request: RejectWorkOrderRequest | None = None,
    user_id: int = Depends(get_acting_user_id),
    use_case: TransitionWorkOrderUseCase = Depends(get_transition_work_order_use_case),
) -> WorkOrderResponse:
    """Submitted -> Rejected."""
    return await _transition(
        use_case,
        work_order_id,
        WorkOrderAction.REJECT,
        user_id,
        request,
        reason=request.reason if request else None,
    )


@router.post("/{work_order_id}/start", response_model=WorkOrderResponse, responses=ACTION_RESPONSES)
async def start_work_order(
    work_order_id: int,
    request: WorkOrderActionRequest | None = None,
    user_id: int = Depends(get_acting_user_id),
    use_case: TransitionWorkOrderUseCase = Depends(get_transition_work_order_use_case),
) -> WorkOrderResponse:
    """Approved -> InProgress."""
    return await _transition(use_case, work_order_id, WorkOrderAction.START, user_id, request)


@router.post("/{work_order_id}/complete", response_model=WorkOrderResponse, responses=ACTION_RESPONSES)
async def complete_work_order(
    work_order_id: int,
    request: WorkOrderActionRequest | None = None,
    user_id: int = Depends(get_acting_user_id),
    use_case: TransitionWorkOrderUseCase = Depends(get_transition_work_order_use_case),
) -> WorkOrderResponse:
    """InProgress -> Completed."""
    return await _transition(use_case, work_order_id, WorkOrderAction.COMPLETE, user_id, request)


@router.post("/{work_order_id}/cancel", response_model=WorkOrderResponse, responses=ACTION_RESPONSES)
async def cancel_work_order(
    work_order_id: int,
    request: WorkOrderActionRequest | None = None,
    user_id: int = Depends(get_acting_user_id),
    use_case: TransitionWorkOrderUseCase = Depends(get_transition_work_order_use_case),
) -> WorkOrderResponse:
    """Cancel from any status except completed."""
    return await _transition(use_case, work_order_id, WorkOrderAction.CANCEL, user_id, request)


@router.post(
    "/{work_order_id}/issue-items",
    response_model=IssueItemsResponse,
    responses=ACTION_RESPONSES,
)
async def issue_work_order_items(
    work_order_id: int,
    request: IssueItemsRequest,
    user_id: int = Depends(get_acting_user_id),
    use_case: IssueWorkOrderItemsUseCase = Depends(get_issue_work_order_items_use_case),
) -> IssueItemsResponse:
    """
    Issue stock against an in-progress work order.

    Every line is applied or none is: one short line (422) or one stale
    product (409) leaves stock and the order untouched.
    """
    result = await use_case.execute(work_order_id, request, performed_by=user_id)
    return use_case.to_response(result)
