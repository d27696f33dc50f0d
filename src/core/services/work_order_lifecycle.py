"""
Work order lifecycle engine.

Loads a work order, asks work_order_workflow whether the action is legal,
and persists the result with a version check so that two racing
transitions on the same order (e.g. approve vs. cancel) cannot both win.

Issuing items is the only operation that touches the stock ledger. All
of its movements and the item quantity updates share one unit of work:
either every line is applied or none is.
"""

from dataclasses import dataclass, field
from datetime import UTC, date, datetime

from src.config import get_logger
from src.core.entities.events import WorkOrderStatusChanged
from src.core.entities.stock_movement import StockMovement, StockMovementType
from src.core.entities.work_order import (
    WorkOrder,
    WorkOrderAction,
    WorkOrderItem,
    WorkOrderPriority,
)
from src.core.exceptions import (
    ConcurrencyConflictError,
    InactiveUserError,
    ProductNotFoundError,
    UserNotFoundError,
    ValidationError,
    WorkOrderNotFoundError,
)
from src.core.interfaces.storage import IUnitOfWork, UnitOfWorkFactory
from src.core.services.notification_dispatcher import NotificationDispatcher
from src.core.services.stock_ledger import (
    MovementRequest,
    MovementResult,
    StockLedgerService,
)
from src.core.services.work_order_workflow import (
    IssueLine,
    apply_outcome,
    plan_issue,
    plan_transition,
)

logger = get_logger(__name__)


@dataclass
class NewWorkOrderItem:
    product_id: int
    quantity_requested: int
    notes: str | None = None


@dataclass
class NewWorkOrder:
    """Input for creating a draft work order."""

    title: str
    description: str = ""
    priority: WorkOrderPriority = WorkOrderPriority.MEDIUM
    due_date: date | None = None
    items: list[NewWorkOrderItem] = field(default_factory=list)


@dataclass
class IssueResult:
    """Work order after issuance plus the movements it created."""

    work_order: WorkOrder
    movements: list[StockMovement]


def format_order_number(prefix: str, day: date, sequence: int) -> str:
    """e.g. WO-20240615-0003"""
    return f"{prefix}-{day:%Y%m%d}-{sequence:04d}"


class WorkOrderLifecycleService:
    """Creates work orders and drives them through their lifecycle."""

    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        ledger: StockLedgerService,
        dispatcher: NotificationDispatcher | None = None,
        order_number_prefix: str = "WO",
    ):
        self._uow_factory = uow_factory
        self._ledger = ledger
        self._dispatcher = dispatcher
        self._prefix = order_number_prefix

    async def create(self, request: NewWorkOrder, requested_by: int) -> WorkOrder:
        """Create a draft work order with its items."""
        if not request.title.strip():
            raise ValidationError("title", "Title is required")

        seen: set[int] = set()
        for line in request.items:
            if line.quantity_requested <= 0:
                raise ValidationError(
                    "quantity_requested",
                    "Quantity requested must be greater than zero",
                    line.quantity_requested,
                )
            if line.product_id in seen:
                raise ValidationError(
                    "items", "Each product may appear only once", line.product_id
                )
            seen.add(line.product_id)

        async with self._uow_factory() as uow:
            await self._require_active_user(uow, requested_by)

            for line in request.items:
                if await uow.products.get(line.product_id) is None:
                    raise ProductNotFoundError(line.product_id)

            now = datetime.now(UTC)
            sequence = await uow.work_orders.count_created_on(now.date()) + 1

            work_order = WorkOrder(
                order_number=format_order_number(self._prefix, now.date(), sequence),
                title=request.title.strip(),
                description=request.description,
                priority=request.priority,
                due_date=request.due_date,
                requested_by=requested_by,
                items=[
                    WorkOrderItem(
                        product_id=line.product_id,
                        quantity_requested=line.quantity_requested,
                        notes=line.notes,
                    )
                    for line in request.items
                ],
                created_at=now,
                updated_at=now,
                updated_by=requested_by,
            )
            work_order = await uow.work_orders.add(work_order)

        logger.info(
            "work_order_created",
            work_order_id=work_order.id,
            order_number=work_order.order_number,
            items=len(work_order.items),
        )
        return work_order

    async def submit(
        self, work_order_id: int, performed_by: int, expected_version: int | None = None
    ) -> WorkOrder:
        return await self._transition(
            work_order_id, WorkOrderAction.SUBMIT, performed_by, expected_version
        )

    async def approve(
        self,
        work_order_id: int,
        assignee_id: int,
        performed_by: int,
        expected_version: int | None = None,
    ) -> WorkOrder:
        return await self._transition(
            work_order_id,
            WorkOrderAction.APPROVE,
            performed_by,
            expected_version,
            assignee_id=assignee_id,
        )

    async def reject(
        self,
        work_order_id: int,
        reason: str,
        performed_by: int,
        expected_version: int | None = None,
    ) -> WorkOrder:
        return await self._transition(
            work_order_id,
            WorkOrderAction.REJECT,
            performed_by,
            expected_version,
            reason=reason,
        )

    async def start(
        self, work_order_id: int, performed_by: int, expected_version: int | None = None
    ) -> WorkOrder:
        return await self._transition(
            work_order_id, WorkOrderAction.START, performed_by, expected_version
        )

    async def complete(
        self, work_order_id: int, performed_by: int, expected_version: int | None = None
    ) -> WorkOrder:
        return await self._transition(
            work_order_id, WorkOrderAction.COMPLETE, performed_by, expected_version
        )

    async def cancel(
        self, work_order_id: int, performed_by: int, expected_version: int | None = None
    ) -> WorkOrder:
        return await self._transition(
            work_order_id, WorkOrderAction.CANCEL, performed_by, expected_version
        )

    async def transition(
        self,
        work_order_id: int,
        action: WorkOrderAction,
        performed_by: int,
        expected_version: int | None = None,
        assignee_id: int | None = None,
        reason: str | None = None,
    ) -> WorkOrder:
        """Dispatch a status-changing action by name."""
        return await self._transition(
            work_order_id,
            action,
            performed_by,
            expected_version,
            assignee_id=assignee_id,
            reason=reason,
        )

    async def issue_items(
        self,
        work_order_id: int,
        lines: list[IssueLine],
        performed_by: int,
        expected_version: int | None = None,
    ) -> IssueResult:
        """
        Issue stock against an in-progress work order.

        Each line becomes an Issue movement in the ledger and increments
        the item's issued quantity. Any failure rolls back every line.
        """
        results: list[MovementResult] = []

        async with self._uow_factory() as uow:
            work_order = await self._load(uow, work_order_id, expected_version)
            planned = plan_issue(work_order, lines)

            read_version = work_order.version
            updated = work_order.model_copy(deep=True)

            for line in planned:
                result = await self._ledger.apply_movement(
                    uow,
                    MovementRequest(
                        product_id=line.product_id,
                        movement_type=StockMovementType.ISSUE,
                        quantity=line.quantity,
                        performed_by=performed_by,
                        source_location=line.from_location or "",
                        reason=f"Issued for Work Order {work_order.order_number}",
                        reference=work_order.order_number,
                        work_order_id=work_order.id,
                    ),
                )
                results.append(result)

                item = updated.item_for_product(line.product_id)
                item.quantity_issued += line.quantity  # type: ignore[union-attr]

            updated.updated_at = datetime.now(UTC)
            updated.updated_by = performed_by
            updated = await uow.work_orders.update(updated, expected_version=read_version)

        logger.info(
            "work_order_items_issued",
            work_order_id=updated.id,
            lines=len(results),
            version=updated.version,
        )

        for result in results:
            self._ledger.notify(result)

        return IssueResult(work_order=updated, movements=[r.movement for r in results])

    async def _transition(
        self,
        work_order_id: int,
        action: WorkOrderAction,
        performed_by: int,
        expected_version: int | None,
        assignee_id: int | None = None,
        reason: str | None = None,
    ) -> WorkOrder:
        async with self._uow_factory() as uow:
            work_order = await self._load(uow, work_order_id, expected_version)
            outcome = plan_transition(
                work_order, action, assignee_id=assignee_id, reason=reason
            )

            if action == WorkOrderAction.APPROVE:
                await self._require_active_user(uow, assignee_id)  # type: ignore[arg-type]

            updated = apply_outcome(work_order, outcome)
            updated.updated_at = datetime.now(UTC)
            updated.updated_by = performed_by
            updated = await uow.work_orders.update(updated, expected_version=work_order.version)

        logger.info(
            "work_order_transitioned",
            work_order_id=updated.id,
            action=action.value,
            from_status=outcome.from_status.value,
            to_status=outcome.to_status.value,
            version=updated.version,
        )

        if self._dispatcher:
            self._dispatcher.dispatch(
                WorkOrderStatusChanged(
                    work_order_id=updated.id,  # type: ignore[arg-type]
                    order_number=updated.order_number,
                    action=action.value,
                    from_status=outcome.from_status.value,
                    to_status=outcome.to_status.value,
                    performed_by=performed_by,
                )
            )

        return updated

    @staticmethod
    async def _load(
        uow: IUnitOfWork, work_order_id: int, expected_version: int | None
    ) -> WorkOrder:
        work_order = await uow.work_orders.get(work_order_id)
        if work_order is None:
            raise WorkOrderNotFoundError(work_order_id)
        if expected_version is not None and expected_version != work_order.version:
            raise ConcurrencyConflictError(
                "WorkOrder",
                work_order_id,
                expected_version=expected_version,
                actual_version=work_order.version,
            )
        return work_order

    @staticmethod
    async def _require_active_user(uow: IUnitOfWork, user_id: int) -> None:
        user = await uow.users.get(user_id)
        if user is None:
            raise UserNotFoundError(user_id)
        if not user.is_active:
            raise InactiveUserError(user_id)
