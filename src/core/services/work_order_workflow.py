"""
Work order transition rules.

The lifecycle is kept as data (WORK_ORDER_TRANSITIONS) and every check is
a pure function of the current work order plus the requested action, so
the rules can be exercised without a store.

    draft -> submitted -> approved -> in_progress -> completed
                 |                         ^   |
                 v                         |___| issue_items
              rejected

    cancel: any status except completed -> cancelled
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from src.core.entities.work_order import (
    WorkOrder,
    WorkOrderAction,
    WorkOrderStatus,
)
from src.core.exceptions import (
    CompletedWorkOrderError,
    EmptyWorkOrderError,
    InvalidTransitionError,
    OverIssueError,
    ValidationError,
    WorkOrderItemNotFoundError,
)


@dataclass(frozen=True)
class TransitionRule:
    """Statuses an action is valid from, and the status it leads to."""

    from_statuses: frozenset[WorkOrderStatus]
    to_status: WorkOrderStatus


WORK_ORDER_TRANSITIONS: dict[WorkOrderAction, TransitionRule] = {
    WorkOrderAction.SUBMIT: TransitionRule(
        frozenset({WorkOrderStatus.DRAFT}), WorkOrderStatus.SUBMITTED
    ),
    WorkOrderAction.APPROVE: TransitionRule(
        frozenset({WorkOrderStatus.SUBMITTED}), WorkOrderStatus.APPROVED
    ),
    WorkOrderAction.REJECT: TransitionRule(
        frozenset({WorkOrderStatus.SUBMITTED}), WorkOrderStatus.REJECTED
    ),
    WorkOrderAction.START: TransitionRule(
        frozenset({WorkOrderStatus.APPROVED}), WorkOrderStatus.IN_PROGRESS
    ),
    WorkOrderAction.ISSUE_ITEMS: TransitionRule(
        frozenset({WorkOrderStatus.IN_PROGRESS}), WorkOrderStatus.IN_PROGRESS
    ),
    WorkOrderAction.COMPLETE: TransitionRule(
        frozenset({WorkOrderStatus.IN_PROGRESS}), WorkOrderStatus.COMPLETED
    ),
    WorkOrderAction.CANCEL: TransitionRule(
        frozenset(
            {
                WorkOrderStatus.DRAFT,
                WorkOrderStatus.SUBMITTED,
                WorkOrderStatus.APPROVED,
                WorkOrderStatus.IN_PROGRESS,
                WorkOrderStatus.REJECTED,
                WorkOrderStatus.CANCELLED,
            }
        ),
        WorkOrderStatus.CANCELLED,
    ),
}

# No further work happens in these; cancel stays available except after completion
TERMINAL_STATUSES = frozenset(
    {WorkOrderStatus.COMPLETED, WorkOrderStatus.REJECTED, WorkOrderStatus.CANCELLED}
)


@dataclass
class TransitionOutcome:
    """Result of planning a transition: new status plus field changes."""

    action: WorkOrderAction
    from_status: WorkOrderStatus
    to_status: WorkOrderStatus
    changes: dict[str, Any] = field(default_factory=dict)


@dataclass
class IssueLine:
    """One requested issuance: product and quantity."""

    product_id: int
    quantity: int
    from_location: str | None = None
    notes: str | None = None


def allowed_actions(status: WorkOrderStatus) -> list[WorkOrderAction]:
    """Actions that are valid from a status, in lifecycle order."""
    return [action for action, rule in WORK_ORDER_TRANSITIONS.items() if status in rule.from_statuses]


def is_terminal(status: WorkOrderStatus) -> bool:
    return status in TERMINAL_STATUSES


def check_action(work_order: WorkOrder, action: WorkOrderAction) -> TransitionRule:
    """
    Raise if `action` is not allowed from the work order's status.

    Cancelling a completed order is a business-rule violation; every other
    illegal edge is an invalid-state error.
    """
    rule = WORK_ORDER_TRANSITIONS[action]
    if work_order.status in rule.from_statuses:
        return rule

    if action == WorkOrderAction.CANCEL and work_order.status == WorkOrderStatus.COMPLETED:
        raise CompletedWorkOrderError(work_order.id or 0)

    raise InvalidTransitionError(
        action=action.value,
        current_status=work_order.status.value,
        allowed_from=sorted(s.value for s in rule.from_statuses),
    )


def plan_transition(
    work_order: WorkOrder,
    action: WorkOrderAction,
    assignee_id: int | None = None,
    reason: str | None = None,
    now: datetime | None = None,
) -> TransitionOutcome:
    """
    Validate a status-changing action and describe its effect.

    Does not mutate the work order. Issue-items is planned separately by
    plan_issue() because it changes item quantities, not status.
    """
    if action == WorkOrderAction.ISSUE_ITEMS:
        raise ValueError("use plan_issue() for issue_items")

    rule = check_action(work_order, action)
    changes: dict[str, Any] = {}

    if action == WorkOrderAction.SUBMIT:
        if not work_order.items:
            raise EmptyWorkOrderError(work_order.id or 0)

    elif action == WorkOrderAction.APPROVE:
        if assignee_id is None:
            raise ValidationError("assignee_id", "Approval requires an assignee")
        changes["assigned_to"] = assignee_id

    elif action == WorkOrderAction.REJECT:
        changes["rejection_reason"] = reason or ""

    elif action == WorkOrderAction.COMPLETE:
        changes["completed_at"] = now or datetime.now(UTC)

    return TransitionOutcome(
        action=action,
        from_status=work_order.status,
        to_status=rule.to_status,
        changes=changes,
    )


def apply_outcome(work_order: WorkOrder, outcome: TransitionOutcome) -> WorkOrder:
    """Return a copy of the work order with the outcome applied."""
    updated = work_order.model_copy(deep=True)
    updated.status = outcome.to_status
    for name, value in outcome.changes.items():
        setattr(updated, name, value)
    return updated


def plan_issue(work_order: WorkOrder, lines: list[IssueLine]) -> list[IssueLine]:
    """
    Validate an issuance request against the work order.

    Lines for the same product are merged. Every merged line must refer to
    one of the work order's items and fit in that item's remaining
    quantity. Returns the merged lines in request order.
    """
    check_action(work_order, WorkOrderAction.ISSUE_ITEMS)

    if not lines:
        raise ValidationError("items", "At least one line is required")

    merged: dict[int, IssueLine] = {}
    for line in lines:
        if line.quantity <= 0:
            raise ValidationError("quantity", "Quantity must be greater than zero", line.quantity)
        if line.product_id in merged:
            merged[line.product_id].quantity += line.quantity
        else:
            merged[line.product_id] = IssueLine(
                product_id=line.product_id,
                quantity=line.quantity,
                from_location=line.from_location,
                notes=line.notes,
            )

    for line in merged.values():
        item = work_order.item_for_product(line.product_id)
        if item is None:
            raise WorkOrderItemNotFoundError(work_order.id or 0, line.product_id)
        if item.quantity_issued + line.quantity > item.quantity_requested:
            raise OverIssueError(
                product_id=line.product_id,
                requested=item.quantity_requested,
                issued=item.quantity_issued,
                attempted=line.quantity,
            )

    return list(merged.values())
