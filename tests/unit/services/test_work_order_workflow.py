"""Tests for the pure work order transition rules."""

from datetime import UTC, datetime

import pytest

from src.core.entities.work_order import (
    WorkOrder,
    WorkOrderAction,
    WorkOrderItem,
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
from src.core.services import (
    TERMINAL_STATUSES,
    WORK_ORDER_TRANSITIONS,
    IssueLine,
    allowed_actions,
    apply_outcome,
    is_terminal,
    plan_issue,
    plan_transition,
)

# (action, from) -> to, for every legal edge
LEGAL_EDGES = {
    (WorkOrderAction.SUBMIT, WorkOrderStatus.DRAFT): WorkOrderStatus.SUBMITTED,
    (WorkOrderAction.APPROVE, WorkOrderStatus.SUBMITTED): WorkOrderStatus.APPROVED,
    (WorkOrderAction.REJECT, WorkOrderStatus.SUBMITTED): WorkOrderStatus.REJECTED,
    (WorkOrderAction.START, WorkOrderStatus.APPROVED): WorkOrderStatus.IN_PROGRESS,
    (WorkOrderAction.COMPLETE, WorkOrderStatus.IN_PROGRESS): WorkOrderStatus.COMPLETED,
    (WorkOrderAction.CANCEL, WorkOrderStatus.DRAFT): WorkOrderStatus.CANCELLED,
    (WorkOrderAction.CANCEL, WorkOrderStatus.SUBMITTED): WorkOrderStatus.CANCELLED,
    (WorkOrderAction.CANCEL, WorkOrderStatus.APPROVED): WorkOrderStatus.CANCELLED,
    (WorkOrderAction.CANCEL, WorkOrderStatus.IN_PROGRESS): WorkOrderStatus.CANCELLED,
    (WorkOrderAction.CANCEL, WorkOrderStatus.REJECTED): WorkOrderStatus.CANCELLED,
    (WorkOrderAction.CANCEL, WorkOrderStatus.CANCELLED): WorkOrderStatus.CANCELLED,
}

STATUS_ACTIONS = [a for a in WorkOrderAction if a != WorkOrderAction.ISSUE_ITEMS]


def make_order(status: WorkOrderStatus, items: int = 1, issued: int = 0) -> WorkOrder:
    return WorkOrder(
        id=1,
        order_number="WO-20240615-0001",
        title="Replace bearings",
        requested_by=1,
        status=status,
        items=[
            WorkOrderItem(id=n + 1, product_id=n + 1, quantity_requested=10, quantity_issued=issued)
            for n in range(items)
        ],
    )


class TestTransitionTable:
    def test_table_matches_lifecycle(self):
        for action in STATUS_ACTIONS:
            rule = WORK_ORDER_TRANSITIONS[action]
            for status in rule.from_statuses:
                assert LEGAL_EDGES[(action, status)] == rule.to_status

    def test_terminal_statuses(self):
        assert TERMINAL_STATUSES == {
            WorkOrderStatus.COMPLETED,
            WorkOrderStatus.REJECTED,
            WorkOrderStatus.CANCELLED,
        }
        assert is_terminal(WorkOrderStatus.REJECTED)
        assert not is_terminal(WorkOrderStatus.IN_PROGRESS)

    def test_completed_allows_nothing(self):
        assert allowed_actions(WorkOrderStatus.COMPLETED) == []

    @pytest.mark.parametrize("status", [WorkOrderStatus.REJECTED, WorkOrderStatus.CANCELLED])
    def test_closed_statuses_only_cancel(self, status):
        assert allowed_actions(status) == [WorkOrderAction.CANCEL]

    def test_allowed_actions_in_progress(self):
        assert allowed_actions(WorkOrderStatus.IN_PROGRESS) == [
            WorkOrderAction.ISSUE_ITEMS,
            WorkOrderAction.COMPLETE,
            WorkOrderAction.CANCEL,
        ]


class TestPlanTransition:
    @pytest.mark.parametrize("status", list(WorkOrderStatus))
    @pytest.mark.parametrize("action", STATUS_ACTIONS)
    def test_every_status_action_pair(self, status, action):
        """Legal edges plan the target status; everything else is rejected."""
        work_order = make_order(status)
        expected = LEGAL_EDGES.get((action, status))

        if expected is not None:
            outcome = plan_transition(work_order, action, assignee_id=2, reason="no budget")
            assert outcome.from_status == status
            assert outcome.to_status == expected
        elif action == WorkOrderAction.CANCEL and status == WorkOrderStatus.COMPLETED:
            with pytest.raises(CompletedWorkOrderError):
                plan_transition(work_order, action)
        else:
            with pytest.raises(InvalidTransitionError):
                plan_transition(work_order, action, assignee_id=2)

        # planning never mutates the input
        assert work_order.status == status

    def test_submit_empty_order_is_rule_violation(self):
        with pytest.raises(EmptyWorkOrderError):
            plan_transition(make_order(WorkOrderStatus.DRAFT, items=0), WorkOrderAction.SUBMIT)

    def test_submit_checks_state_before_items(self):
        with pytest.raises(InvalidTransitionError):
            plan_transition(make_order(WorkOrderStatus.APPROVED, items=0), WorkOrderAction.SUBMIT)

    def test_approve_requires_assignee(self):
        with pytest.raises(ValidationError):
            plan_transition(make_order(WorkOrderStatus.SUBMITTED), WorkOrderAction.APPROVE)

    def test_approve_sets_assignee(self):
        outcome = plan_transition(
            make_order(WorkOrderStatus.SUBMITTED), WorkOrderAction.APPROVE, assignee_id=42
        )
        assert outcome.changes == {"assigned_to": 42}

    def test_reject_records_reason(self):
        outcome = plan_transition(
            make_order(WorkOrderStatus.SUBMITTED), WorkOrderAction.REJECT, reason="Duplicate"
        )
        assert outcome.changes == {"rejection_reason": "Duplicate"}

    def test_complete_sets_timestamp(self):
        now = datetime(2024, 6, 15, 12, 0, tzinfo=UTC)
        outcome = plan_transition(
            make_order(WorkOrderStatus.IN_PROGRESS), WorkOrderAction.COMPLETE, now=now
        )
        assert outcome.changes == {"completed_at": now}

    def test_issue_items_is_not_a_status_transition(self):
        with pytest.raises(ValueError):
            plan_transition(make_order(WorkOrderStatus.IN_PROGRESS), WorkOrderAction.ISSUE_ITEMS)

    def test_invalid_transition_details(self):
        with pytest.raises(InvalidTransitionError) as exc_info:
            plan_transition(make_order(WorkOrderStatus.CANCELLED), WorkOrderAction.COMPLETE)
        assert exc_info.value.details["current_status"] == "cancelled"
        assert exc_info.value.details["allowed_from"] == ["in_progress"]


class TestApplyOutcome:
    def test_returns_updated_copy(self):
        work_order = make_order(WorkOrderStatus.SUBMITTED)
        outcome = plan_transition(work_order, WorkOrderAction.APPROVE, assignee_id=5)

        updated = apply_outcome(work_order, outcome)

        assert updated.status == WorkOrderStatus.APPROVED
        assert updated.assigned_to == 5
        assert work_order.status == WorkOrderStatus.SUBMITTED
        assert work_order.assigned_to is None


class TestPlanIssue:
    def test_requires_in_progress(self):
        with pytest.raises(InvalidTransitionError):
            plan_issue(make_order(WorkOrderStatus.APPROVED), [IssueLine(product_id=1, quantity=1)])

    def test_requires_lines(self):
        with pytest.raises(ValidationError):
            plan_issue(make_order(WorkOrderStatus.IN_PROGRESS), [])

    def test_rejects_non_positive_quantity(self):
        with pytest.raises(ValidationError):
            plan_issue(make_order(WorkOrderStatus.IN_PROGRESS), [IssueLine(product_id=1, quantity=0)])

    def test_unknown_product_is_item_not_found(self):
        with pytest.raises(WorkOrderItemNotFoundError):
            plan_issue(make_order(WorkOrderStatus.IN_PROGRESS), [IssueLine(product_id=99, quantity=1)])

    def test_over_issue(self):
        work_order = make_order(WorkOrderStatus.IN_PROGRESS, issued=8)
        with pytest.raises(OverIssueError) as exc_info:
            plan_issue(work_order, [IssueLine(product_id=1, quantity=3)])
        assert exc_info.value.details["remaining"] == 2

    def test_exact_remaining_is_allowed(self):
        work_order = make_order(WorkOrderStatus.IN_PROGRESS, issued=8)
        planned = plan_issue(work_order, [IssueLine(product_id=1, quantity=2)])
        assert planned[0].quantity == 2

    def test_lines_for_same_product_are_merged(self):
        work_order = make_order(WorkOrderStatus.IN_PROGRESS, items=2)
        planned = plan_issue(
            work_order,
            [
                IssueLine(product_id=2, quantity=3),
                IssueLine(product_id=1, quantity=4),
                IssueLine(product_id=2, quantity=5),
            ],
        )
        assert [(line.product_id, line.quantity) for line in planned] == [(2, 8), (1, 4)]

    def test_merged_lines_are_checked_against_remaining(self):
        work_order = make_order(WorkOrderStatus.IN_PROGRESS)
        with pytest.raises(OverIssueError):
            plan_issue(
                work_order,
                [IssueLine(product_id=1, quantity=6), IssueLine(product_id=1, quantity=5)],
            )
