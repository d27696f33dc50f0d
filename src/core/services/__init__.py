"""
Core business logic services.

Layer-pure services that depend only on:
- src/core/entities/*
- src/core/interfaces/*
- src/core/exceptions.py

NO infrastructure imports. All dependencies injected via constructor.
"""

from src.core.services.notification_dispatcher import NotificationDispatcher
from src.core.services.product_rules import TEXT_LIMITS, validate_product, validate_text
from src.core.services.stock_ledger import (
    MovementRequest,
    MovementResult,
    StockLedgerService,
    signed_delta,
)
from src.core.services.work_order_lifecycle import (
    IssueResult,
    NewWorkOrder,
    NewWorkOrderItem,
    WorkOrderLifecycleService,
    format_order_number,
)
from src.core.services.work_order_workflow import (
    TERMINAL_STATUSES,
    WORK_ORDER_TRANSITIONS,
    IssueLine,
    TransitionOutcome,
    TransitionRule,
    allowed_actions,
    apply_outcome,
    check_action,
    is_terminal,
    plan_issue,
    plan_transition,
)

__all__ = [
    # Stock ledger
    "StockLedgerService",
    "MovementRequest",
    "MovementResult",
    "signed_delta",
    # Work order lifecycle
    "WorkOrderLifecycleService",
    "NewWorkOrder",
    "NewWorkOrderItem",
    "IssueResult",
    "format_order_number",
    # Transition rules
    "WORK_ORDER_TRANSITIONS",
    "TERMINAL_STATUSES",
    "TransitionRule",
    "TransitionOutcome",
    "IssueLine",
    "allowed_actions",
    "is_terminal",
    "check_action",
    "plan_transition",
    "apply_outcome",
    "plan_issue",
    # Product rules
    "TEXT_LIMITS",
    "validate_product",
    "validate_text",
    # Notifications
    "NotificationDispatcher",
]
