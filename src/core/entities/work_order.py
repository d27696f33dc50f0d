"""Work order aggregate: header plus its requested items."""

from datetime import UTC, date, datetime
from enum import Enum

from pydantic import BaseModel, Field


class WorkOrderStatus(str, Enum):
    """Work order lifecycle states."""

    DRAFT = "draft"
    SUBMITTED = "submitted"
    APPROVED = "approved"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    REJECTED = "rejected"
    CANCELLED = "cancelled"


class WorkOrderPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class WorkOrderAction(str, Enum):
    """Operations that move a work order along its lifecycle."""

    SUBMIT = "submit"
    APPROVE = "approve"
    REJECT = "reject"
    START = "start"
    ISSUE_ITEMS = "issue_items"
    COMPLETE = "complete"
    CANCEL = "cancel"


class WorkOrderItem(BaseModel):
    """Requested product line. Invariant: quantity_issued <= quantity_requested."""

    id: int | None = None
    work_order_id: int | None = None
    product_id: int
    quantity_requested: int = Field(..., gt=0)
    quantity_issued: int = Field(default=0, ge=0)
    notes: str | None = None

    @property
    def remaining(self) -> int:
        return self.quantity_requested - self.quantity_issued


class WorkOrder(BaseModel):
    """Work order header with its items."""

    id: int | None = None
    order_number: str = ""
    title: str
    description: str = ""
    priority: WorkOrderPriority = WorkOrderPriority.MEDIUM
    status: WorkOrderStatus = WorkOrderStatus.DRAFT
    due_date: date | None = None
    completed_at: datetime | None = None
    requested_by: int
    assigned_to: int | None = None
    rejection_reason: str | None = None
    items: list[WorkOrderItem] = Field(default_factory=list)
    version: int = 1

    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    updated_by: int | None = None

    def item_for_product(self, product_id: int) -> WorkOrderItem | None:
        """Find the item line for a product, if any."""
        for item in self.items:
            if item.product_id == product_id:
                return item
        return None

    @property
    def is_fully_issued(self) -> bool:
        return all(item.remaining == 0 for item in self.items)
