"""Request DTOs for API endpoints.

Pydantic v2 models for API request validation.
These are the ONLY contracts between API and use cases.

Shapes are checked here; business rules (field lengths, positive costs,
stock availability) are enforced by the use cases so that they fail with
the domain's ValidationError rather than a schema error.
"""

from datetime import date

from pydantic import BaseModel, Field

from src.core.entities.product import CostingMethod
from src.core.entities.stock_movement import StockMovementType
from src.core.entities.user import UserRole
from src.core.entities.work_order import WorkOrderPriority

# --- Users ---


class CreateUserRequest(BaseModel):
    """Request to register a user."""

    email: str = Field(..., description="Unique email address", examples=["ops@example.com"])
    first_name: str = Field(..., description="Given name")
    last_name: str = Field(..., description="Family name")
    role: UserRole = Field(default=UserRole.OPERATOR, description="Operator, manager or admin")
    is_active: bool = Field(default=True, description="Inactive users cannot be assigned work")


# --- Products ---


class RegisterProductRequest(BaseModel):
    """Request to register a product.

    A positive initial quantity is booked as a receipt movement.
    """

    sku: str = Field(..., description="Stock keeping unit, unique", examples=["BRG-6204"])
    name: str = Field(..., description="Product name", examples=["Ball bearing 6204"])
    description: str = Field(default="", description="Free-text description")
    category: str = Field(..., description="Product category", examples=["Bearings"])
    initial_quantity: int = Field(default=0, description="Opening stock")
    reorder_point: int = Field(default=0, description="Low-stock threshold")
    reorder_quantity: int = Field(default=1, description="Suggested reorder amount")
    unit_cost: float = Field(..., description="Cost per unit")
    unit_of_measure: str = Field(default="ea", description="Unit of measure", examples=["ea", "kg"])
    location: str = Field(..., description="Storage location", examples=["A-01-03"])
    costing_method: CostingMethod = Field(default=CostingMethod.AVERAGE)


class UpdateProductRequest(BaseModel):
    """Request to change descriptive product attributes.

    Quantity is never changed here; record a stock movement instead.
    Omitted fields keep their current value.
    """

    name: str | None = None
    description: str | None = None
    category: str | None = None
    reorder_point: int | None = None
    reorder_quantity: int | None = None
    unit_cost: float | None = None
    unit_of_measure: str | None = None
    location: str | None = None
    costing_method: CostingMethod | None = None
    expected_version: int | None = Field(
        default=None,
        description="Version the client last read; a mismatch fails with 409",
    )


# --- Stock movements ---


class RecordStockMovementRequest(BaseModel):
    """Request to record one stock movement against a product."""

    product_id: int = Field(..., description="Product to move")
    movement_type: StockMovementType = Field(..., description="receipt, issue, adjustment, transfer or return")
    quantity: int = Field(..., description="Positive quantity; direction comes from the type")
    increase: bool | None = Field(
        default=None,
        description="Required for adjustments: true adds stock, false removes it",
    )
    source_location: str = Field(default="", description="Defaults to the product's location")
    destination_location: str = Field(default="", description="Transfers move the product here")
    reason: str = Field(default="", description="Why the movement happened")
    reference: str | None = Field(default=None, description="External reference (PO, ticket)")
    work_order_id: int | None = Field(default=None, description="Optional work order link")
    expected_version: int | None = Field(
        default=None,
        description="Product version the client last read; a mismatch fails with 409",
    )


# --- Work orders ---


class WorkOrderItemRequest(BaseModel):
    product_id: int
    quantity_requested: int = Field(..., description="Must be greater than zero")
    notes: str | None = None


class CreateWorkOrderRequest(BaseModel):
    """Request to create a draft work order."""

    title: str = Field(..., description="Short title", examples=["Replace pump bearings"])
    description: str = Field(default="")
    priority: WorkOrderPriority = Field(default=WorkOrderPriority.MEDIUM)
    due_date: date | None = None
    items: list[WorkOrderItemRequest] = Field(default_factory=list)


class WorkOrderActionRequest(BaseModel):
    """Body for submit, start, complete and cancel (all optional)."""

    expected_version: int | None = Field(
        default=None,
        description="Work order version the client last read",
    )


class ApproveWorkOrderRequest(WorkOrderActionRequest):
    assignee_id: int = Field(..., description="Active user who will carry out the work")


class RejectWorkOrderRequest(WorkOrderActionRequest):
    reason: str = Field(default="", description="Recorded on the work order")


class IssueItemLineRequest(BaseModel):
    product_id: int
    quantity: int = Field(..., description="Must be greater than zero")
    from_location: str | None = None
    notes: str | None = None


class IssueItemsRequest(WorkOrderActionRequest):
    """Issue stock for one or more work order items in a single transaction."""

    items: list[IssueItemLineRequest] = Field(..., description="Lines to issue")
