"""Response DTOs for API endpoints.

Pydantic v2 models for API responses.
"""

from datetime import UTC, date, datetime

from pydantic import BaseModel, Field

# --- Users ---


class UserResponse(BaseModel):
    id: int
    email: str
    first_name: str
    last_name: str
    full_name: str
    role: str
    is_active: bool
    created_at: datetime


class UserListResponse(BaseModel):
    items: list[UserResponse] = Field(default_factory=list)
    total: int


# --- Products ---


class ProductResponse(BaseModel):
    """Product with derived stock indicators."""

    id: int = Field(..., description="Product ID")
    sku: str = Field(..., description="Stock keeping unit")
    name: str = Field(..., description="Product name")
    description: str = Field(default="")
    category: str = Field(default="")
    quantity: int = Field(..., description="Current stock")
    reorder_point: int = Field(..., description="Low-stock threshold")
    reorder_quantity: int = Field(..., description="Suggested reorder amount")
    unit_cost: float = Field(..., description="Cost per unit")
    unit_of_measure: str
    location: str
    costing_method: str
    total_value: float = Field(..., description="quantity * unit_cost")
    is_low_stock: bool = Field(..., description="quantity <= reorder_point")
    version: int = Field(..., description="Concurrency token; send back as expected_version")
    created_at: datetime
    updated_at: datetime
    is_deleted: bool = False


class PaginatedResponse(BaseModel):
    """Base for paginated responses."""

    total: int
    limit: int
    offset: int
    has_more: bool


class ProductListResponse(PaginatedResponse):
    items: list[ProductResponse] = Field(default_factory=list)


# --- Stock movements ---


class StockMovementResponse(BaseModel):
    """One ledger entry."""

    id: int
    product_id: int
    movement_type: str
    quantity: int = Field(..., description="Always positive")
    signed_quantity: int = Field(..., description="Delta applied to the product")
    increase: bool | None = None
    source_location: str = ""
    destination_location: str = ""
    reason: str = ""
    reference: str | None = None
    work_order_id: int | None = None
    performed_by: int
    unit_cost: float
    quantity_after: int | None = None
    timestamp: datetime


class StockMovementListResponse(PaginatedResponse):
    items: list[StockMovementResponse] = Field(default_factory=list)


class RecordStockMovementResponse(BaseModel):
    """Movement plus the product as stored after it."""

    movement: StockMovementResponse
    product: ProductResponse


# --- Work orders ---


class WorkOrderItemResponse(BaseModel):
    id: int
    product_id: int
    quantity_requested: int
    quantity_issued: int
    remaining: int
    notes: str | None = None


class WorkOrderResponse(BaseModel):
    """Work order with items and the actions valid from its status."""

    id: int
    order_number: str
    title: str
    description: str = ""
    priority: str
    status: str
    due_date: date | None = None
    completed_at: datetime | None = None
    requested_by: int
    assigned_to: int | None = None
    rejection_reason: str | None = None
    items: list[WorkOrderItemResponse] = Field(default_factory=list)
    allowed_actions: list[str] = Field(default_factory=list)
    is_fully_issued: bool = False
    version: int
    created_at: datetime
    updated_at: datetime


class WorkOrderListResponse(PaginatedResponse):
    items: list[WorkOrderResponse] = Field(default_factory=list)


class IssueItemsResponse(BaseModel):
    work_order: WorkOrderResponse
    movements: list[StockMovementResponse] = Field(default_factory=list)


# --- Health / Errors ---


class ComponentHealthResponse(BaseModel):
    """Health of one dependency."""

    name: str
    available: bool
    latency_ms: float | None = None
    error: str | None = None
    schema_version: str | None = None
    pool_size: int | None = None
    pool_in_use: int | None = None


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str = "1.0.0"
    uptime_seconds: float
    database: ComponentHealthResponse | None = None


class ErrorResponse(BaseModel):
    """Standardized error response DTO.

    Every error response includes:
    - error_code: machine-readable code (e.g. INSUFFICIENT_STOCK)
    - message: human-readable description
    - hint: suggested recovery action
    - path: request path that triggered the error
    """

    error_code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error description")
    hint: str | None = Field(default=None, description="Suggested recovery action")
    detail: str | None = Field(default=None, description="Additional details")
    details: dict | None = Field(default=None, description="Structured error context")
    path: str | None = Field(default=None, description="Request path")
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))
