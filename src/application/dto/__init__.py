"""Data transfer objects for the API boundary."""

from src.application.dto.mappers import (
    movement_to_response,
    product_to_response,
    user_to_response,
    work_order_to_response,
)
from src.application.dto.requests import (
    ApproveWorkOrderRequest,
    CreateUserRequest,
    CreateWorkOrderRequest,
    IssueItemLineRequest,
    IssueItemsRequest,
    RecordStockMovementRequest,
    RegisterProductRequest,
    RejectWorkOrderRequest,
    UpdateProductRequest,
    WorkOrderActionRequest,
    WorkOrderItemRequest,
)
from src.application.dto.responses import (
    ComponentHealthResponse,
    ErrorResponse,
    HealthResponse,
    IssueItemsResponse,
    PaginatedResponse,
    ProductListResponse,
    ProductResponse,
    RecordStockMovementResponse,
    StockMovementListResponse,
    StockMovementResponse,
    UserListResponse,
    UserResponse,
    WorkOrderItemResponse,
    WorkOrderListResponse,
    WorkOrderResponse,
)

__all__ = [
    # Requests
    "CreateUserRequest",
    "RegisterProductRequest",
    "UpdateProductRequest",
    "RecordStockMovementRequest",
    "CreateWorkOrderRequest",
    "WorkOrderItemRequest",
    "WorkOrderActionRequest",
    "ApproveWorkOrderRequest",
    "RejectWorkOrderRequest",
    "IssueItemsRequest",
    "IssueItemLineRequest",
    # Responses
    "UserResponse",
    "UserListResponse",
    "ProductResponse",
    "ProductListResponse",
    "StockMovementResponse",
    "StockMovementListResponse",
    "RecordStockMovementResponse",
    "WorkOrderResponse",
    "WorkOrderItemResponse",
    "WorkOrderListResponse",
    "IssueItemsResponse",
    "PaginatedResponse",
    "HealthResponse",
    "ComponentHealthResponse",
    "ErrorResponse",
    # Mappers
    "product_to_response",
    "movement_to_response",
    "work_order_to_response",
    "user_to_response",
]
