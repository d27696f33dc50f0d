"""
Domain exceptions for the inventory service.

Every core operation fails with exactly one of the kinds below. The API
layer maps kinds to HTTP status codes; nothing here knows about HTTP.
"""

from typing import Any


class InventoryError(Exception):
    """Base exception for all inventory errors."""

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


# Not Found
class NotFoundError(InventoryError):
    """Referenced entity does not exist."""

    def __init__(self, entity: str, key: Any, code: str = "NOT_FOUND"):
        super().__init__(
            f"{entity} not found: {key}",
            code=code,
            details={"entity": entity, "key": key},
        )


class ProductNotFoundError(NotFoundError):
    """Product not found (or soft-deleted)."""

    def __init__(self, product_id: int):
        super().__init__("Product", product_id, code="PRODUCT_NOT_FOUND")


class WorkOrderNotFoundError(NotFoundError):
    """Work order not found."""

    def __init__(self, work_order_id: int):
        super().__init__("WorkOrder", work_order_id, code="WORK_ORDER_NOT_FOUND")


class WorkOrderItemNotFoundError(NotFoundError):
    """Product is not one of the work order's items."""

    def __init__(self, work_order_id: int, product_id: int):
        super().__init__(
            "WorkOrderItem",
            f"product {product_id} in work order {work_order_id}",
            code="WORK_ORDER_ITEM_NOT_FOUND",
        )
        self.details.update({"work_order_id": work_order_id, "product_id": product_id})


class UserNotFoundError(NotFoundError):
    """User not found."""

    def __init__(self, user_id: int):
        super().__init__("User", user_id, code="USER_NOT_FOUND")


# Invalid State
class InvalidStateError(InventoryError):
    """Requested transition is illegal from the entity's current state."""

    pass


class InvalidTransitionError(InvalidStateError):
    """Work order action not allowed from its current status."""

    def __init__(self, action: str, current_status: str, allowed_from: list[str]):
        super().__init__(
            f"Cannot '{action}' a work order in status '{current_status}'",
            code="INVALID_TRANSITION",
            details={
                "action": action,
                "current_status": current_status,
                "allowed_from": allowed_from,
            },
        )


# Business Rules
class BusinessRuleViolationError(InventoryError):
    """A domain invariant would be broken."""

    pass


class EmptyWorkOrderError(BusinessRuleViolationError):
    """Work order has no items and cannot be submitted."""

    def __init__(self, work_order_id: int):
        super().__init__(
            "Cannot submit work order without items",
            code="EMPTY_WORK_ORDER",
            details={"work_order_id": work_order_id},
        )


class OverIssueError(BusinessRuleViolationError):
    """Issuing would exceed the quantity requested for an item."""

    def __init__(self, product_id: int, requested: int, issued: int, attempted: int):
        remaining = requested - issued
        super().__init__(
            f"Cannot issue {attempted} units of product {product_id}. Remaining: {remaining}",
            code="OVER_ISSUE",
            details={
                "product_id": product_id,
                "quantity_requested": requested,
                "quantity_issued": issued,
                "attempted": attempted,
                "remaining": remaining,
            },
        )


class CompletedWorkOrderError(BusinessRuleViolationError):
    """Completed work orders are terminal."""

    def __init__(self, work_order_id: int):
        super().__init__(
            "Cannot cancel completed work orders",
            code="WORK_ORDER_COMPLETED",
            details={"work_order_id": work_order_id},
        )


class ProductInUseError(BusinessRuleViolationError):
    """Product is still referenced by open work orders."""

    def __init__(self, product_id: int, open_work_orders: int):
        super().__init__(
            f"Product {product_id} is referenced by {open_work_orders} open work order(s)",
            code="PRODUCT_IN_USE",
            details={"product_id": product_id, "open_work_orders": open_work_orders},
        )


class InactiveUserError(BusinessRuleViolationError):
    """User exists but is deactivated."""

    def __init__(self, user_id: int):
        super().__init__(
            f"User {user_id} is inactive",
            code="USER_INACTIVE",
            details={"user_id": user_id},
        )


# Stock
class InsufficientStockError(InventoryError):
    """Decreasing movement would take quantity below zero."""

    def __init__(self, product_id: int, available: int, requested: int):
        super().__init__(
            f"Insufficient stock for product {product_id}. "
            f"Available: {available}, Requested: {requested}",
            code="INSUFFICIENT_STOCK",
            details={
                "product_id": product_id,
                "available": available,
                "requested": requested,
                "shortfall": requested - available,
            },
        )
        self.product_id = product_id
        self.available = available
        self.requested = requested


# Concurrency
class ConcurrencyConflictError(InventoryError):
    """Stored version no longer matches the version the caller read."""

    def __init__(
        self,
        entity: str,
        entity_id: int,
        expected_version: int | None = None,
        actual_version: int | None = None,
    ):
        super().__init__(
            f"{entity} {entity_id} was modified by another writer. Reload and retry.",
            code="CONCURRENCY_CONFLICT",
            details={
                "entity": entity,
                "entity_id": entity_id,
                "expected_version": expected_version,
                "actual_version": actual_version,
            },
        )
        self.entity = entity
        self.entity_id = entity_id
        self.expected_version = expected_version
        self.actual_version = actual_version


# Validation
class ValidationError(InventoryError):
    """Input validation failed."""

    def __init__(self, field: str, message: str, value: Any = None):
        super().__init__(
            f"Validation error for '{field}': {message}",
            code="VALIDATION_ERROR",
            details={
                "field": field,
                "message": message,
                "value": str(value)[:100] if value is not None else None,
            },
        )


class DuplicateSkuError(ValidationError):
    """SKU already registered."""

    def __init__(self, sku: str):
        super().__init__(
            field="sku",
            message="Product with this SKU already exists",
            value=sku,
        )
        self.code = "DUPLICATE_SKU"


class DuplicateEmailError(ValidationError):
    """Email already registered."""

    def __init__(self, email: str):
        super().__init__(
            field="email",
            message="User with this email already exists",
            value=email,
        )
        self.code = "DUPLICATE_EMAIL"


class MissingActingUserError(ValidationError):
    """X-User-Id header absent or not an integer user ID."""

    def __init__(self, value: str | None = None):
        super().__init__(
            field="X-User-Id",
            message="header must carry the acting user's integer ID",
            value=value,
        )
        self.code = "MISSING_USER_ID"


# Storage
class StorageError(InventoryError):
    """Base exception for storage operations."""

    pass


class DatabaseError(StorageError):
    """Database operation failed."""

    def __init__(self, operation: str, error: str):
        super().__init__(
            f"Database error during {operation}: {error}",
            code="DATABASE_ERROR",
            details={"operation": operation, "error": error},
        )
