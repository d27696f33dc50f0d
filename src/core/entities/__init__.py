"""Core domain entities."""

from src.core.entities.events import (
    LowStockDetected,
    NotificationEvent,
    WorkOrderStatusChanged,
)
from src.core.entities.product import CostingMethod, Product
from src.core.entities.stock_movement import StockMovement, StockMovementType
from src.core.entities.user import User, UserRole
from src.core.entities.work_order import (
    WorkOrder,
    WorkOrderAction,
    WorkOrderItem,
    WorkOrderPriority,
    WorkOrderStatus,
)

__all__ = [
    # Product entities
    "Product",
    "CostingMethod",
    # Ledger entities
    "StockMovement",
    "StockMovementType",
    # Work order entities
    "WorkOrder",
    "WorkOrderItem",
    "WorkOrderStatus",
    "WorkOrderPriority",
    "WorkOrderAction",
    # User entities
    "User",
    "UserRole",
    # Events
    "NotificationEvent",
    "WorkOrderStatusChanged",
    "LowStockDetected",
]
