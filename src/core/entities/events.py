"""Notification events emitted after successful state changes."""

from datetime import UTC, datetime
from typing import Literal

from pydantic import BaseModel, Field


class NotificationEvent(BaseModel):
    """Base for events handed to notification sinks."""

    event_type: str
    occurred_at: datetime = Field(default_factory=lambda: datetime.now(UTC))


class WorkOrderStatusChanged(NotificationEvent):
    event_type: Literal["work_order.status_changed"] = "work_order.status_changed"
    work_order_id: int
    order_number: str
    action: str
    from_status: str
    to_status: str
    performed_by: int


class LowStockDetected(NotificationEvent):
    event_type: Literal["product.low_stock"] = "product.low_stock"
    product_id: int
    sku: str
    name: str
    quantity: int
    reorder_point: int
    reorder_quantity: int
