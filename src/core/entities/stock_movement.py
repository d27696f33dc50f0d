"""Stock movement ledger entry."""

from datetime import UTC, datetime
from enum import Enum

from pydantic import BaseModel, Field


class StockMovementType(str, Enum):
    """Types of stock movements."""

    RECEIPT = "receipt"
    ISSUE = "issue"
    ADJUSTMENT = "adjustment"
    TRANSFER = "transfer"
    RETURN = "return"


class StockMovement(BaseModel):
    """
    Append-only ledger entry.

    `quantity` is always positive; direction is implied by `movement_type`
    (and by `increase` for adjustments). Never updated after insert.
    """

    id: int | None = None
    product_id: int
    movement_type: StockMovementType
    quantity: int = Field(..., gt=0)
    increase: bool | None = None  # adjustments only
    source_location: str = ""
    destination_location: str = ""
    reason: str = ""
    reference: str | None = None
    work_order_id: int | None = None
    performed_by: int
    unit_cost: float = 0.0  # product unit cost at time of transaction
    quantity_after: int | None = None
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @property
    def signed_quantity(self) -> int:
        """Quantity delta this movement applied to the product."""
        if self.movement_type in (StockMovementType.RECEIPT, StockMovementType.RETURN):
            return self.quantity
        if self.movement_type == StockMovementType.ISSUE:
            return -self.quantity
        if self.movement_type == StockMovementType.ADJUSTMENT:
            return self.quantity if self.increase else -self.quantity
        return 0
