"""Product domain entity."""

from datetime import UTC, datetime
from enum import Enum

from pydantic import BaseModel, Field


class CostingMethod(str, Enum):
    """Inventory costing method. Informational only."""

    FIFO = "fifo"
    LIFO = "lifo"
    AVERAGE = "average"


class Product(BaseModel):
    """
    Stocked product.

    `quantity` is mutated only through the stock ledger. `version` is the
    optimistic concurrency token; every stored update increments it.
    """

    id: int | None = None
    sku: str
    name: str
    description: str = ""
    category: str = ""
    quantity: int = Field(default=0, ge=0)
    reorder_point: int = 0
    reorder_quantity: int = 1
    unit_cost: float = 0.0
    unit_of_measure: str = "ea"
    location: str = ""
    costing_method: CostingMethod = CostingMethod.AVERAGE
    version: int = 1

    # Audit
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    created_by: int | None = None
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    updated_by: int | None = None

    # Soft delete
    is_deleted: bool = False
    deleted_at: datetime | None = None
    deleted_by: int | None = None

    @property
    def is_low_stock(self) -> bool:
        """At or below the reorder point."""
        return self.quantity <= self.reorder_point

    @property
    def total_value(self) -> float:
        return self.quantity * self.unit_cost
