"""Core interfaces (ports) for dependency injection."""

from src.core.interfaces.notifications import INotificationSink
from src.core.interfaces.storage import (
    IProductRepository,
    IStockMovementRepository,
    IUnitOfWork,
    IUserRepository,
    IWorkOrderRepository,
    MovementQuery,
    ProductQuery,
    UnitOfWorkFactory,
    WorkOrderQuery,
)

__all__ = [
    # Storage interfaces
    "IUnitOfWork",
    "UnitOfWorkFactory",
    "IProductRepository",
    "IWorkOrderRepository",
    "IStockMovementRepository",
    "IUserRepository",
    # Query objects
    "ProductQuery",
    "MovementQuery",
    "WorkOrderQuery",
    # Notifications
    "INotificationSink",
]
