"""
Application layer - Use cases, DTOs, and service factories.

This layer orchestrates business logic by:
1. Defining request/response DTOs for API contracts
2. Implementing use cases that coordinate core services
3. Providing factory functions for dependency injection

Use cases are the only entry point for API handlers that change state.
"""

from src.application.services import (
    get_notification_dispatcher,
    get_stock_ledger_service,
    get_uow_factory,
    get_work_order_service,
    reset_services,
)
from src.application.use_cases import (
    CreateUserUseCase,
    CreateWorkOrderUseCase,
    DeleteProductUseCase,
    IssueWorkOrderItemsUseCase,
    RecordStockMovementUseCase,
    RegisterProductUseCase,
    TransitionWorkOrderUseCase,
    UpdateProductUseCase,
)

__all__ = [
    # Service factories
    "get_uow_factory",
    "get_notification_dispatcher",
    "get_stock_ledger_service",
    "get_work_order_service",
    "reset_services",
    # Use cases
    "CreateUserUseCase",
    "RegisterProductUseCase",
    "UpdateProductUseCase",
    "DeleteProductUseCase",
    "RecordStockMovementUseCase",
    "CreateWorkOrderUseCase",
    "TransitionWorkOrderUseCase",
    "IssueWorkOrderItemsUseCase",
]
