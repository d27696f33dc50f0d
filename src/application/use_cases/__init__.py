"""Application use cases."""

from src.application.use_cases.create_user import CreateUserUseCase
from src.application.use_cases.create_work_order import CreateWorkOrderUseCase
from src.application.use_cases.delete_product import DeleteProductUseCase
from src.application.use_cases.issue_work_order_items import IssueWorkOrderItemsUseCase
from src.application.use_cases.record_stock_movement import RecordStockMovementUseCase
from src.application.use_cases.register_product import (
    RegisterProductResult,
    RegisterProductUseCase,
)
from src.application.use_cases.transition_work_order import TransitionWorkOrderUseCase
from src.application.use_cases.update_product import UpdateProductUseCase

__all__ = [
    "CreateUserUseCase",
    "RegisterProductUseCase",
    "RegisterProductResult",
    "UpdateProductUseCase",
    "DeleteProductUseCase",
    "RecordStockMovementUseCase",
    "CreateWorkOrderUseCase",
    "TransitionWorkOrderUseCase",
    "IssueWorkOrderItemsUseCase",
]
