"""Entity -> response DTO conversion shared by use cases and routes."""

from src.application.dto.responses import (
    ProductResponse,
    StockMovementResponse,
    UserResponse,
    WorkOrderItemResponse,
    WorkOrderResponse,
)
from src.core.entities.product import Product
from src.core.entities.stock_movement import StockMovement
from src.core.entities.user import User
from src.core.entities.work_order import WorkOrder
from src.core.services.work_order_workflow import allowed_actions


def product_to_response(product: Product) -> ProductResponse:
    return ProductResponse(
        id=product.id,  # type: ignore[arg-type]
        sku=product.sku,
        name=product.name,
        description=product.description,
        category=product.category,
        quantity=product.quantity,
        reorder_point=product.reorder_point,
        reorder_quantity=product.reorder_quantity,
        unit_cost=product.unit_cost,
        unit_of_measure=product.unit_of_measure,
        location=product.location,
        costing_method=product.costing_method.value,
        total_value=product.total_value,
        is_low_stock=product.is_low_stock,
        version=product.version,
        created_at=product.created_at,
        updated_at=product.updated_at,
        is_deleted=product.is_deleted,
    )


def movement_to_response(movement: StockMovement) -> StockMovementResponse:
    return StockMovementResponse(
        id=movement.id,  # type: ignore[arg-type]
        product_id=movement.product_id,
        movement_type=movement.movement_type.value,
        quantity=movement.quantity,
        signed_quantity=movement.signed_quantity,
        increase=movement.increase,
        source_location=movement.source_location,
        destination_location=movement.destination_location,
        reason=movement.reason,
        reference=movement.reference,
        work_order_id=movement.work_order_id,
        performed_by=movement.performed_by,
        unit_cost=movement.unit_cost,
        quantity_after=movement.quantity_after,
        timestamp=movement.timestamp,
    )


def work_order_to_response(work_order: WorkOrder) -> WorkOrderResponse:
    return WorkOrderResponse(
        id=work_order.id,  # type: ignore[arg-type]
        order_number=work_order.order_number,
        title=work_order.title,
        description=work_order.description,
        priority=work_order.priority.value,
        status=work_order.status.value,
        due_date=work_order.due_date,
        completed_at=work_order.completed_at,
        requested_by=work_order.requested_by,
        assigned_to=work_order.assigned_to,
        rejection_reason=work_order.rejection_reason,
        items=[
            WorkOrderItemResponse(
                id=item.id,  # type: ignore[arg-type]
                product_id=item.product_id,
                quantity_requested=item.quantity_requested,
                quantity_issued=item.quantity_issued,
                remaining=item.remaining,
                notes=item.notes,
            )
            for item in work_order.items
        ],
        allowed_actions=[a.value for a in allowed_actions(work_order.status)],
        is_fully_issued=work_order.is_fully_issued,
        version=work_order.version,
        created_at=work_order.created_at,
        updated_at=work_order.updated_at,
    )


def user_to_response(user: User) -> UserResponse:
    return UserResponse(
        id=user.id,  # type: ignore[arg-type]
        email=user.email,
        first_name=user.first_name,
        last_name=user.last_name,
        full_name=user.full_name,
        role=user.role.value,
        is_active=user.is_active,
        created_at=user.created_at,
    )
