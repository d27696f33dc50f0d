"""API route modules."""

from src.api.routes.health import router as health_router
from src.api.routes.products import router as products_router
from src.api.routes.stock_movements import router as stock_movements_router
from src.api.routes.users import router as users_router
from src.api.routes.work_orders import router as work_orders_router

__all__ = [
    "health_router",
    "users_router",
    "products_router",
    "stock_movements_router",
    "work_orders_router",
]
