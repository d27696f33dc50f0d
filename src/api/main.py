"""
FastAPI application factory for the stock and work order service.

Startup migrates the database and opens the connection pool; shutdown
waits for queued notifications before closing storage.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src.api.middleware import ErrorHandlerMiddleware, LoggingMiddleware
from src.api.middleware.error_handler import setup_exception_handlers
from src.api.routes import (
    health_router,
    products_router,
    stock_movements_router,
    users_router,
    work_orders_router,
)
from src.application.services import get_notification_dispatcher, reset_services
from src.config import configure_logging, get_logger, get_settings
from src.infrastructure.storage.sqlite import (
    close_pool,
    get_pool,
    reset_unit_of_work_factory,
)
from src.infrastructure.storage.sqlite.migrations.migrator import run_migrations

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    settings = get_settings()
    configure_logging()
    logger.info(
        "application_starting",
        environment=settings.environment,
        db_path=str(settings.storage.db_path),
    )

    applied = await run_migrations()
    pool = await get_pool()
    logger.info(
        "application_started",
        migrations_applied=len(applied),
        pool_size=pool.pool_size,
        webhook=bool(settings.notifications.webhook_url),
    )

    try:
        yield
    finally:
        logger.info("application_stopping")
        await get_notification_dispatcher().drain()
        await close_pool()
        reset_unit_of_work_factory()
        reset_services()
        logger.info("application_stopped")


def create_app() -> FastAPI:
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        description="Work order lifecycle and stock ledger with optimistic concurrency",
        version=settings.app_version,
        docs_url="/docs" if settings.api.debug else None,
        redoc_url="/redoc" if settings.api.debug else None,
        lifespan=lifespan,
    )

    # Last added runs outermost; logging wraps error handling
    app.add_middleware(ErrorHandlerMiddleware)
    app.add_middleware(LoggingMiddleware)
    if settings.api.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.api.cors_origins,
            allow_methods=["GET", "POST", "PUT", "DELETE"],
            allow_headers=["Content-Type", "X-User-Id", "X-Request-ID"],
            expose_headers=["X-Request-ID", "X-Response-Time"],
        )

    setup_exception_handlers(app)

    for router in (
        health_router,
        users_router,
        products_router,
        stock_movements_router,
        work_orders_router,
    ):
        app.include_router(router)

    @app.get("/health", include_in_schema=False)
    async def root_health() -> dict[str, str]:
        """Container liveness probe."""
        return {"status": "healthy", "version": settings.app_version}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "src.api.main:app",
        host=settings.api.host,
        port=settings.api.port,
        reload=settings.api.debug,
    )
