"""
Service factory functions for dependency injection.

This module provides factory functions that wire infrastructure
implementations to core services. Use cases should import from here.

Clean Architecture: Application layer orchestrates DI, not core layer.
"""

from src.config import get_settings
from src.core.interfaces import UnitOfWorkFactory
from src.core.services import (
    NotificationDispatcher,
    StockLedgerService,
    WorkOrderLifecycleService,
)

# Singleton service instances
_dispatcher: NotificationDispatcher | None = None
_stock_ledger_service: StockLedgerService | None = None
_work_order_service: WorkOrderLifecycleService | None = None


async def get_uow_factory() -> UnitOfWorkFactory:
    """Unit-of-work factory bound to the global SQLite pool."""
    # Lazy import infrastructure to avoid circular imports
    from src.infrastructure.storage.sqlite import get_unit_of_work_factory

    return await get_unit_of_work_factory()


def get_notification_dispatcher() -> NotificationDispatcher:
    """
    Get or create the notification dispatcher.

    Sinks come from settings: structured log always, webhook when a URL
    is configured.
    """
    global _dispatcher

    if _dispatcher is None:
        from src.infrastructure.notifications import get_notification_sinks

        _dispatcher = NotificationDispatcher(
            sinks=get_notification_sinks(),
            enabled=get_settings().notifications.enabled,
        )
    return _dispatcher


async def get_stock_ledger_service(
    uow_factory: UnitOfWorkFactory | None = None,
) -> StockLedgerService:
    """
    Get or create StockLedgerService.

    Args:
        uow_factory: Optional override; bypasses the singleton

    Returns:
        Configured StockLedgerService
    """
    global _stock_ledger_service

    if uow_factory is not None:
        return StockLedgerService(
            uow_factory,
            dispatcher=get_notification_dispatcher(),
            notify_low_stock=get_settings().work_orders.notify_low_stock,
        )

    if _stock_ledger_service is None:
        _stock_ledger_service = StockLedgerService(
            await get_uow_factory(),
            dispatcher=get_notification_dispatcher(),
            notify_low_stock=get_settings().work_orders.notify_low_stock,
        )
    return _stock_ledger_service


async def get_work_order_service(
    uow_factory: UnitOfWorkFactory | None = None,
) -> WorkOrderLifecycleService:
    """
    Get or create WorkOrderLifecycleService.

    Args:
        uow_factory: Optional override; bypasses the singleton

    Returns:
        Configured WorkOrderLifecycleService
    """
    global _work_order_service

    prefix = get_settings().work_orders.order_number_prefix

    if uow_factory is not None:
        return WorkOrderLifecycleService(
            uow_factory,
            ledger=await get_stock_ledger_service(uow_factory),
            dispatcher=get_notification_dispatcher(),
            order_number_prefix=prefix,
        )

    if _work_order_service is None:
        _work_order_service = WorkOrderLifecycleService(
            await get_uow_factory(),
            ledger=await get_stock_ledger_service(),
            dispatcher=get_notification_dispatcher(),
            order_number_prefix=prefix,
        )
    return _work_order_service


def reset_services() -> None:
    """
    Reset all singleton instances.

    Useful for testing or reconfiguration.
    """
    global _dispatcher
    global _stock_ledger_service
    global _work_order_service

    _dispatcher = None
    _stock_ledger_service = None
    _work_order_service = None


__all__ = [
    "get_uow_factory",
    "get_notification_dispatcher",
    "get_stock_ledger_service",
    "get_work_order_service",
    "reset_services",
]
