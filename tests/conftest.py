"""Pytest configuration and fixtures."""

from collections.abc import AsyncGenerator, Callable, Generator
from pathlib import Path

import pytest

from src.application.dto.requests import CreateUserRequest, RegisterProductRequest
from src.application.services import reset_services
from src.application.use_cases.create_user import CreateUserUseCase
from src.application.use_cases.register_product import RegisterProductUseCase
from src.config import reset_settings
from src.core.entities.events import NotificationEvent
from src.core.entities.product import Product
from src.core.entities.user import User, UserRole
from src.core.interfaces.notifications import INotificationSink
from src.core.services import (
    NotificationDispatcher,
    StockLedgerService,
    WorkOrderLifecycleService,
)
from src.infrastructure.storage.sqlite import (
    ConnectionPool,
    SQLiteUnitOfWorkFactory,
    reset_unit_of_work_factory,
    set_pool,
)
from src.infrastructure.storage.sqlite.migrations.migrator import initialize_database


class RecordingSink(INotificationSink):
    """Collects published events in memory."""

    def __init__(self):
        self.events: list[NotificationEvent] = []

    async def publish(self, event: NotificationEvent) -> None:
        self.events.append(event)

    def of_type(self, event_type: str) -> list[NotificationEvent]:
        return [e for e in self.events if e.event_type == event_type]


@pytest.fixture(autouse=True)
def reset_singletons() -> Generator[None, None, None]:
    """Every test starts with fresh settings and service singletons."""
    reset_settings()
    reset_services()
    reset_unit_of_work_factory()
    set_pool(None)
    yield
    reset_services()
    reset_unit_of_work_factory()
    set_pool(None)
    reset_settings()


@pytest.fixture
def temp_db_path(tmp_path: Path) -> Path:
    """Create a temporary database path."""
    return tmp_path / "stockline-test.db"


@pytest.fixture
async def migrated_db(temp_db_path: Path) -> Path:
    """Temporary database with every migration applied."""
    await initialize_database(db_path=temp_db_path, create_backup_before=False)
    return temp_db_path


@pytest.fixture
async def pool(migrated_db: Path) -> AsyncGenerator[ConnectionPool, None]:
    pool = ConnectionPool(migrated_db, pool_size=5, busy_timeout=5000)
    await pool.initialize()
    yield pool
    await pool.close()


@pytest.fixture
def uow_factory(pool: ConnectionPool) -> SQLiteUnitOfWorkFactory:
    return SQLiteUnitOfWorkFactory(pool)


@pytest.fixture
def recording_sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def dispatcher(recording_sink: RecordingSink) -> NotificationDispatcher:
    return NotificationDispatcher(sinks=[recording_sink])


@pytest.fixture
def ledger(uow_factory, dispatcher) -> StockLedgerService:
    return StockLedgerService(uow_factory, dispatcher=dispatcher)


@pytest.fixture
def work_order_service(uow_factory, ledger, dispatcher) -> WorkOrderLifecycleService:
    return WorkOrderLifecycleService(uow_factory, ledger, dispatcher=dispatcher)


@pytest.fixture
def make_user(uow_factory) -> Callable:
    """Factory: create a stored user."""
    counter = {"n": 0}

    async def _make(
        role: UserRole = UserRole.OPERATOR,
        is_active: bool = True,
        email: str | None = None,
    ) -> User:
        counter["n"] += 1
        use_case = CreateUserUseCase(uow_factory)
        return await use_case.execute(
            CreateUserRequest(
                email=email or f"user{counter['n']}@example.com",
                first_name="Test",
                last_name=f"User{counter['n']}",
                role=role,
                is_active=is_active,
            )
        )

    return _make


@pytest.fixture
def make_product(uow_factory, ledger) -> Callable:
    """Factory: register a product with opening stock."""
    counter = {"n": 0}

    async def _make(
        quantity: int = 0,
        sku: str | None = None,
        reorder_point: int = 0,
        performed_by: int = 1,
        **fields,
    ) -> Product:
        counter["n"] += 1
        use_case = RegisterProductUseCase(uow_factory, ledger)
        request = RegisterProductRequest(
            sku=sku or f"SKU-{counter['n']:03d}",
            name=fields.pop("name", f"Product {counter['n']}"),
            category=fields.pop("category", "General"),
            initial_quantity=quantity,
            reorder_point=reorder_point,
            reorder_quantity=fields.pop("reorder_quantity", 10),
            unit_cost=fields.pop("unit_cost", 2.5),
            location=fields.pop("location", "A-01"),
            **fields,
        )
        result = await use_case.execute(request, performed_by=performed_by)
        return result.product

    return _make
