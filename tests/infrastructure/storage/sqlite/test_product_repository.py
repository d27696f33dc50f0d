"""Tests for SQLiteProductRepository against a migrated database."""

import pytest

from src.core.entities.product import Product
from src.core.entities.user import User
from src.core.entities.work_order import WorkOrder, WorkOrderItem, WorkOrderStatus
from src.core.exceptions import (
    ConcurrencyConflictError,
    DuplicateSkuError,
    ProductInUseError,
    ProductNotFoundError,
)
from src.core.interfaces.storage import ProductQuery, WorkOrderQuery


def product(sku: str = "BRG-6204", **fields) -> Product:
    defaults = {
        "name": "Ball bearing",
        "category": "Bearings",
        "quantity": 10,
        "reorder_point": 2,
        "reorder_quantity": 5,
        "unit_cost": 3.25,
        "location": "A-01",
        "created_by": 1,
    }
    defaults.update(fields)
    return Product(sku=sku, **defaults)


class TestAddAndGet:
    async def test_add_assigns_id_and_version(self, uow_factory):
        async with uow_factory() as uow:
            stored = await uow.products.add(product())

        assert stored.id is not None
        assert stored.version == 1

        async with uow_factory() as uow:
            loaded = await uow.products.get(stored.id)

        assert loaded.sku == "BRG-6204"
        assert loaded.quantity == 10
        assert loaded.unit_cost == pytest.approx(3.25)
        assert loaded.created_by == 1
        assert loaded.created_at.tzinfo is not None

    async def test_get_by_sku(self, uow_factory):
        async with uow_factory() as uow:
            await uow.products.add(product())
            assert (await uow.products.get_by_sku("BRG-6204")).name == "Ball bearing"
            assert await uow.products.get_by_sku("NOPE") is None

    async def test_duplicate_sku(self, uow_factory):
        async with uow_factory() as uow:
            await uow.products.add(product())

        with pytest.raises(DuplicateSkuError):
            async with uow_factory() as uow:
                await uow.products.add(product(name="Other"))


class TestCompareAndSwapUpdate:
    async def test_update_increments_version(self, uow_factory):
        async with uow_factory() as uow:
            stored = await uow.products.add(product())
            updated = await uow.products.update(
                stored.model_copy(update={"quantity": 7}), expected_version=1
            )

        assert updated.version == 2
        async with uow_factory() as uow:
            loaded = await uow.products.get(stored.id)
        assert loaded.quantity == 7
        assert loaded.version == 2

    async def test_stale_version_conflicts(self, uow_factory):
        async with uow_factory() as uow:
            stored = await uow.products.add(product())
            await uow.products.update(stored, expected_version=1)

        with pytest.raises(ConcurrencyConflictError) as exc_info:
            async with uow_factory() as uow:
                await uow.products.update(
                    stored.model_copy(update={"quantity": 1}), expected_version=1
                )

        assert exc_info.value.expected_version == 1
        assert exc_info.value.actual_version == 2

        async with uow_factory() as uow:
            loaded = await uow.products.get(stored.id)
        assert loaded.quantity == 10

    async def test_missing_product(self, uow_factory):
        with pytest.raises(ProductNotFoundError):
            async with uow_factory() as uow:
                await uow.products.update(product().model_copy(update={"id": 999}), expected_version=1)


class TestSoftDeleteAndListing:
    async def test_soft_deleted_hidden_unless_requested(self, uow_factory):
        async with uow_factory() as uow:
            stored = await uow.products.add(product())
            await uow.products.update(
                stored.model_copy(update={"is_deleted": True, "deleted_by": 4}), expected_version=1
            )

        async with uow_factory() as uow:
            assert await uow.products.get(stored.id) is None
            assert await uow.products.get_by_sku("BRG-6204") is None
            deleted = await uow.products.get(stored.id, include_deleted=True)
            assert deleted.is_deleted and deleted.deleted_by == 4
            assert await uow.products.count_products(ProductQuery()) == 0
            assert await uow.products.count_products(ProductQuery(include_deleted=True)) == 1

        # SKU stays reserved
        with pytest.raises(DuplicateSkuError):
            async with uow_factory() as uow:
                await uow.products.add(product())

    async def test_filters(self, uow_factory):
        async with uow_factory() as uow:
            await uow.products.add(product("BRG-1", name="Bearing small", quantity=1))
            await uow.products.add(product("BRG-2", name="Bearing large", quantity=50))
            await uow.products.add(product("FLT-1", name="Oil filter", category="Filters"))

            by_category = await uow.products.list_products(ProductQuery(category="Filters"))
            assert [p.sku for p in by_category] == ["FLT-1"]

            by_search = await uow.products.list_products(ProductQuery(search="Bearing"))
            assert {p.sku for p in by_search} == {"BRG-1", "BRG-2"}

            low_stock = await uow.products.list_products(ProductQuery(low_stock_only=True))
            assert [p.sku for p in low_stock] == ["BRG-1"]

    async def test_pagination(self, uow_factory):
        async with uow_factory() as uow:
            for i in range(5):
                await uow.products.add(product(f"P-{i}", name=f"Part {i}"))

            page = await uow.products.list_products(ProductQuery(limit=2, offset=2))
            assert [p.sku for p in page] == ["P-2", "P-3"]
            assert await uow.products.count_products(ProductQuery(limit=2)) == 5


class TestOpenReferences:
    async def test_counts_only_non_terminal_orders(self, uow_factory):
        async with uow_factory() as uow:
            user = await uow.users.add(User(email="a@example.com", first_name="A", last_name="B"))
            stored = await uow.products.add(product())

            for number, status in enumerate(
                [WorkOrderStatus.DRAFT, WorkOrderStatus.IN_PROGRESS, WorkOrderStatus.COMPLETED]
            ):
                await uow.work_orders.add(
                    WorkOrder(
                        order_number=f"WO-20240615-{number:04d}",
                        title="t",
                        requested_by=user.id,
                        status=status,
                        items=[WorkOrderItem(product_id=stored.id, quantity_requested=1)],
                    )
                )

            assert await uow.products.count_open_references(stored.id) == 2

    async def test_soft_delete_refused_while_referenced(self, uow_factory):
        async with uow_factory() as uow:
            user = await uow.users.add(User(email="a@example.com", first_name="A", last_name="B"))
            stored = await uow.products.add(product())
            await uow.work_orders.add(
                WorkOrder(
                    order_number="WO-20240615-0001",
                    title="t",
                    requested_by=user.id,
                    items=[WorkOrderItem(product_id=stored.id, quantity_requested=1)],
                )
            )

        with pytest.raises(ProductInUseError) as exc_info:
            async with uow_factory() as uow:
                await uow.products.update(
                    stored.model_copy(update={"is_deleted": True}), expected_version=1
                )
        assert exc_info.value.details["open_work_orders"] == 1

        async with uow_factory() as uow:
            loaded = await uow.products.get(stored.id)
        assert loaded is not None
        assert loaded.version == 1

    async def test_item_for_deleted_product_not_inserted(self, uow_factory):
        async with uow_factory() as uow:
            user = await uow.users.add(User(email="a@example.com", first_name="A", last_name="B"))
            stored = await uow.products.add(product())
            await uow.products.update(
                stored.model_copy(update={"is_deleted": True}), expected_version=1
            )

        with pytest.raises(ProductNotFoundError):
            async with uow_factory() as uow:
                await uow.work_orders.add(
                    WorkOrder(
                        order_number="WO-20240615-0001",
                        title="t",
                        requested_by=user.id,
                        items=[WorkOrderItem(product_id=stored.id, quantity_requested=1)],
                    )
                )

        async with uow_factory() as uow:
            assert await uow.work_orders.count_work_orders(WorkOrderQuery()) == 0
