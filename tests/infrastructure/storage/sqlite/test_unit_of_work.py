"""Tests for SQLiteUnitOfWork commit / rollback behaviour."""

import pytest

from src.core.entities.product import Product
from src.core.entities.user import User
from src.infrastructure.storage.sqlite import (
    SQLiteUnitOfWork,
    get_unit_of_work_factory,
    set_pool,
)


def widget(sku: str = "W-1") -> Product:
    return Product(sku=sku, name="Widget", category="General", unit_cost=1, location="A")


class TestSQLiteUnitOfWork:
    async def test_commits_on_clean_exit(self, uow_factory):
        async with uow_factory() as uow:
            await uow.products.add(widget())

        async with uow_factory() as uow:
            assert await uow.products.get_by_sku("W-1") is not None

    async def test_rolls_back_every_write_on_exception(self, uow_factory):
        with pytest.raises(RuntimeError):
            async with uow_factory() as uow:
                await uow.users.add(User(email="a@example.com", first_name="A", last_name="B"))
                await uow.products.add(widget())
                raise RuntimeError("fail after writes")

        async with uow_factory() as uow:
            assert await uow.products.get_by_sku("W-1") is None
            assert await uow.users.get_by_email("a@example.com") is None

    async def test_connection_returned_to_pool(self, uow_factory, pool):
        before = pool.available
        async with uow_factory():
            assert pool.available == before - 1
        assert pool.available == before

    async def test_connection_returned_after_failure(self, uow_factory, pool):
        before = pool.available
        with pytest.raises(ValueError):
            async with uow_factory():
                raise ValueError("boom")
        assert pool.available == before

    async def test_not_reentrant(self, pool):
        uow = SQLiteUnitOfWork(pool)
        async with uow:
            with pytest.raises(RuntimeError):
                await uow.__aenter__()

    async def test_commit_outside_block(self, pool):
        with pytest.raises(RuntimeError):
            await SQLiteUnitOfWork(pool).commit()

    async def test_global_factory_uses_global_pool(self, pool):
        set_pool(pool)
        factory = await get_unit_of_work_factory()
        assert factory.pool is pool
        assert await get_unit_of_work_factory() is factory
