"""Unit tests for SQLite connection pool."""

import asyncio
from pathlib import Path

import aiosqlite
import pytest

from src.core.exceptions import DatabaseError
from src.infrastructure.storage.sqlite.connection import (
    ConnectionPool,
    close_pool,
    get_pool,
    set_pool,
)


class TestConnectionPoolInit:
    """Tests for ConnectionPool construction."""

    def test_defaults(self, temp_db_path: Path):
        pool = ConnectionPool(temp_db_path)
        assert pool.db_path == temp_db_path
        assert pool.pool_size == 5
        assert pool.busy_timeout == 30000
        assert pool.initialized is False

    def test_custom_settings(self, temp_db_path: Path):
        pool = ConnectionPool(temp_db_path, pool_size=2, busy_timeout=1000)
        assert pool.pool_size == 2
        assert pool.busy_timeout == 1000


class TestConnectionPoolInitialize:
    async def test_creates_directory(self, tmp_path: Path):
        """Initialize creates database directory if not exists."""
        db_path = tmp_path / "nested" / "dir" / "stock.db"
        pool = ConnectionPool(db_path, pool_size=1)

        await pool.initialize()
        assert db_path.parent.exists()
        await pool.close()

    async def test_initialize_idempotent(self, temp_db_path: Path):
        pool = ConnectionPool(temp_db_path, pool_size=2)

        await pool.initialize()
        await pool.initialize()

        assert pool.available == 2
        await pool.close()

    async def test_pragmas(self, temp_db_path: Path):
        pool = ConnectionPool(temp_db_path, pool_size=1)
        async with pool.acquire() as conn:
            async with conn.execute("PRAGMA journal_mode") as cursor:
                assert (await cursor.fetchone())[0] == "wal"
            async with conn.execute("PRAGMA foreign_keys") as cursor:
                assert (await cursor.fetchone())[0] == 1
            assert conn.row_factory is aiosqlite.Row
        await pool.close()


class TestConnectionPoolAcquire:
    async def test_acquire_initializes_lazily(self, temp_db_path: Path):
        pool = ConnectionPool(temp_db_path, pool_size=1)
        async with pool.acquire():
            assert pool.initialized
        await pool.close()

    async def test_connection_returned_after_use(self, temp_db_path: Path):
        pool = ConnectionPool(temp_db_path, pool_size=2)
        await pool.initialize()

        async with pool.acquire():
            assert pool.available == 1
        assert pool.available == 2
        await pool.close()

    async def test_waits_when_exhausted(self, temp_db_path: Path):
        pool = ConnectionPool(temp_db_path, pool_size=1)
        await pool.initialize()

        async with pool.acquire():
            with pytest.raises(asyncio.TimeoutError):
                async with asyncio.timeout(0.1):
                    async with pool.acquire():
                        pass
        await pool.close()

    async def test_acquire_timeout_raises(self, temp_db_path: Path):
        pool = ConnectionPool(temp_db_path, pool_size=1, acquire_timeout=0.05)
        async with pool.acquire():
            with pytest.raises(DatabaseError) as exc_info:
                async with pool.acquire():
                    pass
        assert exc_info.value.details["operation"] == "acquire connection"
        await pool.close()

    async def test_open_transaction_rolled_back_on_return(self, temp_db_path: Path):
        pool = ConnectionPool(temp_db_path, pool_size=1)
        async with pool.transaction() as conn:
            await conn.execute("CREATE TABLE t (x INTEGER)")

        async with pool.acquire() as conn:
            await conn.execute("INSERT INTO t VALUES (1)")
            assert conn.in_transaction

        async with pool.acquire() as conn:
            assert not conn.in_transaction
            async with conn.execute("SELECT COUNT(*) FROM t") as cursor:
                assert (await cursor.fetchone())[0] == 0
        await pool.close()


class TestConnectionPoolTransaction:
    async def test_commits(self, temp_db_path: Path):
        pool = ConnectionPool(temp_db_path, pool_size=1)
        async with pool.transaction() as conn:
            await conn.execute("CREATE TABLE t (x INTEGER)")
            await conn.execute("INSERT INTO t VALUES (1)")

        async with pool.acquire() as conn:
            async with conn.execute("SELECT COUNT(*) FROM t") as cursor:
                assert (await cursor.fetchone())[0] == 1
        await pool.close()

    async def test_rolls_back_on_exception(self, temp_db_path: Path):
        pool = ConnectionPool(temp_db_path, pool_size=1)
        async with pool.transaction() as conn:
            await conn.execute("CREATE TABLE t (x INTEGER)")

        with pytest.raises(RuntimeError):
            async with pool.transaction() as conn:
                await conn.execute("INSERT INTO t VALUES (1)")
                raise RuntimeError("abort")

        async with pool.acquire() as conn:
            async with conn.execute("SELECT COUNT(*) FROM t") as cursor:
                assert (await cursor.fetchone())[0] == 0
        await pool.close()


class TestConnectionPoolPingAndClose:
    async def test_ping(self, temp_db_path: Path):
        pool = ConnectionPool(temp_db_path, pool_size=1)
        assert await pool.ping() is True
        await pool.close()

    async def test_close(self, temp_db_path: Path):
        pool = ConnectionPool(temp_db_path, pool_size=2)
        await pool.initialize()
        await pool.close()

        assert pool.initialized is False
        assert pool.available == 0

    async def test_stats(self, temp_db_path: Path):
        pool = ConnectionPool(temp_db_path, pool_size=3)
        async with pool.acquire():
            stats = pool.stats()
            assert (stats.size, stats.idle, stats.in_use) == (3, 2, 1)
        assert pool.stats().in_use == 0
        await pool.close()


class TestGlobalPool:
    async def test_get_pool_uses_settings(self, monkeypatch, temp_db_path: Path):
        monkeypatch.setenv("STORAGE_DATA_DIR", str(temp_db_path.parent))
        monkeypatch.setenv("STORAGE_DB_NAME", temp_db_path.name)
        monkeypatch.setenv("STORAGE_POOL_SIZE", "2")

        pool = await get_pool()
        try:
            assert pool.db_path == temp_db_path
            assert pool.pool_size == 2
            assert await get_pool() is pool
        finally:
            await close_pool()

    async def test_set_pool(self, temp_db_path: Path):
        custom = ConnectionPool(temp_db_path, pool_size=1)
        set_pool(custom)
        assert await get_pool() is custom
        await close_pool()
