"""Shared helpers for SQLite repositories."""

from collections.abc import Iterable
from datetime import UTC, date, datetime
from typing import Any

import aiosqlite

from src.config import get_logger

logger = get_logger(__name__)


def to_db_datetime(value: datetime | None) -> str | None:
    """Store datetimes as UTC ISO-8601 so text comparison orders them."""
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.astimezone(UTC).isoformat()


def from_db_datetime(value: str | None) -> datetime | None:
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value)
    except (ValueError, TypeError):
        logger.warning("unparseable_datetime", value=value)
        return None
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=UTC)


def from_db_date(value: str | None) -> date | None:
    if not value:
        return None
    try:
        return date.fromisoformat(value)
    except (ValueError, TypeError):
        logger.warning("unparseable_date", value=value)
        return None


class SQLiteRepository:
    """
    Base for repositories bound to a unit of work's connection.

    Cursors are always closed before returning so no read statement stays
    active on the connection; an open statement would pin a WAL snapshot
    and make the next write fail with SQLITE_BUSY instead of waiting.
    """

    def __init__(self, conn: aiosqlite.Connection):
        self._conn = conn

    async def _fetchone(self, sql: str, params: Iterable[Any] = ()) -> aiosqlite.Row | None:
        async with self._conn.execute(sql, tuple(params)) as cursor:
            return await cursor.fetchone()

    async def _fetchall(self, sql: str, params: Iterable[Any] = ()) -> list[aiosqlite.Row]:
        async with self._conn.execute(sql, tuple(params)) as cursor:
            return list(await cursor.fetchall())

    async def _scalar(self, sql: str, params: Iterable[Any] = ()) -> Any:
        row = await self._fetchone(sql, params)
        return row[0] if row is not None else None

    async def _execute(self, sql: str, params: Iterable[Any] = ()) -> tuple[int | None, int]:
        """Run a write statement; returns (lastrowid, rowcount)."""
        async with self._conn.execute(sql, tuple(params)) as cursor:
            return cursor.lastrowid, cursor.rowcount
