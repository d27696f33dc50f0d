"""SQLite implementation of work order storage."""

from datetime import date

import aiosqlite

from src.config import get_logger
from src.core.entities.work_order import (
    WorkOrder,
    WorkOrderItem,
    WorkOrderPriority,
    WorkOrderStatus,
)
from src.core.exceptions import (
    ConcurrencyConflictError,
    DatabaseError,
    ProductNotFoundError,
    WorkOrderNotFoundError,
)
from src.core.interfaces.storage import IWorkOrderRepository, WorkOrderQuery
from src.infrastructure.storage.sqlite.base import (
    SQLiteRepository,
    from_db_date,
    from_db_datetime,
    to_db_datetime,
)

logger = get_logger(__name__)


class SQLiteWorkOrderRepository(SQLiteRepository, IWorkOrderRepository):
    """work_orders header table plus work_order_items."""

    async def add(self, work_order: WorkOrder) -> WorkOrder:
        try:
            work_order_id, _ = await self._execute(
                """
                INSERT INTO work_orders (
                    order_number, title, description, priority, status,
                    due_date, completed_at, requested_by, assigned_to,
                    rejection_reason, version, created_at, updated_at, updated_by
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, 1, ?, ?, ?)
                """,
                (
                    work_order.order_number,
                    work_order.title,
                    work_order.description,
                    work_order.priority.value,
                    work_order.status.value,
                    work_order.due_date.isoformat() if work_order.due_date else None,
                    to_db_datetime(work_order.completed_at),
                    work_order.requested_by,
                    work_order.assigned_to,
                    work_order.rejection_reason,
                    to_db_datetime(work_order.created_at),
                    to_db_datetime(work_order.updated_at),
                    work_order.updated_by,
                ),
            )

            items = []
            for item in work_order.items:
                # Inserted only while the product is still active
                item_id, inserted = await self._execute(
                    """
                    INSERT INTO work_order_items (
                        work_order_id, product_id, quantity_requested, quantity_issued, notes
                    )
                    SELECT ?, ?, ?, ?, ?
                    WHERE EXISTS (SELECT 1 FROM products WHERE id = ? AND is_deleted = 0)
                    """,
                    (
                        work_order_id,
                        item.product_id,
                        item.quantity_requested,
                        item.quantity_issued,
                        item.notes,
                        item.product_id,
                    ),
                )
                if not inserted:
                    raise ProductNotFoundError(item.product_id)
                items.append(item.model_copy(update={"id": item_id, "work_order_id": work_order_id}))
        except aiosqlite.IntegrityError as e:
            if "work_orders.order_number" in str(e):
                # Another writer took the same daily sequence number
                raise ConcurrencyConflictError("WorkOrder", 0) from e
            raise DatabaseError("insert work order", str(e)) from e

        logger.debug(
            "work_order_inserted",
            work_order_id=work_order_id,
            order_number=work_order.order_number,
        )
        return work_order.model_copy(update={"id": work_order_id, "version": 1, "items": items})

    async def get(self, work_order_id: int) -> WorkOrder | None:
        row = await self._fetchone("SELECT * FROM work_orders WHERE id = ?", (work_order_id,))
        if row is None:
            return None
        items = await self._load_items([work_order_id])
        return self._row_to_work_order(row, items.get(work_order_id, []))

    async def list_work_orders(self, query: WorkOrderQuery) -> list[WorkOrder]:
        where, params = self._build_where(query)
        rows = await self._fetchall(
            f"""
            SELECT * FROM work_orders {where}
            ORDER BY created_at DESC, id DESC
            LIMIT ? OFFSET ?
            """,
            [*params, query.limit, query.offset],
        )
        items = await self._load_items([row["id"] for row in rows])
        return [self._row_to_work_order(row, items.get(row["id"], [])) for row in rows]

    async def count_work_orders(self, query: WorkOrderQuery) -> int:
        where, params = self._build_where(query)
        return await self._scalar(f"SELECT COUNT(*) FROM work_orders {where}", params)

    async def count_created_on(self, day: date) -> int:
        return await self._scalar(
            "SELECT COUNT(*) FROM work_orders WHERE substr(created_at, 1, 10) = ?",
            (day.isoformat(),),
        )

    async def update(self, work_order: WorkOrder, expected_version: int) -> WorkOrder:
        try:
            _, rowcount = await self._execute(
                """
                UPDATE work_orders SET
                    title = ?, description = ?, priority = ?, status = ?,
                    due_date = ?, completed_at = ?, assigned_to = ?,
                    rejection_reason = ?, updated_at = ?, updated_by = ?,
                    version = version + 1
                WHERE id = ? AND version = ?
                """,
                (
                    work_order.title,
                    work_order.description,
                    work_order.priority.value,
                    work_order.status.value,
                    work_order.due_date.isoformat() if work_order.due_date else None,
                    to_db_datetime(work_order.completed_at),
                    work_order.assigned_to,
                    work_order.rejection_reason,
                    to_db_datetime(work_order.updated_at),
                    work_order.updated_by,
                    work_order.id,
                    expected_version,
                ),
            )

            if rowcount == 0:
                actual = await self._scalar(
                    "SELECT version FROM work_orders WHERE id = ?", (work_order.id,)
                )
                if actual is None:
                    raise WorkOrderNotFoundError(work_order.id)  # type: ignore[arg-type]
                logger.info(
                    "work_order_version_conflict",
                    work_order_id=work_order.id,
                    expected_version=expected_version,
                    actual_version=actual,
                )
                raise ConcurrencyConflictError(
                    "WorkOrder",
                    work_order.id,  # type: ignore[arg-type]
                    expected_version=expected_version,
                    actual_version=actual,
                )

            for item in work_order.items:
                await self._execute(
                    "UPDATE work_order_items SET quantity_issued = ?, notes = ? WHERE id = ?",
                    (item.quantity_issued, item.notes, item.id),
                )
        except aiosqlite.IntegrityError as e:
            raise DatabaseError("update work order", str(e)) from e

        return work_order.model_copy(update={"version": expected_version + 1})

    async def _load_items(self, work_order_ids: list[int]) -> dict[int, list[WorkOrderItem]]:
        if not work_order_ids:
            return {}
        placeholders = ",".join("?" * len(work_order_ids))
        rows = await self._fetchall(
            f"SELECT * FROM work_order_items WHERE work_order_id IN ({placeholders}) ORDER BY id",
            work_order_ids,
        )
        grouped: dict[int, list[WorkOrderItem]] = {}
        for row in rows:
            grouped.setdefault(row["work_order_id"], []).append(
                WorkOrderItem(
                    id=row["id"],
                    work_order_id=row["work_order_id"],
                    product_id=row["product_id"],
                    quantity_requested=row["quantity_requested"],
                    quantity_issued=row["quantity_issued"],
                    notes=row["notes"],
                )
            )
        return grouped

    @staticmethod
    def _build_where(query: WorkOrderQuery) -> tuple[str, list]:
        clauses: list[str] = []
        params: list = []

        if query.status:
            clauses.append("status = ?")
            params.append(query.status.value)
        if query.priority:
            clauses.append("priority = ?")
            params.append(query.priority.value)
        if query.assigned_to is not None:
            clauses.append("assigned_to = ?")
            params.append(query.assigned_to)
        if query.requested_by is not None:
            clauses.append("requested_by = ?")
            params.append(query.requested_by)

        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
        return where, params

    @staticmethod
    def _row_to_work_order(row: aiosqlite.Row, items: list[WorkOrderItem]) -> WorkOrder:
        return WorkOrder(
            id=row["id"],
            order_number=row["order_number"],
            title=row["title"],
            description=row["description"] or "",
            priority=WorkOrderPriority(row["priority"]),
            status=WorkOrderStatus(row["status"]),
            due_date=from_db_date(row["due_date"]),
            completed_at=from_db_datetime(row["completed_at"]),
            requested_by=row["requested_by"],
            assigned_to=row["assigned_to"],
            rejection_reason=row["rejection_reason"],
            items=items,
            version=row["version"],
            created_at=from_db_datetime(row["created_at"]),
            updated_at=from_db_datetime(row["updated_at"]),
            updated_by=row["updated_by"],
        )
