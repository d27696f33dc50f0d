"""SQLite implementation of the stock movement ledger."""

import aiosqlite

from src.config import get_logger
from src.core.entities.stock_movement import StockMovement, StockMovementType
from src.core.exceptions import DatabaseError
from src.core.interfaces.storage import IStockMovementRepository, MovementQuery
from src.infrastructure.storage.sqlite.base import (
    SQLiteRepository,
    from_db_datetime,
    to_db_datetime,
)

logger = get_logger(__name__)


class SQLiteStockMovementRepository(SQLiteRepository, IStockMovementRepository):
    """Insert-only access to stock_movements."""

    async def add(self, movement: StockMovement) -> StockMovement:
        try:
            movement_id, _ = await self._execute(
                """
                INSERT INTO stock_movements (
                    product_id, movement_type, quantity, increase,
                    source_location, destination_location, reason, reference,
                    work_order_id, performed_by, unit_cost, quantity_after, timestamp
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    movement.product_id,
                    movement.movement_type.value,
                    movement.quantity,
                    None if movement.increase is None else int(movement.increase),
                    movement.source_location,
                    movement.destination_location,
                    movement.reason,
                    movement.reference,
                    movement.work_order_id,
                    movement.performed_by,
                    movement.unit_cost,
                    movement.quantity_after,
                    to_db_datetime(movement.timestamp),
                ),
            )
        except aiosqlite.IntegrityError as e:
            raise DatabaseError("insert stock movement", str(e)) from e

        return movement.model_copy(update={"id": movement_id})

    async def list_movements(self, query: MovementQuery) -> list[StockMovement]:
        where, params = self._build_where(query)
        rows = await self._fetchall(
            f"""
            SELECT * FROM stock_movements {where}
            ORDER BY timestamp DESC, id DESC
            LIMIT ? OFFSET ?
            """,
            [*params, query.limit, query.offset],
        )
        return [self._row_to_movement(row) for row in rows]

    async def count_movements(self, query: MovementQuery) -> int:
        where, params = self._build_where(query)
        return await self._scalar(f"SELECT COUNT(*) FROM stock_movements {where}", params)

    @staticmethod
    def _build_where(query: MovementQuery) -> tuple[str, list]:
        clauses: list[str] = []
        params: list = []

        if query.product_id is not None:
            clauses.append("product_id = ?")
            params.append(query.product_id)
        if query.movement_type:
            clauses.append("movement_type = ?")
            params.append(query.movement_type.value)
        if query.work_order_id is not None:
            clauses.append("work_order_id = ?")
            params.append(query.work_order_id)
        if query.from_date:
            clauses.append("timestamp >= ?")
            params.append(to_db_datetime(query.from_date))
        if query.to_date:
            clauses.append("timestamp <= ?")
            params.append(to_db_datetime(query.to_date))

        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
        return where, params

    @staticmethod
    def _row_to_movement(row: aiosqlite.Row) -> StockMovement:
        return StockMovement(
            id=row["id"],
            product_id=row["product_id"],
            movement_type=StockMovementType(row["movement_type"]),
            quantity=row["quantity"],
            increase=None if row["increase"] is None else bool(row["increase"]),
            source_location=row["source_location"] or "",
            destination_location=row["destination_location"] or "",
            reason=row["reason"] or "",
            reference=row["reference"],
            work_order_id=row["work_order_id"],
            performed_by=row["performed_by"],
            unit_cost=float(row["unit_cost"]),
            quantity_after=row["quantity_after"],
            timestamp=from_db_datetime(row["timestamp"]),
        )
