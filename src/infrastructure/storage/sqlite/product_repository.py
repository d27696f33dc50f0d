"""SQLite implementation of product storage."""

import aiosqlite

from src.config import get_logger
from src.core.entities.product import CostingMethod, Product
from src.core.exceptions import (
    ConcurrencyConflictError,
    DatabaseError,
    DuplicateSkuError,
    ProductInUseError,
    ProductNotFoundError,
)
from src.core.interfaces.storage import IProductRepository, ProductQuery
from src.infrastructure.storage.sqlite.base import (
    SQLiteRepository,
    from_db_datetime,
    to_db_datetime,
)

logger = get_logger(__name__)

_TERMINAL = ("completed", "rejected", "cancelled")

_OPEN_REFERENCES = f"""
    FROM work_order_items i
    JOIN work_orders wo ON wo.id = i.work_order_id
    WHERE i.product_id = ? AND wo.status NOT IN ({",".join("?" * len(_TERMINAL))})
"""


class SQLiteProductRepository(SQLiteRepository, IProductRepository):
    """Products table. Every read filters soft-deleted rows explicitly."""

    async def add(self, product: Product) -> Product:
        try:
            product_id, _ = await self._execute(
                """
                INSERT INTO products (
                    sku, name, description, category, quantity,
                    reorder_point, reorder_quantity, unit_cost, unit_of_measure,
                    location, costing_method, version,
                    created_at, created_by, updated_at, updated_by
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, 1, ?, ?, ?, ?)
                """,
                (
                    product.sku,
                    product.name,
                    product.description,
                    product.category,
                    product.quantity,
                    product.reorder_point,
                    product.reorder_quantity,
                    product.unit_cost,
                    product.unit_of_measure,
                    product.location,
                    product.costing_method.value,
                    to_db_datetime(product.created_at),
                    product.created_by,
                    to_db_datetime(product.updated_at),
                    product.updated_by,
                ),
            )
        except aiosqlite.IntegrityError as e:
            if "products.sku" in str(e):
                raise DuplicateSkuError(product.sku) from e
            raise DatabaseError("insert product", str(e)) from e

        logger.debug("product_inserted", product_id=product_id, sku=product.sku)
        return product.model_copy(update={"id": product_id, "version": 1})

    async def get(self, product_id: int, include_deleted: bool = False) -> Product | None:
        sql = "SELECT * FROM products WHERE id = ?"
        if not include_deleted:
            sql += " AND is_deleted = 0"
        row = await self._fetchone(sql, (product_id,))
        return self._row_to_product(row) if row else None

    async def get_by_sku(self, sku: str, include_deleted: bool = False) -> Product | None:
        sql = "SELECT * FROM products WHERE sku = ?"
        if not include_deleted:
            sql += " AND is_deleted = 0"
        row = await self._fetchone(sql, (sku,))
        return self._row_to_product(row) if row else None

    async def list_products(self, query: ProductQuery) -> list[Product]:
        where, params = self._build_where(query)
        rows = await self._fetchall(
            f"SELECT * FROM products {where} ORDER BY name, id LIMIT ? OFFSET ?",
            [*params, query.limit, query.offset],
        )
        return [self._row_to_product(row) for row in rows]

    async def count_products(self, query: ProductQuery) -> int:
        where, params = self._build_where(query)
        return await self._scalar(f"SELECT COUNT(*) FROM products {where}", params)

    async def update(self, product: Product, expected_version: int) -> Product:
        # A soft delete only lands while no open work order lists the product
        guard = ""
        guard_params: tuple = ()
        if product.is_deleted:
            guard = f" AND (is_deleted = 1 OR NOT EXISTS (SELECT 1 {_OPEN_REFERENCES}))"
            guard_params = (product.id, *_TERMINAL)

        try:
            _, rowcount = await self._execute(
                f"""
                UPDATE products SET
                    name = ?, description = ?, category = ?, quantity = ?,
                    reorder_point = ?, reorder_quantity = ?, unit_cost = ?,
                    unit_of_measure = ?, location = ?, costing_method = ?,
                    updated_at = ?, updated_by = ?,
                    is_deleted = ?, deleted_at = ?, deleted_by = ?,
                    version = version + 1
                WHERE id = ? AND version = ?{guard}
                """,
                (
                    product.name,
                    product.description,
                    product.category,
                    product.quantity,
                    product.reorder_point,
                    product.reorder_quantity,
                    product.unit_cost,
                    product.unit_of_measure,
                    product.location,
                    product.costing_method.value,
                    to_db_datetime(product.updated_at),
                    product.updated_by,
                    int(product.is_deleted),
                    to_db_datetime(product.deleted_at),
                    product.deleted_by,
                    product.id,
                    expected_version,
                    *guard_params,
                ),
            )
        except aiosqlite.IntegrityError as e:
            raise DatabaseError("update product", str(e)) from e

        if rowcount == 0:
            actual = await self._scalar("SELECT version FROM products WHERE id = ?", (product.id,))
            if actual is None:
                raise ProductNotFoundError(product.id)  # type: ignore[arg-type]
            if product.is_deleted and actual == expected_version:
                raise ProductInUseError(
                    product.id,  # type: ignore[arg-type]
                    await self.count_open_references(product.id),  # type: ignore[arg-type]
                )
            logger.info(
                "product_version_conflict",
                product_id=product.id,
                expected_version=expected_version,
                actual_version=actual,
            )
            raise ConcurrencyConflictError(
                "Product",
                product.id,  # type: ignore[arg-type]
                expected_version=expected_version,
                actual_version=actual,
            )

        return product.model_copy(update={"version": expected_version + 1})

    async def count_open_references(self, product_id: int) -> int:
        return await self._scalar(
            f"SELECT COUNT(DISTINCT wo.id) {_OPEN_REFERENCES}",
            (product_id, *_TERMINAL),
        )

    @staticmethod
    def _build_where(query: ProductQuery) -> tuple[str, list]:
        clauses: list[str] = []
        params: list = []

        if not query.include_deleted:
            clauses.append("is_deleted = 0")
        if query.category:
            clauses.append("category = ?")
            params.append(query.category)
        if query.search:
            clauses.append("(sku LIKE ? OR name LIKE ?)")
            pattern = f"%{query.search}%"
            params.extend([pattern, pattern])
        if query.low_stock_only:
            clauses.append("quantity <= reorder_point")

        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
        return where, params

    @staticmethod
    def _row_to_product(row: aiosqlite.Row) -> Product:
        return Product(
            id=row["id"],
            sku=row["sku"],
            name=row["name"],
            description=row["description"] or "",
            category=row["category"] or "",
            quantity=row["quantity"],
            reorder_point=row["reorder_point"],
            reorder_quantity=row["reorder_quantity"],
            unit_cost=float(row["unit_cost"]),
            unit_of_measure=row["unit_of_measure"],
            location=row["location"] or "",
            costing_method=CostingMethod(row["costing_method"]),
            version=row["version"],
            created_at=from_db_datetime(row["created_at"]),
            created_by=row["created_by"],
            updated_at=from_db_datetime(row["updated_at"]),
            updated_by=row["updated_by"],
            is_deleted=bool(row["is_deleted"]),
            deleted_at=from_db_datetime(row["deleted_at"]),
            deleted_by=row["deleted_by"],
        )
