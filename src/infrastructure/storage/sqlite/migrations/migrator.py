"""
Versioned schema migrations for the stock database.

Migration files live next to this module as ``vNNN_description.sql`` and
are applied in version order. Each applied file is recorded in
``schema_migrations`` with a checksum; editing a file after it has been
applied stops the run instead of silently diverging.

Before migrating an existing database a copy is taken with SQLite's online
backup API. The copy is restored if the run fails and removed if it
succeeds.
"""

import argparse
import asyncio
import hashlib
import re
import time
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

import aiosqlite

from src.config import get_logger, get_settings
from src.core.exceptions import DatabaseError

logger = get_logger(__name__)

MIGRATIONS_DIR = Path(__file__).parent

REQUIRED_TABLES = [
    "users",
    "products",
    "work_orders",
    "work_order_items",
    "stock_movements",
    "schema_migrations",
]

_FILENAME = re.compile(r"v(\d+)_(.+)\.sql$")

_RECORD_SQL = """
CREATE TABLE IF NOT EXISTS schema_migrations (
    version TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    checksum TEXT NOT NULL,
    execution_time_ms INTEGER DEFAULT 0,
    applied_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%fZ', 'now'))
)
"""

# Products whose stored quantity differs from the net of their movement log
_LEDGER_BALANCE_SQL = """
SELECT p.id, p.quantity, COALESCE(m.net, 0)
FROM products p
LEFT JOIN (
    SELECT product_id,
           SUM(CASE movement_type
                   WHEN 'receipt' THEN quantity
                   WHEN 'return' THEN quantity
                   WHEN 'issue' THEN -quantity
                   WHEN 'adjustment' THEN CASE WHEN increase THEN quantity ELSE -quantity END
                   ELSE 0
               END) AS net
    FROM stock_movements
    GROUP BY product_id
) m ON m.product_id = p.id
WHERE p.quantity != COALESCE(m.net, 0)
ORDER BY p.id
"""


@dataclass
class MigrationInfo:
    """A migration file on disk."""

    version: str
    name: str
    path: Path
    checksum: str

    @classmethod
    def from_file(cls, path: Path) -> "MigrationInfo":
        match = _FILENAME.match(path.name)
        if not match:
            raise ValueError(f"Invalid migration filename: {path.name}")
        digest = hashlib.sha256(path.read_bytes()).hexdigest()[:16]
        return cls(version=match.group(1), name=match.group(2), path=path, checksum=digest)


@dataclass
class MigrationResult:
    """Outcome of applying one migration."""

    version: str
    name: str
    success: bool
    execution_time_ms: int
    error: str | None = None


@dataclass
class MigrationStatus:
    exists: bool
    current_version: str | None
    applied: list[str] = field(default_factory=list)
    pending: list[str] = field(default_factory=list)


@dataclass
class SchemaCheck:
    """One verification performed against a live database."""

    name: str
    passed: bool
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def status(self) -> str:
        return "PASS" if self.passed else "FAIL"


def discover_migrations(migrations_dir: Path | None = None) -> list[MigrationInfo]:
    """Migration files in version order; badly named files are skipped."""
    found = []
    for path in sorted((migrations_dir or MIGRATIONS_DIR).glob("v*.sql")):
        try:
            found.append(MigrationInfo.from_file(path))
        except ValueError as e:
            logger.warning("skipping_invalid_migration", path=str(path), error=str(e))
    return found


async def get_applied_migrations(conn: aiosqlite.Connection) -> dict[str, str]:
    """Applied version -> checksum. Empty for a fresh database."""
    try:
        async with conn.execute(
            "SELECT version, checksum FROM schema_migrations ORDER BY version"
        ) as cursor:
            return {row[0]: row[1] for row in await cursor.fetchall()}
    except aiosqlite.OperationalError:
        return {}


async def get_current_version(conn: aiosqlite.Connection) -> str | None:
    applied = await get_applied_migrations(conn)
    return max(applied) if applied else None


def select_pending(
    migrations: list[MigrationInfo], applied: dict[str, str]
) -> list[MigrationInfo]:
    """
    Migrations not yet applied.

    Raises:
        DatabaseError: An applied migration's file no longer matches the
            checksum recorded when it ran.
    """
    pending = []
    for migration in migrations:
        recorded = applied.get(migration.version)
        if recorded is None:
            pending.append(migration)
        elif recorded != migration.checksum:
            raise DatabaseError(
                "migrate",
                f"migration v{migration.version} was modified after it was applied",
            )
    return pending


async def apply_migration(
    conn: aiosqlite.Connection, migration: MigrationInfo
) -> MigrationResult:
    """Run one migration script and record it."""
    logger.info("applying_migration", version=migration.version, name=migration.name)
    started = time.monotonic()

    try:
        await conn.executescript(migration.path.read_text(encoding="utf-8"))
        await conn.execute(_RECORD_SQL)
        elapsed = int((time.monotonic() - started) * 1000)
        await conn.execute(
            "INSERT INTO schema_migrations (version, name, checksum, execution_time_ms) "
            "VALUES (?, ?, ?, ?)",
            (migration.version, migration.name, migration.checksum, elapsed),
        )
        await conn.commit()
    except aiosqlite.Error as e:
        await conn.rollback()
        logger.error("migration_failed", version=migration.version, error=str(e))
        return MigrationResult(
            version=migration.version,
            name=migration.name,
            success=False,
            execution_time_ms=int((time.monotonic() - started) * 1000),
            error=str(e),
        )

    logger.info("migration_applied", version=migration.version, execution_time_ms=elapsed)
    return MigrationResult(
        version=migration.version,
        name=migration.name,
        success=True,
        execution_time_ms=elapsed,
    )


async def create_backup(db_path: Path) -> Path:
    """Copy the database aside, including pages still in the WAL."""
    stamp = datetime.now(UTC).strftime("%Y%m%d_%H%M%S")
    backup_path = db_path.with_name(f"{db_path.stem}.backup_{stamp}{db_path.suffix}")
    async with aiosqlite.connect(db_path) as source, aiosqlite.connect(backup_path) as target:
        await source.backup(target)
    logger.info("database_backup_created", backup_path=str(backup_path))
    return backup_path


async def restore_backup(db_path: Path, backup_path: Path) -> None:
    async with aiosqlite.connect(backup_path) as source, aiosqlite.connect(db_path) as target:
        await source.backup(target)
    logger.warning("database_restored_from_backup", backup_path=str(backup_path))


async def initialize_database(
    db_path: Path | None = None,
    create_backup_before: bool = True,
) -> list[MigrationResult]:
    """
    Bring the database up to the latest schema.

    Args:
        db_path: Database file (default from settings)
        create_backup_before: Back up an existing file before migrating

    Returns:
        Results for the migrations applied in this run; empty when the
        schema was already current.
    """
    db_path = Path(db_path) if db_path else get_settings().storage.db_path
    db_path.parent.mkdir(parents=True, exist_ok=True)
    logger.info("initializing_database", db_path=str(db_path))

    backup_path = None
    if create_backup_before and db_path.exists():
        backup_path = await create_backup(db_path)

    results: list[MigrationResult] = []
    try:
        async with aiosqlite.connect(db_path) as conn:
            await conn.execute("PRAGMA journal_mode=WAL")
            await conn.execute("PRAGMA foreign_keys=ON")

            pending = select_pending(discover_migrations(), await get_applied_migrations(conn))
            for migration in pending:
                result = await apply_migration(conn, migration)
                results.append(result)
                if not result.success:
                    raise DatabaseError("migrate", result.error or "unknown error")

            logger.info(
                "database_initialized",
                applied=len(results),
                version=await get_current_version(conn),
            )
    except (DatabaseError, aiosqlite.Error) as e:
        logger.error("database_initialization_failed", error=str(e))
        if backup_path is not None:
            await restore_backup(db_path, backup_path)
        raise

    if backup_path is not None:
        backup_path.unlink()
        logger.debug("backup_cleaned_up")

    return results


run_migrations = initialize_database


async def get_migration_status(db_path: Path | None = None) -> MigrationStatus:
    db_path = Path(db_path) if db_path else get_settings().storage.db_path
    migrations = discover_migrations()

    if not db_path.exists():
        return MigrationStatus(
            exists=False,
            current_version=None,
            pending=[m.version for m in migrations],
        )

    async with aiosqlite.connect(db_path) as conn:
        applied = await get_applied_migrations(conn)

    return MigrationStatus(
        exists=True,
        current_version=max(applied) if applied else None,
        applied=list(applied),
        pending=[m.version for m in migrations if m.version not in applied],
    )


async def verify_schema_integrity(db_path: Path | None = None) -> list[SchemaCheck]:
    """
    Structural checks plus a ledger balance check.

    The ledger check reports every product whose stored quantity is not
    the net of its recorded movements.
    """
    db_path = Path(db_path) if db_path else get_settings().storage.db_path
    checks: list[SchemaCheck] = []

    async with aiosqlite.connect(db_path) as conn:
        async with conn.execute("PRAGMA integrity_check") as cursor:
            (integrity,) = await cursor.fetchone()
        checks.append(SchemaCheck("integrity", integrity == "ok", {"result": integrity}))

        async with conn.execute("PRAGMA foreign_key_check") as cursor:
            violations = await cursor.fetchall()
        checks.append(
            SchemaCheck("foreign_keys", not violations, {"violations": len(violations)})
        )

        async with conn.execute("SELECT name FROM sqlite_master WHERE type='table'") as cursor:
            tables = {row[0] for row in await cursor.fetchall()}
        missing = [t for t in REQUIRED_TABLES if t not in tables]
        checks.append(SchemaCheck("required_tables", not missing, {"missing": missing}))

        if not {"products", "stock_movements"} - tables:
            async with conn.execute(_LEDGER_BALANCE_SQL) as cursor:
                unbalanced = [
                    {"product_id": pid, "quantity": qty, "ledger_net": net}
                    for pid, qty, net in await cursor.fetchall()
                ]
            checks.append(
                SchemaCheck("ledger_balance", not unbalanced, {"unbalanced": unbalanced})
            )

    return checks


def main() -> None:
    """Command line entry point: stockline-migrate [--status | --verify]."""
    parser = argparse.ArgumentParser(description="Stockline database migrator")
    parser.add_argument("--db-path", type=Path, help="Database path (default from settings)")
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument("--status", action="store_true", help="Show applied and pending versions")
    mode.add_argument("--verify", action="store_true", help="Check schema and ledger balance")
    parser.add_argument("--no-backup", action="store_true", help="Skip the pre-migration backup")
    args = parser.parse_args()

    if args.status:
        status = asyncio.run(get_migration_status(args.db_path))
        print(f"Database exists: {status.exists}")
        print(f"Current version: {status.current_version or 'N/A'}")
        print(f"Pending: {', '.join(status.pending) or 'none'}")
        return

    if args.verify:
        checks = asyncio.run(verify_schema_integrity(args.db_path))
        for check in checks:
            print(f"[{check.status}] {check.name}")
            if not check.passed:
                for key, value in check.details.items():
                    print(f"    {key}: {value}")
        raise SystemExit(0 if all(c.passed for c in checks) else 1)

    results = asyncio.run(
        initialize_database(args.db_path, create_backup_before=not args.no_backup)
    )
    if not results:
        print("Database is up to date")
    for result in results:
        print(f"[{'OK' if result.success else 'FAILED'}] v{result.version} {result.name}")


if __name__ == "__main__":
    main()
