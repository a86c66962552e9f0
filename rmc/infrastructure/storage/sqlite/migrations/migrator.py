"""
Versioned SQL migrations for the costing database.

Migration files live next to this module and are named ``vNNN_name.sql``.
Each one is applied in its own transaction together with its row in
``schema_migrations``. Applied files are pinned by checksum: editing one after
it ran is a configuration error, not something to silently re-run.
"""

import hashlib
import re
import shutil
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import aiosqlite

from rmc.config import get_logger, get_settings
from rmc.core.exceptions import ConfigurationError

logger = get_logger(__name__)

MIGRATIONS_DIR = Path(__file__).parent

MIGRATION_FILENAME = re.compile(r"^v(\d+)_(\w+)\.sql$")

REQUIRED_TABLES = [
    "schema_migrations",
    "app_counters",
    "raw_materials",
    "rm_vendor_prices",
    "rm_price_logs",
    "recipes",
    "recipe_items",
    "recipe_history",
    "recipe_logs",
]


@dataclass(frozen=True)
class Migration:
    """One migration file on disk."""

    version: str
    name: str
    path: Path
    checksum: str

    @classmethod
    def load(cls, path: Path) -> "Migration":
        match = MIGRATION_FILENAME.match(path.name)
        if match is None:
            raise ValueError(f"not a migration file name: {path.name}")
        digest = hashlib.sha256(path.read_bytes()).hexdigest()
        return cls(
            version=match.group(1),
            name=match.group(2),
            path=path,
            checksum=digest[:16],
        )


@dataclass
class MigrationResult:
    version: str
    name: str
    success: bool
    execution_time_ms: int
    error: str | None = None


def discover_migrations(directory: Path = MIGRATIONS_DIR) -> list[Migration]:
    """Migration files in version order. Misnamed files are skipped."""
    found: list[Migration] = []
    for path in directory.glob("v*.sql"):
        try:
            found.append(Migration.load(path))
        except ValueError as e:
            logger.warning("migration_file_ignored", path=str(path), reason=str(e))
    return sorted(found, key=lambda m: int(m.version))


async def _table_names(conn: aiosqlite.Connection) -> set[str]:
    cursor = await conn.execute("SELECT name FROM sqlite_master WHERE type = 'table'")
    return {row[0] for row in await cursor.fetchall()}


async def get_applied_migrations(conn: aiosqlite.Connection) -> dict[str, str]:
    """Applied version -> recorded checksum. Empty on a fresh database."""
    if "schema_migrations" not in await _table_names(conn):
        return {}
    cursor = await conn.execute("SELECT version, checksum FROM schema_migrations")
    return {row[0]: row[1] for row in await cursor.fetchall()}


async def get_current_version(conn: aiosqlite.Connection) -> str | None:
    applied = await get_applied_migrations(conn)
    return max(applied, key=int) if applied else None


def _check_unchanged(migration: Migration, recorded_checksum: str) -> None:
    if recorded_checksum != migration.checksum:
        raise ConfigurationError(
            f"Migration v{migration.version} changed after it was applied",
            code="MIGRATION_CHECKSUM_MISMATCH",
            details={
                "version": migration.version,
                "recorded": recorded_checksum,
                "on_disk": migration.checksum,
            },
        )


async def apply_migration(
    conn: aiosqlite.Connection, migration: Migration
) -> MigrationResult:
    """Run one migration file and record it, all or nothing."""
    started = time.perf_counter()

    def elapsed_ms() -> int:
        return int((time.perf_counter() - started) * 1000)

    try:
        # executescript commits first; the explicit BEGIN keeps the file atomic
        await conn.executescript("BEGIN;\n" + migration.path.read_text(encoding="utf-8"))
        await conn.execute(
            "INSERT INTO schema_migrations (version, name, checksum, execution_time_ms) "
            "VALUES (?, ?, ?, ?)",
            (migration.version, migration.name, migration.checksum, elapsed_ms()),
        )
        await conn.commit()
    except aiosqlite.Error as e:
        await conn.rollback()
        logger.error("migration_failed", version=migration.version, error=str(e))
        return MigrationResult(
            migration.version, migration.name, False, elapsed_ms(), error=str(e)
        )

    logger.info(
        "migration_applied",
        version=migration.version,
        name=migration.name,
        execution_time_ms=elapsed_ms(),
    )
    return MigrationResult(migration.version, migration.name, True, elapsed_ms())


def create_backup(db_path: Path) -> Path:
    """Copy the database file aside before migrating it."""
    stamp = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%S")
    backup_path = db_path.with_name(f"{db_path.stem}.backup_{stamp}{db_path.suffix}")
    shutil.copy2(db_path, backup_path)
    logger.info("database_backup_created", backup_path=str(backup_path))
    return backup_path


def restore_backup(db_path: Path, backup_path: Path) -> None:
    shutil.copy2(backup_path, db_path)
    logger.warning("database_restored_from_backup", backup_path=str(backup_path))


async def run_migrations(
    db_path: Path | None = None,
    create_backup_before: bool = True,
) -> list[MigrationResult]:
    """
    Bring the database schema up to date.

    Args:
        db_path: Database file (default from storage settings)
        create_backup_before: Copy an existing database aside first; the copy
            is restored on failure and removed after a clean run

    Returns:
        One result per migration attempted; empty when already current.
        Stops at the first failed migration.

    Raises:
        ConfigurationError: An applied migration file was modified
    """
    db_path = db_path or get_settings().storage.db_path
    db_path.parent.mkdir(parents=True, exist_ok=True)

    backup_path = (
        create_backup(db_path) if create_backup_before and db_path.exists() else None
    )
    results: list[MigrationResult] = []

    try:
        async with aiosqlite.connect(db_path) as conn:
            await conn.execute("PRAGMA journal_mode=WAL")
            await conn.execute("PRAGMA foreign_keys=ON")
            applied = await get_applied_migrations(conn)

            for migration in discover_migrations():
                if migration.version in applied:
                    _check_unchanged(migration, applied[migration.version])
                    continue
                result = await apply_migration(conn, migration)
                results.append(result)
                if not result.success:
                    break
    except Exception as e:
        logger.error("migration_run_failed", db_path=str(db_path), error=str(e))
        if backup_path is not None:
            restore_backup(db_path, backup_path)
        raise

    if backup_path is not None and all(r.success for r in results):
        backup_path.unlink()

    logger.info(
        "migrations_complete",
        db_path=str(db_path),
        applied=[r.version for r in results if r.success],
    )
    return results


async def get_migration_status(db_path: Path | None = None) -> dict[str, Any]:
    """Applied and pending versions, for ``manage.py status``."""
    db_path = db_path or get_settings().storage.db_path
    discovered = discover_migrations()

    applied: dict[str, str] = {}
    current = None
    if db_path.exists():
        async with aiosqlite.connect(db_path) as conn:
            applied = await get_applied_migrations(conn)
            current = await get_current_version(conn)

    return {
        "exists": db_path.exists(),
        "current_version": current,
        "applied_migrations": sorted(applied, key=int),
        "pending_migrations": [m.version for m in discovered if m.version not in applied],
        "total_migrations": len(discovered),
    }


async def verify_schema_integrity(db_path: Path | None = None) -> list[dict[str, Any]]:
    """Foreign key, page integrity and required table checks."""
    db_path = db_path or get_settings().storage.db_path

    async with aiosqlite.connect(db_path) as conn:
        cursor = await conn.execute("PRAGMA foreign_key_check")
        violations = len(await cursor.fetchall())
        cursor = await conn.execute("PRAGMA integrity_check")
        integrity = (await cursor.fetchone())[0]
        missing = [t for t in REQUIRED_TABLES if t not in await _table_names(conn)]

    def check(name: str, passed: bool, **extra: Any) -> dict[str, Any]:
        return {"check": name, "status": "PASS" if passed else "FAIL", **extra}

    return [
        check("foreign_keys", violations == 0, violations=violations),
        check("integrity", integrity == "ok", result=integrity),
        check("required_tables", not missing, missing=missing),
    ]
