"""Database migrations module."""

from rmc.infrastructure.storage.sqlite.migrations.migrator import (
    Migration,
    MigrationResult,
    create_backup,
    discover_migrations,
    get_current_version,
    get_migration_status,
    restore_backup,
    run_migrations,
    verify_schema_integrity,
)

__all__ = [
    "Migration",
    "MigrationResult",
    "create_backup",
    "discover_migrations",
    "get_current_version",
    "get_migration_status",
    "restore_backup",
    "run_migrations",
    "verify_schema_integrity",
]
