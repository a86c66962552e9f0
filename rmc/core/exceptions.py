"""
Domain exceptions for the costing engine.

Each carries a stable ``code`` (used as the API ``error_code``) and a
``details`` dict identifying the records involved.
"""

from typing import Any


class RMCError(Exception):
    """Base exception for all costing engine errors."""

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Plain representation for CLI output."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


# Storage Exceptions
class StorageError(RMCError):
    """The SQLite layer failed."""


class DatabaseError(StorageError):
    """Database operation failed."""

    def __init__(self, operation: str, error: str):
        super().__init__(
            f"Database error during {operation}: {error}",
            code="DATABASE_ERROR",
            details={"operation": operation, "error": error},
        )


# Not Found Exceptions
class NotFoundError(RMCError):
    """A referenced record does not exist."""


class RawMaterialNotFoundError(NotFoundError):
    """Raw material not found in storage."""

    def __init__(self, raw_material_id: int):
        super().__init__(
            f"Raw material not found: {raw_material_id}",
            code="RAW_MATERIAL_NOT_FOUND",
            details={"raw_material_id": raw_material_id},
        )


class RecipeNotFoundError(NotFoundError):
    """Recipe not found in storage."""

    def __init__(self, recipe_id: int):
        super().__init__(
            f"Recipe not found: {recipe_id}",
            code="RECIPE_NOT_FOUND",
            details={"recipe_id": recipe_id},
        )


class SnapshotNotFoundError(NotFoundError):
    """Recipe history snapshot not found."""

    def __init__(self, snapshot_id: int, recipe_id: int | None = None):
        super().__init__(
            f"History snapshot not found: {snapshot_id}",
            code="SNAPSHOT_NOT_FOUND",
            details={"snapshot_id": snapshot_id, "recipe_id": recipe_id},
        )


class LogEntryNotFoundError(NotFoundError):
    """Price or recipe log entry not found."""

    def __init__(self, log_id: int, kind: str):
        super().__init__(
            f"{kind.capitalize()} log entry not found: {log_id}",
            code="LOG_ENTRY_NOT_FOUND",
            details={"log_id": log_id, "kind": kind},
        )


class VendorPriceNotFoundError(NotFoundError):
    """No vendor price has been recorded for a raw material."""

    def __init__(self, raw_material_id: int):
        super().__init__(
            f"No vendor prices found for raw material: {raw_material_id}",
            code="VENDOR_PRICE_NOT_FOUND",
            details={"raw_material_id": raw_material_id},
        )


# Consistency Exceptions
class ConsistencyError(RMCError):
    """Persisted costing values disagree with a recomputation."""

    def __init__(self, recipe_id: int, fields: list[str]):
        super().__init__(
            f"Recipe {recipe_id} has stale costing values: {', '.join(fields)}",
            code="CONSISTENCY_ERROR",
            details={"recipe_id": recipe_id, "fields": fields},
        )


# Validation Exceptions
class ValidationError(RMCError):
    """Input validation failed."""

    def __init__(self, field: str, message: str, value: Any = None):
        super().__init__(
            f"Validation error for '{field}': {message}",
            code="VALIDATION_ERROR",
            details={
                "field": field,
                "message": message,
                "value": str(value)[:100] if value is not None else None,
            },
        )


class ConfigurationError(RMCError):
    """Settings or schema state prevents startup."""
