"""SQLite storage implementations."""

from rmc.infrastructure.storage.sqlite.connection import (
    ConnectionPool,
    close_pool,
    get_connection,
    get_pool,
    get_transaction,
)
from rmc.infrastructure.storage.sqlite.raw_material_store import SQLiteRawMaterialStore
from rmc.infrastructure.storage.sqlite.recipe_history_store import SQLiteRecipeHistoryStore
from rmc.infrastructure.storage.sqlite.recipe_log_store import SQLiteRecipeLogStore
from rmc.infrastructure.storage.sqlite.recipe_store import SQLiteRecipeStore
from rmc.infrastructure.storage.sqlite.vendor_price_store import SQLiteVendorPriceStore

# Singleton instances
_raw_material_store: SQLiteRawMaterialStore | None = None
_vendor_price_store: SQLiteVendorPriceStore | None = None
_recipe_store: SQLiteRecipeStore | None = None
_recipe_log_store: SQLiteRecipeLogStore | None = None
_recipe_history_store: SQLiteRecipeHistoryStore | None = None


async def get_raw_material_store() -> SQLiteRawMaterialStore:
    """Get singleton raw material store instance."""
    global _raw_material_store
    if _raw_material_store is None:
        _raw_material_store = SQLiteRawMaterialStore()
    return _raw_material_store


async def get_vendor_price_store() -> SQLiteVendorPriceStore:
    """Get singleton vendor price store instance."""
    global _vendor_price_store
    if _vendor_price_store is None:
        _vendor_price_store = SQLiteVendorPriceStore()
    return _vendor_price_store


async def get_recipe_store() -> SQLiteRecipeStore:
    """Get singleton recipe store instance."""
    global _recipe_store
    if _recipe_store is None:
        _recipe_store = SQLiteRecipeStore()
    return _recipe_store


async def get_recipe_log_store() -> SQLiteRecipeLogStore:
    """Get singleton recipe log store instance."""
    global _recipe_log_store
    if _recipe_log_store is None:
        _recipe_log_store = SQLiteRecipeLogStore()
    return _recipe_log_store


async def get_recipe_history_store() -> SQLiteRecipeHistoryStore:
    """Get singleton recipe history store instance."""
    global _recipe_history_store
    if _recipe_history_store is None:
        _recipe_history_store = SQLiteRecipeHistoryStore()
    return _recipe_history_store


__all__ = [
    # Connection
    "ConnectionPool",
    "get_pool",
    "close_pool",
    "get_connection",
    "get_transaction",
    # Store classes
    "SQLiteRawMaterialStore",
    "SQLiteVendorPriceStore",
    "SQLiteRecipeStore",
    "SQLiteRecipeLogStore",
    "SQLiteRecipeHistoryStore",
    # Factory functions
    "get_raw_material_store",
    "get_vendor_price_store",
    "get_recipe_store",
    "get_recipe_log_store",
    "get_recipe_history_store",
]
