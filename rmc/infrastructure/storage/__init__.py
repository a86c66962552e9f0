"""Storage infrastructure implementations."""

from rmc.infrastructure.storage.sqlite import (
    SQLiteRawMaterialStore,
    SQLiteRecipeHistoryStore,
    SQLiteRecipeLogStore,
    SQLiteRecipeStore,
    SQLiteVendorPriceStore,
    close_pool,
    get_connection,
    get_pool,
    get_transaction,
)

__all__ = [
    # SQLite stores
    "SQLiteRawMaterialStore",
    "SQLiteVendorPriceStore",
    "SQLiteRecipeStore",
    "SQLiteRecipeLogStore",
    "SQLiteRecipeHistoryStore",
    # Connection pool
    "get_pool",
    "close_pool",
    "get_connection",
    "get_transaction",
]
