"""Core domain entities."""

from rmc.core.entities.raw_material import (
    PriceChangeLog,
    RawMaterial,
    VendorPrice,
    utc_now,
)
from rmc.core.entities.recipe import (
    ChangeField,
    ItemCostDelta,
    Recipe,
    RecipeChangeLog,
    RecipeHistorySnapshot,
    RecipeItem,
    RecipeUpdate,
    SnapshotComparison,
    SnapshotReason,
)

__all__ = [
    # Raw materials
    "RawMaterial",
    "VendorPrice",
    "PriceChangeLog",
    "utc_now",
    # Recipes
    "Recipe",
    "RecipeItem",
    "RecipeUpdate",
    "RecipeChangeLog",
    "ChangeField",
    "RecipeHistorySnapshot",
    "SnapshotReason",
    "SnapshotComparison",
    "ItemCostDelta",
]
