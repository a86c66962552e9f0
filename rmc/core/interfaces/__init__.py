"""Core interfaces (ports) for dependency injection."""

from rmc.core.interfaces.raw_material_store import IRawMaterialStore, IVendorPriceStore
from rmc.core.interfaces.recipe_store import (
    IRecipeHistoryStore,
    IRecipeLogStore,
    IRecipeStore,
)

__all__ = [
    "IRawMaterialStore",
    "IVendorPriceStore",
    "IRecipeStore",
    "IRecipeLogStore",
    "IRecipeHistoryStore",
]
