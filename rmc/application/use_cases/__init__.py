"""Application use cases."""

from rmc.application.use_cases.add_vendor_price import AddVendorPriceUseCase
from rmc.application.use_cases.create_raw_material import CreateRawMaterialUseCase
from rmc.application.use_cases.create_recipe import CreateRecipeResult, CreateRecipeUseCase
from rmc.application.use_cases.sync_latest_price import SyncLatestPriceUseCase
from rmc.application.use_cases.update_recipe import UpdateRecipeUseCase

__all__ = [
    "CreateRawMaterialUseCase",
    "AddVendorPriceUseCase",
    "SyncLatestPriceUseCase",
    "CreateRecipeUseCase",
    "CreateRecipeResult",
    "UpdateRecipeUseCase",
]
