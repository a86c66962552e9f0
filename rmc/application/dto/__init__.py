"""Data transfer objects for the API boundary."""

from rmc.application.dto.requests import (
    AddVendorPriceRequest,
    CreateRawMaterialRequest,
    CreateRecipeRequest,
    RecipeItemRequest,
    TakeSnapshotRequest,
    UpdateRecipeRequest,
)
from rmc.application.dto.responses import (
    AddVendorPriceResponse,
    ConsistencyResponse,
    ErrorResponse,
    HealthResponse,
    ItemCostDeltaResponse,
    PriceChangeLogResponse,
    ProviderHealthResponse,
    RawMaterialListResponse,
    RawMaterialResponse,
    RecipeChangeLogResponse,
    RecipeItemResponse,
    RecipeListResponse,
    RecipeResponse,
    RepairResponse,
    SnapshotComparisonResponse,
    SnapshotResponse,
    SyncPriceResponse,
    UpdateRecipeResponse,
    VendorPriceResponse,
)

__all__ = [
    # Requests
    "CreateRawMaterialRequest",
    "AddVendorPriceRequest",
    "RecipeItemRequest",
    "CreateRecipeRequest",
    "UpdateRecipeRequest",
    "TakeSnapshotRequest",
    # Responses
    "RawMaterialResponse",
    "RawMaterialListResponse",
    "VendorPriceResponse",
    "PriceChangeLogResponse",
    "AddVendorPriceResponse",
    "SyncPriceResponse",
    "RepairResponse",
    "RecipeItemResponse",
    "RecipeResponse",
    "RecipeListResponse",
    "RecipeChangeLogResponse",
    "UpdateRecipeResponse",
    "SnapshotResponse",
    "ItemCostDeltaResponse",
    "SnapshotComparisonResponse",
    "ConsistencyResponse",
    "ProviderHealthResponse",
    "HealthResponse",
    "ErrorResponse",
]
