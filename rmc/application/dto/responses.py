"""Response DTOs for API endpoints.

Pydantic v2 models for API responses.
"""

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from rmc.core.entities.recipe import ChangeField, SnapshotReason


class RawMaterialResponse(BaseModel):
    """Raw material with its current price pointer."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    code: str
    name: str
    category_id: str | None = None
    category_name: str | None = None
    sub_category_id: str | None = None
    sub_category_name: str | None = None
    unit_id: str | None = None
    unit_name: str | None = None
    hsn_code: str | None = None
    last_added_price: float | None = None
    last_vendor_name: str | None = None
    last_price_date: datetime | None = None
    created_by: str | None = None
    created_at: datetime
    updated_at: datetime


class RawMaterialListResponse(BaseModel):
    """List of raw materials."""

    raw_materials: list[RawMaterialResponse]
    total: int


class VendorPriceResponse(BaseModel):
    """One ledger entry."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    raw_material_id: int
    vendor_id: str
    vendor_name: str
    quantity: float
    unit_id: str | None = None
    unit_name: str | None = None
    price: float
    added_at: datetime
    created_by: str | None = None


class PriceChangeLogResponse(BaseModel):
    """One raw material price change log entry."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    raw_material_id: int
    vendor_id: str
    vendor_name: str
    old_price: float
    new_price: float
    quantity: float
    unit_id: str | None = None
    unit_name: str | None = None
    changed_at: datetime
    changed_by: str | None = None


class AddVendorPriceResponse(BaseModel):
    """Result of recording a vendor quote."""

    ledger_entry_id: int
    price_changed: bool
    price_log: PriceChangeLogResponse | None = None
    updated_recipe_ids: list[int] = Field(default_factory=list)
    failed_recipe_ids: dict[int, str] = Field(
        default_factory=dict, description="Recipe ID to error code"
    )


class SyncPriceResponse(BaseModel):
    """Result of adopting the latest ledger price."""

    no_change: bool
    message: str
    price: float
    updated_recipe_ids: list[int] = Field(default_factory=list)
    failed_recipe_ids: dict[int, str] = Field(default_factory=dict)


class RepairResponse(BaseModel):
    """Result of a repair sweep over one raw material's recipes."""

    raw_material_id: int
    updated_recipe_ids: list[int] = Field(default_factory=list)
    repaired_recipe_ids: list[int] = Field(default_factory=list)
    failed_recipe_ids: dict[int, str] = Field(default_factory=dict)


class RecipeItemResponse(BaseModel):
    """Recipe line item."""

    model_config = ConfigDict(from_attributes=True)

    id: int | None = None
    recipe_id: int | None = None
    raw_material_id: int
    raw_material_name: str = ""
    raw_material_code: str = ""
    quantity: float
    unit_id: str | None = None
    unit_name: str | None = None
    price: float
    vendor_id: str | None = None
    vendor_name: str | None = None
    moisture_percentage: float | None = None
    yield_quantity: float | None = None
    total_price: float


class RecipeResponse(BaseModel):
    """Recipe header with costing and, when loaded, its items."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    code: str
    name: str
    batch_size: float
    unit_id: str
    unit_name: str | None = None
    yield_quantity: float | None = None
    moisture_percentage: float | None = None
    total_raw_material_cost: float
    price_per_unit: float
    created_by: str | None = None
    created_at: datetime
    updated_at: datetime
    items: list[RecipeItemResponse] = Field(default_factory=list)


class RecipeListResponse(BaseModel):
    """List of recipes (headers only)."""

    recipes: list[RecipeResponse]
    total: int


class RecipeChangeLogResponse(BaseModel):
    """One recipe change log entry."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    recipe_id: int
    recipe_code: str
    recipe_item_id: int | None = None
    raw_material_id: int | None = None
    field: ChangeField
    old_value: Any = None
    new_value: Any = None
    changed_at: datetime
    changed_by: str | None = None


class UpdateRecipeResponse(BaseModel):
    """Result of a manual recipe edit."""

    recipe: RecipeResponse
    changes: list[RecipeChangeLogResponse]
    snapshot_id: int


class SnapshotResponse(BaseModel):
    """Recipe history snapshot."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    recipe_id: int
    recipe_code: str
    recipe_name: str
    taken_at: datetime
    total_raw_material_cost: float
    price_per_unit: float
    items: list[RecipeItemResponse]
    reason: SnapshotReason
    changed_by: str | None = None


class ItemCostDeltaResponse(BaseModel):
    """Per raw material movement between two snapshots."""

    model_config = ConfigDict(from_attributes=True)

    raw_material_id: int
    raw_material_name: str
    old_price: float
    new_price: float
    price_delta: float
    old_total: float
    new_total: float
    total_delta: float


class SnapshotComparisonResponse(BaseModel):
    """Older-to-newer comparison of two snapshots."""

    model_config = ConfigDict(from_attributes=True)

    old_snapshot_id: int | None
    new_snapshot_id: int | None
    old_taken_at: datetime
    new_taken_at: datetime
    old_total_cost: float
    new_total_cost: float
    total_cost_delta: float
    old_price_per_unit: float
    new_price_per_unit: float
    price_per_unit_delta: float
    price_per_unit_change_pct: float | None = None
    item_deltas: list[ItemCostDeltaResponse]
    added_items: list[RecipeItemResponse]
    removed_items: list[RecipeItemResponse]


class ConsistencyResponse(BaseModel):
    """Recipe passed a consistency check."""

    recipe_id: int
    consistent: bool = True
    total_raw_material_cost: float
    price_per_unit: float


class ProviderHealthResponse(BaseModel):
    """Provider health status."""

    name: str
    available: bool
    latency_ms: float | None = None
    error: str | None = None


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str = "1.0.0"
    uptime_seconds: float
    database: ProviderHealthResponse | None = None


class ErrorResponse(BaseModel):
    """Standardized error response DTO.

    Every error response includes:
    - error_code: machine-readable code (e.g. RECIPE_NOT_FOUND)
    - message: human-readable description
    - hint: suggested recovery action
    - path: request path that triggered the error
    """

    error_code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error description")
    hint: str | None = Field(default=None, description="Suggested recovery action")
    detail: str | None = Field(default=None, description="Additional details")
    path: str | None = Field(default=None, description="Request path")
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
