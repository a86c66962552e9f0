"""
Recipe (bill of materials) entities, change logs and history snapshots.
"""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from rmc.core.entities.raw_material import utc_now


class SnapshotReason(str, Enum):
    """Why a history snapshot was written."""

    INITIAL_CREATION = "initial_creation"
    PRICE_CHANGE = "price_change"
    MANUAL_UPDATE = "manual_update"


class ChangeField(str, Enum):
    """Field names recorded on recipe change logs."""

    # Recipe scalars
    BATCH_SIZE = "batch_size"
    UNIT = "unit"
    YIELD = "yield"
    MOISTURE = "moisture"

    # Item fields (item yield shares the "yield" label)
    QUANTITY = "quantity"
    PRICE = "price"
    MOISTURE_PERCENTAGE = "moisture_percentage"

    ITEM_ADDED = "item_added"
    ITEM_REMOVED = "item_removed"


class RecipeItem(BaseModel):
    """A raw material line in a recipe. ``total_price`` is quantity * price."""

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
    total_price: float = 0.0


class Recipe(BaseModel):
    """Recipe header with derived cost aggregates."""

    id: int | None = None
    code: str = ""
    name: str
    batch_size: float
    unit_id: str
    unit_name: str | None = None
    yield_quantity: float | None = None
    moisture_percentage: float | None = None
    total_raw_material_cost: float = 0.0
    price_per_unit: float = 0.0
    created_by: str | None = None
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)


class RecipeUpdate(BaseModel):
    """New scalar fields submitted with a full recipe edit."""

    name: str
    batch_size: float
    unit_id: str
    unit_name: str | None = None
    yield_quantity: float | None = None
    moisture_percentage: float | None = None


class RecipeChangeLog(BaseModel):
    """
    One changed field on a recipe or one of its items.

    Manual edits and price propagation both produce this shape.
    """

    model_config = ConfigDict(frozen=True)

    id: int | None = None
    recipe_id: int
    recipe_code: str = ""
    recipe_item_id: int | None = None
    raw_material_id: int | None = None
    field: ChangeField
    old_value: Any = None
    new_value: Any = None
    changed_at: datetime = Field(default_factory=utc_now)
    changed_by: str | None = None


class RecipeHistorySnapshot(BaseModel):
    """Frozen copy of a recipe's cost state and full item list."""

    model_config = ConfigDict(frozen=True)

    id: int | None = None
    recipe_id: int
    recipe_code: str = ""
    recipe_name: str = ""
    taken_at: datetime = Field(default_factory=utc_now)
    total_raw_material_cost: float
    price_per_unit: float
    items: tuple[RecipeItem, ...] = ()
    reason: SnapshotReason
    changed_by: str | None = None

    @classmethod
    def capture(
        cls,
        recipe: Recipe,
        items: list[RecipeItem],
        reason: SnapshotReason,
        changed_by: str | None = None,
    ) -> "RecipeHistorySnapshot":
        """Build a snapshot holding value copies of the given items."""
        return cls(
            recipe_id=recipe.id,  # type: ignore[arg-type]
            recipe_code=recipe.code,
            recipe_name=recipe.name,
            total_raw_material_cost=recipe.total_raw_material_cost,
            price_per_unit=recipe.price_per_unit,
            items=tuple(item.model_copy(deep=True) for item in items),
            reason=reason,
            changed_by=changed_by,
        )


class ItemCostDelta(BaseModel):
    """Price and total movement of one raw material between two snapshots."""

    raw_material_id: int
    raw_material_name: str = ""
    old_price: float
    new_price: float
    price_delta: float
    old_total: float
    new_total: float
    total_delta: float


class SnapshotComparison(BaseModel):
    """Difference between an older and a newer snapshot of the same recipe."""

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
    item_deltas: list[ItemCostDelta] = Field(default_factory=list)
    added_items: list[RecipeItem] = Field(default_factory=list)
    removed_items: list[RecipeItem] = Field(default_factory=list)
