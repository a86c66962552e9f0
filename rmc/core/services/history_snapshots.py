"""
History Snapshot Service.

Immutable point-in-time copies of a recipe's costing, and comparison
between two of them.
"""

from rmc.config import get_logger
from rmc.core.entities.recipe import (
    ItemCostDelta,
    Recipe,
    RecipeHistorySnapshot,
    RecipeItem,
    SnapshotComparison,
    SnapshotReason,
)
from rmc.core.exceptions import RecipeNotFoundError, SnapshotNotFoundError
from rmc.core.interfaces.recipe_store import IRecipeHistoryStore, IRecipeStore
from rmc.core.services.costing import round2

logger = get_logger(__name__)


class HistorySnapshotService:
    """Writes, reads and compares recipe history snapshots."""

    def __init__(
        self,
        history_store: IRecipeHistoryStore,
        recipe_store: IRecipeStore,
    ):
        self._history = history_store
        self._recipes = recipe_store

    async def record(
        self,
        recipe: Recipe,
        items: list[RecipeItem],
        reason: SnapshotReason,
        actor: str | None,
    ) -> RecipeHistorySnapshot:
        """Snapshot the given recipe state. Items are copied by value."""
        snapshot = await self._history.add_snapshot(
            RecipeHistorySnapshot.capture(recipe, items, reason, changed_by=actor)
        )
        logger.info(
            "recipe_snapshot_recorded",
            recipe_id=recipe.id,
            snapshot_id=snapshot.id,
            reason=reason.value,
            total_cost=snapshot.total_raw_material_cost,
        )
        return snapshot

    async def take_snapshot(
        self,
        recipe_id: int,
        reason: SnapshotReason,
        actor: str | None,
    ) -> RecipeHistorySnapshot:
        """Snapshot the recipe as currently stored."""
        recipe = await self._recipes.get_recipe(recipe_id)
        if recipe is None:
            raise RecipeNotFoundError(recipe_id)
        items = await self._recipes.get_items(recipe_id)
        return await self.record(recipe, items, reason, actor)

    async def list_snapshots(
        self, recipe_id: int, limit: int = 100
    ) -> list[RecipeHistorySnapshot]:
        """Snapshots of a recipe, newest first."""
        return await self._history.list_snapshots(recipe_id, limit=limit)

    async def latest(self, recipe_id: int) -> RecipeHistorySnapshot | None:
        snapshots = await self._history.list_snapshots(recipe_id, limit=1)
        return snapshots[0] if snapshots else None

    async def get(self, recipe_id: int, snapshot_id: int) -> RecipeHistorySnapshot:
        snapshot = await self._history.get_snapshot(snapshot_id)
        if snapshot is None or snapshot.recipe_id != recipe_id:
            raise SnapshotNotFoundError(snapshot_id, recipe_id)
        return snapshot

    async def delete(self, recipe_id: int, snapshot_id: int) -> None:
        deleted = await self._history.delete_snapshot(recipe_id, snapshot_id)
        if not deleted:
            raise SnapshotNotFoundError(snapshot_id, recipe_id)
        logger.info("recipe_snapshot_deleted", recipe_id=recipe_id, snapshot_id=snapshot_id)

    async def compare_by_ids(
        self, recipe_id: int, a_id: int, b_id: int
    ) -> SnapshotComparison:
        a = await self.get(recipe_id, a_id)
        b = await self.get(recipe_id, b_id)
        return self.compare(a, b)

    @staticmethod
    def compare(
        a: RecipeHistorySnapshot, b: RecipeHistorySnapshot
    ) -> SnapshotComparison:
        """
        Compare two snapshots, older first regardless of argument order.

        Per-item deltas cover raw materials present in both snapshots only.
        Items present in one snapshot are reported in ``added_items`` or
        ``removed_items``.
        """
        old, new = sorted((a, b), key=lambda s: (s.taken_at, s.id or 0))

        old_items = {item.raw_material_id: item for item in old.items}
        new_items = {item.raw_material_id: item for item in new.items}

        item_deltas: list[ItemCostDelta] = []
        added_items: list[RecipeItem] = []
        for rm_id, new_item in new_items.items():
            old_item = old_items.get(rm_id)
            if old_item is None:
                added_items.append(new_item)
                continue
            item_deltas.append(
                ItemCostDelta(
                    raw_material_id=rm_id,
                    raw_material_name=new_item.raw_material_name,
                    old_price=old_item.price,
                    new_price=new_item.price,
                    price_delta=round2(new_item.price - old_item.price),
                    old_total=old_item.total_price,
                    new_total=new_item.total_price,
                    total_delta=round2(new_item.total_price - old_item.total_price),
                )
            )
        removed_items = [item for rm_id, item in old_items.items() if rm_id not in new_items]

        change_pct = None
        if old.price_per_unit:
            change_pct = round2(
                (new.price_per_unit - old.price_per_unit) / old.price_per_unit * 100
            )

        return SnapshotComparison(
            old_snapshot_id=old.id,
            new_snapshot_id=new.id,
            old_taken_at=old.taken_at,
            new_taken_at=new.taken_at,
            old_total_cost=old.total_raw_material_cost,
            new_total_cost=new.total_raw_material_cost,
            total_cost_delta=round2(
                new.total_raw_material_cost - old.total_raw_material_cost
            ),
            old_price_per_unit=old.price_per_unit,
            new_price_per_unit=new.price_per_unit,
            price_per_unit_delta=round2(new.price_per_unit - old.price_per_unit),
            price_per_unit_change_pct=change_pct,
            item_deltas=item_deltas,
            added_items=added_items,
            removed_items=removed_items,
        )
