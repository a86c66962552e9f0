"""
Cost Propagator Service.

Keeps recipe costing consistent with raw material prices:
- price changes fan out to every recipe line referencing the raw material
- manual recipe edits are diffed, logged and recomputed
- drifted recipes can be repaired and verified
"""

from dataclasses import dataclass, field

from rmc.config import get_logger
from rmc.core.entities.raw_material import utc_now
from rmc.core.entities.recipe import (
    ChangeField,
    Recipe,
    RecipeChangeLog,
    RecipeHistorySnapshot,
    RecipeItem,
    RecipeUpdate,
    SnapshotReason,
)
from rmc.core.exceptions import (
    ConsistencyError,
    RawMaterialNotFoundError,
    RecipeNotFoundError,
    RMCError,
    ValidationError,
)
from rmc.core.interfaces.raw_material_store import IRawMaterialStore
from rmc.core.interfaces.recipe_store import IRecipeStore
from rmc.core.services.audit_log import AuditLogService
from rmc.core.services.costing import (
    find_aggregate_drift,
    line_total,
    manual_edit_divisor,
    propagation_divisor,
    recompute,
)
from rmc.core.services.history_snapshots import HistorySnapshotService
from rmc.core.services.locks import KeyedLock
from rmc.core.services.recipe_diff import diff_recipe_fields, diff_recipe_items

logger = get_logger(__name__)

# Failure code for unexpected errors on a single recipe
INTERNAL_ERROR = "INTERNAL_ERROR"


@dataclass
class PropagationResult:
    """Outcome of a propagation or repair sweep."""

    updated_recipe_ids: list[int] = field(default_factory=list)
    failed_recipe_ids: dict[int, str] = field(default_factory=dict)  # id -> error code
    repaired_recipe_ids: list[int] = field(default_factory=list)

    @property
    def has_failures(self) -> bool:
        return bool(self.failed_recipe_ids)


@dataclass
class ManualEditResult:
    """Outcome of a manual recipe edit."""

    recipe: Recipe
    items: list[RecipeItem]
    changes: list[RecipeChangeLog]
    snapshot: RecipeHistorySnapshot


def validate_recipe_input(batch_size: float, items: list[RecipeItem]) -> None:
    """Reject a recipe that cannot be costed. Raises ValidationError."""
    if batch_size is None or batch_size <= 0:
        raise ValidationError("batch_size", "must be greater than 0", batch_size)
    seen: set[int] = set()
    for item in items:
        if item.raw_material_id in seen:
            raise ValidationError(
                "raw_material_id", "appears on more than one line", item.raw_material_id
            )
        seen.add(item.raw_material_id)
        if item.quantity <= 0:
            raise ValidationError(
                "quantity",
                f"must be greater than 0 (raw material {item.raw_material_id})",
                item.quantity,
            )
        if item.price < 0:
            raise ValidationError(
                "price",
                f"must not be negative (raw material {item.raw_material_id})",
                item.price,
            )


class CostPropagatorService:
    """
    Recomputes recipes when their inputs change.

    Each recipe is updated inside its own critical section. A failure on one
    recipe is reported and never aborts the sweep over the others; recipes
    already updated stay updated.
    """

    def __init__(
        self,
        recipe_store: IRecipeStore,
        raw_material_store: IRawMaterialStore,
        audit_log: AuditLogService,
        snapshots: HistorySnapshotService,
        recipe_locks: KeyedLock | None = None,
        raw_material_locks: KeyedLock | None = None,
    ):
        self._recipes = recipe_store
        self._raw_materials = raw_material_store
        self._audit = audit_log
        self._snapshots = snapshots
        self._recipe_locks = recipe_locks if recipe_locks is not None else KeyedLock()
        self._raw_material_locks = (
            raw_material_locks if raw_material_locks is not None else KeyedLock()
        )

    async def _referencing_recipe_ids(self, raw_material_id: int) -> list[int]:
        items = await self._recipes.find_items_by_raw_material(raw_material_id)
        return list(dict.fromkeys(item.recipe_id for item in items if item.recipe_id))

    async def propagate_price_change(
        self,
        raw_material_id: int,
        new_price: float,
        actor: str | None,
    ) -> PropagationResult:
        """
        Push a raw material's new price into every recipe that uses it.

        Callers already hold the raw material's critical section.
        """
        result = PropagationResult()
        recipe_ids = await self._referencing_recipe_ids(raw_material_id)

        for recipe_id in recipe_ids:
            try:
                changed = await self._propagate_to_recipe(
                    recipe_id, raw_material_id, new_price, actor
                )
            except RMCError as e:
                logger.error(
                    "recipe_propagation_failed",
                    recipe_id=recipe_id,
                    raw_material_id=raw_material_id,
                    error_code=e.code,
                    error=e.message,
                )
                result.failed_recipe_ids[recipe_id] = e.code
                continue
            except Exception as e:
                logger.exception(
                    "recipe_propagation_crashed",
                    recipe_id=recipe_id,
                    raw_material_id=raw_material_id,
                    error_type=type(e).__name__,
                )
                result.failed_recipe_ids[recipe_id] = INTERNAL_ERROR
                continue
            if changed:
                result.updated_recipe_ids.append(recipe_id)

        logger.info(
            "price_change_propagated",
            raw_material_id=raw_material_id,
            new_price=new_price,
            referencing=len(recipe_ids),
            updated=len(result.updated_recipe_ids),
            failed=len(result.failed_recipe_ids),
        )
        return result

    async def _propagate_to_recipe(
        self,
        recipe_id: int,
        raw_material_id: int,
        new_price: float,
        actor: str | None,
    ) -> bool:
        async with self._recipe_locks.hold(recipe_id):
            recipe = await self._recipes.get_recipe(recipe_id)
            if recipe is None:
                logger.warning("recipe_missing_during_propagation", recipe_id=recipe_id)
                return False

            items: list[RecipeItem] = []
            logs: list[RecipeChangeLog] = []
            for item in await self._recipes.get_items(recipe_id):
                if item.raw_material_id == raw_material_id and item.price != new_price:
                    logs.append(
                        RecipeChangeLog(
                            recipe_id=recipe_id,
                            recipe_code=recipe.code,
                            recipe_item_id=item.id,
                            raw_material_id=raw_material_id,
                            field=ChangeField.PRICE,
                            old_value=item.price,
                            new_value=new_price,
                            changed_by=actor,
                        )
                    )
                    item = item.model_copy(
                        update={
                            "price": new_price,
                            "total_price": line_total(item.quantity, new_price),
                        }
                    )
                items.append(item)

            if not logs:
                return False

            totals = recompute(items, propagation_divisor(recipe))
            recipe = await self._recipes.save_costing(
                recipe.model_copy(
                    update={
                        "total_raw_material_cost": totals.total_raw_material_cost,
                        "price_per_unit": totals.price_per_unit,
                        "updated_at": utc_now(),
                    }
                ),
                items,
            )
            await self._audit.record_recipe_changes(logs)
            await self._snapshots.record(recipe, items, SnapshotReason.PRICE_CHANGE, actor)

        logger.info(
            "recipe_price_propagated",
            recipe_id=recipe_id,
            raw_material_id=raw_material_id,
            items_changed=len(logs),
            total_cost=recipe.total_raw_material_cost,
            price_per_unit=recipe.price_per_unit,
        )
        return True

    async def apply_manual_edit(
        self,
        recipe_id: int,
        new_items: list[RecipeItem],
        fields: RecipeUpdate,
        actor: str | None,
    ) -> ManualEditResult:
        """
        Replace a recipe's fields and items, logging every difference.

        The stored items are read inside the recipe's critical section and
        are the baseline of the diff. Always writes a ``manual_update``
        snapshot, even when nothing changed.
        """
        validate_recipe_input(fields.batch_size, new_items)

        async with self._recipe_locks.hold(recipe_id):
            recipe = await self._recipes.get_recipe(recipe_id)
            if recipe is None:
                raise RecipeNotFoundError(recipe_id)
            stored_items = await self._recipes.get_items(recipe_id)

            prepared = [
                item.model_copy(
                    update={
                        "id": None,
                        "recipe_id": recipe_id,
                        "total_price": line_total(item.quantity, item.price),
                    }
                )
                for item in new_items
            ]

            changes = diff_recipe_fields(recipe, fields, actor)
            changes += diff_recipe_items(recipe, stored_items, prepared, actor)

            updated = recipe.model_copy(update=fields.model_dump())
            totals = recompute(prepared, manual_edit_divisor(updated))
            updated = updated.model_copy(
                update={
                    "total_raw_material_cost": totals.total_raw_material_cost,
                    "price_per_unit": totals.price_per_unit,
                    "updated_at": utc_now(),
                }
            )

            saved, saved_items = await self._recipes.replace_recipe(updated, prepared)
            changes = await self._audit.record_recipe_changes(changes)
            snapshot = await self._snapshots.record(
                saved, saved_items, SnapshotReason.MANUAL_UPDATE, actor
            )

        logger.info(
            "recipe_manually_updated",
            recipe_id=recipe_id,
            changes=len(changes),
            total_cost=saved.total_raw_material_cost,
            price_per_unit=saved.price_per_unit,
        )
        return ManualEditResult(
            recipe=saved, items=saved_items, changes=changes, snapshot=snapshot
        )

    async def repair_raw_material(
        self, raw_material_id: int, actor: str | None
    ) -> PropagationResult:
        """
        Bring every recipe using a raw material back in line with its price.

        Re-propagates the current price pointer, then fixes recipes whose
        stored totals drifted or whose latest snapshot is missing or stale.
        Safe to run repeatedly.
        """
        async with self._raw_material_locks.hold(raw_material_id):
            raw_material = await self._raw_materials.get_raw_material(raw_material_id)
            if raw_material is None:
                raise RawMaterialNotFoundError(raw_material_id)

            if raw_material.last_added_price is not None:
                result = await self.propagate_price_change(
                    raw_material_id, raw_material.last_added_price, actor
                )
            else:
                result = PropagationResult()

            handled = set(result.updated_recipe_ids) | set(result.failed_recipe_ids)
            for recipe_id in await self._referencing_recipe_ids(raw_material_id):
                if recipe_id in handled:
                    continue
                try:
                    repaired = await self._repair_recipe(recipe_id, actor)
                except RMCError as e:
                    logger.error(
                        "recipe_repair_failed",
                        recipe_id=recipe_id,
                        error_code=e.code,
                        error=e.message,
                    )
                    result.failed_recipe_ids[recipe_id] = e.code
                    continue
                except Exception as e:
                    logger.exception(
                        "recipe_repair_crashed",
                        recipe_id=recipe_id,
                        error_type=type(e).__name__,
                    )
                    result.failed_recipe_ids[recipe_id] = INTERNAL_ERROR
                    continue
                if repaired:
                    result.repaired_recipe_ids.append(recipe_id)

        logger.info(
            "raw_material_repaired",
            raw_material_id=raw_material_id,
            updated=result.updated_recipe_ids,
            repaired=result.repaired_recipe_ids,
            failed=list(result.failed_recipe_ids),
        )
        return result

    async def _repair_recipe(self, recipe_id: int, actor: str | None) -> bool:
        async with self._recipe_locks.hold(recipe_id):
            recipe = await self._recipes.get_recipe(recipe_id)
            if recipe is None:
                return False
            items = await self._recipes.get_items(recipe_id)

            drift = find_aggregate_drift(recipe, items)
            if drift:
                items = [
                    item.model_copy(
                        update={"total_price": line_total(item.quantity, item.price)}
                    )
                    for item in items
                ]
                totals = recompute(items, propagation_divisor(recipe))
                recipe = await self._recipes.save_costing(
                    recipe.model_copy(
                        update={
                            "total_raw_material_cost": totals.total_raw_material_cost,
                            "price_per_unit": totals.price_per_unit,
                            "updated_at": utc_now(),
                        }
                    ),
                    items,
                )

            latest = await self._snapshots.latest(recipe_id)
            snapshot_stale = (
                latest is None
                or latest.total_raw_material_cost != recipe.total_raw_material_cost
                or latest.price_per_unit != recipe.price_per_unit
            )
            if not drift and not snapshot_stale:
                return False

            await self._snapshots.record(recipe, items, SnapshotReason.PRICE_CHANGE, actor)

        logger.info(
            "recipe_repaired",
            recipe_id=recipe_id,
            drift=drift,
            snapshot_stale=snapshot_stale,
        )
        return True

    async def verify_recipe(self, recipe_id: int) -> Recipe:
        """Check stored costing against a recomputation. Raises ConsistencyError."""
        recipe = await self._recipes.get_recipe(recipe_id)
        if recipe is None:
            raise RecipeNotFoundError(recipe_id)
        items = await self._recipes.get_items(recipe_id)

        drift = find_aggregate_drift(recipe, items)
        if drift:
            logger.warning("recipe_drift_detected", recipe_id=recipe_id, fields=drift)
            raise ConsistencyError(recipe_id, drift)
        return recipe
