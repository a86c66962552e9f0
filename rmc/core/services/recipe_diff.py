"""
Field-level diffing for manual recipe edits.

Produces unsaved RecipeChangeLog entries; callers persist them.
"""

from typing import Any

from rmc.core.entities.recipe import (
    ChangeField,
    Recipe,
    RecipeChangeLog,
    RecipeItem,
    RecipeUpdate,
)

# Item attribute -> logged field name
ITEM_FIELDS: tuple[tuple[str, ChangeField], ...] = (
    ("quantity", ChangeField.QUANTITY),
    ("price", ChangeField.PRICE),
    ("moisture_percentage", ChangeField.MOISTURE_PERCENTAGE),
    ("yield_quantity", ChangeField.YIELD),
)


def diff_recipe_fields(
    recipe: Recipe, update: RecipeUpdate, actor: str | None
) -> list[RecipeChangeLog]:
    """One log per changed scalar: batch size, unit, yield, moisture."""
    logs: list[RecipeChangeLog] = []

    def log(field: ChangeField, old: Any, new: Any) -> None:
        logs.append(
            RecipeChangeLog(
                recipe_id=recipe.id,  # type: ignore[arg-type]
                recipe_code=recipe.code,
                field=field,
                old_value=old,
                new_value=new,
                changed_by=actor,
            )
        )

    if recipe.batch_size != update.batch_size:
        log(ChangeField.BATCH_SIZE, recipe.batch_size, update.batch_size)
    if recipe.unit_id != update.unit_id:
        # Unit changes are recorded by display name
        log(ChangeField.UNIT, recipe.unit_name, update.unit_name)
    if recipe.yield_quantity != update.yield_quantity:
        log(ChangeField.YIELD, recipe.yield_quantity, update.yield_quantity)
    if recipe.moisture_percentage != update.moisture_percentage:
        log(ChangeField.MOISTURE, recipe.moisture_percentage, update.moisture_percentage)

    return logs


def diff_recipe_items(
    recipe: Recipe,
    old_items: list[RecipeItem],
    new_items: list[RecipeItem],
    actor: str | None,
) -> list[RecipeChangeLog]:
    """
    Diff two item lists keyed by raw material.

    Items in both lists get one log per changed field. Items only in the new
    list log ``item_added``; items only in the old list log ``item_removed``.
    """
    logs: list[RecipeChangeLog] = []
    remaining = {item.raw_material_id: item for item in old_items}

    for new_item in new_items:
        old_item = remaining.pop(new_item.raw_material_id, None)
        if old_item is None:
            logs.append(
                RecipeChangeLog(
                    recipe_id=recipe.id,  # type: ignore[arg-type]
                    recipe_code=recipe.code,
                    raw_material_id=new_item.raw_material_id,
                    field=ChangeField.ITEM_ADDED,
                    old_value=None,
                    new_value=new_item.model_dump(mode="json"),
                    changed_by=actor,
                )
            )
            continue

        for attr, field in ITEM_FIELDS:
            old_value = getattr(old_item, attr)
            new_value = getattr(new_item, attr)
            if old_value != new_value:
                logs.append(
                    RecipeChangeLog(
                        recipe_id=recipe.id,  # type: ignore[arg-type]
                        recipe_code=recipe.code,
                        recipe_item_id=old_item.id,
                        raw_material_id=new_item.raw_material_id,
                        field=field,
                        old_value=old_value,
                        new_value=new_value,
                        changed_by=actor,
                    )
                )

    for removed in remaining.values():
        logs.append(
            RecipeChangeLog(
                recipe_id=recipe.id,  # type: ignore[arg-type]
                recipe_code=recipe.code,
                recipe_item_id=removed.id,
                raw_material_id=removed.raw_material_id,
                field=ChangeField.ITEM_REMOVED,
                old_value=removed.model_dump(mode="json"),
                new_value=None,
                changed_by=actor,
            )
        )

    return logs
