"""Tests for recipe entities and history snapshots."""

import pydantic
import pytest

from rmc.core.entities import (
    ChangeField,
    Recipe,
    RecipeChangeLog,
    RecipeHistorySnapshot,
    RecipeItem,
    SnapshotReason,
)


@pytest.fixture
def recipe() -> Recipe:
    return Recipe(
        id=1,
        code="RES001",
        name="Ladoo",
        batch_size=10,
        unit_id="kg",
        yield_quantity=8,
        total_raw_material_cost=80.0,
        price_per_unit=10.0,
    )


@pytest.fixture
def items() -> list[RecipeItem]:
    return [
        RecipeItem(id=1, recipe_id=1, raw_material_id=1, quantity=2, price=40.0, total_price=80.0)
    ]


class TestSnapshotCapture:
    def test_copies_costing(self, recipe, items):
        snapshot = RecipeHistorySnapshot.capture(
            recipe, items, SnapshotReason.INITIAL_CREATION, changed_by="alice"
        )
        assert snapshot.recipe_id == 1
        assert snapshot.recipe_code == "RES001"
        assert snapshot.recipe_name == "Ladoo"
        assert snapshot.total_raw_material_cost == 80.0
        assert snapshot.price_per_unit == 10.0
        assert snapshot.reason == SnapshotReason.INITIAL_CREATION
        assert snapshot.changed_by == "alice"
        assert len(snapshot.items) == 1

    def test_items_are_copied_by_value(self, recipe, items):
        snapshot = RecipeHistorySnapshot.capture(recipe, items, SnapshotReason.PRICE_CHANGE)

        items[0].price = 999.0
        items.append(RecipeItem(raw_material_id=2, quantity=1, price=1.0))

        assert snapshot.items[0].price == 40.0
        assert len(snapshot.items) == 1

    def test_snapshot_is_frozen(self, recipe, items):
        snapshot = RecipeHistorySnapshot.capture(recipe, items, SnapshotReason.PRICE_CHANGE)
        with pytest.raises(pydantic.ValidationError):
            snapshot.price_per_unit = 1.0


class TestRecipeChangeLog:
    def test_field_values(self):
        assert ChangeField.YIELD.value == "yield"
        assert ChangeField.ITEM_ADDED.value == "item_added"

    def test_values_accept_structured_payloads(self):
        log = RecipeChangeLog(
            recipe_id=1,
            field=ChangeField.ITEM_ADDED,
            new_value={"raw_material_id": 2, "quantity": 1.0},
        )
        assert log.old_value is None
        assert log.new_value["raw_material_id"] == 2

    def test_snapshot_reason_values(self):
        assert {r.value for r in SnapshotReason} == {
            "initial_creation",
            "price_change",
            "manual_update",
        }
