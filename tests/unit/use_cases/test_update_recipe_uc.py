"""Tests for UpdateRecipeUseCase."""

from unittest.mock import AsyncMock

import pytest

from rmc.application.dto.requests import RecipeItemRequest, UpdateRecipeRequest
from rmc.application.use_cases.update_recipe import UpdateRecipeUseCase
from rmc.core.entities import (
    ChangeField,
    RecipeChangeLog,
    RecipeHistorySnapshot,
    SnapshotReason,
)
from rmc.core.services.cost_propagator import ManualEditResult


@pytest.fixture
def mock_propagator(ladoo, ladoo_items):
    propagator = AsyncMock()
    updated = ladoo.model_copy(update={"total_raw_material_cost": 120.0, "price_per_unit": 15.0})
    items = [ladoo_items[0].model_copy(update={"id": 200, "quantity": 3, "total_price": 120.0})]
    propagator.apply_manual_edit.return_value = ManualEditResult(
        recipe=updated,
        items=items,
        changes=[
            RecipeChangeLog(
                id=1,
                recipe_id=10,
                recipe_item_id=100,
                raw_material_id=1,
                field=ChangeField.QUANTITY,
                old_value=2,
                new_value=3,
            )
        ],
        snapshot=RecipeHistorySnapshot.capture(
            updated, items, SnapshotReason.MANUAL_UPDATE
        ).model_copy(update={"id": 7}),
    )
    return propagator


@pytest.fixture
def use_case(mock_propagator):
    return UpdateRecipeUseCase(propagator=mock_propagator)


@pytest.fixture
def request_body() -> UpdateRecipeRequest:
    return UpdateRecipeRequest(
        name="Ladoo ",
        batch_size=10,
        unit_id="kg",
        unit_name="Kilogram",
        yield_quantity=8,
        items=[RecipeItemRequest(raw_material_id=1, quantity=3, price=40)],
        actor="bob",
    )


class TestUpdateRecipeUseCase:
    async def test_passes_items_and_fields(self, use_case, mock_propagator, request_body):
        await use_case.execute(10, request_body)

        kwargs = mock_propagator.apply_manual_edit.call_args.kwargs
        assert kwargs["recipe_id"] == 10
        assert kwargs["new_items"][0].total_price == 120.0
        assert kwargs["fields"].name == "Ladoo"
        assert kwargs["fields"].yield_quantity == 8
        assert kwargs["actor"] == "bob"

    async def test_default_actor(self, use_case, mock_propagator, request_body):
        request_body.actor = None
        await use_case.execute(10, request_body)
        assert mock_propagator.apply_manual_edit.call_args.kwargs["actor"] == "system"

    async def test_to_response(self, use_case, request_body):
        result = await use_case.execute(10, request_body)
        response = use_case.to_response(result)

        assert response.recipe.price_per_unit == 15.0
        assert response.recipe.items[0].quantity == 3
        assert response.snapshot_id == 7
        assert response.changes[0].field == ChangeField.QUANTITY
        assert response.changes[0].old_value == 2
