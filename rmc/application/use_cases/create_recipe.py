"""Create Recipe Use Case: costed on creation, with an initial snapshot."""

from dataclasses import dataclass

from rmc.application.dto.requests import CreateRecipeRequest, RecipeItemRequest
from rmc.application.dto.responses import RecipeResponse
from rmc.config import get_logger, get_settings
from rmc.core.entities.recipe import (
    Recipe,
    RecipeHistorySnapshot,
    RecipeItem,
    SnapshotReason,
)
from rmc.core.interfaces.recipe_store import IRecipeStore
from rmc.core.services.cost_propagator import validate_recipe_input
from rmc.core.services.costing import line_total, manual_edit_divisor, recompute
from rmc.core.services.history_snapshots import HistorySnapshotService

logger = get_logger(__name__)


def build_items(requests: list[RecipeItemRequest]) -> list[RecipeItem]:
    """Turn request lines into items carrying their line totals."""
    items = []
    for line in requests:
        item = RecipeItem(**line.model_dump())
        items.append(
            item.model_copy(update={"total_price": line_total(item.quantity, item.price)})
        )
    return items


def recipe_response(recipe: Recipe, items: list[RecipeItem]) -> RecipeResponse:
    """Recipe response including its items."""
    return RecipeResponse.model_validate(
        {**recipe.model_dump(), "items": [item.model_dump() for item in items]}
    )


@dataclass
class CreateRecipeResult:
    """Result of creating a recipe."""

    recipe: Recipe
    items: list[RecipeItem]
    snapshot: RecipeHistorySnapshot


class CreateRecipeUseCase:
    """Create a recipe; unit price is divided by the recipe's yield."""

    def __init__(
        self,
        recipe_store: IRecipeStore | None = None,
        snapshots: HistorySnapshotService | None = None,
    ):
        self._recipe_store = recipe_store
        self._snapshots = snapshots

    async def _get_recipe_store(self) -> IRecipeStore:
        if self._recipe_store is None:
            from rmc.infrastructure.storage.sqlite import get_recipe_store

            self._recipe_store = await get_recipe_store()
        return self._recipe_store

    async def _get_snapshots(self) -> HistorySnapshotService:
        if self._snapshots is None:
            from rmc.application.services import get_history_snapshot_service

            self._snapshots = await get_history_snapshot_service()
        return self._snapshots

    async def execute(self, request: CreateRecipeRequest) -> CreateRecipeResult:
        """Execute create recipe use case."""
        actor = request.actor or get_settings().costing.default_actor
        items = build_items(request.items)
        validate_recipe_input(request.batch_size, items)

        recipe = Recipe(
            code=request.code or "",
            name=request.name.strip(),
            batch_size=request.batch_size,
            unit_id=request.unit_id,
            unit_name=request.unit_name,
            yield_quantity=request.yield_quantity,
            moisture_percentage=request.moisture_percentage,
            created_by=actor,
        )
        totals = recompute(items, manual_edit_divisor(recipe))
        recipe = recipe.model_copy(
            update={
                "total_raw_material_cost": totals.total_raw_material_cost,
                "price_per_unit": totals.price_per_unit,
            }
        )

        store = await self._get_recipe_store()
        recipe, items = await store.create_recipe(recipe, items)

        snapshots = await self._get_snapshots()
        snapshot = await snapshots.record(recipe, items, SnapshotReason.INITIAL_CREATION, actor)

        logger.info(
            "create_recipe_complete",
            recipe_id=recipe.id,
            code=recipe.code,
            total_cost=recipe.total_raw_material_cost,
            price_per_unit=recipe.price_per_unit,
        )
        return CreateRecipeResult(recipe=recipe, items=items, snapshot=snapshot)

    def to_response(self, result: CreateRecipeResult) -> RecipeResponse:
        """Convert result to API response."""
        return recipe_response(result.recipe, result.items)
