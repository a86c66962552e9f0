"""Update Recipe Use Case: full manual edit with change logs."""

from rmc.application.dto.requests import UpdateRecipeRequest
from rmc.application.dto.responses import RecipeChangeLogResponse, UpdateRecipeResponse
from rmc.application.use_cases.create_recipe import build_items, recipe_response
from rmc.config import get_logger, get_settings
from rmc.core.entities.recipe import RecipeUpdate
from rmc.core.services.cost_propagator import CostPropagatorService, ManualEditResult

logger = get_logger(__name__)


class UpdateRecipeUseCase:
    """Replace a recipe's fields and items, logging every difference."""

    def __init__(self, propagator: CostPropagatorService | None = None):
        self._propagator = propagator

    async def _get_propagator(self) -> CostPropagatorService:
        if self._propagator is None:
            from rmc.application.services import get_cost_propagator_service

            self._propagator = await get_cost_propagator_service()
        return self._propagator

    async def execute(
        self, recipe_id: int, request: UpdateRecipeRequest
    ) -> ManualEditResult:
        """Execute update recipe use case."""
        actor = request.actor or get_settings().costing.default_actor

        propagator = await self._get_propagator()
        result = await propagator.apply_manual_edit(
            recipe_id=recipe_id,
            new_items=build_items(request.items),
            fields=RecipeUpdate(
                name=request.name.strip(),
                batch_size=request.batch_size,
                unit_id=request.unit_id,
                unit_name=request.unit_name,
                yield_quantity=request.yield_quantity,
                moisture_percentage=request.moisture_percentage,
            ),
            actor=actor,
        )

        logger.info(
            "update_recipe_complete",
            recipe_id=recipe_id,
            changes=len(result.changes),
            snapshot_id=result.snapshot.id,
        )
        return result

    def to_response(self, result: ManualEditResult) -> UpdateRecipeResponse:
        """Convert result to API response."""
        return UpdateRecipeResponse(
            recipe=recipe_response(result.recipe, result.items),
            changes=[RecipeChangeLogResponse.model_validate(log) for log in result.changes],
            snapshot_id=result.snapshot.id,  # type: ignore[arg-type]
        )
