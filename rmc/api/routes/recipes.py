"""Recipe, history snapshot and recipe log endpoints."""

from fastapi import APIRouter, Depends, Query, status

from rmc.api.dependencies import (
    get_app_settings,
    get_audit_log,
    get_create_recipe_use_case,
    get_propagator,
    get_rec_store,
    get_snapshots,
    get_update_recipe_use_case,
)
from rmc.application.dto.requests import (
    CreateRecipeRequest,
    TakeSnapshotRequest,
    UpdateRecipeRequest,
)
from rmc.application.dto.responses import (
    ConsistencyResponse,
    ErrorResponse,
    RecipeChangeLogResponse,
    RecipeItemResponse,
    RecipeListResponse,
    RecipeResponse,
    SnapshotComparisonResponse,
    SnapshotResponse,
    UpdateRecipeResponse,
)
from rmc.application.use_cases import CreateRecipeUseCase, UpdateRecipeUseCase
from rmc.application.use_cases.create_recipe import recipe_response
from rmc.config import Settings
from rmc.core.exceptions import RecipeNotFoundError
from rmc.core.services import AuditLogService, CostPropagatorService, HistorySnapshotService
from rmc.infrastructure.storage.sqlite import SQLiteRecipeStore

router = APIRouter(prefix="/api/recipes", tags=["recipes"])

NOT_FOUND = {404: {"model": ErrorResponse}}


@router.post(
    "",
    response_model=RecipeResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
)
async def create_recipe(
    request: CreateRecipeRequest,
    use_case: CreateRecipeUseCase = Depends(get_create_recipe_use_case),
) -> RecipeResponse:
    """Create a recipe. Writes an initial_creation snapshot."""
    result = await use_case.execute(request)
    return use_case.to_response(result)


@router.get("", response_model=RecipeListResponse)
async def list_recipes(
    limit: int = Query(default=100, ge=1, le=1000),
    offset: int = Query(default=0, ge=0),
    store: SQLiteRecipeStore = Depends(get_rec_store),
) -> RecipeListResponse:
    """List recipe headers, most recently updated first."""
    recipes = await store.list_recipes(limit=limit, offset=offset)
    return RecipeListResponse(
        recipes=[RecipeResponse.model_validate(recipe) for recipe in recipes],
        total=len(recipes),
    )


@router.get("/{recipe_id}", response_model=RecipeResponse, responses=NOT_FOUND)
async def get_recipe(
    recipe_id: int,
    store: SQLiteRecipeStore = Depends(get_rec_store),
) -> RecipeResponse:
    """Get a recipe with its items."""
    recipe = await store.get_recipe(recipe_id)
    if recipe is None:
        raise RecipeNotFoundError(recipe_id)
    return recipe_response(recipe, await store.get_items(recipe_id))


@router.put(
    "/{recipe_id}",
    response_model=UpdateRecipeResponse,
    responses={400: {"model": ErrorResponse}, **NOT_FOUND},
)
async def update_recipe(
    recipe_id: int,
    request: UpdateRecipeRequest,
    use_case: UpdateRecipeUseCase = Depends(get_update_recipe_use_case),
) -> UpdateRecipeResponse:
    """Replace a recipe's fields and items. Logs every change."""
    result = await use_case.execute(recipe_id, request)
    return use_case.to_response(result)


@router.delete("/{recipe_id}", status_code=status.HTTP_204_NO_CONTENT, responses=NOT_FOUND)
async def delete_recipe(
    recipe_id: int,
    store: SQLiteRecipeStore = Depends(get_rec_store),
) -> None:
    """Delete a recipe with its items, history and logs."""
    if not await store.delete_recipe(recipe_id):
        raise RecipeNotFoundError(recipe_id)


@router.get(
    "/{recipe_id}/items",
    response_model=list[RecipeItemResponse],
    responses=NOT_FOUND,
)
async def get_recipe_items(
    recipe_id: int,
    store: SQLiteRecipeStore = Depends(get_rec_store),
) -> list[RecipeItemResponse]:
    """Items of a recipe."""
    if await store.get_recipe(recipe_id) is None:
        raise RecipeNotFoundError(recipe_id)
    items = await store.get_items(recipe_id)
    return [RecipeItemResponse.model_validate(item) for item in items]


@router.get("/{recipe_id}/history", response_model=list[SnapshotResponse])
async def list_history(
    recipe_id: int,
    limit: int = Query(default=100, ge=1, le=1000),
    snapshots: HistorySnapshotService = Depends(get_snapshots),
) -> list[SnapshotResponse]:
    """History snapshots, newest first."""
    history = await snapshots.list_snapshots(recipe_id, limit=limit)
    return [SnapshotResponse.model_validate(snapshot) for snapshot in history]


@router.post(
    "/{recipe_id}/history",
    response_model=SnapshotResponse,
    status_code=status.HTTP_201_CREATED,
    responses=NOT_FOUND,
)
async def take_snapshot(
    recipe_id: int,
    request: TakeSnapshotRequest | None = None,
    snapshots: HistorySnapshotService = Depends(get_snapshots),
    settings: Settings = Depends(get_app_settings),
) -> SnapshotResponse:
    """Snapshot the recipe as currently stored."""
    request = request or TakeSnapshotRequest()
    snapshot = await snapshots.take_snapshot(
        recipe_id, request.reason, request.actor or settings.costing.default_actor
    )
    return SnapshotResponse.model_validate(snapshot)


@router.get(
    "/{recipe_id}/history/compare",
    response_model=SnapshotComparisonResponse,
    responses=NOT_FOUND,
)
async def compare_history(
    recipe_id: int,
    a: int = Query(..., description="Snapshot ID"),
    b: int = Query(..., description="Snapshot ID"),
    snapshots: HistorySnapshotService = Depends(get_snapshots),
) -> SnapshotComparisonResponse:
    """Compare two snapshots, older to newer regardless of argument order."""
    comparison = await snapshots.compare_by_ids(recipe_id, a, b)
    return SnapshotComparisonResponse.model_validate(comparison)


@router.delete(
    "/{recipe_id}/history/{snapshot_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses=NOT_FOUND,
)
async def delete_snapshot(
    recipe_id: int,
    snapshot_id: int,
    snapshots: HistorySnapshotService = Depends(get_snapshots),
) -> None:
    """Delete one history snapshot."""
    await snapshots.delete(recipe_id, snapshot_id)


@router.get("/{recipe_id}/logs", response_model=list[RecipeChangeLogResponse])
async def list_recipe_logs(
    recipe_id: int,
    limit: int = Query(default=200, ge=1, le=1000),
    audit_log: AuditLogService = Depends(get_audit_log),
) -> list[RecipeChangeLogResponse]:
    """Recipe change logs, newest first."""
    logs = await audit_log.list_recipe_logs(recipe_id=recipe_id, limit=limit)
    return [RecipeChangeLogResponse.model_validate(log) for log in logs]


@router.delete(
    "/{recipe_id}/logs/{log_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses=NOT_FOUND,
)
async def delete_recipe_log(
    recipe_id: int,
    log_id: int,
    audit_log: AuditLogService = Depends(get_audit_log),
) -> None:
    """Purge one recipe change log entry."""
    await audit_log.delete_recipe_log(log_id, recipe_id=recipe_id)


@router.get(
    "/{recipe_id}/consistency",
    response_model=ConsistencyResponse,
    responses={409: {"model": ErrorResponse}, **NOT_FOUND},
)
async def check_consistency(
    recipe_id: int,
    propagator: CostPropagatorService = Depends(get_propagator),
) -> ConsistencyResponse:
    """Verify stored costing against a recomputation."""
    recipe = await propagator.verify_recipe(recipe_id)
    return ConsistencyResponse(
        recipe_id=recipe_id,
        total_raw_material_cost=recipe.total_raw_material_cost,
        price_per_unit=recipe.price_per_unit,
    )
