"""Raw material, vendor price ledger and price log endpoints."""

from fastapi import APIRouter, Depends, Query, status

from rmc.api.dependencies import (
    get_add_vendor_price_use_case,
    get_app_settings,
    get_audit_log,
    get_create_raw_material_use_case,
    get_ledger,
    get_propagator,
    get_rm_store,
    get_sync_latest_price_use_case,
)
from rmc.application.dto.requests import AddVendorPriceRequest, CreateRawMaterialRequest
from rmc.application.dto.responses import (
    AddVendorPriceResponse,
    ErrorResponse,
    PriceChangeLogResponse,
    RawMaterialListResponse,
    RawMaterialResponse,
    RecipeChangeLogResponse,
    RepairResponse,
    SyncPriceResponse,
    VendorPriceResponse,
)
from rmc.application.use_cases import (
    AddVendorPriceUseCase,
    CreateRawMaterialUseCase,
    SyncLatestPriceUseCase,
)
from rmc.config import Settings
from rmc.core.exceptions import RawMaterialNotFoundError
from rmc.core.services import AuditLogService, CostPropagatorService, PriceLedgerService
from rmc.infrastructure.storage.sqlite import SQLiteRawMaterialStore

router = APIRouter(prefix="/api/raw-materials", tags=["raw-materials"])

NOT_FOUND = {404: {"model": ErrorResponse}}


@router.post(
    "",
    response_model=RawMaterialResponse,
    status_code=status.HTTP_201_CREATED,
    responses={422: {"model": ErrorResponse}},
)
async def create_raw_material(
    request: CreateRawMaterialRequest,
    use_case: CreateRawMaterialUseCase = Depends(get_create_raw_material_use_case),
) -> RawMaterialResponse:
    """Register a raw material."""
    raw_material = await use_case.execute(request)
    return use_case.to_response(raw_material)


@router.get("", response_model=RawMaterialListResponse)
async def list_raw_materials(
    limit: int = Query(default=100, ge=1, le=1000),
    offset: int = Query(default=0, ge=0),
    store: SQLiteRawMaterialStore = Depends(get_rm_store),
) -> RawMaterialListResponse:
    """List raw materials, most recently updated first."""
    raw_materials = await store.list_raw_materials(limit=limit, offset=offset)
    return RawMaterialListResponse(
        raw_materials=[RawMaterialResponse.model_validate(rm) for rm in raw_materials],
        total=len(raw_materials),
    )


@router.get("/{raw_material_id}", response_model=RawMaterialResponse, responses=NOT_FOUND)
async def get_raw_material(
    raw_material_id: int,
    store: SQLiteRawMaterialStore = Depends(get_rm_store),
) -> RawMaterialResponse:
    """Get a raw material with its current price pointer."""
    raw_material = await store.get_raw_material(raw_material_id)
    if raw_material is None:
        raise RawMaterialNotFoundError(raw_material_id)
    return RawMaterialResponse.model_validate(raw_material)


@router.delete(
    "/{raw_material_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses=NOT_FOUND,
)
async def delete_raw_material(
    raw_material_id: int,
    store: SQLiteRawMaterialStore = Depends(get_rm_store),
) -> None:
    """Delete a raw material with its vendor prices and price logs."""
    if not await store.delete_raw_material(raw_material_id):
        raise RawMaterialNotFoundError(raw_material_id)


@router.post(
    "/{raw_material_id}/vendor-prices",
    response_model=AddVendorPriceResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, **NOT_FOUND},
)
async def add_vendor_price(
    raw_material_id: int,
    request: AddVendorPriceRequest,
    use_case: AddVendorPriceUseCase = Depends(get_add_vendor_price_use_case),
) -> AddVendorPriceResponse:
    """Record a vendor quote and propagate the price to recipes."""
    result = await use_case.execute(raw_material_id, request)
    return use_case.to_response(result)


@router.get(
    "/{raw_material_id}/vendor-prices",
    response_model=list[VendorPriceResponse],
    responses=NOT_FOUND,
)
async def list_vendor_prices(
    raw_material_id: int,
    limit: int = Query(default=100, ge=1, le=1000),
    ledger: PriceLedgerService = Depends(get_ledger),
) -> list[VendorPriceResponse]:
    """Ledger entries, newest first."""
    entries = await ledger.list_vendor_prices(raw_material_id, limit=limit)
    return [VendorPriceResponse.model_validate(entry) for entry in entries]


@router.get(
    "/{raw_material_id}/vendor-prices/cheapest",
    response_model=VendorPriceResponse,
    responses=NOT_FOUND,
)
async def cheapest_vendor_price(
    raw_material_id: int,
    ledger: PriceLedgerService = Depends(get_ledger),
) -> VendorPriceResponse:
    """Lowest recorded quote, independent of the price pointer."""
    return VendorPriceResponse.model_validate(
        await ledger.cheapest_vendor_price(raw_material_id)
    )


@router.post(
    "/{raw_material_id}/sync-price",
    response_model=SyncPriceResponse,
    responses=NOT_FOUND,
)
async def sync_latest_price(
    raw_material_id: int,
    actor: str | None = None,
    use_case: SyncLatestPriceUseCase = Depends(get_sync_latest_price_use_case),
) -> SyncPriceResponse:
    """Adopt the newest ledger price and propagate it if it moved."""
    result = await use_case.execute(raw_material_id, actor)
    return use_case.to_response(result)


@router.post(
    "/{raw_material_id}/repair",
    response_model=RepairResponse,
    responses=NOT_FOUND,
)
async def repair_raw_material(
    raw_material_id: int,
    actor: str | None = None,
    propagator: CostPropagatorService = Depends(get_propagator),
    settings: Settings = Depends(get_app_settings),
) -> RepairResponse:
    """Re-propagate the current price and fix drifted recipes."""
    result = await propagator.repair_raw_material(
        raw_material_id, actor or settings.costing.default_actor
    )
    return RepairResponse(
        raw_material_id=raw_material_id,
        updated_recipe_ids=result.updated_recipe_ids,
        repaired_recipe_ids=result.repaired_recipe_ids,
        failed_recipe_ids=result.failed_recipe_ids,
    )


@router.get(
    "/{raw_material_id}/price-logs",
    response_model=list[PriceChangeLogResponse],
)
async def list_price_logs(
    raw_material_id: int,
    limit: int = Query(default=100, ge=1, le=1000),
    audit_log: AuditLogService = Depends(get_audit_log),
) -> list[PriceChangeLogResponse]:
    """Price change logs, newest first."""
    logs = await audit_log.list_price_logs(raw_material_id, limit=limit)
    return [PriceChangeLogResponse.model_validate(log) for log in logs]


@router.delete(
    "/{raw_material_id}/price-logs/{log_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses=NOT_FOUND,
)
async def delete_price_log(
    raw_material_id: int,
    log_id: int,
    audit_log: AuditLogService = Depends(get_audit_log),
) -> None:
    """Purge one price change log entry."""
    await audit_log.delete_price_log(raw_material_id, log_id)


@router.get(
    "/{raw_material_id}/recipe-logs",
    response_model=list[RecipeChangeLogResponse],
)
async def list_recipe_logs_for_raw_material(
    raw_material_id: int,
    limit: int = Query(default=200, ge=1, le=1000),
    audit_log: AuditLogService = Depends(get_audit_log),
) -> list[RecipeChangeLogResponse]:
    """Recipe change logs involving this raw material, newest first."""
    logs = await audit_log.list_recipe_logs(raw_material_id=raw_material_id, limit=limit)
    return [RecipeChangeLogResponse.model_validate(log) for log in logs]
