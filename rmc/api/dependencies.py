"""
Dependency injection container for FastAPI.

Provides service instances to route handlers.
"""

from functools import lru_cache

from rmc.application.services import (
    get_audit_log_service,
    get_cost_propagator_service,
    get_history_snapshot_service,
    get_price_ledger_service,
)
from rmc.application.use_cases import (
    AddVendorPriceUseCase,
    CreateRawMaterialUseCase,
    CreateRecipeUseCase,
    SyncLatestPriceUseCase,
    UpdateRecipeUseCase,
)
from rmc.config import Settings, get_settings
from rmc.core.services import (
    AuditLogService,
    CostPropagatorService,
    HistorySnapshotService,
    PriceLedgerService,
)
from rmc.infrastructure.storage.sqlite import (
    SQLiteRawMaterialStore,
    SQLiteRecipeStore,
    get_raw_material_store,
    get_recipe_store,
)


@lru_cache
def get_app_settings() -> Settings:
    """Get cached application settings."""
    return get_settings()


# Service dependencies
async def get_ledger() -> PriceLedgerService:
    """Get price ledger service."""
    return await get_price_ledger_service()


async def get_propagator() -> CostPropagatorService:
    """Get cost propagator service."""
    return await get_cost_propagator_service()


async def get_audit_log() -> AuditLogService:
    """Get audit log service."""
    return await get_audit_log_service()


async def get_snapshots() -> HistorySnapshotService:
    """Get history snapshot service."""
    return await get_history_snapshot_service()


# Store dependencies
async def get_rm_store() -> SQLiteRawMaterialStore:
    """Get raw material store."""
    return await get_raw_material_store()


async def get_rec_store() -> SQLiteRecipeStore:
    """Get recipe store."""
    return await get_recipe_store()


# Use case dependencies
def get_create_raw_material_use_case() -> CreateRawMaterialUseCase:
    """Get create raw material use case."""
    return CreateRawMaterialUseCase()


def get_add_vendor_price_use_case() -> AddVendorPriceUseCase:
    """Get add vendor price use case."""
    return AddVendorPriceUseCase()


def get_sync_latest_price_use_case() -> SyncLatestPriceUseCase:
    """Get sync latest price use case."""
    return SyncLatestPriceUseCase()


def get_create_recipe_use_case() -> CreateRecipeUseCase:
    """Get create recipe use case."""
    return CreateRecipeUseCase()


def get_update_recipe_use_case() -> UpdateRecipeUseCase:
    """Get update recipe use case."""
    return UpdateRecipeUseCase()
