"""
Service factory functions for dependency injection.

This module provides factory functions that wire infrastructure
implementations to core services. Use cases should import from here.

All services built here share the same two KeyedLock registries, so the
per-raw-material and per-recipe critical sections hold process-wide.
"""

from typing import TYPE_CHECKING

from rmc.core.services import (
    AuditLogService,
    CostPropagatorService,
    HistorySnapshotService,
    KeyedLock,
    PriceLedgerService,
)

if TYPE_CHECKING:
    from rmc.core.interfaces import (
        IRawMaterialStore,
        IRecipeHistoryStore,
        IRecipeLogStore,
        IRecipeStore,
        IVendorPriceStore,
    )


# Shared critical sections
_raw_material_locks = KeyedLock()
_recipe_locks = KeyedLock()

# Singleton service instances
_audit_log_service: AuditLogService | None = None
_history_snapshot_service: HistorySnapshotService | None = None
_cost_propagator_service: CostPropagatorService | None = None
_price_ledger_service: PriceLedgerService | None = None


def get_raw_material_locks() -> KeyedLock:
    return _raw_material_locks


def get_recipe_locks() -> KeyedLock:
    return _recipe_locks


async def get_audit_log_service(
    vendor_price_store: "IVendorPriceStore | None" = None,
    recipe_log_store: "IRecipeLogStore | None" = None,
) -> AuditLogService:
    """
    Get or create AuditLogService instance.

    Args:
        vendor_price_store: Optional vendor price store override
        recipe_log_store: Optional recipe log store override

    Returns:
        Configured AuditLogService
    """
    global _audit_log_service

    overridden = vendor_price_store is not None or recipe_log_store is not None
    if _audit_log_service is not None and not overridden:
        return _audit_log_service

    # Lazy import infrastructure to avoid circular imports
    from rmc.infrastructure.storage.sqlite import get_recipe_log_store, get_vendor_price_store

    service = AuditLogService(
        vendor_price_store=vendor_price_store or await get_vendor_price_store(),
        recipe_log_store=recipe_log_store or await get_recipe_log_store(),
    )

    if not overridden:
        _audit_log_service = service

    return service


async def get_history_snapshot_service(
    history_store: "IRecipeHistoryStore | None" = None,
    recipe_store: "IRecipeStore | None" = None,
) -> HistorySnapshotService:
    """
    Get or create HistorySnapshotService instance.

    Args:
        history_store: Optional history store override
        recipe_store: Optional recipe store override

    Returns:
        Configured HistorySnapshotService
    """
    global _history_snapshot_service

    overridden = history_store is not None or recipe_store is not None
    if _history_snapshot_service is not None and not overridden:
        return _history_snapshot_service

    from rmc.infrastructure.storage.sqlite import get_recipe_history_store, get_recipe_store

    service = HistorySnapshotService(
        history_store=history_store or await get_recipe_history_store(),
        recipe_store=recipe_store or await get_recipe_store(),
    )

    if not overridden:
        _history_snapshot_service = service

    return service


async def get_cost_propagator_service(
    recipe_store: "IRecipeStore | None" = None,
    raw_material_store: "IRawMaterialStore | None" = None,
) -> CostPropagatorService:
    """
    Get or create CostPropagatorService instance.

    Args:
        recipe_store: Optional recipe store override
        raw_material_store: Optional raw material store override

    Returns:
        Configured CostPropagatorService
    """
    global _cost_propagator_service

    overridden = recipe_store is not None or raw_material_store is not None
    if _cost_propagator_service is not None and not overridden:
        return _cost_propagator_service

    from rmc.infrastructure.storage.sqlite import get_raw_material_store
    from rmc.infrastructure.storage.sqlite import get_recipe_store as get_default_recipe_store

    rec_store = recipe_store or await get_default_recipe_store()
    service = CostPropagatorService(
        recipe_store=rec_store,
        raw_material_store=raw_material_store or await get_raw_material_store(),
        audit_log=await get_audit_log_service(),
        snapshots=await get_history_snapshot_service(recipe_store=recipe_store),
        recipe_locks=_recipe_locks,
        raw_material_locks=_raw_material_locks,
    )

    if not overridden:
        _cost_propagator_service = service

    return service


async def get_price_ledger_service(
    raw_material_store: "IRawMaterialStore | None" = None,
    vendor_price_store: "IVendorPriceStore | None" = None,
) -> PriceLedgerService:
    """
    Get or create PriceLedgerService instance.

    Args:
        raw_material_store: Optional raw material store override
        vendor_price_store: Optional vendor price store override

    Returns:
        Configured PriceLedgerService
    """
    global _price_ledger_service

    overridden = raw_material_store is not None or vendor_price_store is not None
    if _price_ledger_service is not None and not overridden:
        return _price_ledger_service

    from rmc.infrastructure.storage.sqlite import get_raw_material_store as get_default_rm_store
    from rmc.infrastructure.storage.sqlite import get_vendor_price_store as get_default_vp_store

    rm_store = raw_material_store or await get_default_rm_store()
    vp_store = vendor_price_store or await get_default_vp_store()
    service = PriceLedgerService(
        raw_material_store=rm_store,
        vendor_price_store=vp_store,
        audit_log=await get_audit_log_service(vendor_price_store=vendor_price_store),
        propagator=await get_cost_propagator_service(raw_material_store=raw_material_store),
        raw_material_locks=_raw_material_locks,
    )

    if not overridden:
        _price_ledger_service = service

    return service


def reset_services() -> None:
    """
    Reset all singleton service instances.

    Useful for testing or when configuration changes.
    """
    global _audit_log_service
    global _history_snapshot_service
    global _cost_propagator_service
    global _price_ledger_service

    _audit_log_service = None
    _history_snapshot_service = None
    _cost_propagator_service = None
    _price_ledger_service = None


__all__ = [
    # Locks
    "get_raw_material_locks",
    "get_recipe_locks",
    # Factory functions
    "get_audit_log_service",
    "get_history_snapshot_service",
    "get_cost_propagator_service",
    "get_price_ledger_service",
    # Testing
    "reset_services",
]
