"""
Core business logic services.

Layer-pure services that depend only on:
- rmc/core/entities/*
- rmc/core/interfaces/*
- rmc/core/exceptions.py

NO infrastructure imports. All dependencies injected via constructor.
"""

from rmc.core.services.audit_log import AuditLogService
from rmc.core.services.cost_propagator import (
    CostPropagatorService,
    ManualEditResult,
    PropagationResult,
)
from rmc.core.services.costing import (
    RecipeTotals,
    find_aggregate_drift,
    line_total,
    manual_edit_divisor,
    propagation_divisor,
    recompute,
    round2,
)
from rmc.core.services.history_snapshots import HistorySnapshotService
from rmc.core.services.locks import KeyedLock
from rmc.core.services.price_ledger import (
    AddVendorPriceResult,
    PriceLedgerService,
    SyncPriceResult,
)

__all__ = [
    # Costing
    "RecipeTotals",
    "round2",
    "line_total",
    "recompute",
    "manual_edit_divisor",
    "propagation_divisor",
    "find_aggregate_drift",
    # Price ledger
    "PriceLedgerService",
    "AddVendorPriceResult",
    "SyncPriceResult",
    # Propagation
    "CostPropagatorService",
    "PropagationResult",
    "ManualEditResult",
    # Audit and history
    "AuditLogService",
    "HistorySnapshotService",
    # Concurrency
    "KeyedLock",
]
