"""
Application layer - Use cases, DTOs, and service factories.

This layer orchestrates business logic by:
1. Defining request/response DTOs for API contracts
2. Implementing use cases that coordinate core services
3. Providing factory functions for dependency injection

Use cases are the entry point for API handlers that write.
"""

from rmc.application.dto.requests import (
    AddVendorPriceRequest,
    CreateRawMaterialRequest,
    CreateRecipeRequest,
    UpdateRecipeRequest,
)
from rmc.application.dto.responses import ErrorResponse, HealthResponse
from rmc.application.services import (
    get_audit_log_service,
    get_cost_propagator_service,
    get_history_snapshot_service,
    get_price_ledger_service,
    reset_services,
)
from rmc.application.use_cases import (
    AddVendorPriceUseCase,
    CreateRawMaterialUseCase,
    CreateRecipeUseCase,
    SyncLatestPriceUseCase,
    UpdateRecipeUseCase,
)

__all__ = [
    # Request DTOs
    "CreateRawMaterialRequest",
    "AddVendorPriceRequest",
    "CreateRecipeRequest",
    "UpdateRecipeRequest",
    # Response DTOs
    "HealthResponse",
    "ErrorResponse",
    # Use Cases
    "CreateRawMaterialUseCase",
    "AddVendorPriceUseCase",
    "SyncLatestPriceUseCase",
    "CreateRecipeUseCase",
    "UpdateRecipeUseCase",
    # Service factories
    "get_audit_log_service",
    "get_history_snapshot_service",
    "get_cost_propagator_service",
    "get_price_ledger_service",
    "reset_services",
]
