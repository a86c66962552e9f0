"""Add Vendor Price Use Case: record a quote and propagate it to recipes."""

from rmc.application.dto.requests import AddVendorPriceRequest
from rmc.application.dto.responses import AddVendorPriceResponse, PriceChangeLogResponse
from rmc.config import get_logger, get_settings
from rmc.core.services.price_ledger import AddVendorPriceResult, PriceLedgerService

logger = get_logger(__name__)


class AddVendorPriceUseCase:
    """Record a vendor quote, move the price pointer and update recipes."""

    def __init__(self, ledger: PriceLedgerService | None = None):
        self._ledger = ledger

    async def _get_ledger(self) -> PriceLedgerService:
        if self._ledger is None:
            from rmc.application.services import get_price_ledger_service

            self._ledger = await get_price_ledger_service()
        return self._ledger

    async def execute(
        self, raw_material_id: int, request: AddVendorPriceRequest
    ) -> AddVendorPriceResult:
        """Execute add vendor price use case."""
        actor = request.actor or get_settings().costing.default_actor
        logger.info(
            "add_vendor_price_started",
            raw_material_id=raw_material_id,
            vendor_id=request.vendor_id,
            price=request.price,
        )

        ledger = await self._get_ledger()
        result = await ledger.add_vendor_price(
            raw_material_id=raw_material_id,
            vendor_id=request.vendor_id,
            vendor_name=request.vendor_name,
            quantity=request.quantity,
            price=request.price,
            actor=actor,
            unit_id=request.unit_id,
            unit_name=request.unit_name,
        )

        if result.propagation.has_failures:
            logger.warning(
                "add_vendor_price_partial",
                raw_material_id=raw_material_id,
                failed_recipe_ids=list(result.propagation.failed_recipe_ids),
            )
        return result

    def to_response(self, result: AddVendorPriceResult) -> AddVendorPriceResponse:
        """Convert result to API response."""
        return AddVendorPriceResponse(
            ledger_entry_id=result.vendor_price.id,  # type: ignore[arg-type]
            price_changed=result.price_changed,
            price_log=(
                PriceChangeLogResponse.model_validate(result.price_log)
                if result.price_log
                else None
            ),
            updated_recipe_ids=result.propagation.updated_recipe_ids,
            failed_recipe_ids=result.propagation.failed_recipe_ids,
        )
