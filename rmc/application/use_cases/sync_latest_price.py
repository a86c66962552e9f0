"""Sync Latest Price Use Case: adopt the newest ledger entry."""

from rmc.application.dto.responses import SyncPriceResponse
from rmc.config import get_logger, get_settings
from rmc.core.services.price_ledger import PriceLedgerService, SyncPriceResult

logger = get_logger(__name__)


class SyncLatestPriceUseCase:
    """Point a raw material at its newest quote and propagate when it moved."""

    def __init__(self, ledger: PriceLedgerService | None = None):
        self._ledger = ledger

    async def _get_ledger(self) -> PriceLedgerService:
        if self._ledger is None:
            from rmc.application.services import get_price_ledger_service

            self._ledger = await get_price_ledger_service()
        return self._ledger

    async def execute(self, raw_material_id: int, actor: str | None = None) -> SyncPriceResult:
        """Execute sync latest price use case."""
        ledger = await self._get_ledger()
        return await ledger.adopt_latest_price(
            raw_material_id, actor or get_settings().costing.default_actor
        )

    def to_response(self, result: SyncPriceResult) -> SyncPriceResponse:
        """Convert result to API response."""
        if result.no_change:
            message = "No price change"
        else:
            count = len(result.propagation.updated_recipe_ids)
            message = f"Price synced, {count} recipe(s) updated"
        return SyncPriceResponse(
            no_change=result.no_change,
            message=message,
            price=result.price,
            updated_recipe_ids=result.propagation.updated_recipe_ids,
            failed_recipe_ids=result.propagation.failed_recipe_ids,
        )
