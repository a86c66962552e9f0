"""
Audit Log Service.

Append-only access to raw material price change logs and recipe change logs.
Entries may be purged one at a time; they are never edited.
"""

from rmc.config import get_logger
from rmc.core.entities.raw_material import PriceChangeLog, VendorPrice
from rmc.core.entities.recipe import RecipeChangeLog
from rmc.core.exceptions import LogEntryNotFoundError
from rmc.core.interfaces.raw_material_store import IVendorPriceStore
from rmc.core.interfaces.recipe_store import IRecipeLogStore

logger = get_logger(__name__)


class AuditLogService:
    """Reads and writes the two change logs."""

    def __init__(
        self,
        vendor_price_store: IVendorPriceStore,
        recipe_log_store: IRecipeLogStore,
    ):
        self._vendor_prices = vendor_price_store
        self._recipe_logs = recipe_log_store

    async def record_price_change(
        self,
        previous: VendorPrice,
        entry: VendorPrice,
        actor: str | None,
    ) -> PriceChangeLog:
        """Log a vendor re-quoting a raw material at a different price."""
        log = await self._vendor_prices.add_price_log(
            PriceChangeLog(
                raw_material_id=entry.raw_material_id,
                vendor_id=entry.vendor_id,
                vendor_name=entry.vendor_name,
                old_price=previous.price,
                new_price=entry.price,
                quantity=entry.quantity,
                unit_id=entry.unit_id,
                unit_name=entry.unit_name,
                changed_by=actor,
            )
        )
        logger.info(
            "price_change_logged",
            raw_material_id=entry.raw_material_id,
            vendor_id=entry.vendor_id,
            old_price=previous.price,
            new_price=entry.price,
        )
        return log

    async def record_recipe_changes(
        self, logs: list[RecipeChangeLog]
    ) -> list[RecipeChangeLog]:
        if not logs:
            return []
        return await self._recipe_logs.add_logs(logs)

    async def list_price_logs(
        self, raw_material_id: int, limit: int = 100
    ) -> list[PriceChangeLog]:
        return await self._vendor_prices.list_price_logs(raw_material_id, limit=limit)

    async def list_recipe_logs(
        self,
        recipe_id: int | None = None,
        raw_material_id: int | None = None,
        limit: int = 200,
    ) -> list[RecipeChangeLog]:
        return await self._recipe_logs.list_logs(
            recipe_id=recipe_id, raw_material_id=raw_material_id, limit=limit
        )

    async def delete_price_log(self, raw_material_id: int, log_id: int) -> None:
        """Purge one price change log entry. Nothing is recomputed."""
        deleted = await self._vendor_prices.delete_price_log(raw_material_id, log_id)
        if not deleted:
            raise LogEntryNotFoundError(log_id, "price")
        logger.info("price_log_deleted", raw_material_id=raw_material_id, log_id=log_id)

    async def delete_recipe_log(self, log_id: int, recipe_id: int | None = None) -> None:
        """Purge one recipe change log entry. Nothing is recomputed."""
        deleted = await self._recipe_logs.delete_log(log_id, recipe_id=recipe_id)
        if not deleted:
            raise LogEntryNotFoundError(log_id, "recipe")
        logger.info("recipe_log_deleted", recipe_id=recipe_id, log_id=log_id)
