"""
Price Ledger Service.

Records vendor quotes for raw materials and moves the raw material's price
pointer. The pointer always follows the most recently recorded quote; the
cheapest quote is a separate query.
"""

from dataclasses import dataclass, field

from rmc.config import get_logger
from rmc.core.entities.raw_material import PriceChangeLog, VendorPrice
from rmc.core.exceptions import (
    RawMaterialNotFoundError,
    ValidationError,
    VendorPriceNotFoundError,
)
from rmc.core.interfaces.raw_material_store import IRawMaterialStore, IVendorPriceStore
from rmc.core.services.audit_log import AuditLogService
from rmc.core.services.cost_propagator import CostPropagatorService, PropagationResult
from rmc.core.services.locks import KeyedLock

logger = get_logger(__name__)


@dataclass
class AddVendorPriceResult:
    """Outcome of recording a vendor quote."""

    vendor_price: VendorPrice
    price_changed: bool
    price_log: PriceChangeLog | None
    propagation: PropagationResult


@dataclass
class SyncPriceResult:
    """Outcome of adopting the latest ledger price."""

    price: float
    no_change: bool = False
    propagation: PropagationResult = field(default_factory=PropagationResult)


class PriceLedgerService:
    """
    Append-only vendor price ledger with a chronological price pointer.

    Both write operations run inside the raw material's critical section and
    propagate the resulting price to recipes before releasing it.
    """

    def __init__(
        self,
        raw_material_store: IRawMaterialStore,
        vendor_price_store: IVendorPriceStore,
        audit_log: AuditLogService,
        propagator: CostPropagatorService,
        raw_material_locks: KeyedLock | None = None,
    ):
        self._raw_materials = raw_material_store
        self._vendor_prices = vendor_price_store
        self._audit = audit_log
        self._propagator = propagator
        self._locks = raw_material_locks if raw_material_locks is not None else KeyedLock()

    async def add_vendor_price(
        self,
        raw_material_id: int,
        vendor_id: str,
        vendor_name: str,
        quantity: float,
        price: float,
        actor: str | None,
        unit_id: str | None = None,
        unit_name: str | None = None,
    ) -> AddVendorPriceResult:
        """
        Record a vendor quote and propagate it.

        Args:
            raw_material_id: Raw material being quoted
            vendor_id: Vendor identifier, required
            vendor_name: Vendor display name
            quantity: Quoted quantity, must be positive
            price: Quoted price, must not be negative
            actor: User recorded on logs and snapshots
            unit_id: Optional unit of the quote
            unit_name: Optional unit display name

        Returns:
            AddVendorPriceResult with the ledger entry and propagation outcome
        """
        if not vendor_id or not vendor_id.strip():
            raise ValidationError("vendor_id", "is required", vendor_id)
        if quantity is None or quantity <= 0:
            raise ValidationError("quantity", "must be greater than 0", quantity)
        if price is None or price < 0:
            raise ValidationError("price", "must not be negative", price)

        async with self._locks.hold(raw_material_id):
            raw_material = await self._raw_materials.get_raw_material(raw_material_id)
            if raw_material is None:
                raise RawMaterialNotFoundError(raw_material_id)

            previous = await self._vendor_prices.get_latest_for_vendor(
                raw_material_id, vendor_id
            )
            entry = await self._vendor_prices.add_vendor_price(
                VendorPrice(
                    raw_material_id=raw_material_id,
                    vendor_id=vendor_id,
                    vendor_name=vendor_name,
                    quantity=quantity,
                    unit_id=unit_id,
                    unit_name=unit_name,
                    price=price,
                    created_by=actor,
                )
            )

            price_log = None
            if previous is not None and previous.price != price:
                price_log = await self._audit.record_price_change(previous, entry, actor)

            await self._raw_materials.update_price_pointer(
                raw_material_id, entry.price, entry.vendor_name, entry.added_at
            )
            logger.info(
                "vendor_price_added",
                raw_material_id=raw_material_id,
                vendor_id=vendor_id,
                price=price,
                entry_id=entry.id,
                price_changed=price_log is not None,
            )

            propagation = await self._propagator.propagate_price_change(
                raw_material_id, price, actor
            )

        return AddVendorPriceResult(
            vendor_price=entry,
            price_changed=price_log is not None,
            price_log=price_log,
            propagation=propagation,
        )

    async def adopt_latest_price(
        self, raw_material_id: int, actor: str | None
    ) -> SyncPriceResult:
        """
        Point the raw material at its most recently recorded quote.

        A no-op when the pointer already holds that price.
        """
        async with self._locks.hold(raw_material_id):
            raw_material = await self._raw_materials.get_raw_material(raw_material_id)
            if raw_material is None:
                raise RawMaterialNotFoundError(raw_material_id)

            latest = await self._vendor_prices.get_latest(raw_material_id)
            if latest is None:
                raise VendorPriceNotFoundError(raw_material_id)

            if raw_material.last_added_price == latest.price:
                logger.debug(
                    "latest_price_unchanged",
                    raw_material_id=raw_material_id,
                    price=latest.price,
                )
                return SyncPriceResult(price=latest.price, no_change=True)

            await self._raw_materials.update_price_pointer(
                raw_material_id, latest.price, latest.vendor_name, latest.added_at
            )
            propagation = await self._propagator.propagate_price_change(
                raw_material_id, latest.price, actor
            )

        logger.info(
            "latest_price_adopted",
            raw_material_id=raw_material_id,
            old_price=raw_material.last_added_price,
            price=latest.price,
            updated_recipes=len(propagation.updated_recipe_ids),
        )
        return SyncPriceResult(price=latest.price, propagation=propagation)

    async def list_vendor_prices(
        self, raw_material_id: int, limit: int = 100
    ) -> list[VendorPrice]:
        await self._require_raw_material(raw_material_id)
        return await self._vendor_prices.list_vendor_prices(raw_material_id, limit=limit)

    async def cheapest_vendor_price(self, raw_material_id: int) -> VendorPrice:
        """Lowest recorded quote. Independent of the price pointer."""
        await self._require_raw_material(raw_material_id)
        cheapest = await self._vendor_prices.get_cheapest(raw_material_id)
        if cheapest is None:
            raise VendorPriceNotFoundError(raw_material_id)
        return cheapest

    async def _require_raw_material(self, raw_material_id: int) -> None:
        if await self._raw_materials.get_raw_material(raw_material_id) is None:
            raise RawMaterialNotFoundError(raw_material_id)
