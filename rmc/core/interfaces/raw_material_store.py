"""
Abstract interfaces for raw material and vendor price ledger storage.
"""

from abc import ABC, abstractmethod
from datetime import datetime

from rmc.core.entities.raw_material import PriceChangeLog, RawMaterial, VendorPrice


class IRawMaterialStore(ABC):
    """
    Abstract interface for raw material records.

    The price pointer is written only through ``update_price_pointer``.
    """

    @abstractmethod
    async def create_raw_material(self, raw_material: RawMaterial) -> RawMaterial:
        """Create a raw material, assigning the next ``RMnnn`` code when empty."""

    @abstractmethod
    async def get_raw_material(self, raw_material_id: int) -> RawMaterial | None:
        """Get raw material by ID."""

    @abstractmethod
    async def list_raw_materials(
        self, limit: int = 100, offset: int = 0
    ) -> list[RawMaterial]:
        """List raw materials, most recently updated first."""

    @abstractmethod
    async def update_price_pointer(
        self,
        raw_material_id: int,
        price: float,
        vendor_name: str,
        price_date: datetime,
    ) -> RawMaterial | None:
        """Overwrite the last recorded price pointer. Returns None if absent."""

    @abstractmethod
    async def delete_raw_material(self, raw_material_id: int) -> bool:
        """Delete a raw material with its vendor prices and price logs."""


class IVendorPriceStore(ABC):
    """
    Abstract interface for the append-only vendor price ledger.

    Also holds the price change log, which shares the ledger's lifecycle.
    """

    @abstractmethod
    async def add_vendor_price(self, entry: VendorPrice) -> VendorPrice:
        """Append a ledger entry. Returns a copy carrying the new ID."""

    @abstractmethod
    async def get_latest(self, raw_material_id: int) -> VendorPrice | None:
        """Most recently inserted entry for a raw material, any vendor."""

    @abstractmethod
    async def get_latest_for_vendor(
        self, raw_material_id: int, vendor_id: str
    ) -> VendorPrice | None:
        """Most recently inserted entry for one vendor on a raw material."""

    @abstractmethod
    async def get_cheapest(self, raw_material_id: int) -> VendorPrice | None:
        """Lowest priced entry for a raw material (latest wins on ties)."""

    @abstractmethod
    async def list_vendor_prices(
        self, raw_material_id: int, limit: int = 100
    ) -> list[VendorPrice]:
        """Ledger entries for a raw material, newest first."""

    @abstractmethod
    async def add_price_log(self, log: PriceChangeLog) -> PriceChangeLog:
        """Append a price change log entry."""

    @abstractmethod
    async def list_price_logs(
        self, raw_material_id: int, limit: int = 100
    ) -> list[PriceChangeLog]:
        """Price change logs for a raw material, newest first."""

    @abstractmethod
    async def delete_price_log(self, raw_material_id: int, log_id: int) -> bool:
        """Delete one price change log entry."""
