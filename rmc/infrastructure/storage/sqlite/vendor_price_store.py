"""
SQLite implementation of the vendor price ledger and price change logs.

Both tables are append-only; ordering is by insertion (id) so that
entries recorded within the same second stay distinguishable.
"""

from datetime import datetime

import aiosqlite

from rmc.config import get_logger
from rmc.core.entities.raw_material import PriceChangeLog, VendorPrice
from rmc.core.interfaces.raw_material_store import IVendorPriceStore
from rmc.infrastructure.storage.sqlite.connection import get_connection, get_transaction

logger = get_logger(__name__)


class SQLiteVendorPriceStore(IVendorPriceStore):
    """SQLite implementation of vendor price ledger storage."""

    async def add_vendor_price(self, entry: VendorPrice) -> VendorPrice:
        """Append a ledger entry."""
        async with get_transaction() as conn:
            cursor = await conn.execute(
                """
                INSERT INTO rm_vendor_prices (
                    raw_material_id, vendor_id, vendor_name, quantity,
                    unit_id, unit_name, price, added_at, created_by
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    entry.raw_material_id,
                    entry.vendor_id,
                    entry.vendor_name,
                    entry.quantity,
                    entry.unit_id,
                    entry.unit_name,
                    entry.price,
                    entry.added_at.isoformat(),
                    entry.created_by,
                ),
            )
            return entry.model_copy(update={"id": cursor.lastrowid})

    async def get_latest(self, raw_material_id: int) -> VendorPrice | None:
        async with get_connection() as conn:
            cursor = await conn.execute(
                """
                SELECT * FROM rm_vendor_prices
                WHERE raw_material_id = ?
                ORDER BY id DESC
                LIMIT 1
                """,
                (raw_material_id,),
            )
            row = await cursor.fetchone()
            return self._row_to_vendor_price(row) if row else None

    async def get_latest_for_vendor(
        self, raw_material_id: int, vendor_id: str
    ) -> VendorPrice | None:
        async with get_connection() as conn:
            cursor = await conn.execute(
                """
                SELECT * FROM rm_vendor_prices
                WHERE raw_material_id = ? AND vendor_id = ?
                ORDER BY id DESC
                LIMIT 1
                """,
                (raw_material_id, vendor_id),
            )
            row = await cursor.fetchone()
            return self._row_to_vendor_price(row) if row else None

    async def get_cheapest(self, raw_material_id: int) -> VendorPrice | None:
        async with get_connection() as conn:
            cursor = await conn.execute(
                """
                SELECT * FROM rm_vendor_prices
                WHERE raw_material_id = ?
                ORDER BY price ASC, id DESC
                LIMIT 1
                """,
                (raw_material_id,),
            )
            row = await cursor.fetchone()
            return self._row_to_vendor_price(row) if row else None

    async def list_vendor_prices(
        self, raw_material_id: int, limit: int = 100
    ) -> list[VendorPrice]:
        async with get_connection() as conn:
            cursor = await conn.execute(
                """
                SELECT * FROM rm_vendor_prices
                WHERE raw_material_id = ?
                ORDER BY id DESC
                LIMIT ?
                """,
                (raw_material_id, limit),
            )
            rows = await cursor.fetchall()
            return [self._row_to_vendor_price(row) for row in rows]

    async def add_price_log(self, log: PriceChangeLog) -> PriceChangeLog:
        async with get_transaction() as conn:
            cursor = await conn.execute(
                """
                INSERT INTO rm_price_logs (
                    raw_material_id, vendor_id, vendor_name, old_price, new_price,
                    quantity, unit_id, unit_name, changed_at, changed_by
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    log.raw_material_id,
                    log.vendor_id,
                    log.vendor_name,
                    log.old_price,
                    log.new_price,
                    log.quantity,
                    log.unit_id,
                    log.unit_name,
                    log.changed_at.isoformat(),
                    log.changed_by,
                ),
            )
            return log.model_copy(update={"id": cursor.lastrowid})

    async def list_price_logs(
        self, raw_material_id: int, limit: int = 100
    ) -> list[PriceChangeLog]:
        async with get_connection() as conn:
            cursor = await conn.execute(
                """
                SELECT * FROM rm_price_logs
                WHERE raw_material_id = ?
                ORDER BY changed_at DESC, id DESC
                LIMIT ?
                """,
                (raw_material_id, limit),
            )
            rows = await cursor.fetchall()
            return [self._row_to_price_log(row) for row in rows]

    async def delete_price_log(self, raw_material_id: int, log_id: int) -> bool:
        async with get_transaction() as conn:
            cursor = await conn.execute(
                "DELETE FROM rm_price_logs WHERE id = ? AND raw_material_id = ?",
                (log_id, raw_material_id),
            )
            return cursor.rowcount > 0

    @staticmethod
    def _row_to_vendor_price(row: aiosqlite.Row) -> VendorPrice:
        return VendorPrice(
            id=row["id"],
            raw_material_id=row["raw_material_id"],
            vendor_id=row["vendor_id"],
            vendor_name=row["vendor_name"],
            quantity=row["quantity"],
            unit_id=row["unit_id"],
            unit_name=row["unit_name"],
            price=row["price"],
            added_at=datetime.fromisoformat(row["added_at"]),
            created_by=row["created_by"],
        )

    @staticmethod
    def _row_to_price_log(row: aiosqlite.Row) -> PriceChangeLog:
        return PriceChangeLog(
            id=row["id"],
            raw_material_id=row["raw_material_id"],
            vendor_id=row["vendor_id"],
            vendor_name=row["vendor_name"],
            old_price=row["old_price"],
            new_price=row["new_price"],
            quantity=row["quantity"],
            unit_id=row["unit_id"],
            unit_name=row["unit_name"],
            changed_at=datetime.fromisoformat(row["changed_at"]),
            changed_by=row["changed_by"],
        )
