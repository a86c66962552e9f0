"""
SQLite implementation of raw material storage.
"""

from datetime import datetime

import aiosqlite

from rmc.config import get_logger
from rmc.core.entities.raw_material import RawMaterial, utc_now
from rmc.core.interfaces.raw_material_store import IRawMaterialStore
from rmc.infrastructure.storage.sqlite.connection import get_connection, get_transaction
from rmc.infrastructure.storage.sqlite.counters import RAW_MATERIAL_COUNTER, next_code

logger = get_logger(__name__)


def _parse_datetime(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value else None


class SQLiteRawMaterialStore(IRawMaterialStore):
    """SQLite implementation of raw material records."""

    async def create_raw_material(self, raw_material: RawMaterial) -> RawMaterial:
        """Create a raw material, generating its code when none is given."""
        now = utc_now()
        async with get_transaction() as conn:
            code = raw_material.code or await next_code(conn, RAW_MATERIAL_COUNTER, "RM")
            cursor = await conn.execute(
                """
                INSERT INTO raw_materials (
                    code, name, category_id, category_name, sub_category_id,
                    sub_category_name, unit_id, unit_name, hsn_code,
                    last_added_price, last_vendor_name, last_price_date,
                    created_by, created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    code,
                    raw_material.name,
                    raw_material.category_id,
                    raw_material.category_name,
                    raw_material.sub_category_id,
                    raw_material.sub_category_name,
                    raw_material.unit_id,
                    raw_material.unit_name,
                    raw_material.hsn_code,
                    raw_material.last_added_price,
                    raw_material.last_vendor_name,
                    raw_material.last_price_date.isoformat()
                    if raw_material.last_price_date
                    else None,
                    raw_material.created_by,
                    raw_material.created_at.isoformat(),
                    now.isoformat(),
                ),
            )
            created = raw_material.model_copy(
                update={"id": cursor.lastrowid, "code": code, "updated_at": now}
            )
            logger.info(
                "raw_material_created",
                raw_material_id=created.id,
                code=code,
                name=created.name,
            )
            return created

    async def get_raw_material(self, raw_material_id: int) -> RawMaterial | None:
        """Get raw material by ID."""
        async with get_connection() as conn:
            cursor = await conn.execute(
                "SELECT * FROM raw_materials WHERE id = ?", (raw_material_id,)
            )
            row = await cursor.fetchone()
            return self._row_to_raw_material(row) if row else None

    async def list_raw_materials(
        self, limit: int = 100, offset: int = 0
    ) -> list[RawMaterial]:
        """List raw materials, most recently updated first."""
        async with get_connection() as conn:
            cursor = await conn.execute(
                """
                SELECT * FROM raw_materials
                ORDER BY updated_at DESC, id DESC
                LIMIT ? OFFSET ?
                """,
                (limit, offset),
            )
            rows = await cursor.fetchall()
            return [self._row_to_raw_material(row) for row in rows]

    async def update_price_pointer(
        self,
        raw_material_id: int,
        price: float,
        vendor_name: str,
        price_date: datetime,
    ) -> RawMaterial | None:
        """Overwrite the last recorded price pointer."""
        async with get_transaction() as conn:
            cursor = await conn.execute(
                """
                UPDATE raw_materials
                SET last_added_price = ?, last_vendor_name = ?,
                    last_price_date = ?, updated_at = ?
                WHERE id = ?
                """,
                (
                    price,
                    vendor_name,
                    price_date.isoformat(),
                    utc_now().isoformat(),
                    raw_material_id,
                ),
            )
            if cursor.rowcount == 0:
                return None

            cursor = await conn.execute(
                "SELECT * FROM raw_materials WHERE id = ?", (raw_material_id,)
            )
            row = await cursor.fetchone()
            logger.debug(
                "price_pointer_updated",
                raw_material_id=raw_material_id,
                price=price,
                vendor_name=vendor_name,
            )
            return self._row_to_raw_material(row)

    async def delete_raw_material(self, raw_material_id: int) -> bool:
        """Delete a raw material. Vendor prices and price logs cascade."""
        async with get_transaction() as conn:
            cursor = await conn.execute(
                "DELETE FROM raw_materials WHERE id = ?", (raw_material_id,)
            )
            deleted = cursor.rowcount > 0
            if deleted:
                logger.info("raw_material_deleted", raw_material_id=raw_material_id)
            return deleted

    @staticmethod
    def _row_to_raw_material(row: aiosqlite.Row) -> RawMaterial:
        return RawMaterial(
            id=row["id"],
            code=row["code"],
            name=row["name"],
            category_id=row["category_id"],
            category_name=row["category_name"],
            sub_category_id=row["sub_category_id"],
            sub_category_name=row["sub_category_name"],
            unit_id=row["unit_id"],
            unit_name=row["unit_name"],
            hsn_code=row["hsn_code"],
            last_added_price=row["last_added_price"],
            last_vendor_name=row["last_vendor_name"],
            last_price_date=_parse_datetime(row["last_price_date"]),
            created_by=row["created_by"],
            created_at=datetime.fromisoformat(row["created_at"]),
            updated_at=datetime.fromisoformat(row["updated_at"]),
        )
