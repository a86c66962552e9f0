"""
SQLite implementation of recipe history snapshots.

Snapshot items are serialized to JSON, so later edits to recipe_items
never reach a stored snapshot.
"""

import json
from datetime import datetime

import aiosqlite

from rmc.config import get_logger
from rmc.core.entities.recipe import RecipeHistorySnapshot, RecipeItem, SnapshotReason
from rmc.core.interfaces.recipe_store import IRecipeHistoryStore
from rmc.infrastructure.storage.sqlite.connection import get_connection, get_transaction

logger = get_logger(__name__)


class SQLiteRecipeHistoryStore(IRecipeHistoryStore):
    """SQLite implementation of recipe history snapshots."""

    async def add_snapshot(self, snapshot: RecipeHistorySnapshot) -> RecipeHistorySnapshot:
        items_json = json.dumps([item.model_dump(mode="json") for item in snapshot.items])
        async with get_transaction() as conn:
            cursor = await conn.execute(
                """
                INSERT INTO recipe_history (
                    recipe_id, recipe_code, recipe_name, taken_at,
                    total_raw_material_cost, price_per_unit, items_json,
                    reason, changed_by
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    snapshot.recipe_id,
                    snapshot.recipe_code,
                    snapshot.recipe_name,
                    snapshot.taken_at.isoformat(),
                    snapshot.total_raw_material_cost,
                    snapshot.price_per_unit,
                    items_json,
                    snapshot.reason.value,
                    snapshot.changed_by,
                ),
            )
            return snapshot.model_copy(update={"id": cursor.lastrowid})

    async def get_snapshot(self, snapshot_id: int) -> RecipeHistorySnapshot | None:
        async with get_connection() as conn:
            cursor = await conn.execute(
                "SELECT * FROM recipe_history WHERE id = ?", (snapshot_id,)
            )
            row = await cursor.fetchone()
            return self._row_to_snapshot(row) if row else None

    async def list_snapshots(
        self, recipe_id: int, limit: int = 100
    ) -> list[RecipeHistorySnapshot]:
        async with get_connection() as conn:
            cursor = await conn.execute(
                """
                SELECT * FROM recipe_history
                WHERE recipe_id = ?
                ORDER BY taken_at DESC, id DESC
                LIMIT ?
                """,
                (recipe_id, limit),
            )
            rows = await cursor.fetchall()
            return [self._row_to_snapshot(row) for row in rows]

    async def delete_snapshot(self, recipe_id: int, snapshot_id: int) -> bool:
        async with get_transaction() as conn:
            cursor = await conn.execute(
                "DELETE FROM recipe_history WHERE id = ? AND recipe_id = ?",
                (snapshot_id, recipe_id),
            )
            return cursor.rowcount > 0

    @staticmethod
    def _row_to_snapshot(row: aiosqlite.Row) -> RecipeHistorySnapshot:
        return RecipeHistorySnapshot(
            id=row["id"],
            recipe_id=row["recipe_id"],
            recipe_code=row["recipe_code"],
            recipe_name=row["recipe_name"],
            taken_at=datetime.fromisoformat(row["taken_at"]),
            total_raw_material_cost=row["total_raw_material_cost"],
            price_per_unit=row["price_per_unit"],
            items=tuple(RecipeItem(**item) for item in json.loads(row["items_json"])),
            reason=SnapshotReason(row["reason"]),
            changed_by=row["changed_by"],
        )
