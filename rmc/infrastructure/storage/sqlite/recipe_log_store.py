"""
SQLite implementation of the recipe change log.

Old and new values are stored as JSON text so scalars and whole items
share one column.
"""

import json
from datetime import datetime
from typing import Any

import aiosqlite

from rmc.config import get_logger
from rmc.core.entities.recipe import ChangeField, RecipeChangeLog
from rmc.core.interfaces.recipe_store import IRecipeLogStore
from rmc.infrastructure.storage.sqlite.connection import get_connection, get_transaction

logger = get_logger(__name__)


def _dump(value: Any) -> str | None:
    return None if value is None else json.dumps(value, default=str)


def _load(raw: str | None) -> Any:
    return None if raw is None else json.loads(raw)


class SQLiteRecipeLogStore(IRecipeLogStore):
    """SQLite implementation of recipe change logs."""

    async def add_logs(self, logs: list[RecipeChangeLog]) -> list[RecipeChangeLog]:
        saved = []
        async with get_transaction() as conn:
            for log in logs:
                cursor = await conn.execute(
                    """
                    INSERT INTO recipe_logs (
                        recipe_id, recipe_code, recipe_item_id, raw_material_id,
                        field, old_value, new_value, changed_at, changed_by
                    ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        log.recipe_id,
                        log.recipe_code,
                        log.recipe_item_id,
                        log.raw_material_id,
                        log.field.value,
                        _dump(log.old_value),
                        _dump(log.new_value),
                        log.changed_at.isoformat(),
                        log.changed_by,
                    ),
                )
                saved.append(log.model_copy(update={"id": cursor.lastrowid}))
        logger.debug("recipe_logs_added", count=len(saved))
        return saved

    async def list_logs(
        self,
        recipe_id: int | None = None,
        raw_material_id: int | None = None,
        limit: int = 200,
    ) -> list[RecipeChangeLog]:
        conditions: list[str] = []
        params: list[Any] = []

        if recipe_id is not None:
            conditions.append("recipe_id = ?")
            params.append(recipe_id)

        if raw_material_id is not None:
            conditions.append("raw_material_id = ?")
            params.append(raw_material_id)

        where_clause = ""
        if conditions:
            where_clause = "WHERE " + " AND ".join(conditions)

        params.append(limit)

        async with get_connection() as conn:
            cursor = await conn.execute(
                f"""
                SELECT * FROM recipe_logs
                {where_clause}
                ORDER BY changed_at DESC, id DESC
                LIMIT ?
                """,
                params,
            )
            rows = await cursor.fetchall()
            return [self._row_to_log(row) for row in rows]

    async def delete_log(self, log_id: int, recipe_id: int | None = None) -> bool:
        async with get_transaction() as conn:
            if recipe_id is None:
                cursor = await conn.execute("DELETE FROM recipe_logs WHERE id = ?", (log_id,))
            else:
                cursor = await conn.execute(
                    "DELETE FROM recipe_logs WHERE id = ? AND recipe_id = ?",
                    (log_id, recipe_id),
                )
            return cursor.rowcount > 0

    @staticmethod
    def _row_to_log(row: aiosqlite.Row) -> RecipeChangeLog:
        return RecipeChangeLog(
            id=row["id"],
            recipe_id=row["recipe_id"],
            recipe_code=row["recipe_code"],
            recipe_item_id=row["recipe_item_id"],
            raw_material_id=row["raw_material_id"],
            field=ChangeField(row["field"]),
            old_value=_load(row["old_value"]),
            new_value=_load(row["new_value"]),
            changed_at=datetime.fromisoformat(row["changed_at"]),
            changed_by=row["changed_by"],
        )
