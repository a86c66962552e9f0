"""
SQLite implementation of recipe storage.

A recipe and its items are always written together in one transaction.
"""

from datetime import datetime

import aiosqlite

from rmc.config import get_logger
from rmc.core.entities.recipe import Recipe, RecipeItem
from rmc.core.exceptions import RecipeNotFoundError
from rmc.core.interfaces.recipe_store import IRecipeStore
from rmc.infrastructure.storage.sqlite.connection import get_connection, get_transaction
from rmc.infrastructure.storage.sqlite.counters import RECIPE_COUNTER, next_code

logger = get_logger(__name__)


async def _insert_items(
    conn: aiosqlite.Connection, recipe_id: int, items: list[RecipeItem]
) -> list[RecipeItem]:
    saved = []
    for item in items:
        cursor = await conn.execute(
            """
            INSERT INTO recipe_items (
                recipe_id, raw_material_id, raw_material_name, raw_material_code,
                quantity, unit_id, unit_name, price, vendor_id, vendor_name,
                moisture_percentage, yield_quantity, total_price
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                recipe_id,
                item.raw_material_id,
                item.raw_material_name,
                item.raw_material_code,
                item.quantity,
                item.unit_id,
                item.unit_name,
                item.price,
                item.vendor_id,
                item.vendor_name,
                item.moisture_percentage,
                item.yield_quantity,
                item.total_price,
            ),
        )
        saved.append(item.model_copy(update={"id": cursor.lastrowid, "recipe_id": recipe_id}))
    return saved


class SQLiteRecipeStore(IRecipeStore):
    """SQLite implementation of recipes and recipe items."""

    async def create_recipe(
        self, recipe: Recipe, items: list[RecipeItem]
    ) -> tuple[Recipe, list[RecipeItem]]:
        """Create a recipe with its items, generating its code when none is given."""
        async with get_transaction() as conn:
            code = recipe.code or await next_code(conn, RECIPE_COUNTER, "RES")
            cursor = await conn.execute(
                """
                INSERT INTO recipes (
                    code, name, batch_size, unit_id, unit_name, yield_quantity,
                    moisture_percentage, total_raw_material_cost, price_per_unit,
                    created_by, created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    code,
                    recipe.name,
                    recipe.batch_size,
                    recipe.unit_id,
                    recipe.unit_name,
                    recipe.yield_quantity,
                    recipe.moisture_percentage,
                    recipe.total_raw_material_cost,
                    recipe.price_per_unit,
                    recipe.created_by,
                    recipe.created_at.isoformat(),
                    recipe.updated_at.isoformat(),
                ),
            )
            created = recipe.model_copy(update={"id": cursor.lastrowid, "code": code})
            saved_items = await _insert_items(conn, created.id, items)

            logger.info(
                "recipe_created",
                recipe_id=created.id,
                code=code,
                items=len(saved_items),
            )
            return created, saved_items

    async def get_recipe(self, recipe_id: int) -> Recipe | None:
        """Get recipe by ID."""
        async with get_connection() as conn:
            cursor = await conn.execute("SELECT * FROM recipes WHERE id = ?", (recipe_id,))
            row = await cursor.fetchone()
            return self._row_to_recipe(row) if row else None

    async def list_recipes(self, limit: int = 100, offset: int = 0) -> list[Recipe]:
        async with get_connection() as conn:
            cursor = await conn.execute(
                """
                SELECT * FROM recipes
                ORDER BY updated_at DESC, id DESC
                LIMIT ? OFFSET ?
                """,
                (limit, offset),
            )
            rows = await cursor.fetchall()
            return [self._row_to_recipe(row) for row in rows]

    async def get_items(self, recipe_id: int) -> list[RecipeItem]:
        async with get_connection() as conn:
            cursor = await conn.execute(
                "SELECT * FROM recipe_items WHERE recipe_id = ? ORDER BY id",
                (recipe_id,),
            )
            rows = await cursor.fetchall()
            return [self._row_to_item(row) for row in rows]

    async def find_items_by_raw_material(self, raw_material_id: int) -> list[RecipeItem]:
        async with get_connection() as conn:
            cursor = await conn.execute(
                """
                SELECT * FROM recipe_items
                WHERE raw_material_id = ?
                ORDER BY recipe_id, id
                """,
                (raw_material_id,),
            )
            rows = await cursor.fetchall()
            return [self._row_to_item(row) for row in rows]

    async def save_costing(self, recipe: Recipe, items: list[RecipeItem]) -> Recipe:
        """Persist item prices/totals and recipe aggregates together."""
        async with get_transaction() as conn:
            for item in items:
                await conn.execute(
                    """
                    UPDATE recipe_items SET price = ?, total_price = ?
                    WHERE id = ? AND recipe_id = ?
                    """,
                    (item.price, item.total_price, item.id, recipe.id),
                )

            cursor = await conn.execute(
                """
                UPDATE recipes
                SET total_raw_material_cost = ?, price_per_unit = ?, updated_at = ?
                WHERE id = ?
                """,
                (
                    recipe.total_raw_material_cost,
                    recipe.price_per_unit,
                    recipe.updated_at.isoformat(),
                    recipe.id,
                ),
            )
            if cursor.rowcount == 0:
                raise RecipeNotFoundError(recipe.id)  # type: ignore[arg-type]

            logger.debug(
                "recipe_costing_saved",
                recipe_id=recipe.id,
                total_cost=recipe.total_raw_material_cost,
                price_per_unit=recipe.price_per_unit,
            )
            return recipe

    async def replace_recipe(
        self, recipe: Recipe, items: list[RecipeItem]
    ) -> tuple[Recipe, list[RecipeItem]]:
        """Update recipe fields and swap in a new item list."""
        async with get_transaction() as conn:
            cursor = await conn.execute(
                """
                UPDATE recipes
                SET name = ?, batch_size = ?, unit_id = ?, unit_name = ?,
                    yield_quantity = ?, moisture_percentage = ?,
                    total_raw_material_cost = ?, price_per_unit = ?, updated_at = ?
                WHERE id = ?
                """,
                (
                    recipe.name,
                    recipe.batch_size,
                    recipe.unit_id,
                    recipe.unit_name,
                    recipe.yield_quantity,
                    recipe.moisture_percentage,
                    recipe.total_raw_material_cost,
                    recipe.price_per_unit,
                    recipe.updated_at.isoformat(),
                    recipe.id,
                ),
            )
            if cursor.rowcount == 0:
                raise RecipeNotFoundError(recipe.id)  # type: ignore[arg-type]

            await conn.execute("DELETE FROM recipe_items WHERE recipe_id = ?", (recipe.id,))
            saved_items = await _insert_items(conn, recipe.id, items)  # type: ignore[arg-type]

            logger.info("recipe_replaced", recipe_id=recipe.id, items=len(saved_items))
            return recipe, saved_items

    async def delete_recipe(self, recipe_id: int) -> bool:
        """Delete a recipe. Items, history and logs cascade."""
        async with get_transaction() as conn:
            cursor = await conn.execute("DELETE FROM recipes WHERE id = ?", (recipe_id,))
            deleted = cursor.rowcount > 0
            if deleted:
                logger.info("recipe_deleted", recipe_id=recipe_id)
            return deleted

    @staticmethod
    def _row_to_recipe(row: aiosqlite.Row) -> Recipe:
        return Recipe(
            id=row["id"],
            code=row["code"],
            name=row["name"],
            batch_size=row["batch_size"],
            unit_id=row["unit_id"],
            unit_name=row["unit_name"],
            yield_quantity=row["yield_quantity"],
            moisture_percentage=row["moisture_percentage"],
            total_raw_material_cost=row["total_raw_material_cost"],
            price_per_unit=row["price_per_unit"],
            created_by=row["created_by"],
            created_at=datetime.fromisoformat(row["created_at"]),
            updated_at=datetime.fromisoformat(row["updated_at"]),
        )

    @staticmethod
    def _row_to_item(row: aiosqlite.Row) -> RecipeItem:
        return RecipeItem(
            id=row["id"],
            recipe_id=row["recipe_id"],
            raw_material_id=row["raw_material_id"],
            raw_material_name=row["raw_material_name"],
            raw_material_code=row["raw_material_code"],
            quantity=row["quantity"],
            unit_id=row["unit_id"],
            unit_name=row["unit_name"],
            price=row["price"],
            vendor_id=row["vendor_id"],
            vendor_name=row["vendor_name"],
            moisture_percentage=row["moisture_percentage"],
            yield_quantity=row["yield_quantity"],
            total_price=row["total_price"],
        )
