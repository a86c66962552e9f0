"""
Abstract interfaces for recipe, recipe log and recipe history storage.
"""

from abc import ABC, abstractmethod

from rmc.core.entities.recipe import (
    Recipe,
    RecipeChangeLog,
    RecipeHistorySnapshot,
    RecipeItem,
)


class IRecipeStore(ABC):
    """Interface for recipes and their line items."""

    @abstractmethod
    async def create_recipe(
        self, recipe: Recipe, items: list[RecipeItem]
    ) -> tuple[Recipe, list[RecipeItem]]:
        """Create a recipe with its items, assigning the next ``RESnnn`` code when empty."""

    @abstractmethod
    async def get_recipe(self, recipe_id: int) -> Recipe | None:
        """Get recipe by ID."""

    @abstractmethod
    async def list_recipes(self, limit: int = 100, offset: int = 0) -> list[Recipe]:
        """List recipes, most recently updated first."""

    @abstractmethod
    async def get_items(self, recipe_id: int) -> list[RecipeItem]:
        """Get the items of a recipe in insertion order."""

    @abstractmethod
    async def find_items_by_raw_material(self, raw_material_id: int) -> list[RecipeItem]:
        """Get every recipe item referencing a raw material."""

    @abstractmethod
    async def save_costing(self, recipe: Recipe, items: list[RecipeItem]) -> Recipe:
        """
        Persist item prices/totals and the recipe aggregates in one transaction.

        Items must already exist; only price and total_price are written.
        """

    @abstractmethod
    async def replace_recipe(
        self, recipe: Recipe, items: list[RecipeItem]
    ) -> tuple[Recipe, list[RecipeItem]]:
        """Update recipe fields and replace its full item list in one transaction."""

    @abstractmethod
    async def delete_recipe(self, recipe_id: int) -> bool:
        """Delete a recipe with its items, history and logs."""


class IRecipeLogStore(ABC):
    """Interface for the append-only recipe change log."""

    @abstractmethod
    async def add_logs(self, logs: list[RecipeChangeLog]) -> list[RecipeChangeLog]:
        """Append log entries. Returns copies carrying the new IDs."""

    @abstractmethod
    async def list_logs(
        self,
        recipe_id: int | None = None,
        raw_material_id: int | None = None,
        limit: int = 200,
    ) -> list[RecipeChangeLog]:
        """Logs filtered by recipe and/or raw material, newest first."""

    @abstractmethod
    async def delete_log(self, log_id: int, recipe_id: int | None = None) -> bool:
        """Delete one log entry."""


class IRecipeHistoryStore(ABC):
    """Interface for immutable recipe history snapshots."""

    @abstractmethod
    async def add_snapshot(self, snapshot: RecipeHistorySnapshot) -> RecipeHistorySnapshot:
        """Append a snapshot. Returns a copy carrying the new ID."""

    @abstractmethod
    async def get_snapshot(self, snapshot_id: int) -> RecipeHistorySnapshot | None:
        """Get snapshot by ID."""

    @abstractmethod
    async def list_snapshots(
        self, recipe_id: int, limit: int = 100
    ) -> list[RecipeHistorySnapshot]:
        """Snapshots of a recipe, newest first."""

    @abstractmethod
    async def delete_snapshot(self, recipe_id: int, snapshot_id: int) -> bool:
        """Delete one snapshot of a recipe."""
