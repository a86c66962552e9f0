"""Pytest configuration and fixtures."""

from collections.abc import AsyncGenerator
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from httpx import ASGITransport, AsyncClient

from rmc.application.services import reset_services
from rmc.core.entities import RawMaterial, Recipe, RecipeItem


@pytest.fixture
def temp_db_path(tmp_path: Path) -> Path:
    """Create a temporary database path."""
    return tmp_path / "test.db"


@pytest.fixture
def mock_settings(temp_db_path: Path):
    """Mock settings with temp database path."""
    mock = MagicMock()
    mock.storage.db_path = temp_db_path
    mock.storage.pool_size = 1
    mock.storage.busy_timeout = 5000
    return mock


@pytest.fixture
async def sqlite_db(temp_db_path: Path, mock_settings) -> AsyncGenerator[Path, None]:
    """Migrated temporary database wired into the global connection pool."""
    import rmc.infrastructure.storage.sqlite.connection as conn_module
    from rmc.infrastructure.storage.sqlite.migrations import run_migrations

    await run_migrations(temp_db_path, create_backup_before=False)

    conn_module._pool = None
    reset_services()
    with patch.object(conn_module, "get_settings", return_value=mock_settings):
        try:
            yield temp_db_path
        finally:
            await conn_module.close_pool()
            reset_services()


@pytest.fixture
async def async_client() -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client bound to the app (no lifespan)."""
    from rmc.api.main import app

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def sugar() -> RawMaterial:
    return RawMaterial(
        id=1,
        code="RM001",
        name="Sugar",
        unit_id="kg",
        unit_name="Kilogram",
        last_added_price=40.0,
        last_vendor_name="Acme Foods",
    )


@pytest.fixture
def ladoo() -> Recipe:
    return Recipe(
        id=10,
        code="RES001",
        name="Ladoo",
        batch_size=10,
        unit_id="kg",
        unit_name="Kilogram",
        yield_quantity=8,
        total_raw_material_cost=80.0,
        price_per_unit=10.0,
    )


@pytest.fixture
def ladoo_items() -> list[RecipeItem]:
    return [
        RecipeItem(
            id=100,
            recipe_id=10,
            raw_material_id=1,
            raw_material_name="Sugar",
            raw_material_code="RM001",
            quantity=2,
            unit_id="kg",
            price=40.0,
            total_price=80.0,
        )
    ]
