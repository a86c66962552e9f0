"""API tests for raw material and vendor price endpoints."""

from unittest.mock import AsyncMock

import pytest
from httpx import ASGITransport, AsyncClient

from rmc.api.dependencies import (
    get_add_vendor_price_use_case,
    get_audit_log,
    get_create_raw_material_use_case,
    get_ledger,
    get_propagator,
    get_rm_store,
    get_sync_latest_price_use_case,
)
from rmc.api.main import app
from rmc.application.use_cases import (
    AddVendorPriceUseCase,
    CreateRawMaterialUseCase,
    SyncLatestPriceUseCase,
)
from rmc.core.entities import PriceChangeLog, RawMaterial, VendorPrice
from rmc.core.exceptions import RawMaterialNotFoundError, VendorPriceNotFoundError
from rmc.core.services import (
    AuditLogService,
    CostPropagatorService,
    PriceLedgerService,
)
from rmc.core.services.cost_propagator import PropagationResult
from rmc.core.services.price_ledger import AddVendorPriceResult, SyncPriceResult

OVERRIDES = [
    get_rm_store,
    get_ledger,
    get_propagator,
    get_audit_log,
    get_create_raw_material_use_case,
    get_add_vendor_price_use_case,
    get_sync_latest_price_use_case,
]


def _quote(price: float, entry_id: int = 7, vendor_id: str = "V1") -> VendorPrice:
    return VendorPrice(
        id=entry_id,
        raw_material_id=1,
        vendor_id=vendor_id,
        vendor_name="Acme Foods",
        quantity=1,
        price=price,
    )


@pytest.fixture
def rm_store(sugar: RawMaterial):
    store = AsyncMock()
    store.get_raw_material.return_value = sugar
    store.create_raw_material.side_effect = lambda rm: rm.model_copy(
        update={"id": 2, "code": rm.code or "RM002"}
    )
    store.list_raw_materials.return_value = [sugar]
    store.delete_raw_material.return_value = True
    return store


@pytest.fixture
def ledger():
    return AsyncMock(spec=PriceLedgerService)


@pytest.fixture
def propagator():
    return AsyncMock(spec=CostPropagatorService)


@pytest.fixture
def audit_log():
    return AsyncMock(spec=AuditLogService)


@pytest.fixture
async def client(rm_store, ledger, propagator, audit_log):
    """Client with stores and services replaced by mocks."""
    app.dependency_overrides[get_rm_store] = lambda: rm_store
    app.dependency_overrides[get_ledger] = lambda: ledger
    app.dependency_overrides[get_propagator] = lambda: propagator
    app.dependency_overrides[get_audit_log] = lambda: audit_log
    app.dependency_overrides[get_create_raw_material_use_case] = (
        lambda: CreateRawMaterialUseCase(raw_material_store=rm_store)
    )
    app.dependency_overrides[get_add_vendor_price_use_case] = (
        lambda: AddVendorPriceUseCase(ledger=ledger)
    )
    app.dependency_overrides[get_sync_latest_price_use_case] = (
        lambda: SyncLatestPriceUseCase(ledger=ledger)
    )
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    for dependency in OVERRIDES:
        app.dependency_overrides.pop(dependency, None)


class TestRawMaterialCrud:
    async def test_create(self, client: AsyncClient, rm_store):
        response = await client.post(
            "/api/raw-materials", json={"name": "  Ghee ", "unit_id": "kg"}
        )

        assert response.status_code == 201
        data = response.json()
        assert data["id"] == 2
        assert data["code"] == "RM002"
        assert data["name"] == "Ghee"
        assert data["last_added_price"] is None

    async def test_create_requires_name(self, client: AsyncClient):
        response = await client.post("/api/raw-materials", json={"name": ""})

        assert response.status_code == 422
        assert response.json()["error_code"] == "VALIDATION_ERROR"

    async def test_get(self, client: AsyncClient):
        response = await client.get("/api/raw-materials/1")

        assert response.status_code == 200
        data = response.json()
        assert data["code"] == "RM001"
        assert data["last_added_price"] == 40.0
        assert data["last_vendor_name"] == "Acme Foods"

    async def test_get_missing(self, client: AsyncClient, rm_store):
        rm_store.get_raw_material.return_value = None

        response = await client.get("/api/raw-materials/99")

        assert response.status_code == 404
        data = response.json()
        assert data["error_code"] == "RAW_MATERIAL_NOT_FOUND"
        assert "99" in data["message"]
        assert data["hint"]

    async def test_list(self, client: AsyncClient, rm_store):
        response = await client.get("/api/raw-materials?limit=5&offset=10")

        assert response.status_code == 200
        assert response.json()["total"] == 1
        rm_store.list_raw_materials.assert_awaited_once_with(limit=5, offset=10)

    async def test_delete(self, client: AsyncClient, rm_store):
        response = await client.delete("/api/raw-materials/1")

        assert response.status_code == 204
        rm_store.delete_raw_material.assert_awaited_once_with(1)

    async def test_delete_missing(self, client: AsyncClient, rm_store):
        rm_store.delete_raw_material.return_value = False

        response = await client.delete("/api/raw-materials/1")

        assert response.status_code == 404


class TestVendorPriceAPI:
    async def test_add_vendor_price(self, client: AsyncClient, ledger):
        ledger.add_vendor_price.return_value = AddVendorPriceResult(
            vendor_price=_quote(50.0),
            price_changed=True,
            price_log=PriceChangeLog(
                id=3,
                raw_material_id=1,
                vendor_id="V1",
                vendor_name="Acme Foods",
                old_price=40.0,
                new_price=50.0,
                quantity=1,
            ),
            propagation=PropagationResult(
                updated_recipe_ids=[10], failed_recipe_ids={11: "DATABASE_ERROR"}
            ),
        )

        response = await client.post(
            "/api/raw-materials/1/vendor-prices",
            json={
                "vendor_id": "V1",
                "vendor_name": "Acme Foods",
                "quantity": 1,
                "price": 50,
                "actor": "alice",
            },
        )

        assert response.status_code == 201
        data = response.json()
        assert data["ledger_entry_id"] == 7
        assert data["price_changed"] is True
        assert data["price_log"]["old_price"] == 40.0
        assert data["updated_recipe_ids"] == [10]
        assert data["failed_recipe_ids"] == {"11": "DATABASE_ERROR"}
        assert ledger.add_vendor_price.await_args.kwargs["actor"] == "alice"

    async def test_add_vendor_price_defaults_actor(self, client: AsyncClient, ledger):
        ledger.add_vendor_price.return_value = AddVendorPriceResult(
            vendor_price=_quote(40.0),
            price_changed=False,
            price_log=None,
            propagation=PropagationResult(),
        )

        response = await client.post(
            "/api/raw-materials/1/vendor-prices",
            json={"vendor_id": "V1", "vendor_name": "Acme Foods", "quantity": 1, "price": 40},
        )

        assert response.status_code == 201
        assert response.json()["price_log"] is None
        assert ledger.add_vendor_price.await_args.kwargs["actor"] == "system"

    @pytest.mark.parametrize(
        "body",
        [
            {"vendor_id": "", "vendor_name": "A", "quantity": 1, "price": 1},
            {"vendor_id": "V1", "vendor_name": "A", "quantity": 0, "price": 1},
            {"vendor_id": "V1", "vendor_name": "A", "quantity": 1, "price": -1},
        ],
    )
    async def test_add_vendor_price_rejects_bad_input(
        self, client: AsyncClient, ledger, body
    ):
        response = await client.post("/api/raw-materials/1/vendor-prices", json=body)

        assert response.status_code == 422
        ledger.add_vendor_price.assert_not_awaited()

    async def test_add_vendor_price_unknown_raw_material(self, client: AsyncClient, ledger):
        ledger.add_vendor_price.side_effect = RawMaterialNotFoundError(99)

        response = await client.post(
            "/api/raw-materials/99/vendor-prices",
            json={"vendor_id": "V1", "vendor_name": "Acme", "quantity": 1, "price": 5},
        )

        assert response.status_code == 404
        assert response.json()["error_code"] == "RAW_MATERIAL_NOT_FOUND"

    async def test_list_vendor_prices(self, client: AsyncClient, ledger):
        ledger.list_vendor_prices.return_value = [_quote(50.0, 8), _quote(40.0, 7)]

        response = await client.get("/api/raw-materials/1/vendor-prices?limit=2")

        assert response.status_code == 200
        assert [entry["id"] for entry in response.json()] == [8, 7]
        ledger.list_vendor_prices.assert_awaited_once_with(1, limit=2)

    async def test_cheapest(self, client: AsyncClient, ledger):
        ledger.cheapest_vendor_price.return_value = _quote(30.0, 9, "V2")

        response = await client.get("/api/raw-materials/1/vendor-prices/cheapest")

        assert response.status_code == 200
        assert response.json()["price"] == 30.0

    async def test_cheapest_without_quotes(self, client: AsyncClient, ledger):
        ledger.cheapest_vendor_price.side_effect = VendorPriceNotFoundError(1)

        response = await client.get("/api/raw-materials/1/vendor-prices/cheapest")

        assert response.status_code == 404
        assert response.json()["error_code"] == "VENDOR_PRICE_NOT_FOUND"


class TestSyncAndRepairAPI:
    async def test_sync_no_change(self, client: AsyncClient, ledger):
        ledger.adopt_latest_price.return_value = SyncPriceResult(price=40.0, no_change=True)

        response = await client.post("/api/raw-materials/1/sync-price")

        assert response.status_code == 200
        data = response.json()
        assert data["no_change"] is True
        assert data["message"] == "No price change"
        ledger.adopt_latest_price.assert_awaited_once_with(1, "system")

    async def test_sync_updates(self, client: AsyncClient, ledger):
        ledger.adopt_latest_price.return_value = SyncPriceResult(
            price=50.0, propagation=PropagationResult(updated_recipe_ids=[10, 11])
        )

        response = await client.post("/api/raw-materials/1/sync-price?actor=bob")

        data = response.json()
        assert data["message"] == "Price synced, 2 recipe(s) updated"
        assert data["updated_recipe_ids"] == [10, 11]
        ledger.adopt_latest_price.assert_awaited_once_with(1, "bob")

    async def test_repair(self, client: AsyncClient, propagator):
        propagator.repair_raw_material.return_value = PropagationResult(
            repaired_recipe_ids=[10]
        )

        response = await client.post("/api/raw-materials/1/repair?actor=ops")

        assert response.status_code == 200
        data = response.json()
        assert data["raw_material_id"] == 1
        assert data["repaired_recipe_ids"] == [10]
        propagator.repair_raw_material.assert_awaited_once_with(1, "ops")


class TestPriceLogAPI:
    async def test_list_price_logs(self, client: AsyncClient, audit_log):
        audit_log.list_price_logs.return_value = []

        response = await client.get("/api/raw-materials/1/price-logs")

        assert response.status_code == 200
        assert response.json() == []
        audit_log.list_price_logs.assert_awaited_once_with(1, limit=100)

    async def test_delete_price_log(self, client: AsyncClient, audit_log):
        response = await client.delete("/api/raw-materials/1/price-logs/3")

        assert response.status_code == 204
        audit_log.delete_price_log.assert_awaited_once_with(1, 3)

    async def test_recipe_logs_by_raw_material(self, client: AsyncClient, audit_log):
        audit_log.list_recipe_logs.return_value = []

        response = await client.get("/api/raw-materials/1/recipe-logs")

        assert response.status_code == 200
        audit_log.list_recipe_logs.assert_awaited_once_with(raw_material_id=1, limit=200)
