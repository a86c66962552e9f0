"""API tests for health endpoints."""

from httpx import AsyncClient

from rmc import __version__


class TestHealthAPI:
    async def test_root_health(self, async_client: AsyncClient):
        response = await async_client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy", "version": __version__}

    async def test_api_health(self, async_client: AsyncClient):
        response = await async_client.get("/api/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["uptime_seconds"] >= 0
        assert data["database"] is None

    async def test_request_id_echoed(self, async_client: AsyncClient):
        response = await async_client.get("/api/health", headers={"X-Request-ID": "abc123"})

        assert response.headers["X-Request-ID"] == "abc123"
        assert response.headers["X-Response-Time"].endswith("ms")

    async def test_db_health_reports_schema(self, sqlite_db, async_client: AsyncClient):
        response = await async_client.get("/api/health/db")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["database"]["available"] is True
        assert data["database"]["name"].startswith("sqlite (schema v")

    async def test_unknown_route_standard_error(self, async_client: AsyncClient):
        response = await async_client.get("/api/nope")

        assert response.status_code == 404
        data = response.json()
        assert data["error_code"] == "NOT_FOUND"
        assert data["path"] == "/api/nope"
