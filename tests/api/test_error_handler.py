"""Tests for error response rendering."""

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from pydantic import BaseModel, Field

from rmc.api.middleware import ErrorHandlerMiddleware, LoggingMiddleware
from rmc.api.middleware.error_handler import setup_exception_handlers
from rmc.core.exceptions import (
    ConsistencyError,
    DatabaseError,
    RecipeNotFoundError,
    RMCError,
    ValidationError,
)


class Quote(BaseModel):
    price: float = Field(..., ge=0)


def _build_app() -> FastAPI:
    app = FastAPI()
    app.add_middleware(LoggingMiddleware)
    app.add_middleware(ErrorHandlerMiddleware)
    setup_exception_handlers(app)

    @app.get("/recipes/{recipe_id}")
    async def missing_recipe(recipe_id: int):
        raise RecipeNotFoundError(recipe_id)

    @app.get("/stale")
    async def stale():
        raise ConsistencyError(4, ["price_per_unit"])

    @app.get("/invalid")
    async def invalid():
        raise ValidationError("quantity", "must be positive", -1)

    @app.get("/locked")
    async def locked():
        raise DatabaseError("query", "database is locked")

    @app.get("/generic")
    async def generic():
        raise RMCError("something odd")

    @app.get("/boom")
    async def boom():
        raise RuntimeError("unexpected")

    @app.post("/quotes")
    async def quote(body: Quote):
        return body

    return app


@pytest.fixture
async def client():
    transport = ASGITransport(app=_build_app())
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


class TestDomainErrors:
    @pytest.mark.parametrize(
        ("path", "status", "error_code"),
        [
            ("/recipes/9", 404, "RECIPE_NOT_FOUND"),
            ("/stale", 409, "CONSISTENCY_ERROR"),
            ("/invalid", 400, "VALIDATION_ERROR"),
            ("/locked", 503, "DATABASE_ERROR"),
            ("/generic", 500, "RMCError"),
        ],
    )
    async def test_status_mapping(self, client, path, status, error_code):
        response = await client.get(path)

        assert response.status_code == status
        data = response.json()
        assert data["error_code"] == error_code
        assert data["path"] == path

    async def test_details_rendered(self, client):
        data = (await client.get("/stale")).json()
        assert "recipe_id=4" in data["detail"]
        assert "price_per_unit" in data["detail"]
        assert data["hint"]

    async def test_no_details_no_detail(self, client):
        data = (await client.get("/generic")).json()
        assert data["detail"] is None
        assert data["hint"] is None


class TestFrameworkErrors:
    async def test_unhandled_exception_is_500(self, client):
        response = await client.get("/boom")

        assert response.status_code == 500
        data = response.json()
        assert data["error_code"] == "INTERNAL_ERROR"
        assert "unexpected" not in data["message"]

    async def test_body_validation_is_422(self, client):
        response = await client.post("/quotes", json={"price": -5})

        assert response.status_code == 422
        data = response.json()
        assert data["error_code"] == "VALIDATION_ERROR"
        assert "body.price" in data["detail"]

    async def test_method_not_allowed(self, client):
        response = await client.delete("/stale")

        assert response.status_code == 405
        assert response.json()["error_code"] == "METHOD_NOT_ALLOWED"
