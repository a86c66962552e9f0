"""
FastAPI entry point for the costing service.

``create_app()`` builds the application; ``app`` is the instance uvicorn
serves (``uvicorn rmc.api.main:app`` or ``python manage.py serve``).
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from rmc import __version__
from rmc.api.middleware import ErrorHandlerMiddleware, LoggingMiddleware
from rmc.api.middleware.error_handler import setup_exception_handlers
from rmc.api.routes import health_router, raw_materials_router, recipes_router
from rmc.config import Settings, configure_logging, get_logger, get_settings

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Migrate and open the database before serving; close it afterwards."""
    from rmc.infrastructure.storage.sqlite import close_pool, get_pool
    from rmc.infrastructure.storage.sqlite.migrations import run_migrations

    configure_logging()
    storage = get_settings().storage
    logger.info("rmc_starting", version=__version__, db_path=str(storage.db_path))

    applied = await run_migrations()
    failed = [result.version for result in applied if not result.success]
    if failed:
        logger.error("rmc_schema_incomplete", failed=failed)
        raise RuntimeError("database migration failed, see migration_failed events")
    await get_pool()

    logger.info("rmc_ready", migrations_applied=len(applied))
    try:
        yield
    finally:
        await close_pool()
        logger.info("rmc_stopped")


def _add_middleware(app: FastAPI, settings: Settings) -> None:
    # Starlette runs the last added middleware first
    app.add_middleware(LoggingMiddleware)
    app.add_middleware(ErrorHandlerMiddleware)
    if settings.api.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.api.cors_origins,
            allow_methods=["GET", "POST", "PUT", "DELETE"],
            allow_headers=["*"],
        )


def create_app() -> FastAPI:
    """Build the costing API with its middleware, error handlers and routers."""
    settings = get_settings()
    debug = settings.api.debug

    app = FastAPI(
        title="RMC Costing API",
        description="Raw material price ledger and recipe costing consistency",
        version=__version__,
        docs_url="/docs" if debug else None,
        redoc_url="/redoc" if debug else None,
        lifespan=lifespan,
    )

    _add_middleware(app, settings)
    setup_exception_handlers(app)

    for router in (health_router, raw_materials_router, recipes_router):
        app.include_router(router)

    @app.get("/health", include_in_schema=False)
    async def root_health() -> dict[str, str]:
        """Liveness probe; does not touch the database."""
        return {"status": "healthy", "version": __version__}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    api = get_settings().api
    uvicorn.run("rmc.api.main:app", host=api.host, port=api.port, reload=api.debug)
