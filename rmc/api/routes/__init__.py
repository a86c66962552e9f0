"""API route modules."""

from rmc.api.routes.health import router as health_router
from rmc.api.routes.raw_materials import router as raw_materials_router
from rmc.api.routes.recipes import router as recipes_router

__all__ = [
    "health_router",
    "raw_materials_router",
    "recipes_router",
]
