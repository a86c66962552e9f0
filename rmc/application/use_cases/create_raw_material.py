"""Create Raw Material Use Case."""

from rmc.application.dto.requests import CreateRawMaterialRequest
from rmc.application.dto.responses import RawMaterialResponse
from rmc.config import get_logger
from rmc.core.entities.raw_material import RawMaterial
from rmc.core.interfaces.raw_material_store import IRawMaterialStore

logger = get_logger(__name__)


class CreateRawMaterialUseCase:
    """Register a raw material. Its price pointer starts empty."""

    def __init__(self, raw_material_store: IRawMaterialStore | None = None):
        self._store = raw_material_store

    async def _get_store(self) -> IRawMaterialStore:
        if self._store is None:
            from rmc.infrastructure.storage.sqlite import get_raw_material_store

            self._store = await get_raw_material_store()
        return self._store

    async def execute(self, request: CreateRawMaterialRequest) -> RawMaterial:
        """Execute create raw material use case."""
        store = await self._get_store()
        raw_material = await store.create_raw_material(
            RawMaterial(
                code=request.code or "",
                name=request.name.strip(),
                category_id=request.category_id,
                category_name=request.category_name,
                sub_category_id=request.sub_category_id,
                sub_category_name=request.sub_category_name,
                unit_id=request.unit_id,
                unit_name=request.unit_name,
                hsn_code=request.hsn_code,
                created_by=request.created_by,
            )
        )
        logger.info(
            "create_raw_material_complete",
            raw_material_id=raw_material.id,
            code=raw_material.code,
        )
        return raw_material

    def to_response(self, raw_material: RawMaterial) -> RawMaterialResponse:
        """Convert result to API response."""
        return RawMaterialResponse.model_validate(raw_material)
