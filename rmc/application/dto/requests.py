"""Request DTOs for API endpoints.

Pydantic v2 models for API request validation.
These are the ONLY contracts between API and use cases.
"""

from pydantic import BaseModel, Field

from rmc.core.entities.recipe import SnapshotReason


class CreateRawMaterialRequest(BaseModel):
    """Request to register a raw material."""

    name: str = Field(..., min_length=1, description="Raw material name")
    code: str | None = Field(
        default=None,
        description="Explicit code; generated as RMnnn when omitted",
        examples=["RM001"],
    )
    category_id: str | None = None
    category_name: str | None = None
    sub_category_id: str | None = None
    sub_category_name: str | None = None
    unit_id: str | None = Field(default=None, examples=["kg"])
    unit_name: str | None = Field(default=None, examples=["Kilogram"])
    hsn_code: str | None = Field(default=None, description="HSN tax classification code")
    created_by: str | None = None


class AddVendorPriceRequest(BaseModel):
    """Request to record a vendor quote for a raw material."""

    vendor_id: str = Field(..., min_length=1, description="Vendor identifier")
    vendor_name: str = Field(..., description="Vendor display name")
    quantity: float = Field(..., gt=0, description="Quoted quantity")
    price: float = Field(..., ge=0, description="Quoted price")
    unit_id: str | None = None
    unit_name: str | None = None
    actor: str | None = Field(default=None, description="User recording the quote")


class RecipeItemRequest(BaseModel):
    """One raw material line of a recipe."""

    raw_material_id: int = Field(..., description="Referenced raw material ID")
    raw_material_name: str = ""
    raw_material_code: str = ""
    quantity: float = Field(..., gt=0)
    unit_id: str | None = None
    unit_name: str | None = None
    price: float = Field(..., ge=0, description="Unit price used for costing")
    vendor_id: str | None = None
    vendor_name: str | None = None
    moisture_percentage: float | None = None
    yield_quantity: float | None = None


class CreateRecipeRequest(BaseModel):
    """Request to create a recipe with its items."""

    name: str = Field(..., min_length=1)
    code: str | None = Field(
        default=None,
        description="Explicit code; generated as RESnnn when omitted",
        examples=["RES001"],
    )
    batch_size: float = Field(..., gt=0)
    unit_id: str = Field(..., examples=["kg"])
    unit_name: str | None = None
    yield_quantity: float | None = Field(
        default=None, description="Output quantity; divisor of price_per_unit"
    )
    moisture_percentage: float | None = None
    items: list[RecipeItemRequest] = Field(default_factory=list)
    actor: str | None = None


class UpdateRecipeRequest(BaseModel):
    """Full recipe edit. The item list replaces the stored one."""

    name: str = Field(..., min_length=1)
    batch_size: float = Field(..., gt=0)
    unit_id: str
    unit_name: str | None = None
    yield_quantity: float | None = None
    moisture_percentage: float | None = None
    items: list[RecipeItemRequest] = Field(default_factory=list)
    actor: str | None = None


class TakeSnapshotRequest(BaseModel):
    """Request for an on-demand history snapshot."""

    reason: SnapshotReason = Field(default=SnapshotReason.PRICE_CHANGE)
    actor: str | None = None
