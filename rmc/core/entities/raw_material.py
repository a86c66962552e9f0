"""
Raw material and vendor price ledger entities.

A raw material carries a chronological pointer to the most recently recorded
vendor price. Ledger entries and price change logs are append-only.
"""

from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict, Field


def utc_now() -> datetime:
    return datetime.now(UTC)


class RawMaterial(BaseModel):
    """
    A purchasable input ingredient.

    ``last_added_price`` / ``last_vendor_name`` / ``last_price_date`` always
    describe the most recently recorded quote, not the cheapest one.
    """

    id: int | None = None
    code: str = ""
    name: str
    category_id: str | None = None
    category_name: str | None = None
    sub_category_id: str | None = None
    sub_category_name: str | None = None
    unit_id: str | None = None
    unit_name: str | None = None
    hsn_code: str | None = None
    last_added_price: float | None = None
    last_vendor_name: str | None = None
    last_price_date: datetime | None = None
    created_by: str | None = None
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @property
    def has_price(self) -> bool:
        return self.last_added_price is not None


class VendorPrice(BaseModel):
    """One vendor quote for a raw material. Never updated in place."""

    model_config = ConfigDict(frozen=True)

    id: int | None = None
    raw_material_id: int
    vendor_id: str
    vendor_name: str
    quantity: float
    unit_id: str | None = None
    unit_name: str | None = None
    price: float
    added_at: datetime = Field(default_factory=utc_now)
    created_by: str | None = None


class PriceChangeLog(BaseModel):
    """A vendor re-quoted a raw material at a different price."""

    model_config = ConfigDict(frozen=True)

    id: int | None = None
    raw_material_id: int
    vendor_id: str
    vendor_name: str
    old_price: float
    new_price: float
    quantity: float
    unit_id: str | None = None
    unit_name: str | None = None
    changed_at: datetime = Field(default_factory=utc_now)
    changed_by: str | None = None
