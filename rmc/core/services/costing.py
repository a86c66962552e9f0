"""
Recipe cost aggregation.

Pure functions: derive item totals and recipe aggregates from line items.
Currency values are rounded half-up to 2 decimal places where they are
computed, using Decimal so float error never compounds across recomputation.

Two divisors exist for ``price_per_unit``:
- manual create/edit divides by the recipe's yield
- price propagation divides by the recipe's batch size
Both are kept distinct; see ``manual_edit_divisor`` and
``propagation_divisor``.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from rmc.core.entities.recipe import Recipe, RecipeItem

CENT = Decimal("0.01")


def _to_decimal(value: float | int | Decimal | None) -> Decimal:
    if value is None:
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def round2(value: float | int | Decimal | None) -> float:
    """
    Round a currency value half-up to 2 decimal places.

    Examples:
        >>> round2(2.675)
        2.68
        >>> round2(None)
        0.0
    """
    return float(_to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP))


def line_total(quantity: float | None, price: float | None) -> float:
    """Total price of a recipe line: round2(quantity * price)."""
    return round2(_to_decimal(quantity) * _to_decimal(price))


@dataclass(frozen=True)
class RecipeTotals:
    """Derived recipe aggregates."""

    total_raw_material_cost: float
    price_per_unit: float


def recompute(items: Iterable[RecipeItem], divisor: float | None) -> RecipeTotals:
    """
    Derive a recipe's total cost and unit price from its items.

    A divisor that is missing, zero or negative yields a unit price of 0.
    """
    total = sum((_to_decimal(item.total_price) for item in items), Decimal("0"))
    total_cost = total.quantize(CENT, rounding=ROUND_HALF_UP)

    if divisor is None or divisor <= 0:
        return RecipeTotals(total_raw_material_cost=float(total_cost), price_per_unit=0.0)

    price_per_unit = round2(total_cost / _to_decimal(divisor))
    return RecipeTotals(
        total_raw_material_cost=float(total_cost),
        price_per_unit=price_per_unit,
    )


def manual_edit_divisor(recipe: Recipe) -> float:
    """Divisor used on manual create and edit: the recipe's yield."""
    return recipe.yield_quantity or 0.0


def propagation_divisor(recipe: Recipe) -> float:
    """Divisor used when a raw material price change propagates: the batch size."""
    return recipe.batch_size or 0.0


def find_aggregate_drift(recipe: Recipe, items: list[RecipeItem]) -> list[str]:
    """
    List the persisted costing values that disagree with a recomputation.

    ``price_per_unit`` is accepted if it matches either divisor, since the
    last writer may have been a manual edit or a propagation.
    """
    drift: list[str] = []

    for item in items:
        if item.total_price != line_total(item.quantity, item.price):
            drift.append(f"item:{item.raw_material_id}:total_price")

    expected_items = [
        item.model_copy(update={"total_price": line_total(item.quantity, item.price)})
        for item in items
    ]
    by_yield = recompute(expected_items, manual_edit_divisor(recipe))
    by_batch = recompute(expected_items, propagation_divisor(recipe))

    if recipe.total_raw_material_cost != by_yield.total_raw_material_cost:
        drift.append("total_raw_material_cost")
    elif recipe.price_per_unit not in (by_yield.price_per_unit, by_batch.price_per_unit):
        drift.append("price_per_unit")

    return drift
