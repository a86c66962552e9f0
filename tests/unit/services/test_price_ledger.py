"""Tests for PriceLedgerService."""

from unittest.mock import AsyncMock

import pytest

from rmc.core.entities import PriceChangeLog, VendorPrice
from rmc.core.exceptions import (
    RawMaterialNotFoundError,
    ValidationError,
    VendorPriceNotFoundError,
)
from rmc.core.services import PriceLedgerService, PropagationResult


def _quote(price: float, entry_id: int = 1, vendor_id: str = "V1") -> VendorPrice:
    return VendorPrice(
        id=entry_id,
        raw_material_id=1,
        vendor_id=vendor_id,
        vendor_name="Acme Foods",
        quantity=1,
        price=price,
    )


@pytest.fixture
def mock_rm_store(sugar):
    store = AsyncMock()
    store.get_raw_material.return_value = sugar
    return store


@pytest.fixture
def mock_vp_store():
    store = AsyncMock()
    store.get_latest_for_vendor.return_value = None
    store.add_vendor_price.side_effect = lambda entry: entry.model_copy(update={"id": 5})
    return store


@pytest.fixture
def mock_audit():
    audit = AsyncMock()
    audit.record_price_change.side_effect = lambda prev, entry, actor: PriceChangeLog(
        id=1,
        raw_material_id=entry.raw_material_id,
        vendor_id=entry.vendor_id,
        vendor_name=entry.vendor_name,
        old_price=prev.price,
        new_price=entry.price,
        quantity=entry.quantity,
        changed_by=actor,
    )
    return audit


@pytest.fixture
def mock_propagator():
    propagator = AsyncMock()
    propagator.propagate_price_change.return_value = PropagationResult(updated_recipe_ids=[10])
    return propagator


@pytest.fixture
def ledger(mock_rm_store, mock_vp_store, mock_audit, mock_propagator):
    return PriceLedgerService(mock_rm_store, mock_vp_store, mock_audit, mock_propagator)


class TestAddVendorPrice:
    async def test_first_quote_moves_pointer_without_log(
        self, ledger, mock_rm_store, mock_audit, mock_propagator
    ):
        result = await ledger.add_vendor_price(1, "V1", "Acme Foods", 1, 40.0, "alice")

        assert result.vendor_price.id == 5
        assert result.price_changed is False
        assert result.price_log is None
        mock_audit.record_price_change.assert_not_awaited()
        args = mock_rm_store.update_price_pointer.call_args.args
        assert args[:3] == (1, 40.0, "Acme Foods")
        assert args[3] == result.vendor_price.added_at
        mock_propagator.propagate_price_change.assert_awaited_once_with(1, 40.0, "alice")
        assert result.propagation.updated_recipe_ids == [10]

    async def test_requote_at_new_price_is_logged(self, ledger, mock_vp_store):
        mock_vp_store.get_latest_for_vendor.return_value = _quote(40.0)

        result = await ledger.add_vendor_price(1, "V1", "Acme Foods", 1, 50.0, "alice")

        assert result.price_changed is True
        assert result.price_log.old_price == 40.0
        assert result.price_log.new_price == 50.0

    async def test_requote_at_same_price_not_logged(self, ledger, mock_vp_store, mock_audit):
        mock_vp_store.get_latest_for_vendor.return_value = _quote(40.0)

        result = await ledger.add_vendor_price(1, "V1", "Acme Foods", 1, 40.0, None)

        assert result.price_changed is False
        mock_audit.record_price_change.assert_not_awaited()

    async def test_cheaper_older_quote_does_not_hold_pointer(self, ledger, mock_rm_store):
        # Pointer follows the most recent quote even when it is more expensive
        await ledger.add_vendor_price(1, "V2", "Other", 1, 30.0, None)
        await ledger.add_vendor_price(1, "V1", "Acme Foods", 1, 45.0, None)

        last_call = mock_rm_store.update_price_pointer.call_args_list[-1]
        assert last_call.args[1] == 45.0

    @pytest.mark.parametrize(
        ("vendor_id", "quantity", "price", "field"),
        [
            ("", 1, 10.0, "vendor_id"),
            ("  ", 1, 10.0, "vendor_id"),
            ("V1", 0, 10.0, "quantity"),
            ("V1", -2, 10.0, "quantity"),
            ("V1", 1, -0.01, "price"),
        ],
    )
    async def test_invalid_input_rejected_before_writes(
        self, ledger, mock_vp_store, vendor_id, quantity, price, field
    ):
        with pytest.raises(ValidationError) as exc_info:
            await ledger.add_vendor_price(1, vendor_id, "Acme", quantity, price, None)
        assert exc_info.value.details["field"] == field
        mock_vp_store.add_vendor_price.assert_not_awaited()

    async def test_zero_price_allowed(self, ledger, mock_vp_store):
        result = await ledger.add_vendor_price(1, "V1", "Acme", 1, 0.0, None)
        assert result.vendor_price.price == 0.0

    async def test_missing_raw_material(self, ledger, mock_rm_store, mock_vp_store):
        mock_rm_store.get_raw_material.return_value = None
        with pytest.raises(RawMaterialNotFoundError):
            await ledger.add_vendor_price(99, "V1", "Acme", 1, 10.0, None)
        mock_vp_store.add_vendor_price.assert_not_awaited()


class TestAdoptLatestPrice:
    async def test_no_change_when_pointer_matches(
        self, ledger, mock_vp_store, mock_rm_store, mock_propagator
    ):
        mock_vp_store.get_latest.return_value = _quote(40.0)

        result = await ledger.adopt_latest_price(1, "alice")

        assert result.no_change is True
        assert result.price == 40.0
        mock_rm_store.update_price_pointer.assert_not_awaited()
        mock_propagator.propagate_price_change.assert_not_awaited()

    async def test_adopts_and_propagates(
        self, ledger, mock_vp_store, mock_rm_store, mock_propagator
    ):
        mock_vp_store.get_latest.return_value = _quote(55.0, entry_id=9)

        result = await ledger.adopt_latest_price(1, "alice")

        assert result.no_change is False
        assert result.price == 55.0
        assert mock_rm_store.update_price_pointer.call_args.args[1] == 55.0
        mock_propagator.propagate_price_change.assert_awaited_once_with(1, 55.0, "alice")
        assert result.propagation.updated_recipe_ids == [10]

    async def test_empty_ledger(self, ledger, mock_vp_store):
        mock_vp_store.get_latest.return_value = None
        with pytest.raises(VendorPriceNotFoundError):
            await ledger.adopt_latest_price(1, None)

    async def test_missing_raw_material(self, ledger, mock_rm_store):
        mock_rm_store.get_raw_material.return_value = None
        with pytest.raises(RawMaterialNotFoundError):
            await ledger.adopt_latest_price(1, None)


class TestLedgerQueries:
    async def test_cheapest(self, ledger, mock_vp_store):
        mock_vp_store.get_cheapest.return_value = _quote(30.0)
        cheapest = await ledger.cheapest_vendor_price(1)
        assert cheapest.price == 30.0

    async def test_cheapest_empty(self, ledger, mock_vp_store):
        mock_vp_store.get_cheapest.return_value = None
        with pytest.raises(VendorPriceNotFoundError):
            await ledger.cheapest_vendor_price(1)

    async def test_list_requires_raw_material(self, ledger, mock_rm_store):
        mock_rm_store.get_raw_material.return_value = None
        with pytest.raises(RawMaterialNotFoundError):
            await ledger.list_vendor_prices(1)
