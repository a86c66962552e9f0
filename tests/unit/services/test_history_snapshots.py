"""Tests for HistorySnapshotService."""

from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock

import pytest

from rmc.core.entities import RecipeHistorySnapshot, RecipeItem, SnapshotReason
from rmc.core.exceptions import RecipeNotFoundError, SnapshotNotFoundError
from rmc.core.services import HistorySnapshotService

T0 = datetime(2026, 1, 1, tzinfo=UTC)


def _snapshot(
    snapshot_id: int,
    taken_at: datetime,
    items: list[RecipeItem],
    total: float,
    ppu: float,
    recipe_id: int = 10,
) -> RecipeHistorySnapshot:
    return RecipeHistorySnapshot(
        id=snapshot_id,
        recipe_id=recipe_id,
        taken_at=taken_at,
        total_raw_material_cost=total,
        price_per_unit=ppu,
        items=tuple(items),
        reason=SnapshotReason.PRICE_CHANGE,
    )


@pytest.fixture
def mock_history_store():
    store = AsyncMock()
    store.add_snapshot.side_effect = lambda s: s.model_copy(update={"id": 1})
    return store


@pytest.fixture
def mock_recipe_store():
    return AsyncMock()


@pytest.fixture
def service(mock_history_store, mock_recipe_store):
    return HistorySnapshotService(mock_history_store, mock_recipe_store)


class TestRecord:
    async def test_record_persists_capture(self, service, mock_history_store, ladoo, ladoo_items):
        snapshot = await service.record(
            ladoo, ladoo_items, SnapshotReason.INITIAL_CREATION, "alice"
        )
        assert snapshot.id == 1
        saved = mock_history_store.add_snapshot.call_args.args[0]
        assert saved.recipe_id == ladoo.id
        assert saved.reason == SnapshotReason.INITIAL_CREATION
        assert saved.changed_by == "alice"
        assert saved.items[0].price == 40.0

    async def test_take_snapshot_reads_current_state(
        self, service, mock_recipe_store, ladoo, ladoo_items
    ):
        mock_recipe_store.get_recipe.return_value = ladoo
        mock_recipe_store.get_items.return_value = ladoo_items

        snapshot = await service.take_snapshot(10, SnapshotReason.PRICE_CHANGE, None)

        assert snapshot.total_raw_material_cost == 80.0
        mock_recipe_store.get_items.assert_awaited_once_with(10)

    async def test_take_snapshot_missing_recipe(self, service, mock_recipe_store):
        mock_recipe_store.get_recipe.return_value = None
        with pytest.raises(RecipeNotFoundError):
            await service.take_snapshot(99, SnapshotReason.PRICE_CHANGE, None)


class TestReadAndDelete:
    async def test_latest(self, service, mock_history_store):
        newest = _snapshot(2, T0, [], 100, 10)
        mock_history_store.list_snapshots.return_value = [newest]
        assert await service.latest(10) is newest
        mock_history_store.list_snapshots.assert_awaited_once_with(10, limit=1)

    async def test_latest_empty(self, service, mock_history_store):
        mock_history_store.list_snapshots.return_value = []
        assert await service.latest(10) is None

    async def test_get_rejects_other_recipe(self, service, mock_history_store):
        mock_history_store.get_snapshot.return_value = _snapshot(2, T0, [], 1, 1, recipe_id=11)
        with pytest.raises(SnapshotNotFoundError):
            await service.get(10, 2)

    async def test_delete_missing(self, service, mock_history_store):
        mock_history_store.delete_snapshot.return_value = False
        with pytest.raises(SnapshotNotFoundError):
            await service.delete(10, 5)


class TestCompare:
    @pytest.fixture
    def sugar_at_40(self) -> RecipeItem:
        return RecipeItem(
            raw_material_id=1, raw_material_name="Sugar", quantity=2, price=40, total_price=80
        )

    @pytest.fixture
    def sugar_at_50(self) -> RecipeItem:
        return RecipeItem(
            raw_material_id=1, raw_material_name="Sugar", quantity=2, price=50, total_price=100
        )

    def test_older_first_regardless_of_order(self, sugar_at_40, sugar_at_50):
        old = _snapshot(1, T0, [sugar_at_40], 80, 10)
        new = _snapshot(2, T0 + timedelta(hours=1), [sugar_at_50], 100, 12.5)

        forward = HistorySnapshotService.compare(old, new)
        backward = HistorySnapshotService.compare(new, old)

        assert forward == backward
        assert forward.old_snapshot_id == 1
        assert forward.new_snapshot_id == 2
        assert forward.total_cost_delta == 20.0
        assert forward.price_per_unit_delta == 2.5
        assert forward.price_per_unit_change_pct == 25.0

    def test_item_deltas(self, sugar_at_40, sugar_at_50):
        comparison = HistorySnapshotService.compare(
            _snapshot(1, T0, [sugar_at_40], 80, 10),
            _snapshot(2, T0 + timedelta(minutes=5), [sugar_at_50], 100, 12.5),
        )
        assert len(comparison.item_deltas) == 1
        delta = comparison.item_deltas[0]
        assert delta.raw_material_id == 1
        assert delta.price_delta == 10.0
        assert delta.total_delta == 20.0
        assert comparison.added_items == []
        assert comparison.removed_items == []

    def test_added_and_removed_items_reported_separately(self, sugar_at_40):
        ghee = RecipeItem(raw_material_id=3, quantity=1, price=600, total_price=600)
        comparison = HistorySnapshotService.compare(
            _snapshot(1, T0, [sugar_at_40], 80, 10),
            _snapshot(2, T0 + timedelta(minutes=5), [ghee], 600, 75),
        )
        assert comparison.item_deltas == []
        assert [i.raw_material_id for i in comparison.added_items] == [3]
        assert [i.raw_material_id for i in comparison.removed_items] == [1]

    def test_zero_old_unit_price_has_no_percentage(self):
        comparison = HistorySnapshotService.compare(
            _snapshot(1, T0, [], 0, 0),
            _snapshot(2, T0 + timedelta(minutes=5), [], 10, 1),
        )
        assert comparison.price_per_unit_change_pct is None

    def test_same_timestamp_orders_by_id(self):
        comparison = HistorySnapshotService.compare(
            _snapshot(7, T0, [], 20, 2),
            _snapshot(3, T0, [], 10, 1),
        )
        assert comparison.old_snapshot_id == 3
        assert comparison.total_cost_delta == 10.0

    async def test_compare_by_ids(self, service, mock_history_store):
        snapshots = {
            1: _snapshot(1, T0, [], 80, 10),
            2: _snapshot(2, T0 + timedelta(minutes=1), [], 100, 12.5),
        }
        mock_history_store.get_snapshot.side_effect = lambda sid: snapshots.get(sid)

        comparison = await service.compare_by_ids(10, 2, 1)
        assert comparison.old_snapshot_id == 1

    async def test_compare_by_ids_missing(self, service, mock_history_store):
        mock_history_store.get_snapshot.return_value = None
        with pytest.raises(SnapshotNotFoundError):
            await service.compare_by_ids(10, 1, 2)
