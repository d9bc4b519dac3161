"""
Tests for AdaptiveBlockStore.

Covers:
- Manual block creation and time-range checks
- Task assignment / unassignment
- Block removal and not-found errors
- Atomic replace_all and dropped-task bookkeeping
- Snapshot isolation and owner namespaces
"""

from dataclasses import FrozenInstanceError
from datetime import UTC, datetime

import pytest

from adaptive_schedule.errors import NotFoundError, TimeRangeError
from adaptive_schedule.schedule.block_store import AdaptiveBlockStore, allocate_block_id
from adaptive_schedule.schedule.models import AdaptiveBlock
from tests.fixtures import make_task

START = "2025-10-04T12:00:00Z"
END = "2025-10-04T13:00:00Z"

# =============================================================================
# ADD TIME BLOCK
# =============================================================================


class TestAddTimeBlock:
    """Tests for manual block creation."""

    def test_creates_empty_block(self, store):
        """A new block has no tasks and parsed UTC times."""
        block_id = store.add_time_block("Alex", START, END)

        block = store.get_block("Alex", block_id)
        assert block.task_set == ()
        assert block.start == datetime(2025, 10, 4, 12, 0, tzinfo=UTC)
        assert block.end == datetime(2025, 10, 4, 13, 0, tzinfo=UTC)
        assert block.owner == "Alex"

    def test_ids_are_unique(self, store):
        """Every call yields a fresh id."""
        ids = {store.add_time_block("Alex", START, END) for _ in range(5)}
        assert len(ids) == 5

    def test_ids_unique_across_owners_and_stores(self):
        """Ids never collide across owners or store instances."""
        first = AdaptiveBlockStore().add_time_block("Alex", START, END)
        second = AdaptiveBlockStore().add_time_block("Fuqi", START, END)
        assert first != second

    def test_id_format(self):
        assert allocate_block_id().startswith("adaptive-block-")

    def test_start_equal_end_rejected(self, store):
        with pytest.raises(TimeRangeError, match="before end"):
            store.add_time_block("Alex", START, START)

    def test_start_after_end_rejected(self, store):
        with pytest.raises(TimeRangeError):
            store.add_time_block("Alex", END, START)

    def test_unparsable_time_rejected(self, store):
        with pytest.raises(TimeRangeError, match="Invalid"):
            store.add_time_block("Alex", "noon-ish", END)

    def test_rejected_block_leaves_store_unchanged(self, store):
        store.add_time_block("Alex", START, END)
        with pytest.raises(TimeRangeError):
            store.add_time_block("Alex", END, START)
        assert len(store.list_blocks("Alex")) == 1

    def test_naive_timestamp_read_as_utc(self, store):
        block_id = store.add_time_block("Alex", "2025-10-04T12:00:00", "2025-10-04T13:00:00")
        assert store.get_block("Alex", block_id).start.tzinfo is not None

    def test_accepts_datetime_objects(self, store):
        block_id = store.add_time_block(
            "Alex", datetime(2025, 10, 4, 12, tzinfo=UTC), datetime(2025, 10, 4, 14, tzinfo=UTC)
        )
        assert store.get_block("Alex", block_id).duration_min == 120


# =============================================================================
# ASSIGN / UNASSIGN
# =============================================================================


class TestTaskAssignment:
    """Tests for assign_task / unassign_task."""

    def test_assign_task(self, store):
        block_id = store.add_time_block("Alex", START, END)
        task = make_task("task-1")

        updated = store.assign_task("Alex", task, block_id)

        assert updated.task_ids == ["task-1"]
        assert store.get_block("Alex", block_id).task_ids == ["task-1"]

    def test_assign_same_task_twice_is_noop(self, store):
        block_id = store.add_time_block("Alex", START, END)
        task = make_task("task-1")
        store.assign_task("Alex", task, block_id)
        store.assign_task("Alex", task, block_id)

        assert store.get_block("Alex", block_id).task_ids == ["task-1"]

    def test_assign_to_missing_block(self, store):
        with pytest.raises(NotFoundError, match="not found"):
            store.assign_task("Alex", make_task("task-1"), "adaptive-block-missing")

    def test_unassign_task_keeps_block(self, store):
        """Unassigning the only task leaves an empty block in place."""
        block_id = store.add_time_block("Alex", START, END)
        store.assign_task("Alex", make_task("task-1"), block_id)

        updated = store.unassign_task("Alex", "task-1", block_id)

        assert updated.task_set == ()
        assert [b.time_block_id for b in store.list_blocks("Alex")] == [block_id]

    def test_unassign_preserves_other_tasks(self, store):
        block_id = store.add_time_block("Alex", START, END)
        for task_id in ("task-1", "task-2", "task-3"):
            store.assign_task("Alex", make_task(task_id), block_id)

        store.unassign_task("Alex", "task-2", block_id)

        assert store.get_block("Alex", block_id).task_ids == ["task-1", "task-3"]

    def test_unassign_unknown_task(self, store):
        block_id = store.add_time_block("Alex", START, END)
        with pytest.raises(NotFoundError, match="Task task-9 not found in block"):
            store.unassign_task("Alex", "task-9", block_id)

    def test_unassign_from_missing_block(self, store):
        with pytest.raises(NotFoundError):
            store.unassign_task("Alex", "task-1", "adaptive-block-missing")

    def test_other_owner_cannot_see_block(self, store):
        """Owners are separate namespaces."""
        block_id = store.add_time_block("Alex", START, END)
        with pytest.raises(NotFoundError, match="owner Fuqi"):
            store.assign_task("Fuqi", make_task("task-1"), block_id)


# =============================================================================
# REMOVE / REPLACE
# =============================================================================


class TestRemoveAndReplace:
    """Tests for remove_block and replace_all."""

    def test_remove_block(self, store):
        keep = store.add_time_block("Alex", START, END)
        drop = store.add_time_block("Alex", START, END)

        removed = store.remove_block("Alex", drop)

        assert removed.time_block_id == drop
        assert [b.time_block_id for b in store.list_blocks("Alex")] == [keep]

    def test_remove_missing_block(self, store):
        with pytest.raises(NotFoundError):
            store.remove_block("Alex", "adaptive-block-missing")

    def test_replace_all_swaps_blocks_and_dropped(self, store):
        store.add_time_block("Alex", START, END)
        new_block = AdaptiveBlock(
            time_block_id=allocate_block_id(),
            owner="Alex",
            start=datetime(2025, 10, 4, 15, tzinfo=UTC),
            end=datetime(2025, 10, 4, 16, tzinfo=UTC),
            task_set=(make_task("task-1"),),
        )

        store.replace_all("Alex", [new_block], ["task-5"])

        assert store.list_blocks("Alex") == [new_block]
        assert store.dropped_task_ids("Alex") == ["task-5"]

    def test_replace_all_dedupes_dropped(self, store):
        store.replace_all("Alex", [], ["task-5", "task-6", "task-5"])
        assert store.dropped_task_ids("Alex") == ["task-5", "task-6"]

    def test_replace_all_rejects_foreign_block(self, store):
        foreign = AdaptiveBlock(
            time_block_id=allocate_block_id(),
            owner="Fuqi",
            start=datetime(2025, 10, 4, 15, tzinfo=UTC),
            end=datetime(2025, 10, 4, 16, tzinfo=UTC),
        )
        store.add_time_block("Alex", START, END)

        with pytest.raises(ValueError, match="belongs to Fuqi"):
            store.replace_all("Alex", [foreign], [])
        assert len(store.list_blocks("Alex")) == 1

    def test_replace_all_does_not_touch_other_owners(self, store):
        fuqi_block = store.add_time_block("Fuqi", START, END)
        store.replace_all("Alex", [], ["task-1"])

        assert [b.time_block_id for b in store.list_blocks("Fuqi")] == [fuqi_block]
        assert store.dropped_task_ids("Fuqi") == []

    def test_unknown_owner_is_empty(self, store):
        assert store.list_blocks("nobody") == []
        assert store.dropped_task_ids("nobody") == []


# =============================================================================
# SNAPSHOTS
# =============================================================================


class TestSnapshots:
    """Returned collections never alias store state."""

    def test_list_is_a_copy(self, store):
        store.add_time_block("Alex", START, END)
        blocks = store.list_blocks("Alex")
        blocks.clear()
        assert len(store.list_blocks("Alex")) == 1

    def test_dropped_is_a_copy(self, store):
        store.replace_all("Alex", [], ["task-5"])
        dropped = store.dropped_task_ids("Alex")
        dropped.append("task-6")
        assert store.dropped_task_ids("Alex") == ["task-5"]

    def test_blocks_are_immutable(self, store):
        block_id = store.add_time_block("Alex", START, END)
        block = store.get_block("Alex", block_id)
        with pytest.raises(FrozenInstanceError):
            block.task_set = (make_task("task-1"),)

    def test_earlier_snapshot_unchanged_by_assign(self, store):
        block_id = store.add_time_block("Alex", START, END)
        before = store.get_block("Alex", block_id)
        store.assign_task("Alex", make_task("task-1"), block_id)
        assert before.task_set == ()
