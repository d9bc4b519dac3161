"""
Adaptive Block Store - committed time blocks and dropped tasks per owner.

Owners are independent namespaces. Enforces:
- start < end for every block created through the manual API
- Block ids are unique across all owners for the life of the process
- Callers only ever see immutable snapshots; changes go through store methods

Concurrent writers for the same owner must be serialised by the caller.
"""

import itertools
import logging
from collections.abc import Iterable
from dataclasses import replace

from adaptive_schedule.errors import NotFoundError, TimeRangeError

from .models import AdaptiveBlock, Task
from .timeparse import parse_timestamp

logger = logging.getLogger(__name__)

# Process-wide and never reset, so ids cannot collide across owners or stores
_block_ids = itertools.count()


def allocate_block_id() -> str:
    """Allocate a new globally unique block id."""
    return f"adaptive-block-{next(_block_ids)}"


class AdaptiveBlockStore:
    """
    In-memory store of adaptive blocks.

    Responsibilities:
    - Create and remove blocks manually
    - Assign and unassign tasks on a block
    - Swap an owner's whole state in one step for committed candidates
    """

    def __init__(self):
        self._blocks: dict[str, list[AdaptiveBlock]] = {}
        self._dropped: dict[str, list[str]] = {}

    def allocate_block_id(self) -> str:
        return allocate_block_id()

    def add_time_block(self, owner: str, start, end) -> str:
        """
        Create an empty block for owner.

        Args:
            owner: Owner namespace
            start: ISO timestamp or datetime
            end: ISO timestamp or datetime

        Returns:
            The new block id

        Raises:
            TimeRangeError: If a timestamp is invalid or start >= end
        """
        try:
            start_dt = parse_timestamp(start)
            end_dt = parse_timestamp(end)
        except ValueError as e:
            raise TimeRangeError(f"Invalid start or end time: {e}") from e

        if start_dt >= end_dt:
            raise TimeRangeError(f"Start time must be before end time: {start} >= {end}")

        block = AdaptiveBlock(
            time_block_id=allocate_block_id(),
            owner=owner,
            start=start_dt,
            end=end_dt,
        )
        self._blocks.setdefault(owner, []).append(block)
        logger.debug(f"Created block {block.time_block_id} for {owner}: {start_dt} - {end_dt}")
        return block.time_block_id

    def list_blocks(self, owner: str) -> list[AdaptiveBlock]:
        """All committed blocks for owner, in insertion order."""
        return list(self._blocks.get(owner, []))

    def get_block(self, owner: str, block_id: str) -> AdaptiveBlock:
        """
        Raises:
            NotFoundError: If owner has no block with that id
        """
        return self._blocks_for(owner)[self._index_of(owner, block_id)]

    def dropped_task_ids(self, owner: str) -> list[str]:
        """Task ids the planner dropped in owner's last committed candidate."""
        return list(self._dropped.get(owner, []))

    def assign_task(self, owner: str, task: Task, block_id: str) -> AdaptiveBlock:
        """
        Add a task to a block. Assigning a task already in the block is a no-op.

        Raises:
            NotFoundError: If the block does not exist for owner
        """
        index = self._index_of(owner, block_id)
        block = self._blocks[owner][index]
        if task.task_id in block.task_ids:
            return block

        updated = replace(block, task_set=block.task_set + (task,))
        self._blocks[owner][index] = updated
        logger.debug(f"Assigned {task.task_id} to {block_id} for {owner}")
        return updated

    def unassign_task(self, owner: str, task_id: str, block_id: str) -> AdaptiveBlock:
        """
        Remove a task from a block. The block is kept, possibly empty.

        Raises:
            NotFoundError: If the block does not exist for owner, or the task
                is not assigned to it
        """
        index = self._index_of(owner, block_id)
        block = self._blocks[owner][index]
        if task_id not in block.task_ids:
            raise NotFoundError(f"Task {task_id} not found in block {block_id}")

        remaining = list(block.task_set)
        del remaining[block.task_ids.index(task_id)]
        updated = replace(block, task_set=tuple(remaining))
        self._blocks[owner][index] = updated
        logger.debug(f"Unassigned {task_id} from {block_id} for {owner}")
        return updated

    def remove_block(self, owner: str, block_id: str) -> AdaptiveBlock:
        """
        Delete a block.

        Raises:
            NotFoundError: If the block does not exist for owner
        """
        index = self._index_of(owner, block_id)
        removed = self._blocks[owner].pop(index)
        logger.debug(f"Removed block {block_id} for {owner}")
        return removed

    def replace_all(
        self, owner: str, blocks: Iterable[AdaptiveBlock], dropped_ids: Iterable[str]
    ) -> list[AdaptiveBlock]:
        """
        Discard owner's committed state and install the new one.

        Both collections are built before either is installed, so readers see
        the old state or the new state, never a mix.
        """
        new_blocks = list(blocks)
        for block in new_blocks:
            if block.owner != owner:
                raise ValueError(f"Block {block.time_block_id} belongs to {block.owner}, not {owner}")
        new_dropped = list(dict.fromkeys(dropped_ids))

        self._blocks[owner], self._dropped[owner] = new_blocks, new_dropped
        logger.info(
            f"Replaced state for {owner}: {len(new_blocks)} block(s), {len(new_dropped)} dropped"
        )
        return list(new_blocks)

    def _blocks_for(self, owner: str) -> list[AdaptiveBlock]:
        return self._blocks.get(owner, [])

    def _index_of(self, owner: str, block_id: str) -> int:
        for index, block in enumerate(self._blocks_for(owner)):
            if block.time_block_id == block_id:
                return index
        raise NotFoundError(f"Adaptive block {block_id} not found for owner {owner}")
