"""
Schedule Module

The data layer that everything else builds on.

Objects:
- Task (with priority, deadline, prerequisites, concurrency capability)
- AdaptiveBlock (committed time slot with assigned tasks)
- PlannedBlock / Session / Preference (read-only planner context)

Invariants:
- start < end for every block
- Block ids are never reused, across owners included
- Callers hold immutable snapshots; only the store mutates state
- Prerequisite relations within a request are acyclic
"""

from .block_store import AdaptiveBlockStore, allocate_block_id
from .brief import generate_schedule_brief
from .models import AdaptiveBlock, PlannedBlock, Preference, Session, Task, filter_to_owner
from .task_graph import check_task_graph, find_cycle, sessions_from_records, tasks_from_records
from .timeparse import format_timestamp, parse_timestamp

__all__ = [
    "AdaptiveBlock",
    "AdaptiveBlockStore",
    "PlannedBlock",
    "Preference",
    "Session",
    "Task",
    "allocate_block_id",
    "check_task_graph",
    "filter_to_owner",
    "find_cycle",
    "format_timestamp",
    "generate_schedule_brief",
    "parse_timestamp",
    "sessions_from_records",
    "tasks_from_records",
]
