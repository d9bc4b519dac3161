"""
Task graph checks and loading.

A scheduling request must supply unique task ids whose prerequisite relation
is acyclic. A cycle would make the dependency rule unsatisfiable for every
member without pointing at the cause, so it is rejected up front.
"""

import logging
from collections.abc import Iterable

from adaptive_schedule.errors import CycleError, TaskGraphError

from .models import Session, Task

logger = logging.getLogger(__name__)

_WHITE, _GREY, _BLACK = 0, 1, 2


def build_task_map(tasks: Iterable[Task]) -> dict[str, Task]:
    """
    Index tasks by id.

    Raises:
        TaskGraphError: If two tasks share an id
    """
    task_map: dict[str, Task] = {}
    for task in tasks:
        if task.task_id in task_map:
            raise TaskGraphError(f"Duplicate task id in request: {task.task_id}")
        task_map[task.task_id] = task
    return task_map


def find_cycle(task_map: dict[str, Task]) -> list[str] | None:
    """
    Return one prerequisite cycle as a list of ids (first id repeated last), or None.

    Only edges between tasks of the request are followed; prerequisites
    outside it are treated as already completed.
    """
    color = dict.fromkeys(task_map, _WHITE)

    for root in task_map:
        if color[root] != _WHITE:
            continue
        path: list[str] = [root]
        stack = [iter(task_map[root].prerequisite_ids)]
        color[root] = _GREY
        while stack:
            dep_id = next(stack[-1], None)
            if dep_id is None:
                color[path.pop()] = _BLACK
                stack.pop()
                continue
            if dep_id not in task_map:
                continue
            if color[dep_id] == _GREY:
                return path[path.index(dep_id) :] + [dep_id]
            if color[dep_id] == _WHITE:
                color[dep_id] = _GREY
                path.append(dep_id)
                stack.append(iter(task_map[dep_id].prerequisite_ids))

    return None


def check_task_graph(tasks: Iterable[Task]) -> dict[str, Task]:
    """
    Validate a request's task set and return it indexed by id.

    Raises:
        TaskGraphError: On duplicate ids
        CycleError: If prerequisites form a cycle
    """
    task_map = build_task_map(tasks)
    cycle = find_cycle(task_map)
    if cycle:
        logger.warning(f"Rejecting task set with prerequisite cycle: {' -> '.join(cycle)}")
        raise CycleError(cycle)
    return task_map


# =============================================================================
# LOADING FROM REQUEST RECORDS
# =============================================================================


def _dependency_id(ref) -> str:
    if isinstance(ref, dict):
        return str(ref.get("taskId", ""))
    return str(ref)


def tasks_from_records(records: list[dict]) -> list[Task]:
    """
    Build Task objects from camelCase request records.

    `preDependence` may list task ids or nested records with a `taskId`.
    Prerequisites are built before their dependents, so the order of
    records does not matter.

    Raises:
        TaskGraphError: On duplicate ids or an unknown prerequisite id
        CycleError: If prerequisites form a cycle
    """
    by_id: dict[str, dict] = {}
    for record in records:
        task_id = str(record.get("taskId", ""))
        if task_id in by_id:
            raise TaskGraphError(f"Duplicate task id in request: {task_id}")
        by_id[task_id] = record

    built: dict[str, Task] = {}
    visiting: list[str] = []

    def build(task_id: str) -> Task:
        if task_id in built:
            return built[task_id]
        if task_id in visiting:
            raise CycleError(visiting[visiting.index(task_id) :] + [task_id])
        if task_id not in by_id:
            raise TaskGraphError(f"Unknown prerequisite task id: {task_id}")

        visiting.append(task_id)
        record = by_id[task_id]
        deps = tuple(build(_dependency_id(ref)) for ref in record.get("preDependence") or [])
        visiting.pop()

        task = Task(
            task_id=task_id,
            task_name=record.get("taskName", task_id),
            category=record.get("category", ""),
            duration=int(record["duration"]),
            priority=int(record.get("priority", 3)),
            splittable=bool(record.get("splittable", False)),
            deadline=record.get("deadline"),
            slack=record.get("slack"),
            pre_dependence=deps,
            note=record.get("note"),
            related_block_ids=tuple(record.get("timeBlockSet") or ()),
            owner=record.get("owner"),
            concurrent=bool(record.get("concurrent", False)),
        )
        built[task_id] = task
        return task

    return [build(task_id) for task_id in by_id]


def sessions_from_records(records: list[dict], tasks: dict[str, Task]) -> list[Session]:
    """Build routine Sessions; `linkedTask` may be a task id or a record with `taskId`."""
    sessions = []
    for record in records:
        linked = record.get("linkedTask")
        sessions.append(
            Session(
                owner=record.get("owner", ""),
                session_name=record.get("sessionName", ""),
                session_id=str(record.get("sessionId", "")),
                is_paused=bool(record.get("isPaused", False)),
                is_active=bool(record.get("isActive", False)),
                start=record.get("start"),
                end=record.get("end"),
                linked_task=tasks.get(_dependency_id(linked)) if linked else None,
                interrupt_reason=record.get("interruptReason"),
            )
        )
    return sessions
