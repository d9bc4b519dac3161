"""
Scheduling request files.

A request bundles everything one planner call needs. Files are YAML or JSON
(JSON is valid YAML) with camelCase keys:

    owner: Alex
    currentTime: "2025-10-04T12:00:00Z"
    preferences:
      - Finish deadline work first
    tasks:
      - taskId: task-1
        taskName: Submit Assignment
        category: School
        duration: 100
        priority: 1
        deadline: "2025-10-04T17:00:00Z"
        preDependence: [task-0]
    schedule:
      - timeBlockId: planned-1
        start: "2025-10-04T09:00:00Z"
        end: "2025-10-04T11:00:00Z"
        taskIdSet: [task-1]
    routine:
      - sessionId: session-1
        sessionName: Attempted Assignment
        linkedTask: task-1
"""

from dataclasses import dataclass, field, replace
from datetime import datetime
from pathlib import Path

import yaml

from adaptive_schedule.errors import ShapeError
from adaptive_schedule.schedule.models import PlannedBlock, Preference, Session, Task, filter_to_owner
from adaptive_schedule.schedule.task_graph import sessions_from_records, tasks_from_records
from adaptive_schedule.schedule.timeparse import parse_optional_timestamp


@dataclass
class ScheduleRequest:
    owner: str
    tasks: list[Task] = field(default_factory=list)
    schedule: list[PlannedBlock] = field(default_factory=list)
    routine: list[Session] = field(default_factory=list)
    preference: Preference = field(default_factory=Preference)
    current_time: datetime | None = None

    def for_owner(self) -> "ScheduleRequest":
        """Copy holding only the tasks, planned blocks and sessions that belong to owner."""
        tasks, schedule, routine = filter_to_owner(self.owner, self.tasks, self.schedule, self.routine)
        return replace(self, tasks=tasks, schedule=schedule, routine=routine)


def request_from_dict(data: dict) -> ScheduleRequest:
    """
    Build a ScheduleRequest from a decoded request document.

    Raises:
        ShapeError: If owner is missing or a section has the wrong type
        TaskGraphError / CycleError: If the tasks do not form a valid graph
    """
    if not isinstance(data, dict) or not data.get("owner"):
        raise ShapeError("Request must be a mapping with an 'owner'")

    owner = str(data["owner"])
    for key in ("tasks", "schedule", "routine", "preferences"):
        if not isinstance(data.get(key) or [], list):
            raise ShapeError(f"Request '{key}' must be a list")

    try:
        tasks = tasks_from_records(data.get("tasks") or [])
        task_map = {task.task_id: task for task in tasks}
        schedule = [
            PlannedBlock(
                time_block_id=str(record.get("timeBlockId", "")),
                owner=record.get("owner", owner),
                start=record["start"],
                end=record["end"],
                task_ids=tuple(record.get("taskIdSet") or ()),
            )
            for record in data.get("schedule") or []
        ]
        routine = sessions_from_records(
            [{"owner": owner, **record} for record in data.get("routine") or []], task_map
        )
        current_time = parse_optional_timestamp(data.get("currentTime"))
    except (KeyError, TypeError, ValueError) as e:
        raise ShapeError(f"Invalid request document: {e}") from e

    return ScheduleRequest(
        owner=owner,
        tasks=tasks,
        schedule=schedule,
        routine=routine,
        preference=Preference(preferences=[str(p) for p in data.get("preferences") or []]),
        current_time=current_time,
    )


def load_request(path: str | Path) -> ScheduleRequest:
    """Load a YAML or JSON request file. Other owners' entries are kept; see for_owner."""
    with open(path) as f:
        data = yaml.safe_load(f)
    return request_from_dict(data or {})
