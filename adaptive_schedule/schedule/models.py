"""
Data model for adaptive scheduling.

Task, PlannedBlock, Session and Preference are supplied by the caller on every
request and are only read here. AdaptiveBlock is the committed unit owned by
the block store; it is immutable so snapshots handed to callers cannot alter
store state.
"""

from dataclasses import dataclass, field
from datetime import datetime

from adaptive_schedule import config

from .timeparse import minutes_between, parse_optional_timestamp, parse_timestamp

PRIORITY_LABELS = {
    1: "Critical",
    2: "Important",
    3: "Regular",
    4: "Low",
    5: "Optional",
}


@dataclass(frozen=True)
class Task:
    task_id: str
    task_name: str
    category: str
    duration: int  # minutes
    priority: int  # 1 = most urgent, 5 = optional
    splittable: bool = False
    deadline: datetime | None = None
    slack: str | None = None
    pre_dependence: tuple["Task", ...] = ()
    note: str | None = None
    related_block_ids: tuple[str, ...] = ()
    owner: str | None = None
    concurrent: bool = False

    def __post_init__(self):
        if not self.task_id:
            raise ValueError("Task requires a task_id")
        if self.duration <= 0:
            raise ValueError(f"Task {self.task_id}: duration must be > 0, got {self.duration}")
        if self.priority not in PRIORITY_LABELS:
            raise ValueError(f"Task {self.task_id}: priority must be 1-5, got {self.priority}")
        # Frozen: normalise through object.__setattr__
        object.__setattr__(self, "deadline", parse_optional_timestamp(self.deadline))
        object.__setattr__(self, "pre_dependence", tuple(self.pre_dependence))
        object.__setattr__(self, "related_block_ids", tuple(self.related_block_ids))

    @property
    def priority_label(self) -> str:
        return PRIORITY_LABELS[self.priority]

    @property
    def prerequisite_ids(self) -> list[str]:
        return [dep.task_id for dep in self.pre_dependence]

    @property
    def can_run_concurrently(self) -> bool:
        """Explicit flag, or the concurrency marker anywhere in the note."""
        if self.concurrent:
            return True
        if not self.note:
            return False
        marker = config.CONCURRENCY_MARKER.lower()
        return bool(marker) and marker in self.note.lower()


@dataclass(frozen=True)
class AdaptiveBlock:
    time_block_id: str
    owner: str
    start: datetime
    end: datetime
    task_set: tuple[Task, ...] = ()

    @property
    def duration_min(self) -> float:
        """Block length in minutes."""
        return minutes_between(self.start, self.end)

    @property
    def assigned_min(self) -> int:
        """Total duration of the tasks assigned to this block."""
        return sum(task.duration for task in self.task_set)

    @property
    def task_ids(self) -> list[str]:
        return [task.task_id for task in self.task_set]

    def overlaps(self, other: "AdaptiveBlock") -> bool:
        """Half-open [start, end) overlap."""
        return self.start < other.end and other.start < self.end

    def to_dict(self) -> dict:
        return {
            "timeBlockId": self.time_block_id,
            "owner": self.owner,
            "start": self.start.isoformat(),
            "end": self.end.isoformat(),
            "taskIds": self.task_ids,
        }


@dataclass(frozen=True)
class PlannedBlock:
    """A block from the originally intended schedule."""

    time_block_id: str
    owner: str
    start: datetime
    end: datetime
    task_ids: tuple[str, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "start", parse_timestamp(self.start))
        object.__setattr__(self, "end", parse_timestamp(self.end))
        object.__setattr__(self, "task_ids", tuple(self.task_ids))


@dataclass(frozen=True)
class Session:
    """A logged routine session: what actually happened."""

    owner: str
    session_name: str
    session_id: str
    is_paused: bool = False
    is_active: bool = False
    start: datetime | None = None
    end: datetime | None = None
    linked_task: Task | None = None
    interrupt_reason: str | None = None

    def __post_init__(self):
        object.__setattr__(self, "start", parse_optional_timestamp(self.start))
        object.__setattr__(self, "end", parse_optional_timestamp(self.end))


@dataclass
class Preference:
    preferences: list[str] = field(default_factory=list)


def filter_to_owner(
    owner: str,
    tasks: list[Task],
    schedule: list[PlannedBlock] | None = None,
    routine: list[Session] | None = None,
) -> tuple[list[Task], list[PlannedBlock], list[Session]]:
    """
    Keep only the inputs that belong to owner.

    Tasks without an owner count as the owner's; planned blocks and sessions
    must match exactly.
    """
    return (
        [t for t in tasks if t.owner in (None, owner)],
        [b for b in schedule or [] if b.owner == owner],
        [s for s in routine or [] if s.owner == owner],
    )
