"""
Adaptive Schedule - validated, LLM-assisted day rescheduling.

Layers:
- schedule: data model, block store, task graph, briefs
- contracts: candidate parser and consistency rules
- planner: prompt builder and LLM client
- scheduler: commit coordinator tying the layers together
"""

from adaptive_schedule.errors import (
    AdaptiveScheduleError,
    ConfigError,
    CycleError,
    NotFoundError,
    ParseError,
    PlannerConfigError,
    ShapeError,
    TaskGraphError,
    TimeRangeError,
    ValidationError,
)
from adaptive_schedule.schedule import (
    AdaptiveBlock,
    AdaptiveBlockStore,
    PlannedBlock,
    Preference,
    Session,
    Task,
)
from adaptive_schedule.contracts import DependencyOrdering, RuleTag, Violation, validate
from adaptive_schedule.scheduler import AdaptiveScheduler, CommitResult

__version__ = "0.1.0"

__all__ = [
    # Errors
    "AdaptiveScheduleError",
    "ConfigError",
    "CycleError",
    "NotFoundError",
    "ParseError",
    "PlannerConfigError",
    "ShapeError",
    "TaskGraphError",
    "TimeRangeError",
    "ValidationError",
    # Model
    "AdaptiveBlock",
    "AdaptiveBlockStore",
    "PlannedBlock",
    "Preference",
    "Session",
    "Task",
    # Validation
    "DependencyOrdering",
    "RuleTag",
    "Violation",
    "validate",
    # Coordinator
    "AdaptiveScheduler",
    "CommitResult",
]
