"""
Error taxonomy for Adaptive Schedule.

Manual block operations fail immediately with TimeRangeError / NotFoundError.
Candidate application collects everything it can before failing, so
ParseError, ShapeError and ValidationError carry the full diagnostic detail.
Planner transport errors are not part of this hierarchy and propagate as-is.
"""


class AdaptiveScheduleError(Exception):
    """Base class for every error raised by this package."""

    pass


class TimeRangeError(AdaptiveScheduleError):
    """Raised when a timestamp is unparsable or start is not before end."""

    pass


class NotFoundError(AdaptiveScheduleError):
    """Raised when a block or task is not present for the owner."""

    pass


class ParseError(AdaptiveScheduleError):
    """Raised when no structured payload can be recovered from planner text."""

    pass


class ShapeError(AdaptiveScheduleError):
    """Raised when the payload is present but missing fields or mistyped."""

    def __init__(self, message: str, errors: list[str] | None = None):
        super().__init__(message)
        self.errors = list(errors or [])


class ValidationError(AdaptiveScheduleError):
    """
    Aggregate of every rule violation found in a candidate schedule.

    `violations` is always a list, even for a single failure.
    `warnings` carries non-fatal parse issues and soft capacity warnings.
    """

    def __init__(self, violations: list, warnings: list[str] | None = None):
        self.violations = list(violations)
        self.warnings = list(warnings or [])
        count = len(self.violations)
        summary = "; ".join(v.message for v in self.violations[:3])
        if count > 3:
            summary += f"; ... ({count - 3} more)"
        super().__init__(f"Candidate schedule failed validation with {count} violation(s): {summary}")


class TaskGraphError(AdaptiveScheduleError):
    """Raised when the supplied task set is not a usable graph."""

    pass


class CycleError(TaskGraphError):
    """Raised when prerequisite relations form a cycle."""

    def __init__(self, cycle: list[str]):
        self.cycle = list(cycle)
        super().__init__(f"Prerequisite cycle detected: {' -> '.join(self.cycle)}")


class ConfigError(AdaptiveScheduleError):
    """Raised when a configured setting holds an unusable value."""

    pass


class PlannerConfigError(AdaptiveScheduleError):
    """Raised when the default planner client cannot be configured."""

    pass
