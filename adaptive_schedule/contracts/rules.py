"""
Validation Engine - consistency rules for a candidate schedule.

Rules verify MEANING, not shape. Each rule is independent and reports every
failure it finds; `validate` runs all of them and returns the union, so a
candidate with several defects is described in full.

Rules:
1. time_range            - start < end for every block
2. unknown_task          - nothing scheduled or dropped outside the request
3. duplicate_task        - a task is scheduled at most once
4. scheduled_and_dropped - a task is not both scheduled and dropped
5. time_conflict         - overlapping blocks need a concurrency-capable task
6. deadline              - blocks end at or before their tasks' deadlines
7. dependency            - prerequisites come first, or are dropped

Over-packed blocks are a soft condition, see `capacity_warnings`.
"""

from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from enum import StrEnum

from adaptive_schedule import config
from adaptive_schedule.errors import ConfigError
from adaptive_schedule.schedule.models import AdaptiveBlock, Task
from adaptive_schedule.schedule.timeparse import format_timestamp


class RuleTag(StrEnum):
    TIME_RANGE = "time_range"
    UNKNOWN_TASK = "unknown_task"
    DUPLICATE_TASK = "duplicate_task"
    SCHEDULED_AND_DROPPED = "scheduled_and_dropped"
    TIME_CONFLICT = "time_conflict"
    DEADLINE = "deadline"
    DEPENDENCY = "dependency"


class DependencyOrdering(StrEnum):
    EMISSION = "emission"  # Position in the planner's block list
    CHRONOLOGICAL = "chronological"  # Prerequisite block ends before dependent block starts


@dataclass(frozen=True)
class Violation:
    """A single failed rule."""

    rule: RuleTag
    message: str
    task_ids: tuple[str, ...] = ()
    block_ids: tuple[str, ...] = ()

    def to_dict(self) -> dict:
        return {
            "rule": str(self.rule),
            "message": self.message,
            "taskIds": list(self.task_ids),
            "blockIds": list(self.block_ids),
        }


@dataclass
class ValidationContext:
    owner: str
    blocks: Sequence[AdaptiveBlock]
    dropped_ids: Sequence[str]
    original_tasks: Mapping[str, Task]
    unresolved_refs: Mapping[str, Sequence[str]] = field(default_factory=dict)
    ordering: DependencyOrdering = DependencyOrdering.EMISSION

    def task_name(self, task_id: str) -> str:
        task = self.original_tasks.get(task_id)
        return task.task_name if task else task_id

    def first_block_index(self) -> dict[str, int]:
        """Index of the first block each scheduled task appears in."""
        first: dict[str, int] = {}
        for index, block in enumerate(self.blocks):
            for task in block.task_set:
                first.setdefault(task.task_id, index)
        return first


# =============================================================================
# RULE FUNCTIONS
# =============================================================================


def check_time_range(ctx: ValidationContext) -> list[Violation]:
    """RULE 1: every block starts before it ends."""
    return [
        Violation(
            rule=RuleTag.TIME_RANGE,
            message=(
                f"Invalid time range: block {block.time_block_id} starts at "
                f"{format_timestamp(block.start)} but ends at {format_timestamp(block.end)}"
            ),
            block_ids=(block.time_block_id,),
        )
        for block in ctx.blocks
        if block.start >= block.end
    ]


def check_known_tasks(ctx: ValidationContext) -> list[Violation]:
    """RULE 2: scheduled tasks, unresolved references and dropped ids must come from the request."""
    violations = []

    for block in ctx.blocks:
        for task in block.task_set:
            if task.task_id not in ctx.original_tasks:
                violations.append(
                    Violation(
                        rule=RuleTag.UNKNOWN_TASK,
                        message=(
                            f'Hallucinated task: "{task.task_name}" ({task.task_id}) '
                            f"was not in the original task list"
                        ),
                        task_ids=(task.task_id,),
                        block_ids=(block.time_block_id,),
                    )
                )
        for task_id in ctx.unresolved_refs.get(block.time_block_id, ()):
            violations.append(
                Violation(
                    rule=RuleTag.UNKNOWN_TASK,
                    message=(
                        f"Hallucinated task: block {block.time_block_id} references "
                        f"{task_id}, which was not in the original task list"
                    ),
                    task_ids=(task_id,),
                    block_ids=(block.time_block_id,),
                )
            )

    for task_id in ctx.dropped_ids:
        if task_id not in ctx.original_tasks:
            violations.append(
                Violation(
                    rule=RuleTag.UNKNOWN_TASK,
                    message=f'Invalid dropped task: "{task_id}" was not in the original task list',
                    task_ids=(task_id,),
                )
            )

    return violations


def check_duplicates(ctx: ValidationContext) -> list[Violation]:
    """RULE 3: one violation per task scheduled more than once, naming every block."""
    placements: dict[str, list[str]] = {}
    for block in ctx.blocks:
        for task in block.task_set:
            placements.setdefault(task.task_id, []).append(block.time_block_id)

    return [
        Violation(
            rule=RuleTag.DUPLICATE_TASK,
            message=(
                f'Duplicate scheduling: Task "{ctx.task_name(task_id)}" ({task_id}) is '
                f"scheduled {len(block_ids)} times in {', '.join(block_ids)}"
            ),
            task_ids=(task_id,),
            block_ids=tuple(dict.fromkeys(block_ids)),
        )
        for task_id, block_ids in placements.items()
        if len(block_ids) > 1
    ]


def check_scheduled_and_dropped(ctx: ValidationContext) -> list[Violation]:
    """RULE 4: scheduled and dropped are mutually exclusive."""
    dropped = set(ctx.dropped_ids)
    violations = []
    seen: set[str] = set()

    for block in ctx.blocks:
        for task in block.task_set:
            if task.task_id in dropped and task.task_id not in seen:
                seen.add(task.task_id)
                violations.append(
                    Violation(
                        rule=RuleTag.SCHEDULED_AND_DROPPED,
                        message=(
                            f'Contradictory state: Task "{ctx.task_name(task.task_id)}" '
                            f"({task.task_id}) is both scheduled AND marked as dropped"
                        ),
                        task_ids=(task.task_id,),
                        block_ids=(block.time_block_id,),
                    )
                )

    return violations


def can_overlap(first: AdaptiveBlock, second: AdaptiveBlock) -> bool:
    """Overlap is allowed when any task across both blocks is concurrency-capable."""
    return any(task.can_run_concurrently for task in first.task_set + second.task_set)


def check_time_conflicts(ctx: ValidationContext) -> list[Violation]:
    """RULE 5: overlapping blocks without a concurrency-capable task conflict."""
    violations = []
    blocks = list(ctx.blocks)

    for i, a in enumerate(blocks):
        for b in blocks[i + 1 :]:
            if a.overlaps(b) and not can_overlap(a, b):
                violations.append(
                    Violation(
                        rule=RuleTag.TIME_CONFLICT,
                        message=(
                            f"Time conflict: Blocks {a.time_block_id} "
                            f"({format_timestamp(a.start)} - {format_timestamp(a.end)}) and "
                            f"{b.time_block_id} ({format_timestamp(b.start)} - "
                            f"{format_timestamp(b.end)}) overlap and contain non-concurrent tasks"
                        ),
                        task_ids=tuple(a.task_ids + b.task_ids),
                        block_ids=(a.time_block_id, b.time_block_id),
                    )
                )

    return violations


def check_deadlines(ctx: ValidationContext) -> list[Violation]:
    """RULE 6: a block must end at or before each of its tasks' deadlines."""
    violations = []

    for block in ctx.blocks:
        for task in block.task_set:
            if task.deadline is not None and block.end > task.deadline:
                violations.append(
                    Violation(
                        rule=RuleTag.DEADLINE,
                        message=(
                            f'Deadline violation: Task "{task.task_name}" ({task.task_id}) is '
                            f"scheduled to end at {format_timestamp(block.end)} but has deadline "
                            f"at {format_timestamp(task.deadline)}"
                        ),
                        task_ids=(task.task_id,),
                        block_ids=(block.time_block_id,),
                    )
                )

    return violations


def _runs_before(ctx: ValidationContext, dep_index: int, task_index: int) -> bool:
    if ctx.ordering == DependencyOrdering.CHRONOLOGICAL:
        return ctx.blocks[dep_index].end <= ctx.blocks[task_index].start
    return dep_index < task_index


def check_dependencies(ctx: ValidationContext) -> list[Violation]:
    """
    RULE 7: prerequisites are scheduled earlier, or dropped.

    A prerequisite outside the request that is not scheduled is taken as
    already completed.
    """
    first_index = ctx.first_block_index()
    dropped = set(ctx.dropped_ids)
    violations = []
    checked: set[str] = set()

    for block in ctx.blocks:
        for task in block.task_set:
            if task.task_id in checked:
                continue
            checked.add(task.task_id)
            task_index = first_index[task.task_id]

            for dep in task.pre_dependence:
                dep_index = first_index.get(dep.task_id)
                if dep_index is None:
                    if dep.task_id in ctx.original_tasks and dep.task_id not in dropped:
                        violations.append(
                            Violation(
                                rule=RuleTag.DEPENDENCY,
                                message=(
                                    f'Dependency violation: Task "{task.task_name}" depends on '
                                    f'"{dep.task_name}" which is neither scheduled nor dropped'
                                ),
                                task_ids=(task.task_id, dep.task_id),
                                block_ids=(block.time_block_id,),
                            )
                        )
                elif not _runs_before(ctx, dep_index, task_index):
                    violations.append(
                        Violation(
                            rule=RuleTag.DEPENDENCY,
                            message=(
                                f'Dependency violation: Task "{task.task_name}" is scheduled '
                                f'before its dependency "{dep.task_name}"'
                            ),
                            task_ids=(task.task_id, dep.task_id),
                            block_ids=(
                                ctx.blocks[task_index].time_block_id,
                                ctx.blocks[dep_index].time_block_id,
                            ),
                        )
                    )

    return violations


# =============================================================================
# RULE REGISTRY
# =============================================================================

# ALL rules - run together, in rule-number order
RULES: list[Callable[[ValidationContext], list[Violation]]] = [
    check_time_range,
    check_known_tasks,
    check_duplicates,
    check_scheduled_and_dropped,
    check_time_conflicts,
    check_deadlines,
    check_dependencies,
]


# =============================================================================
# ENFORCEMENT
# =============================================================================


def resolve_ordering(ordering: DependencyOrdering | str | None) -> DependencyOrdering:
    """
    Explicit ordering, else the configured default.

    Raises:
        ValueError: If an explicit ordering is unknown
        ConfigError: If ADAPTIVE_DEPENDENCY_ORDERING is unknown
    """
    if ordering:
        return DependencyOrdering(ordering)
    try:
        return DependencyOrdering(config.DEPENDENCY_ORDERING)
    except ValueError as e:
        choices = ", ".join(o.value for o in DependencyOrdering)
        raise ConfigError(
            f"ADAPTIVE_DEPENDENCY_ORDERING={config.DEPENDENCY_ORDERING!r} is not one of: {choices}"
        ) from e


def validate(
    owner: str,
    blocks: Sequence[AdaptiveBlock],
    dropped_ids: Iterable[str],
    original_tasks: Iterable[Task] | Mapping[str, Task],
    unresolved_refs: Mapping[str, Sequence[str]] | None = None,
    ordering: DependencyOrdering | str | None = None,
) -> list[Violation]:
    """
    Run every rule. Returns the list of violations; empty = pass.

    Args:
        owner: Owner the candidate is for
        blocks: Tentative blocks in planner emission order
        dropped_ids: Tentative dropped task ids
        original_tasks: The request's tasks, as a list or an id map
        unresolved_refs: Block id -> task ids the parser could not resolve
        ordering: Dependency ordering; defaults to config.DEPENDENCY_ORDERING
    """
    if not isinstance(original_tasks, Mapping):
        original_tasks = {task.task_id: task for task in original_tasks}

    ctx = ValidationContext(
        owner=owner,
        blocks=list(blocks),
        dropped_ids=list(dropped_ids),
        original_tasks=original_tasks,
        unresolved_refs=unresolved_refs or {},
        ordering=resolve_ordering(ordering),
    )

    violations: list[Violation] = []
    for rule in RULES:
        violations.extend(rule(ctx))
    return violations


def capacity_warnings(blocks: Iterable[AdaptiveBlock]) -> list[str]:
    """Soft rule: blocks holding more task minutes than wall-clock minutes."""
    warnings = []
    for block in blocks:
        if block.assigned_min > block.duration_min:
            warnings.append(
                f"Block {block.time_block_id}: duration ({block.duration_min:g} min) is less "
                f"than total task duration ({block.assigned_min} min)"
            )
    return warnings
