"""
Adaptive Scheduler - commits planner candidates to the block store.

Commit path (atomic per owner):
1. Check the request's task graph (unique ids, no prerequisite cycles)
2. Parse the planner text into a tentative schedule
3. Validate the tentative schedule against every rule
4. Commit with a single replace_all only when nothing failed

A rejected candidate leaves the owner's committed state exactly as it was.
Requests for the same owner must be serialised by the caller.
"""

import logging
from dataclasses import dataclass, field
from typing import Any

from adaptive_schedule.contracts.candidate import parse_candidate
from adaptive_schedule.contracts.rules import (
    DependencyOrdering,
    capacity_warnings,
    resolve_ordering,
    validate,
)
from adaptive_schedule.errors import ValidationError
from adaptive_schedule.observability.context import ScheduleRequestContext, get_request_id
from adaptive_schedule.planner.client import AnthropicPlanner, Planner
from adaptive_schedule.planner.prompt import build_prompt
from adaptive_schedule.schedule.block_store import AdaptiveBlockStore
from adaptive_schedule.schedule.brief import generate_schedule_brief
from adaptive_schedule.schedule.models import (
    AdaptiveBlock,
    PlannedBlock,
    Preference,
    Session,
    Task,
    filter_to_owner,
)
from adaptive_schedule.schedule.task_graph import check_task_graph
from adaptive_schedule.schedule.timeparse import parse_optional_timestamp

logger = logging.getLogger(__name__)


@dataclass
class CommitResult:
    blocks: list[AdaptiveBlock]
    dropped_task_ids: list[str]
    warnings: list[str] = field(default_factory=list)
    analysis: Any = None

    def to_dict(self) -> dict:
        return {
            "adaptiveBlocks": [block.to_dict() for block in self.blocks],
            "droppedTaskIds": list(self.dropped_task_ids),
            "warnings": list(self.warnings),
            "analysis": self.analysis,
        }


def _request_context(owner: str) -> ScheduleRequestContext:
    # Reuse the enclosing request id so nested calls log under one request
    return ScheduleRequestContext(owner=owner, request_id=get_request_id())


class AdaptiveScheduler:
    """
    Entry point for callers.

    Manual API (no planner involved):
    - add_time_block / remove_block
    - assign_task / unassign_task
    - list_blocks / dropped_task_ids

    Planner API:
    - apply_candidate: validate and commit raw planner output
    - request_adaptive_schedule: build the prompt, call the planner, apply
    """

    def __init__(
        self,
        store: AdaptiveBlockStore | None = None,
        ordering: DependencyOrdering | str | None = None,
    ):
        self.store = store or AdaptiveBlockStore()
        self.ordering = ordering

    # -------------------------------------------------------------------------
    # Manual API
    # -------------------------------------------------------------------------

    def add_time_block(self, owner: str, start, end) -> str:
        return self.store.add_time_block(owner, start, end)

    def remove_block(self, owner: str, block_id: str) -> AdaptiveBlock:
        return self.store.remove_block(owner, block_id)

    def assign_task(self, owner: str, task: Task, block_id: str) -> AdaptiveBlock:
        return self.store.assign_task(owner, task, block_id)

    def unassign_task(self, owner: str, task_id: str, block_id: str) -> AdaptiveBlock:
        return self.store.unassign_task(owner, task_id, block_id)

    def list_blocks(self, owner: str) -> list[AdaptiveBlock]:
        return self.store.list_blocks(owner)

    def dropped_task_ids(self, owner: str) -> list[str]:
        return self.store.dropped_task_ids(owner)

    # -------------------------------------------------------------------------
    # Planner API
    # -------------------------------------------------------------------------

    def apply_candidate(self, owner: str, raw_text: str, tasks: list[Task]) -> CommitResult:
        """
        Parse, validate and commit a planner candidate for owner.

        Args:
            owner: Owner whose state the candidate replaces
            raw_text: Raw planner output
            tasks: The full task set of the current request

        Returns:
            CommitResult with the committed blocks and any warnings

        Raises:
            ConfigError: If no ordering was given and the configured one is unknown
            TaskGraphError / CycleError: If the task set is unusable
            ParseError / ShapeError: If the payload cannot be read
            ValidationError: If any rule fails; the store is unchanged
        """
        with _request_context(owner):
            ordering = resolve_ordering(self.ordering)
            task_map = check_task_graph(tasks)
            parsed = parse_candidate(raw_text, owner, task_map)

            tentative: list[AdaptiveBlock] = []
            unresolved: dict[str, list[str]] = {}
            for candidate in parsed.blocks:
                block = AdaptiveBlock(
                    time_block_id=self.store.allocate_block_id(),
                    owner=owner,
                    start=candidate.start,
                    end=candidate.end,
                    task_set=candidate.tasks,
                )
                tentative.append(block)
                if candidate.unresolved_task_ids:
                    unresolved[block.time_block_id] = list(candidate.unresolved_task_ids)

            violations = validate(
                owner,
                tentative,
                parsed.dropped_task_ids,
                task_map,
                unresolved_refs=unresolved,
                ordering=ordering,
            )
            warnings = parsed.issues + capacity_warnings(tentative)
            for warning in warnings:
                logger.warning(warning)

            if violations:
                logger.warning(f"Rejected candidate for {owner}: {len(violations)} violation(s)")
                for violation in violations:
                    logger.warning(f"  [{violation.rule}] {violation.message}")
                raise ValidationError(violations, warnings)

            committed = self.store.replace_all(owner, tentative, parsed.dropped_task_ids)
            logger.info(
                f"Committed candidate for {owner}: {len(committed)} block(s), "
                f"{len(parsed.dropped_task_ids)} dropped, {len(warnings)} warning(s)"
            )
            return CommitResult(
                blocks=committed,
                dropped_task_ids=self.store.dropped_task_ids(owner),
                warnings=warnings,
                analysis=parsed.analysis,
            )

    def request_adaptive_schedule(
        self,
        owner: str,
        tasks: list[Task],
        schedule: list[PlannedBlock] | None = None,
        routine: list[Session] | None = None,
        preference: Preference | None = None,
        planner: Planner | None = None,
        current_time=None,
    ) -> CommitResult:
        """
        Ask the planner for an adaptive schedule and commit it.

        Tasks, planned blocks and sessions belonging to other owners are
        ignored; tasks without an owner count as the requester's. With no
        tasks left the planner is not called and the current state is returned.
        Planner errors propagate unchanged.
        """
        with _request_context(owner):
            own_tasks, own_schedule, own_routine = filter_to_owner(owner, tasks, schedule, routine)
            if not own_tasks:
                logger.info(f"No tasks to schedule for {owner}")
                return CommitResult(
                    blocks=self.list_blocks(owner), dropped_task_ids=self.dropped_task_ids(owner)
                )

            resolve_ordering(self.ordering)
            check_task_graph(own_tasks)
            prompt = build_prompt(
                owner,
                own_tasks,
                own_schedule,
                own_routine,
                preference or Preference(),
                existing_blocks=self.list_blocks(owner),
                current_time=parse_optional_timestamp(current_time),
            )

            planner = planner or AnthropicPlanner()
            raw_text = planner.generate(prompt)
            return self.apply_candidate(owner, raw_text, own_tasks)

    def render_brief(
        self,
        owner: str,
        tasks: list[Task] | None = None,
        planned: list[PlannedBlock] | None = None,
        routine: list[Session] | None = None,
        preference: Preference | None = None,
        current_time=None,
        format: str = "markdown",
    ) -> str:
        return generate_schedule_brief(
            owner,
            self.list_blocks(owner),
            self.dropped_task_ids(owner),
            tasks=tasks,
            planned=planned,
            routine=routine,
            preference=preference,
            current_time=parse_optional_timestamp(current_time),
            format=format,
        )
