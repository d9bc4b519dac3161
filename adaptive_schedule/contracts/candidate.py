"""
Candidate Parser - structured schedule from raw planner text.

Layers, in order:
1. Extraction: first balanced JSON object in the text (ParseError if none)
2. Shape: pydantic models below (ShapeError on missing fields / wrong types)
3. Content: timestamps and task references, best effort. Bad blocks and
   unknown task ids become non-fatal issues instead of aborting the parse.

The parser never touches the block store.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic import ValidationError as PydanticValidationError

from adaptive_schedule.errors import ParseError, ShapeError
from adaptive_schedule.safety.json_parse import extract_json_object
from adaptive_schedule.schedule.models import Task
from adaptive_schedule.schedule.timeparse import parse_timestamp

logger = logging.getLogger(__name__)


# =============================================================================
# PAYLOAD SHAPE
# =============================================================================


class CandidateBlockEntry(BaseModel):
    """One proposed block. Timestamps are checked later, per block."""

    model_config = ConfigDict(extra="ignore")

    start: Any
    end: Any
    taskIds: list[str]


class CandidatePayload(BaseModel):
    """
    Planner response contract.

    {
      "analysis": "free text",
      "adaptiveBlocks": [{"start": "...", "end": "...", "taskIds": ["task-1"]}],
      "droppedTaskIds": ["task-5"]
    }
    """

    model_config = ConfigDict(extra="ignore")

    adaptiveBlocks: list[CandidateBlockEntry]
    droppedTaskIds: Any = None  # Malformed values degrade to an empty list
    analysis: Any = None  # Passed through, never validated


# =============================================================================
# PARSER OUTPUT
# =============================================================================


@dataclass
class CandidateBlock:
    """A tentative block: parsed times, resolved tasks, and ids that did not resolve."""

    start: datetime
    end: datetime
    tasks: tuple[Task, ...] = ()
    unresolved_task_ids: tuple[str, ...] = ()


@dataclass
class ParsedCandidate:
    blocks: list[CandidateBlock] = field(default_factory=list)
    dropped_task_ids: list[str] = field(default_factory=list)
    issues: list[str] = field(default_factory=list)
    analysis: Any = None


def _shape_errors(error: PydanticValidationError) -> list[str]:
    return [
        f"{'.'.join(str(part) for part in err['loc']) or '<root>'}: {err['msg']}"
        for err in error.errors()
    ]


def _parse_dropped(raw: Any, issues: list[str]) -> list[str]:
    if raw is None:
        return []
    if not isinstance(raw, list):
        issues.append(f"droppedTaskIds must be a list, got {type(raw).__name__}; treating as empty")
        return []

    dropped: list[str] = []
    for task_id in raw:
        if not isinstance(task_id, str):
            issues.append(f"Ignoring non-string dropped task id: {task_id!r}")
            continue
        if task_id in dropped:
            issues.append(f"Dropped task {task_id} listed more than once")
            continue
        dropped.append(task_id)
    return dropped


def _parse_block(
    index: int, entry: CandidateBlockEntry, task_map: dict[str, Task], issues: list[str]
) -> CandidateBlock | None:
    try:
        start = parse_timestamp(entry.start)
    except ValueError:
        issues.append(f"Block {index}: invalid start time: {entry.start!r}")
        return None
    try:
        end = parse_timestamp(entry.end)
    except ValueError:
        issues.append(f"Block {index}: invalid end time: {entry.end!r}")
        return None

    if start >= end:
        issues.append(f"Block {index}: start time must be before end time: {entry.start} >= {entry.end}")
        return None

    tasks: list[Task] = []
    unresolved: list[str] = []
    for task_id in entry.taskIds:
        task = task_map.get(task_id)
        if task is None:
            issues.append(f"Block {index}: task {task_id} not found in task list")
            unresolved.append(task_id)
            continue
        tasks.append(task)

    return CandidateBlock(
        start=start, end=end, tasks=tuple(tasks), unresolved_task_ids=tuple(unresolved)
    )


def parse_candidate(raw_text: str, owner: str, task_map: dict[str, Task]) -> ParsedCandidate:
    """
    Parse planner output into a tentative schedule.

    Args:
        raw_text: Planner response, possibly wrapped in prose or code fences
        owner: Owner the candidate is for (used for logging)
        task_map: Tasks of the current request, by id

    Returns:
        ParsedCandidate with blocks in emission order and non-fatal issues

    Raises:
        ParseError: If no JSON object can be recovered
        ShapeError: If the object does not match CandidatePayload
    """
    extracted = extract_json_object(raw_text)
    if not extracted.success:
        raise ParseError(f"no structured payload ({extracted.error})")

    try:
        payload = CandidatePayload.model_validate(extracted.value)
    except PydanticValidationError as e:
        errors = _shape_errors(e)
        logger.warning(f"Candidate for {owner} has invalid shape: {errors}")
        raise ShapeError(f"Invalid candidate payload: {len(errors)} shape error(s)", errors) from e

    issues: list[str] = []
    blocks = []
    for index, entry in enumerate(payload.adaptiveBlocks):
        block = _parse_block(index, entry, task_map, issues)
        if block is not None:
            blocks.append(block)

    dropped = _parse_dropped(payload.droppedTaskIds, issues)

    if issues:
        logger.warning(f"Parsed candidate for {owner} with {len(issues)} issue(s)")
        for issue in issues:
            logger.debug(f"  {issue}")

    return ParsedCandidate(
        blocks=blocks, dropped_task_ids=dropped, issues=issues, analysis=payload.analysis
    )
