"""
Schedule Brief Generator - readable view of an owner's adaptive schedule.

Sections, each optional except the adaptive schedule and dropped tasks:
- Current time and preferences
- Original planned schedule
- Actual routine (what happened)
- Adaptive schedule (committed blocks, chronological)
- Dropped tasks
"""

from datetime import UTC, datetime

from .models import AdaptiveBlock, PlannedBlock, Preference, Session, Task
from .timeparse import format_clock, format_timestamp

_EPOCH = datetime.min.replace(tzinfo=UTC)


def _fmt_minutes(minutes: float) -> str:
    minutes = int(minutes)
    return f"{minutes // 60}h {minutes % 60}m"


def _task_line(task: Task) -> str:
    return f"{task.task_name} (Priority: {task.priority}, Duration: {task.duration} min)"


def _header(text: str, format: str) -> list[str]:
    if format == "markdown":
        return [f"*{text}*"]
    return [text, "-" * len(text)]


def generate_schedule_brief(
    owner: str,
    blocks: list[AdaptiveBlock],
    dropped_ids: list[str],
    tasks: list[Task] | None = None,
    planned: list[PlannedBlock] | None = None,
    routine: list[Session] | None = None,
    preference: Preference | None = None,
    current_time: datetime | None = None,
    format: str = "markdown",
) -> str:
    """
    Render an owner's adaptive schedule.

    Args:
        owner: Owner to render for; planned/routine entries of other owners are skipped
        blocks: Committed blocks
        dropped_ids: Dropped task ids
        tasks: Full task list, used to describe planned and dropped tasks
        planned: Original planned schedule
        routine: Logged routine sessions
        preference: Owner preferences
        current_time: Anchor time to print in the header
        format: 'markdown' or 'plain'

    Returns:
        Formatted brief string
    """
    task_map = {task.task_id: task for task in tasks or []}
    bullet = "•" if format == "markdown" else "-"
    lines = _header(f"Schedule for {owner}", format)
    lines.append("")

    if current_time is not None:
        lines.append(f"Current time: {format_clock(current_time)} ({format_timestamp(current_time)})")
        lines.append("")

    if preference and preference.preferences:
        lines.extend(_header("Preferences", format))
        for i, pref in enumerate(preference.preferences, 1):
            lines.append(f"{i}. {pref}")
        lines.append("")

    own_planned = sorted((b for b in planned or [] if b.owner == owner), key=lambda b: b.start)
    if own_planned:
        lines.extend(_header("Original Planned Schedule", format))
        for block in own_planned:
            lines.append(f"{format_clock(block.start)} - {format_clock(block.end)} [{block.time_block_id}]")
            if not block.task_ids:
                lines.append("  (No tasks assigned)")
            for task_id in block.task_ids:
                task = task_map.get(task_id)
                detail = _task_line(task) if task else f"Task ID: {task_id} (details not available)"
                lines.append(f"  {bullet} {detail}")
        lines.append("")

    own_routine = [s for s in routine or [] if s.owner == owner]
    if own_routine:
        lines.extend(_header("Actual Routine", format))
        for session in sorted(own_routine, key=lambda s: s.start or _EPOCH):
            if session.start and session.end:
                lines.append(f"{format_clock(session.start)} - {format_clock(session.end)}")
            status = "Active" if session.is_active else "Inactive"
            if session.is_paused:
                status += ", Paused"
            lines.append(f"  Session: {session.session_name} ({status})")
            if session.linked_task:
                lines.append(f"  Linked Task: {session.linked_task.task_name}")
            if session.interrupt_reason:
                lines.append(f"  Interrupt Reason: {session.interrupt_reason}")
        lines.append("")

    total_min = sum(b.duration_min for b in blocks)
    lines.extend(_header(f"Adaptive Schedule ({_fmt_minutes(total_min)})", format))
    if not blocks:
        lines.append("No adaptive blocks scheduled yet.")
    for block in sorted(blocks, key=lambda b: b.start):
        lines.append(f"{format_clock(block.start)} - {format_clock(block.end)} [{block.time_block_id}]")
        if not block.task_set:
            lines.append("  (No tasks assigned)")
        for task in block.task_set:
            lines.append(f"  {bullet} {_task_line(task)}")
    lines.append("")

    lines.extend(_header("Dropped Tasks", format))
    if not dropped_ids:
        lines.append("No tasks were dropped.")
    for task_id in dropped_ids:
        task = task_map.get(task_id)
        if task is None:
            lines.append(f"{bullet} Task ID: {task_id}")
            continue
        lines.append(f"{bullet} {task.task_name}")
        lines.append(f"  Priority: {task.priority} ({task.priority_label})")
        lines.append(f"  Duration: {task.duration} minutes")
        if task.deadline:
            lines.append(f"  Deadline: {format_timestamp(task.deadline)}")

    return "\n".join(lines).rstrip() + "\n"
