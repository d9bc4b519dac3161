"""
Planner prompt builder.

Describes the owner's remaining tasks, the original plan, the logged routine,
preferences and existing adaptive blocks, then pins down the JSON contract
that `contracts.candidate.CandidatePayload` parses.
"""

from datetime import datetime

from adaptive_schedule.schedule.models import AdaptiveBlock, PlannedBlock, Preference, Session, Task
from adaptive_schedule.schedule.timeparse import format_timestamp

RESPONSE_CONTRACT = """{
  "analysis": "Brief analysis of why the routine deviated from the plan and key insights",
  "adaptiveBlocks": [
    {"start": "ISO timestamp", "end": "ISO timestamp", "taskIds": ["taskId1", "taskId2"]}
  ],
  "droppedTaskIds": ["taskId3", "taskId4"]
}"""

PRIORITY_SCALE = """TASK PRIORITY SCALE (1-5):
- 1 (Critical): must be done ASAP, urgent deadlines or emergencies
- 2 (Important): should be done soon, upcoming deadlines or high impact
- 3 (Regular): necessary but not urgent
- 4 (Low): can be done later
- 5 (Optional): only if time permits"""

RULES = """SCHEDULING RULES:
1. Schedule ONLY the tasks listed above. Never invent task ids.
2. Use ISO 8601 timestamps (e.g. "2025-10-04T14:00:00Z"); every block starts before it ends.
3. If a current time is given, every block starts at or after it.
4. A block must be at least as long as the total duration of the tasks in it.
5. A task with a deadline must be finished before that deadline. Never schedule any part of it later.
6. Prerequisites ("Depends on") must be scheduled in an earlier block than the tasks that need them.
7. Put two tasks in overlapping time only if one of them can run concurrently with other work.
8. Schedule each task id in at most one block.
9. If time is insufficient, drop the lowest priority tasks without urgent deadlines into droppedTaskIds.
   A task is either scheduled or dropped, never both."""


def tasks_to_text(tasks: list[Task]) -> str:
    if not tasks:
        return "(No tasks)"

    entries = []
    for task in tasks:
        lines = [
            f"- {task.task_name} (ID: {task.task_id})",
            f"  Category: {task.category}",
            f"  Duration: {task.duration} minutes",
            f"  Priority: {task.priority}",
            f"  Splittable: {str(task.splittable).lower()}",
        ]
        if task.deadline:
            lines.append(f"  Deadline: {format_timestamp(task.deadline)}")
        if task.slack:
            lines.append(f"  Slack: {task.slack}")
        if task.pre_dependence:
            deps = ", ".join(f"{dep.task_name} ({dep.task_id})" for dep in task.pre_dependence)
            lines.append(f"  Depends on: {deps}")
        if task.concurrent:
            lines.append("  Can run concurrently with other tasks")
        if task.note:
            lines.append(f"  Note: {task.note}")
        entries.append("\n".join(lines))
    return "\n\n".join(entries)


def schedule_to_text(schedule: list[PlannedBlock]) -> str:
    if not schedule:
        return "(No planned schedule)"
    return "\n".join(
        f"- {format_timestamp(block.start)} to {format_timestamp(block.end)}: "
        f"{', '.join(block.task_ids) or '(no tasks)'}"
        for block in schedule
    )


def routine_to_text(routine: list[Session]) -> str:
    if not routine:
        return "(No recorded routine)"

    entries = []
    for session in routine:
        lines = [
            f"- {session.session_name} (ID: {session.session_id})",
            f"  Active: {str(session.is_active).lower()}, Paused: {str(session.is_paused).lower()}",
        ]
        if session.start:
            lines.append(f"  Start: {format_timestamp(session.start)}")
        if session.end:
            lines.append(f"  End: {format_timestamp(session.end)}")
        if session.linked_task:
            lines.append(f"  Linked Task: {session.linked_task.task_name}")
        if session.interrupt_reason:
            lines.append(f"  Interrupt Reason: {session.interrupt_reason}")
        entries.append("\n".join(lines))
    return "\n\n".join(entries)


def blocks_to_text(blocks: list[AdaptiveBlock]) -> str:
    if not blocks:
        return "(No existing adaptive blocks)"
    return "\n".join(
        f"- {block.time_block_id}: {format_timestamp(block.start)} to {format_timestamp(block.end)}: "
        f"{', '.join(task.task_name for task in block.task_set) or '(no tasks)'}"
        for block in blocks
    )


def build_prompt(
    owner: str,
    tasks: list[Task],
    schedule: list[PlannedBlock],
    routine: list[Session],
    preference: Preference,
    existing_blocks: list[AdaptiveBlock] | None = None,
    current_time: datetime | None = None,
) -> str:
    """
    Build the adaptive scheduling prompt for one owner.

    Inputs are expected to be filtered to the owner already.
    """
    sections = [
        "You are a scheduling assistant. Build an adaptive schedule for the user from their "
        "remaining tasks, the original plan, what actually happened, and their preferences.",
        f"USER: {owner}",
    ]

    if current_time is not None:
        stamp = format_timestamp(current_time)
        sections.append(
            f"CURRENT TIME: {stamp}\nEvery time block MUST start at or after {stamp}."
        )

    prefs = "\n".join(f"- {p}" for p in preference.preferences) or "(No stated preferences)"
    sections.extend(
        [
            f"USER PREFERENCES:\n{prefs}",
            "TASKS TO SCHEDULE (each still needs the listed duration):\n" + tasks_to_text(tasks),
            "PLANNED SCHEDULE (original plan):\n" + schedule_to_text(schedule),
            "ACTUAL ROUTINE (what happened):\n" + routine_to_text(routine),
            "EXISTING ADAPTIVE BLOCKS (will be replaced):\n" + blocks_to_text(existing_blocks or []),
            PRIORITY_SCALE,
            RULES,
            "Return ONLY a JSON object with this structure, no other text:\n" + RESPONSE_CONTRACT,
        ]
    )
    return "\n\n".join(sections) + "\n"
