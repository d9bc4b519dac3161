"""
Test fixtures for deterministic testing.

This module provides:
- scenarios: the pinned "Alex" day and helpers for building tasks and candidates
"""

from .scenarios import (
    CURRENT_TIME,
    OWNER,
    alex_good_response,
    alex_late_response,
    alex_preference,
    alex_routine,
    alex_schedule,
    alex_tasks,
    candidate_text,
    make_task,
)

__all__ = [
    "CURRENT_TIME",
    "OWNER",
    "alex_good_response",
    "alex_late_response",
    "alex_preference",
    "alex_routine",
    "alex_schedule",
    "alex_tasks",
    "candidate_text",
    "make_task",
]
