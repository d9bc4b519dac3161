"""
Safe JSON extraction from free-form planner text.

Instead of trusting the planner to return bare JSON, this module:
1. Finds the first balanced {...} object in the text (string-aware)
2. Catches only JSONDecodeError (not bare except)
3. Logs errors with snippet length, never the full content
4. Preserves a raw snippet for debugging
"""

import json
import logging
from dataclasses import dataclass
from typing import Any

logger = logging.getLogger(__name__)


@dataclass
class ParseResult:
    """Result of a safe JSON extraction."""

    value: Any  # Parsed value, or None on failure
    success: bool = True
    error: str | None = None
    raw_value: str | None = None  # Preserved for debugging


def _closing_brace(text: str, start: int) -> int | None:
    """Index of the brace closing the one at start, or None if it never closes."""
    depth = 0
    in_string = False
    escaped = False
    for pos in range(start, len(text)):
        char = text[pos]
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue
        if char == '"':
            in_string = True
        elif char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return pos
    return None


def find_balanced_object(text: str) -> str | None:
    """
    Return the first balanced {...} substring of text, or None.

    Braces inside JSON string literals (including escaped quotes) do not
    count toward the balance. A stray opening brace that never closes, such
    as one in the planner's prose, is skipped and the scan resumes at the
    next one.
    """
    start = text.find("{")
    while start != -1:
        end = _closing_brace(text, start)
        if end is not None:
            return text[start : end + 1]
        start = text.find("{", start + 1)
    return None


def _snippet(raw: str) -> str:
    return raw[:100] + "..." if len(raw) > 100 else raw


def extract_json_object(raw: str | None) -> ParseResult:
    """
    Extract and decode the first balanced JSON object in raw.

    Args:
        raw: Free-form text, e.g. an LLM response with prose or code fences

    Returns:
        ParseResult with the decoded object, or success=False and an error
    """
    if not raw:
        return ParseResult(value=None, success=False, error="empty response")

    if not isinstance(raw, str):
        logger.error(f"TypeError extracting JSON: expected str, got {type(raw).__name__}")
        return ParseResult(
            value=None,
            success=False,
            error=f"TypeError: expected str, got {type(raw).__name__}",
        )

    candidate = find_balanced_object(raw)
    if candidate is None:
        logger.warning(f"No JSON object found in response, raw_length={len(raw)}")
        return ParseResult(
            value=None, success=False, error="no JSON object found", raw_value=_snippet(raw)
        )

    try:
        value = json.loads(candidate)
    except json.JSONDecodeError as e:
        logger.error(
            f"JSONDecodeError in planner response: {e.msg} at pos {e.pos}, "
            f"raw_length={len(raw)}"
        )
        return ParseResult(
            value=None,
            success=False,
            error=f"JSONDecodeError: {e.msg} at position {e.pos}",
            raw_value=_snippet(candidate),
        )

    return ParseResult(value=value, success=True)
