"""
Safety utilities for handling untrusted planner output.
"""

from .json_parse import ParseResult, extract_json_object, find_balanced_object

__all__ = [
    "ParseResult",
    "extract_json_object",
    "find_balanced_object",
]
