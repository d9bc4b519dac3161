"""
Contracts Module - Validation for untrusted planner candidates.

This module provides:
- candidate.py: Pydantic shape models and the best-effort candidate parser
- rules.py: Semantic consistency rules (the Validation Engine)

A candidate is committed only when the parser accepts its shape AND every
rule passes.
"""

from .candidate import (
    CandidateBlock,
    CandidateBlockEntry,
    CandidatePayload,
    ParsedCandidate,
    parse_candidate,
)
from .rules import (
    RULES,
    DependencyOrdering,
    RuleTag,
    ValidationContext,
    Violation,
    capacity_warnings,
    validate,
)

__all__ = [
    # Candidate
    "CandidateBlock",
    "CandidateBlockEntry",
    "CandidatePayload",
    "ParsedCandidate",
    "parse_candidate",
    # Rules
    "RULES",
    "DependencyOrdering",
    "RuleTag",
    "ValidationContext",
    "Violation",
    "capacity_warnings",
    "validate",
]
