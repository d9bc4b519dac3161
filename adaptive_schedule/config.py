"""
Centralized configuration for Adaptive Schedule.

All values that vary by deployment belong here.
Override via environment variables where marked.
"""

import os

# ============================================================
# Planner
# ============================================================

PLANNER_MODEL: str = os.environ.get("ADAPTIVE_PLANNER_MODEL", "claude-3-5-haiku-latest")
"""Model name passed to the Anthropic messages API."""

PLANNER_MAX_TOKENS: int = int(os.environ.get("ADAPTIVE_PLANNER_MAX_TOKENS", "4096"))
"""Upper bound on the planner response length."""

ANTHROPIC_API_KEY: str | None = os.environ.get("ANTHROPIC_API_KEY")
"""API key for the default planner client. Unset means the client cannot be built."""

# ============================================================
# Validation
# ============================================================

CONCURRENCY_MARKER: str = os.environ.get("ADAPTIVE_CONCURRENCY_MARKER") or "concurrent"
"""Case-insensitive note marker that lets a task overlap other work. Empty means the default."""

DEPENDENCY_ORDERING: str = (os.environ.get("ADAPTIVE_DEPENDENCY_ORDERING") or "emission").strip().lower()
"""How prerequisite order is judged: 'emission' (block list position) or 'chronological'."""

# ============================================================
# Logging
# ============================================================

LOG_LEVEL: str = os.environ.get("ADAPTIVE_LOG_LEVEL", "INFO")
"""Root log level used by the CLI."""

_log_json = os.environ.get("ADAPTIVE_LOG_JSON", "").lower()
LOG_JSON: bool | None = {"1": True, "true": True, "0": False, "false": False}.get(_log_json)
"""Force JSON (true) or human (false) log lines. Unset auto-detects from the TTY."""
