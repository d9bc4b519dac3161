"""
Test configuration: repo root on sys.path, plus determinism guards.

This allows tests to import from the top-level adaptive_schedule package and
from tests.fixtures. Enforces determinism by blocking live planner calls.
"""

import sys
from pathlib import Path

import pytest

# Add repo root to sys.path so tests can import adaptive_schedule.*, tests.fixtures.*
REPO_ROOT = Path(__file__).parent.parent
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from adaptive_schedule.planner import client as planner_client  # noqa: E402
from adaptive_schedule.schedule.block_store import AdaptiveBlockStore  # noqa: E402
from adaptive_schedule.scheduler import AdaptiveScheduler  # noqa: E402
from tests.fixtures import alex_tasks  # noqa: E402

# =============================================================================
# DETERMINISM GUARD: Block live planner access
# =============================================================================


def _live_client_forbidden(*args, **kwargs):
    raise RuntimeError(
        "DETERMINISM VIOLATION: a live Anthropic client was constructed.\n"
        "Pass a stub planner, or AnthropicPlanner(client=MagicMock())."
    )


@pytest.fixture(autouse=True)
def block_live_planner(monkeypatch):
    """No test may build a real network client."""
    monkeypatch.setattr(planner_client.anthropic, "Anthropic", _live_client_forbidden)


# =============================================================================
# SHARED FIXTURES
# =============================================================================


@pytest.fixture
def store():
    return AdaptiveBlockStore()


@pytest.fixture
def scheduler(store):
    return AdaptiveScheduler(store=store)


@pytest.fixture
def tasks():
    return alex_tasks()


@pytest.fixture
def task_map(tasks):
    return {task.task_id: task for task in tasks}


class StubPlanner:
    """Planner returning canned text and recording the prompts it saw."""

    def __init__(self, response: str):
        self.response = response
        self.prompts: list[str] = []

    def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        return self.response


@pytest.fixture
def stub_planner():
    return StubPlanner
