"""
Tests for the adaptive_schedule CLI.
"""

import json
import logging
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from adaptive_schedule.cli import EXIT_BAD_REQUEST, EXIT_OK, EXIT_REJECTED, build_parser, main
from tests.fixtures import alex_good_response, alex_late_response, candidate_text

REQUEST = str(Path(__file__).parent / "fixtures" / "requests" / "alex.yaml")


@pytest.fixture(autouse=True)
def restore_root_logging():
    """main() reconfigures the root logger; put it back after each test."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def response_file(tmp_path):
    def write(text: str) -> str:
        path = tmp_path / "response.txt"
        path.write_text(text)
        return str(path)

    return write


class TestParser:
    def test_command_required(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([])

    def test_apply_defaults(self):
        args = build_parser().parse_args(["apply", REQUEST, "-"])
        assert args.format == "plain"
        assert args.json is False
        assert args.ordering is None


class TestPromptCommand:
    def test_prints_prompt(self, capsys):
        assert main(["prompt", REQUEST]) == EXIT_OK
        out = capsys.readouterr().out
        assert "USER: Alex" in out
        assert "Submit Assignment (ID: task-1)" in out


class TestApplyCommand:
    def test_commit_prints_brief(self, capsys, response_file):
        code = main(["apply", REQUEST, response_file(alex_good_response())])

        out = capsys.readouterr().out
        assert code == EXIT_OK
        assert "Schedule for Alex" in out
        assert "Organize Notes" in out
        assert "PLANNER ANALYSIS" in out

    def test_commit_json(self, capsys, response_file):
        code = main(["apply", REQUEST, response_file(alex_good_response()), "--json"])

        data = json.loads(capsys.readouterr().out)
        assert code == EXIT_OK
        assert data["droppedTaskIds"] == ["task-5", "task-6"]
        assert len(data["adaptiveBlocks"]) == 4

    def test_rejection(self, capsys, response_file):
        code = main(["apply", REQUEST, response_file(alex_late_response())])

        out = capsys.readouterr().out
        assert code == EXIT_REJECTED
        assert "REJECTED: 1 VIOLATION(S)" in out
        assert "[deadline]" in out

    def test_rejection_json(self, capsys, response_file):
        code = main(["apply", REQUEST, response_file(alex_late_response()), "--json"])

        data = json.loads(capsys.readouterr().out)
        assert code == EXIT_REJECTED
        assert data["violations"][0]["rule"] == "deadline"

    def test_unparsable_response(self, capsys, response_file):
        assert main(["apply", REQUEST, response_file("no json")]) == EXIT_REJECTED
        assert "no structured payload" in capsys.readouterr().err

    def test_shape_error_details(self, capsys, response_file):
        assert main(["apply", REQUEST, response_file('{"blocks": []}')]) == EXIT_REJECTED
        assert "adaptiveBlocks" in capsys.readouterr().err

    def test_stdin(self, capsys, monkeypatch):
        monkeypatch.setattr("sys.stdin", MagicMock(read=MagicMock(return_value=alex_good_response())))
        assert main(["apply", REQUEST, "-"]) == EXIT_OK

    def test_missing_request_file(self, capsys, tmp_path):
        assert main(["apply", str(tmp_path / "nope.yaml"), "-"]) == EXIT_BAD_REQUEST

    def test_bad_request_file(self, capsys, tmp_path, response_file):
        bad = tmp_path / "bad.yaml"
        bad.write_text("tasks: []\n")
        assert main(["apply", str(bad), response_file(alex_good_response())]) == EXIT_BAD_REQUEST

    def test_bad_ordering_config(self, capsys, monkeypatch, response_file):
        monkeypatch.setattr("adaptive_schedule.config.DEPENDENCY_ORDERING", "alphabetical")
        assert main(["apply", REQUEST, response_file(alex_good_response())]) == EXIT_BAD_REQUEST
        assert "ADAPTIVE_DEPENDENCY_ORDERING" in capsys.readouterr().err


class TestPlanCommand:
    def test_plan_with_mocked_planner(self, capsys, tmp_path):
        saved = tmp_path / "saved.txt"
        with patch("adaptive_schedule.cli.AnthropicPlanner") as planner_cls:
            planner_cls.return_value.generate.return_value = alex_good_response()
            code = main(["plan", REQUEST, "--model", "test-model", "--save-response", str(saved)])

        assert code == EXIT_OK
        planner_cls.assert_called_once_with(model="test-model")
        assert saved.read_text() == alex_good_response()
        assert "Schedule for Alex" in capsys.readouterr().out

    def test_plan_saves_rejected_response(self, capsys, tmp_path):
        saved = tmp_path / "saved.txt"
        with patch("adaptive_schedule.cli.AnthropicPlanner") as planner_cls:
            planner_cls.return_value.generate.return_value = alex_late_response()
            code = main(["plan", REQUEST, "--save-response", str(saved)])

        assert code == EXIT_REJECTED
        assert saved.read_text() == alex_late_response()

    def test_plan_without_api_key(self, capsys, monkeypatch):
        monkeypatch.setattr("adaptive_schedule.config.ANTHROPIC_API_KEY", None)
        assert main(["plan", REQUEST]) == EXIT_BAD_REQUEST
        assert "ANTHROPIC_API_KEY" in capsys.readouterr().err


SHARED_REQUEST = """\
owner: Alex
currentTime: "2025-10-04T12:00:00Z"
tasks:
  - taskId: task-1
    taskName: Submit Assignment
    category: School
    duration: 60
    priority: 1
  - taskId: task-bob
    taskName: Bob secret
    category: Work
    duration: 60
    priority: 2
    owner: Bob
"""

BOTH_OWNERS_RESPONSE = candidate_text(
    [
        ("2025-10-04T12:00:00Z", "2025-10-04T13:00:00Z", ["task-1"]),
        ("2025-10-04T13:00:00Z", "2025-10-04T14:00:00Z", ["task-bob"]),
    ]
)


class TestOwnerFiltering:
    """Every command sees only the requesting owner's tasks."""

    @pytest.fixture
    def shared_request(self, tmp_path):
        path = tmp_path / "shared.yaml"
        path.write_text(SHARED_REQUEST)
        return str(path)

    def test_prompt_omits_other_owner(self, capsys, shared_request):
        assert main(["prompt", shared_request]) == EXIT_OK
        out = capsys.readouterr().out
        assert "Submit Assignment" in out
        assert "Bob secret" not in out

    def test_apply_rejects_other_owner_task(self, capsys, shared_request, response_file):
        code = main(["apply", shared_request, response_file(BOTH_OWNERS_RESPONSE), "--json"])

        data = json.loads(capsys.readouterr().out)
        assert code == EXIT_REJECTED
        assert [v["rule"] for v in data["violations"]] == ["unknown_task"]
        assert data["violations"][0]["taskIds"] == ["task-bob"]

    def test_plan_rejects_other_owner_task(self, capsys, shared_request):
        with patch("adaptive_schedule.cli.AnthropicPlanner") as planner_cls:
            planner_cls.return_value.generate.return_value = BOTH_OWNERS_RESPONSE
            code = main(["plan", shared_request, "--json"])

        prompt = planner_cls.return_value.generate.call_args.args[0]
        assert code == EXIT_REJECTED
        assert "Bob secret" not in prompt
        assert json.loads(capsys.readouterr().out)["violations"][0]["rule"] == "unknown_task"
