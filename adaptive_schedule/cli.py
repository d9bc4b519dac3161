"""
Adaptive Schedule CLI

Usage:
    python -m adaptive_schedule prompt request.yaml
    python -m adaptive_schedule apply request.yaml response.txt [--format plain] [--json]
    python -m adaptive_schedule plan request.yaml [--save-response out.txt]

`apply` validates a saved planner response ('-' reads stdin) against a
request file and prints the committed schedule, or every violation found.
`plan` calls the configured planner first.

Exit codes: 0 committed, 1 candidate rejected, 2 unusable request.
"""

import argparse
import json
import logging
import sys

from adaptive_schedule import config
from adaptive_schedule.errors import (
    ConfigError,
    ParseError,
    PlannerConfigError,
    ShapeError,
    TaskGraphError,
    ValidationError,
)
from adaptive_schedule.observability import configure_logging
from adaptive_schedule.planner.client import AnthropicPlanner
from adaptive_schedule.planner.prompt import build_prompt
from adaptive_schedule.request import ScheduleRequest, load_request
from adaptive_schedule.scheduler import AdaptiveScheduler, CommitResult

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_REJECTED = 1
EXIT_BAD_REQUEST = 2


def print_header(text: str):
    """Print a section header."""
    print(f"\n{'═' * 50}")
    print(f"  {text}")
    print(f"{'═' * 50}")


class _RecordingPlanner:
    """Wraps a planner and keeps the last raw response."""

    def __init__(self, planner):
        self.planner = planner
        self.last_response: str | None = None

    def generate(self, prompt: str) -> str:
        self.last_response = self.planner.generate(prompt)
        return self.last_response


def _report_commit(scheduler: AdaptiveScheduler, request: ScheduleRequest, result: CommitResult, args) -> int:
    if args.json:
        print(json.dumps(result.to_dict(), indent=2, default=str))
        return EXIT_OK

    print(
        scheduler.render_brief(
            request.owner,
            tasks=request.tasks,
            planned=request.schedule,
            routine=request.routine,
            preference=request.preference,
            current_time=request.current_time,
            format=args.format,
        )
    )
    if result.analysis:
        print_header("PLANNER ANALYSIS")
        print(result.analysis)
    if result.warnings:
        print_header(f"WARNINGS ({len(result.warnings)})")
        for warning in result.warnings:
            print(f"  - {warning}")
    return EXIT_OK


def _report_rejection(error: ValidationError, args) -> int:
    if args.json:
        payload = {
            "violations": [v.to_dict() for v in error.violations],
            "warnings": error.warnings,
        }
        print(json.dumps(payload, indent=2))
        return EXIT_REJECTED

    print_header(f"REJECTED: {len(error.violations)} VIOLATION(S)")
    for violation in error.violations:
        print(f"  [{violation.rule}] {violation.message}")
    if error.warnings:
        print_header(f"WARNINGS ({len(error.warnings)})")
        for warning in error.warnings:
            print(f"  - {warning}")
    return EXIT_REJECTED


def _commit(scheduler: AdaptiveScheduler, request: ScheduleRequest, args, run) -> int:
    try:
        result = run()
    except ValidationError as e:
        return _report_rejection(e, args)
    except ShapeError as e:
        print(f"❌ {e}", file=sys.stderr)
        for detail in e.errors:
            print(f"   {detail}", file=sys.stderr)
        return EXIT_REJECTED
    except ParseError as e:
        print(f"❌ {e}", file=sys.stderr)
        return EXIT_REJECTED
    return _report_commit(scheduler, request, result, args)


def _load_request(args) -> ScheduleRequest:
    """Request file narrowed to the requesting owner's own entries."""
    return load_request(args.request).for_owner()


def cmd_prompt(args) -> int:
    """Print the planner prompt for a request."""
    request = _load_request(args)
    print(
        build_prompt(
            request.owner,
            request.tasks,
            request.schedule,
            request.routine,
            request.preference,
            current_time=request.current_time,
        )
    )
    return EXIT_OK


def cmd_apply(args) -> int:
    """Validate and commit a saved planner response."""
    request = _load_request(args)
    if args.response == "-":
        raw_text = sys.stdin.read()
    else:
        with open(args.response) as f:
            raw_text = f.read()

    scheduler = AdaptiveScheduler(ordering=args.ordering)
    return _commit(
        scheduler,
        request,
        args,
        lambda: scheduler.apply_candidate(request.owner, raw_text, request.tasks),
    )


def cmd_plan(args) -> int:
    """Call the planner for a request, then validate and commit."""
    request = _load_request(args)
    planner = _RecordingPlanner(AnthropicPlanner(model=args.model))
    scheduler = AdaptiveScheduler(ordering=args.ordering)

    try:
        return _commit(
            scheduler,
            request,
            args,
            lambda: scheduler.request_adaptive_schedule(
                request.owner,
                request.tasks,
                schedule=request.schedule,
                routine=request.routine,
                preference=request.preference,
                planner=planner,
                current_time=request.current_time,
            ),
        )
    finally:
        if args.save_response and planner.last_response is not None:
            with open(args.save_response, "w") as f:
                f.write(planner.last_response)
            logger.info(f"Saved planner response to {args.save_response}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="adaptive_schedule",
        description="Validate and commit LLM-proposed adaptive schedules",
    )
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default=config.LOG_LEVEL,
    )
    sub = parser.add_subparsers(dest="command", required=True)

    p_prompt = sub.add_parser("prompt", help="Print the planner prompt for a request")
    p_prompt.add_argument("request", help="Request file (YAML or JSON)")
    p_prompt.set_defaults(func=cmd_prompt)

    for name, func, help_text in (
        ("apply", cmd_apply, "Validate and commit a saved planner response"),
        ("plan", cmd_plan, "Call the planner, then validate and commit"),
    ):
        p = sub.add_parser(name, help=help_text)
        p.add_argument("request", help="Request file (YAML or JSON)")
        if name == "apply":
            p.add_argument("response", help="Planner response file, or '-' for stdin")
        else:
            p.add_argument("--model", default=None, help="Planner model override")
            p.add_argument("--save-response", default=None, help="Write the raw planner response here")
        p.add_argument("--format", choices=["markdown", "plain"], default="plain")
        p.add_argument("--json", action="store_true", help="Emit the result as JSON")
        p.add_argument(
            "--ordering",
            choices=["emission", "chronological"],
            default=None,
            help="Dependency ordering (default: ADAPTIVE_DEPENDENCY_ORDERING)",
        )
        p.set_defaults(func=func)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level, json_format=config.LOG_JSON)

    try:
        return args.func(args)
    except (ShapeError, TaskGraphError, ConfigError, PlannerConfigError) as e:
        print(f"❌ {e}", file=sys.stderr)
        return EXIT_BAD_REQUEST
    except OSError as e:
        print(f"❌ {e}", file=sys.stderr)
        return EXIT_BAD_REQUEST


if __name__ == "__main__":
    sys.exit(main())
