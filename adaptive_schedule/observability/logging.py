"""
Log formatting for scheduling requests.

Records carry the request id and owner of the ScheduleRequestContext they were
emitted in. ScheduleContextFilter stamps them onto the record at emit time;
formatters fall back to the live context for records that bypassed the filter.
"""

import json
import logging
import sys
from datetime import UTC, datetime
from typing import Any

from .context import get_owner, get_request_id

# Attributes every LogRecord has; anything else arrived through `extra=`
_STANDARD_ATTRS = frozenset(logging.LogRecord("", 0, "", 0, "", (), None).__dict__) | {"message"}
_CONTEXT_ATTRS = ("request_id", "owner")

# Planner SDK transport loggers, chatty at INFO
_NOISY_LOGGERS = ("anthropic", "httpx", "httpcore")


def _context_of(record: logging.LogRecord) -> tuple[str | None, str | None]:
    request_id = getattr(record, "request_id", None) or get_request_id()
    owner = getattr(record, "owner", None) or get_owner()
    return request_id, owner


class ScheduleContextFilter(logging.Filter):
    """Copies the current request id and owner onto each record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id, record.owner = _context_of(record)
        return True


class JSONFormatter(logging.Formatter):
    """
    One JSON object per line.

    {
        "timestamp": "2025-10-04T12:00:00.000Z",
        "level": "INFO",
        "logger": "adaptive_schedule.scheduler",
        "message": "Committed candidate for Alex: 4 block(s), 2 dropped, 0 warning(s)",
        "request_id": "req-3f9c2a7d1e4b8a60",
        "owner": "Alex",
        ...extra fields
    }
    """

    def format(self, record: logging.LogRecord) -> str:
        created = datetime.fromtimestamp(record.created, UTC)
        entry: dict[str, Any] = {
            "timestamp": created.isoformat(timespec="milliseconds").replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        request_id, owner = _context_of(record)
        if request_id:
            entry["request_id"] = request_id
        if owner:
            entry["owner"] = owner

        entry.update(
            (key, value)
            for key, value in record.__dict__.items()
            if key not in _STANDARD_ATTRS and key not in _CONTEXT_ATTRS
        )

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


class HumanFormatter(logging.Formatter):
    """Single-line format for terminals: time, level, logger, request, owner."""

    def format(self, record: logging.LogRecord) -> str:
        request_id, owner = _context_of(record)
        parts = [
            datetime.fromtimestamp(record.created).strftime("%Y-%m-%d %H:%M:%S"),
            f"[{record.levelname}]",
            f"{record.name}:",
        ]
        if request_id:
            parts.append(f"[{request_id[:12]}]")
        if owner:
            parts.append(f"({owner})")
        parts.append(record.getMessage())

        line = " ".join(parts)
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


def configure_logging(level: str = "INFO", json_format: bool | None = None) -> None:
    """
    Route all logging to stderr through one handler.

    Args:
        level: Root log level name (DEBUG, INFO, ...)
        json_format: JSON lines if True, human lines if False, and
            auto-detected from whether stderr is a terminal if None
    """
    if json_format is None:
        json_format = not sys.stderr.isatty()

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(JSONFormatter() if json_format else HumanFormatter())
    handler.addFilter(ScheduleContextFilter())

    root = logging.getLogger()
    root.setLevel(level.upper())
    root.handlers[:] = [handler]

    sdk_level = logging.DEBUG if root.level <= logging.DEBUG else logging.WARNING
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(sdk_level)


def get_logger(name: str) -> logging.Logger:
    """
    Module logger. Equivalent to logging.getLogger(name).

        logger = get_logger(__name__)
        logger.info("Committed", extra={"blocks": 3})
    """
    return logging.getLogger(name)
