"""
Timestamp parsing for block boundaries and deadlines.

Accepts ISO-8601 strings (a trailing 'Z' included) or datetime objects.
Naive values are read as UTC so every comparison is between aware datetimes.
"""

from datetime import UTC, datetime


def parse_timestamp(value) -> datetime:
    """
    Parse value into an aware datetime.

    Raises:
        ValueError: If value is not a datetime or an ISO-8601 string
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value.strip():
        parsed = datetime.fromisoformat(value.strip())
    else:
        raise ValueError(f"Not a timestamp: {value!r}")

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def parse_optional_timestamp(value) -> datetime | None:
    """parse_timestamp, passing None (and empty strings) through as None."""
    if value is None or value == "":
        return None
    return parse_timestamp(value)


def format_timestamp(value: datetime) -> str:
    """ISO-8601 in UTC with a 'Z' suffix, the form planners are asked to emit."""
    return value.astimezone(UTC).strftime("%Y-%m-%dT%H:%M:%SZ")


def format_clock(value: datetime) -> str:
    """Readable 12-hour clock time in UTC, e.g. '1:40 PM UTC'."""
    utc = value.astimezone(UTC)
    hour = utc.hour % 12 or 12
    period = "PM" if utc.hour >= 12 else "AM"
    return f"{hour}:{utc.minute:02d} {period} UTC"


def minutes_between(start: datetime, end: datetime) -> float:
    """Wall-clock length of [start, end) in minutes."""
    return (end - start).total_seconds() / 60
