"""
Observability module: structured logging and request context.

Usage:
    from adaptive_schedule.observability import get_logger, ScheduleRequestContext

    logger = get_logger(__name__)

    with ScheduleRequestContext(owner="Alex") as ctx:
        logger.info("Applying candidate", extra={"blocks": 3})
        # records carry ctx.request_id and owner="Alex"
"""

from .context import ScheduleRequestContext, generate_request_id, get_owner, get_request_id
from .logging import (
    HumanFormatter,
    JSONFormatter,
    ScheduleContextFilter,
    configure_logging,
    get_logger,
)

__all__ = [
    # Logging
    "get_logger",
    "configure_logging",
    "JSONFormatter",
    "HumanFormatter",
    "ScheduleContextFilter",
    # Context
    "ScheduleRequestContext",
    "generate_request_id",
    "get_request_id",
    "get_owner",
]
