"""
Scheduling request context with contextvars.

Every log record emitted while a request runs carries its request ID and owner.
"""

import contextvars
import uuid
from typing import Optional

_request_id_var: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar(
    "request_id", default=None
)
_owner_var: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar("owner", default=None)


def get_request_id() -> Optional[str]:
    """Get the current request ID from context."""
    return _request_id_var.get()


def get_owner() -> Optional[str]:
    """Get the owner of the current scheduling request."""
    return _owner_var.get()


def generate_request_id() -> str:
    """Generate a new request ID."""
    return f"req-{uuid.uuid4().hex[:16]}"


class ScheduleRequestContext:
    """
    Context manager for one scheduling request.

    Usage:
        with ScheduleRequestContext(owner="Alex") as ctx:
            logger.info("Applying candidate")
            # records inside this block carry ctx.request_id and owner
    """

    def __init__(self, owner: Optional[str] = None, request_id: Optional[str] = None):
        self.owner = owner
        self.request_id = request_id or generate_request_id()
        self._tokens: list[tuple[contextvars.ContextVar, contextvars.Token]] = []

    def __enter__(self) -> "ScheduleRequestContext":
        self._tokens = [
            (_request_id_var, _request_id_var.set(self.request_id)),
            (_owner_var, _owner_var.set(self.owner)),
        ]
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        for var, token in reversed(self._tokens):
            var.reset(token)
        self._tokens = []
