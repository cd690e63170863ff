"""Request correlation ids carried across async boundaries.

The logging middleware sets the id from the X-Correlation-ID header (or a
fresh one) at the start of each request; every structlog entry emitted
while serving that request picks it up.
"""

from contextvars import ContextVar
from typing import Any

from uuid6 import uuid7

_correlation_id: ContextVar[str] = ContextVar("correlation_id", default="")


def generate_correlation_id() -> str:
    """Return a new time-ordered correlation id."""
    return str(uuid7())


def get_correlation_id() -> str:
    """Return the correlation id of the current context, or ""."""
    return _correlation_id.get()


def set_correlation_id(correlation_id: str) -> None:
    """Bind a correlation id to the current context."""
    _correlation_id.set(correlation_id)


def correlation_id_processor(
    logger: Any, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Structlog processor adding correlation_id when one is set.

    An explicitly bound correlation_id wins over the context value.
    """
    correlation_id = get_correlation_id()
    if correlation_id and "correlation_id" not in event_dict:
        event_dict["correlation_id"] = correlation_id
    return event_dict
