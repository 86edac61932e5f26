"""
Correlation IDs for tracing one request, trigger or job through the logs.

The ID lives in a context variable, so concurrent deliveries started from one
request (asyncio.gather) all log under the same ID.
"""

import uuid
from contextvars import ContextVar
from typing import Optional

correlation_id_var: ContextVar[str] = ContextVar("correlation_id", default="")


def generate_correlation_id() -> str:
    """
    Generate a short correlation ID.

    Returns:
        8-character hexadecimal string, short enough to quote in a bug report.
    """
    return uuid.uuid4().hex[:8]


def get_correlation_id() -> str:
    """Get the current correlation ID, or "" outside any request or job."""
    return correlation_id_var.get()


def set_correlation_id(correlation_id: str) -> None:
    """Set the correlation ID for the current context."""
    correlation_id_var.set(correlation_id)


def bind_correlation_id(incoming: Optional[str] = None) -> str:
    """
    Adopt an upstream correlation ID or start a new one.

    Used by the HTTP middleware (X-Correlation-ID header) and by CLI tasks,
    which have no upstream.

    Args:
        incoming: ID supplied by the caller, if any

    Returns:
        The ID now bound to the current context
    """
    correlation_id = (incoming or "").strip()[:64] or generate_correlation_id()
    set_correlation_id(correlation_id)
    return correlation_id
