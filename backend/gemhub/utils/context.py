# backend/gemhub/utils/context.py
"""
Correlation ID context for request and job tracing.

Uses contextvars, so the value follows async/await calls within one request
and stays isolated between the request handlers and the background price
refresh thread.

Usage:
    from gemhub.utils.context import correlation_scope, get_correlation_id

    # In middleware or at the start of a background job
    with correlation_scope("refresh-1a2b"):
        logger.info("...")  # stamped with refresh-1a2b
"""

import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar

_correlation_id_var: ContextVar[str | None] = ContextVar("correlation_id", default=None)


def get_correlation_id() -> str | None:
    """Correlation ID of the current request or job, or None."""
    return _correlation_id_var.get()


def set_correlation_id(correlation_id: str) -> None:
    _correlation_id_var.set(correlation_id)


def clear_correlation_id() -> None:
    _correlation_id_var.set(None)


def new_correlation_id(prefix: str | None = None) -> str:
    """Fresh UUID-based id, optionally prefixed ("refresh-<uuid>")."""
    value = str(uuid.uuid4())
    return f"{prefix}-{value}" if prefix else value


@contextmanager
def correlation_scope(correlation_id: str) -> Iterator[str]:
    """
    Set a correlation ID for the duration of a block.

    The previous value is restored on exit, even if the block raises.
    """
    token = _correlation_id_var.set(correlation_id)
    try:
        yield correlation_id
    finally:
        _correlation_id_var.reset(token)
