# backend/gemhub/utils/__init__.py
"""
Cross-cutting utilities for GEM Hub.

- logging: Logging configuration with correlation ID support
- context: Correlation ID storage for requests and background jobs

Usage:
    from gemhub.utils import setup_logging
    from gemhub.utils import get_correlation_id, correlation_scope
"""

from gemhub.utils.context import (
    get_correlation_id,
    set_correlation_id,
    clear_correlation_id,
    new_correlation_id,
    correlation_scope,
)
from gemhub.utils.logging import setup_logging

__all__ = [
    # Logging
    "setup_logging",
    # Context
    "get_correlation_id",
    "set_correlation_id",
    "clear_correlation_id",
    "new_correlation_id",
    "correlation_scope",
]
