# backend/gemhub/middleware/__init__.py
"""
ASGI middleware for GEM Hub.

Usage:
    from gemhub.middleware import CorrelationIdMiddleware

    app.add_middleware(CorrelationIdMiddleware)
"""

from gemhub.middleware.correlation import CorrelationIdMiddleware

__all__ = ["CorrelationIdMiddleware"]
