# backend/gemhub/middleware/correlation.py
"""
Correlation ID middleware for request tracing.

Correlation ID sources, in order of precedence:
1. X-Correlation-ID header
2. X-Request-ID header
3. A fresh UUID

The chosen ID is stored in context for the duration of the request (so
every log line carries it) and echoed in the X-Correlation-ID response
header.

Usage:
    app = FastAPI()
    app.add_middleware(CorrelationIdMiddleware)
"""

from typing import Awaitable, Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from gemhub.utils.context import correlation_scope, new_correlation_id

CORRELATION_ID_HEADER = "X-Correlation-ID"
REQUEST_ID_HEADER = "X-Request-ID"


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    """Assigns each request a correlation ID and echoes it on the response."""

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        correlation_id = (
            request.headers.get(CORRELATION_ID_HEADER)
            or request.headers.get(REQUEST_ID_HEADER)
            or new_correlation_id()
        )

        with correlation_scope(correlation_id):
            response = await call_next(request)
            response.headers[CORRELATION_ID_HEADER] = correlation_id
            return response
