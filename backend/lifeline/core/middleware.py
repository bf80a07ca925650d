"""
Request middleware — correlation ids and the access log.

Every response carries X-Request-ID (echoed from the caller when supplied)
and X-Process-Time. Log lines emitted while a request is in flight carry the
same id through ``RequestIdFilter``.
"""

from __future__ import annotations

import logging
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from backend.lifeline.core.logging_config import bind_request_id, reset_request_id

logger = logging.getLogger(__name__)

# Paths that never produce an access-log line
QUIET_PREFIXES = ("/docs", "/redoc", "/openapi", "/favicon", "/health/live")


def _access_level(status_code: int) -> int:
    if status_code >= 500:
        return logging.ERROR
    if status_code >= 400:
        return logging.WARNING
    return logging.INFO


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Tag each request with an id, time it and write one access line."""

    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex[:16]
        path = request.url.path
        token = bind_request_id(request_id)
        start = time.perf_counter()
        status_code = 500

        try:
            response = await call_next(request)
            status_code = response.status_code
            response.headers["X-Request-ID"] = request_id
            response.headers["X-Process-Time"] = (
                f"{(time.perf_counter() - start) * 1000:.1f}ms"
            )
            return response
        finally:
            duration_ms = (time.perf_counter() - start) * 1000
            if status_code >= 500 or not path.startswith(QUIET_PREFIXES):
                logger.log(
                    _access_level(status_code),
                    "%s %s → %d (%.1fms)",
                    request.method, path, status_code, duration_ms,
                    extra={
                        "duration_ms": round(duration_ms, 1),
                        "status_code": status_code,
                        "endpoint": path,
                    },
                )
            reset_request_id(token)
