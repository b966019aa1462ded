"""
Pressroom Backend: Access Log Middleware
========================================

What:  One log line per request: method, path, status, duration, response size,
       request id, client.
How:   Level follows the outcome:
           5xx, or an exception escaping the app   → ERROR
           4xx, or slower than slow_request_ms     → WARNING
           anything else                           → INFO
       Only the path is logged. The query string is dropped because
       /screenshot forwards it to the target site.

Never logged: request bodies (contact forms carry personal data), uploaded
files, and the Authorization header.

Example:
    POST /news 201 84.2ms 412B [3f9c2a1b] from 10.0.0.7
    GET /screenshot/https://example.com 200 6120.4ms 183004B [a71d09ce] from 10.0.0.7 SLOW
"""

import logging
import time
from typing import Iterable

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from pressroom.middleware.request_id import request_id_var

logger = logging.getLogger("pressroom.access")

DEFAULT_QUIET_PATHS = ("/health",)


def level_for(status: int, duration_ms: float, slow_request_ms: float) -> int:
    if status >= 500:
        return logging.ERROR
    if status >= 400 or duration_ms >= slow_request_ms:
        return logging.WARNING
    return logging.INFO


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Args:
        slow_request_ms:  Duration above which a successful request is a WARNING
        quiet_paths:      Exact paths that are never logged (health checks)
    """

    def __init__(
        self,
        app: ASGIApp,
        slow_request_ms: float = 5_000,
        quiet_paths: Iterable[str] = DEFAULT_QUIET_PATHS,
    ):
        super().__init__(app)
        self.slow_request_ms = slow_request_ms
        self.quiet_paths = frozenset(quiet_paths)

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        if path in self.quiet_paths:
            return await call_next(request)

        client_ip = request.client.host if request.client else "unknown"
        started = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            logger.exception(
                "%s %s failed after %.1fms [%s] from %s",
                request.method,
                path,
                (time.perf_counter() - started) * 1000,
                request_id_var.get(""),
                client_ip,
            )
            raise

        duration_ms = (time.perf_counter() - started) * 1000
        status = response.status_code
        size = response.headers.get("content-length", "?")
        slow = duration_ms >= self.slow_request_ms
        rid = request_id_var.get("")

        logger.log(
            level_for(status, duration_ms, self.slow_request_ms),
            "%s %s %d %.1fms %sB [%s] from %s%s",
            request.method,
            path,
            status,
            duration_ms,
            size,
            rid,
            client_ip,
            " SLOW" if slow else "",
            extra={
                "request_id": rid,
                "status": status,
                "duration_ms": round(duration_ms, 2),
                "slow": slow,
            },
        )
        return response
