"""
Pressroom Backend: Request ID Middleware
========================================

What:  Tags every request with a short correlation id.
How:   Reuses the caller's X-Request-ID header when it is a plain token
       (letters, digits, `.`, `_`, `-`, at most 64 chars); anything else is
       replaced by a generated id. The id lives in a ContextVar (read by loggers
       and the exception handlers) and in request.state, and is echoed in the
       response header.

Error bodies carry the same id as `request_id`, so a client can quote it when
reporting a failed upload or email.
"""

import re
import uuid
from contextvars import ContextVar
from typing import Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

REQUEST_ID_HEADER = "X-Request-ID"

# Coroutine-local: concurrent requests on the same loop each see their own id
request_id_var: ContextVar[str] = ContextVar("request_id", default="")

# Ends up verbatim in log lines and a response header
_CLIENT_ID_PATTERN = re.compile(r"[A-Za-z0-9._-]{1,64}")


def new_request_id() -> str:
    return uuid.uuid4().hex[:8]


def accepted_client_id(raw: Optional[str]) -> Optional[str]:
    """The caller's id if it is safe to log and echo, else None."""
    if raw and _CLIENT_ID_PATTERN.fullmatch(raw):
        return raw
    return None


class RequestIDMiddleware(BaseHTTPMiddleware):

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = accepted_client_id(request.headers.get(REQUEST_ID_HEADER)) or new_request_id()
        # Not reset afterwards: the outermost 500 handler still reads it
        request_id_var.set(rid)
        request.state.request_id = rid

        response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = rid
        return response
