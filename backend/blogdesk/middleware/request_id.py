"""
Blogdesk Backend: Request ID Middleware
=========================================

What:  Tags every request with a short correlation ID.
How:   Accepts the client's X-Request-ID when it is a plain token (letters,
       digits, '-', '_', '.', at most 64 chars); anything else is replaced by a
       generated ID so headers cannot inject text into log lines. The ID lives
       in a ContextVar (reset after the request), on request.state, and in the
       response header.
Who:   Applied to every request; error bodies carry it as `request_id`.
"""

import re
import uuid
from contextvars import ContextVar
from typing import Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

REQUEST_ID_HEADER = "X-Request-ID"

_VALID_REQUEST_ID = re.compile(r"[A-Za-z0-9._-]{1,64}")

request_id_var: ContextVar[str] = ContextVar("request_id", default="")


def new_request_id() -> str:
    return uuid.uuid4().hex[:8]


def accepted_request_id(header_value: Optional[str]) -> str:
    """The client's ID when it is safe to log, a fresh one otherwise."""
    if header_value and _VALID_REQUEST_ID.fullmatch(header_value):
        return header_value
    return new_request_id()


def current_request_id(request: Request) -> str:
    """The ID for `request`, also outside the middleware's context."""
    return request_id_var.get("") or getattr(request.state, "request_id", "")


class RequestIDMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = accepted_request_id(request.headers.get(REQUEST_ID_HEADER))
        request.state.request_id = request_id
        token = request_id_var.set(request_id)
        try:
            response = await call_next(request)
        finally:
            request_id_var.reset(token)

        response.headers[REQUEST_ID_HEADER] = request_id
        return response
