"""
Blogdesk Backend: Access Log Middleware
=========================================

What:  One line per HTTP request on the `blogdesk.access` logger.
How:   Times the handler, then logs method, path, status, duration, response
       size, request ID, client IP and, on admin routes, the authenticated
       admin's email. Requests that raise are logged as 500 before the
       exception continues to the catch-all handler.

Level by status:
    5xx / raised → ERROR
    4xx          → WARNING
    otherwise    → INFO

Not logged: request bodies, uploaded files, Authorization headers, query
strings. GET /_health is skipped.
"""

import logging
import time
from typing import Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from blogdesk.middleware.request_id import current_request_id

logger = logging.getLogger("blogdesk.access")

SKIP_PATHS = {"/_health"}


def level_for_status(status: int) -> int:
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


def _admin_email(request: Request) -> Optional[str]:
    # Set by the require_admin dependency once the auth gate admits the request
    identity = getattr(request.state, "admin", None)
    return getattr(identity, "email", None)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if request.url.path in SKIP_PATHS:
            return await call_next(request)

        started = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            self._log(request, 500, started, size=None)
            raise

        self._log(request, response.status_code, started, size=response.headers.get("content-length"))
        return response

    @staticmethod
    def _log(request: Request, status: int, started: float, size: Optional[str]) -> None:
        duration_ms = (time.perf_counter() - started) * 1000
        request_id = current_request_id(request)
        client_ip = request.client.host if request.client else "unknown"
        admin = _admin_email(request)

        logger.log(
            level_for_status(status),
            "%s %s %d %.1fms %sB [%s] from %s%s",
            request.method,
            request.url.path,
            status,
            duration_ms,
            size or "-",
            request_id,
            client_ip,
            f" admin={admin}" if admin else "",
            extra={
                "request_id": request_id,
                "method": request.method,
                "path": request.url.path,
                "status": status,
                "duration_ms": round(duration_ms, 2),
                "response_bytes": int(size) if size and size.isdigit() else None,
                "client_ip": client_ip,
                "admin": admin,
            },
        )
