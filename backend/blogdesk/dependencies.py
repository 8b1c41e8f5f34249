"""
Blogdesk Backend: Shared FastAPI Dependencies
===============================================

What:  Accessors for the per-app collaborators built by `create_app()`
       (image host, auth gate), the admin gate dependency, and lenient
       pagination query parsing.
How:   Everything is read from `request.app.state`, so tests swap them with
       `app.dependency_overrides` or by building the app with fakes.
"""

from typing import Optional, Tuple

from fastapi import Depends, Query, Request

from blogdesk.services.auth_gate import AdminIdentity, AuthGate
from blogdesk.services.image_host_base import ImageHost
from blogdesk.services.params import parse_page_params


def get_image_host(request: Request) -> ImageHost:
    return request.app.state.image_host


def get_auth_gate(request: Request) -> AuthGate:
    return request.app.state.auth_gate


async def require_admin(
    request: Request,
    gate: AuthGate = Depends(get_auth_gate),
) -> AdminIdentity:
    """
    Router-level dependency for every admin router.

    Raises UnauthorizedError (→ 401) before the handler runs.
    """
    identity = await gate.authenticate(request)
    request.state.admin = identity
    return identity


def get_page_params(
    page: Optional[str] = Query(default=None, description="Page number, 1-based (default 1)"),
    limit: Optional[str] = Query(default=None, description="Page size (default 10)"),
) -> Tuple[int, int]:
    """Raw strings so bad values fall back to defaults instead of failing."""
    return parse_page_params(page, limit)
