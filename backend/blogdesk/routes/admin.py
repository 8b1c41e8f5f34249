"""
Blogdesk Backend: Admin Session Routes
========================================

What:  POST /api/admin/login issues an access token; GET /api/admin/me
       returns the admin behind the presented token.
"""

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from blogdesk.database import get_db_session
from blogdesk.dependencies import require_admin
from blogdesk.exceptions import NotFoundError, UnauthorizedError
from blogdesk.schemas.admin import AdminResponse, LoginRequest, LoginResponse
from blogdesk.schemas.common import ErrorResponse
from blogdesk.services.admin_service import admin_service
from blogdesk.services.auth_gate import AdminIdentity

router = APIRouter(prefix="/api/admin", tags=["Admin"])


@router.post(
    "/login",
    response_model=LoginResponse,
    responses={401: {"description": "Invalid credentials", "model": ErrorResponse}},
)
async def login(
    data: LoginRequest,
    request: Request,
    db: AsyncSession = Depends(get_db_session),
) -> LoginResponse:
    return await admin_service.login(db, data, request.app.state.auth_gate)


@router.get(
    "/me",
    response_model=AdminResponse,
    responses={401: {"description": "Missing or invalid token", "model": ErrorResponse}},
)
async def me(
    identity: AdminIdentity = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
):
    try:
        return await admin_service.get_admin(db, identity.id)
    except NotFoundError:
        # Valid token for an admin that no longer exists
        raise UnauthorizedError(context={"reason": "admin not found", "admin_id": identity.id})
