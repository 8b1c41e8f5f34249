"""
Blogdesk Backend: Admin Service
=================================

What:  Admin login (credentials → access token) and admin provisioning for
       the `blogdesk-admin init` command.
"""

import logging
from typing import Tuple

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from blogdesk.database import translate_db_errors
from blogdesk.exceptions import NotFoundError, UnauthorizedError
from blogdesk.models.admin import Admin
from blogdesk.schemas.admin import AdminResponse, LoginRequest, LoginResponse
from blogdesk.services.auth_gate import JWTAuthGate
from blogdesk.services.params import parse_uuid

logger = logging.getLogger(__name__)


class AdminService:
    async def _by_email(self, db: AsyncSession, email: str):
        result = await db.execute(select(Admin).where(Admin.email == email.strip().lower()))
        return result.scalar_one_or_none()

    async def login(self, db: AsyncSession, data: LoginRequest, gate: JWTAuthGate) -> LoginResponse:
        async with translate_db_errors("looking up admin"):
            admin = await self._by_email(db, data.email)

        if admin is None or not admin.check_password(data.password):
            logger.info("Failed admin login for %s", data.email)
            raise UnauthorizedError(message="Invalid credentials", context={"email": data.email})

        token = gate.issue_token(str(admin.id), admin.email)
        logger.info("Admin logged in: %s", admin.id)
        return LoginResponse(token=token, admin=AdminResponse.model_validate(admin))

    async def get_admin(self, db: AsyncSession, admin_id: str) -> Admin:
        async with translate_db_errors("fetching admin", admin_id=admin_id):
            aid = parse_uuid(admin_id)
            admin = None
            if aid is not None:
                result = await db.execute(select(Admin).where(Admin.id == aid))
                admin = result.scalar_one_or_none()
            if admin is None:
                raise NotFoundError(resource="admin", resource_id=admin_id)
            return admin

    async def ensure_admin(self, db: AsyncSession, email: str, password: str) -> Tuple[Admin, bool]:
        """Returns (admin, created); an existing admin is left untouched."""
        async with translate_db_errors("provisioning admin", email=email):
            existing = await self._by_email(db, email)
            if existing is not None:
                return existing, False

            admin = Admin(email=email)
            admin.set_password(password)
            db.add(admin)
            await db.flush()
            logger.info("Admin created: %s", admin.email)
            return admin, True


admin_service = AdminService()
