"""
Blogdesk Backend: Auth Gate
=============================

What:  Decides whether a request may reach an admin handler.
How:   `AuthGate.authenticate(request)` returns the AdminIdentity or raises
       UnauthorizedError (→ 401 "Not authorized"). The app factory builds one
       gate and every admin router depends on it (see dependencies.py).

JWTAuthGate:
    Authorization: Bearer <token>
    HS256 JWT signed with JWT_SECRET; required claims exp, sub, type.
    Only tokens with type == "access" are admitted.
"""

import logging
import secrets
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict

import jwt
from fastapi import Request

from blogdesk.exceptions import UnauthorizedError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AdminIdentity:
    id: str
    email: str


class AuthGate(ABC):
    @abstractmethod
    async def authenticate(self, request: Request) -> AdminIdentity:
        """Return who is calling, or raise UnauthorizedError."""
        ...


class JWTAuthGate(AuthGate):
    def __init__(self, secret: str, algorithm: str = "HS256", expires_minutes: int = 1440):
        self.secret = secret
        self.algorithm = algorithm
        self.access_token_expires = timedelta(minutes=expires_minutes)

    def issue_token(self, admin_id: str, email: str) -> str:
        """Sign an access token for an admin who just logged in."""
        now = datetime.now(timezone.utc)
        payload = {
            "sub": admin_id,
            "email": email,
            "iat": now,
            "exp": now + self.access_token_expires,
            "type": "access",
            "jti": secrets.token_urlsafe(16),
        }
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def verify_token(self, token: str) -> Dict[str, Any]:
        try:
            payload = jwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
                options={"require": ["exp", "sub", "type"]},
            )
        except jwt.ExpiredSignatureError:
            raise UnauthorizedError(context={"reason": "token expired"})
        except jwt.InvalidTokenError as e:
            raise UnauthorizedError(context={"reason": f"invalid token: {e}"})

        if payload.get("type") != "access":
            raise UnauthorizedError(context={"reason": "wrong token type"})
        return payload

    async def authenticate(self, request: Request) -> AdminIdentity:
        header = request.headers.get("Authorization", "")
        scheme, _, token = header.partition(" ")
        if scheme.lower() != "bearer" or not token.strip():
            raise UnauthorizedError(context={"reason": "missing bearer token"})

        payload = self.verify_token(token.strip())
        identity = AdminIdentity(id=str(payload["sub"]), email=str(payload.get("email", "")))
        logger.debug("Admin authenticated: %s", identity.id)
        return identity
