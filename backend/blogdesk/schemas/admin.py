import uuid
from datetime import datetime

from pydantic import BaseModel, field_validator

from blogdesk.schemas.common import CamelModel


class LoginRequest(BaseModel):
    email: str
    password: str

    @field_validator("email", "password")
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be empty")
        return v


class AdminResponse(CamelModel):
    id: uuid.UUID
    email: str
    created_at: datetime


class LoginResponse(CamelModel):
    token: str
    admin: AdminResponse
