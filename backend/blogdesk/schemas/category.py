"""
Blogdesk Backend: Category Request/Response Schemas
=====================================================

What:  Pydantic models for the category endpoints.
How:   Input models trim strings and reject blank names; invalid bodies turn
       into 400 responses through the RequestValidationError handler.

Update semantics (CategoryUpdate):
    name         absent → unchanged   present → must be non-blank
    description  absent → unchanged   null or blank → cleared
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from blogdesk.schemas.common import CamelModel


def _clean_description(v: Optional[str]) -> Optional[str]:
    if v is None:
        return None
    v = v.strip()
    return v or None


class CategoryCreate(BaseModel):
    name: str = Field(description="Unique category name")
    description: Optional[str] = Field(default=None, description="Optional description")

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name must not be empty")
        return v

    @field_validator("description")
    @classmethod
    def validate_description(cls, v: Optional[str]) -> Optional[str]:
        return _clean_description(v)


class CategoryUpdate(BaseModel):
    """Only fields present in the request body are applied."""

    name: Optional[str] = Field(default=None, description="New name (slug follows)")
    description: Optional[str] = Field(default=None, description="New description; null clears it")

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: Optional[str]) -> str:
        # Runs only when the client sent the field
        if v is None or not v.strip():
            raise ValueError("name must not be empty")
        return v.strip()

    @field_validator("description")
    @classmethod
    def validate_description(cls, v: Optional[str]) -> Optional[str]:
        return _clean_description(v)


class CategoryResponse(CamelModel):
    id: uuid.UUID
    name: str
    slug: str
    description: Optional[str] = None
    created_at: datetime
    updated_at: datetime
