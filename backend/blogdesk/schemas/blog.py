"""
Blogdesk Backend: Blog Request/Response Schemas
=================================================

What:  Pydantic models for blog create/update input and blog/list output.
How:   Blog writes arrive as multipart forms (text fields plus image files),
       so the input models are built from the form fields in the route via
       `from_form()`, which raises the API's ValidationError on bad input.

Form semantics:
    FastAPI treats an empty form value as absent. For updates an absent field
    leaves the stored value alone; a whitespace-only value is rejected.
"""

import uuid
from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from blogdesk.exceptions import ValidationError
from blogdesk.schemas.category import CategoryResponse
from blogdesk.schemas.common import CamelModel, field_errors

TEXT_FIELDS = ("title", "description", "content", "author")


def _not_blank(v: str) -> str:
    v = v.strip()
    if not v:
        raise ValueError("must not be empty")
    return v


class _FormModel(BaseModel):
    @classmethod
    def from_form(cls, **fields: Any):
        """Validate the non-None form fields, mapping failures to a 400."""
        provided = {k: v for k, v in fields.items() if v is not None}
        try:
            return cls(**provided)
        except PydanticValidationError as exc:
            raise ValidationError(errors=field_errors(exc.errors(), default_location="form")) from exc


class BlogCreate(_FormModel):
    title: str
    description: str
    content: str
    author: str
    category: uuid.UUID = Field(description="Category id; not checked for existence")

    @field_validator(*TEXT_FIELDS)
    @classmethod
    def validate_text(cls, v: str) -> str:
        return _not_blank(v)


class BlogUpdate(_FormModel):
    """Only the fields the client sent end up in `model_fields_set`."""

    title: Optional[str] = None
    description: Optional[str] = None
    content: Optional[str] = None
    author: Optional[str] = None
    category: Optional[uuid.UUID] = None

    @field_validator(*TEXT_FIELDS)
    @classmethod
    def validate_text(cls, v: Optional[str]) -> str:
        if v is None:
            raise ValueError("must not be empty")
        return _not_blank(v)


class ImageOut(BaseModel):
    """A hosted image; keys stay snake_case to match the stored JSON."""

    url: str
    public_id: str


class BlogResponse(CamelModel):
    id: uuid.UUID
    title: str
    description: str
    content: str
    author: str
    category_id: uuid.UUID
    category: Optional[CategoryResponse] = None
    images: List[ImageOut] = Field(default_factory=list)
    is_deleted: bool
    created_at: datetime
    updated_at: datetime


class BlogListResponse(CamelModel):
    """One page of blogs, newest first (or best match first for search)."""

    blogs: List[BlogResponse]
    current_page: int
    total_pages: int
    total: int
