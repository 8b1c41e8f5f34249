"""
Blogdesk Backend: Shared Pydantic Schemas
===========================================

What:  Base model for camelCase JSON, error/health/message envelopes, and the
       conversion from Pydantic error lists to the API's field-error format.
How:   Response models subclass `CamelModel`, so `is_deleted` serializes as
       `isDeleted`, `created_at` as `createdAt`, and so on. FastAPI
       serializes response models by alias.
"""

from typing import Any, Dict, Iterable, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Snake_case attributes, camelCase JSON; readable from ORM objects."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class FieldError(BaseModel):
    """One failed input field: which one, what is wrong, where it was sent."""

    field: str = Field(description="Name of the offending field")
    message: str = Field(description="Human-readable reason")
    location: str = Field(default="body", description="body, query, path or form")


class ErrorResponse(BaseModel):
    """
    Standardized error envelope for all API errors.

    Example (validation failure):
        {
            "error": "validation_error",
            "message": "Validation failed",
            "errors": [{"field": "title", "message": "Field required", "location": "body"}],
            "request_id": "a1b2c3d4"
        }
    """

    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    errors: Optional[List[FieldError]] = Field(default=None, description="Per-field validation errors")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class MessageResponse(BaseModel):
    """Confirmation body for deletes."""

    message: str


class HealthResponse(BaseModel):
    """
    Returned by GET /_health for probes and load balancers.

    database: connected | connecting | disconnecting | disconnected
    """

    status: str = Field(description="ok when the database is connected, else unavailable")
    uptime: float = Field(description="Seconds since the application was created")
    database: str = Field(description="Database connection state")
    version: str = Field(description="Application version")


def field_errors(errors: Iterable[Dict[str, Any]], default_location: str = "body") -> List[Dict[str, str]]:
    """
    Flatten Pydantic/FastAPI error dicts into `FieldError`-shaped dicts.

    A FastAPI location looks like ("body", "name") or ("query", "page");
    a bare Pydantic location is just ("name",).
    """
    flattened = []
    for err in errors:
        loc = [str(part) for part in err.get("loc", ())]
        location = default_location
        if loc and loc[0] in {"body", "query", "path", "header", "cookie", "form"}:
            location = loc.pop(0)
        message = str(err.get("msg", "Invalid value"))
        # Pydantic prefixes custom ValueError messages
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        flattened.append({
            "field": ".".join(loc) or location,
            "message": message,
            "location": location,
        })
    return flattened
