"""
Blogdesk Backend: Custom Exception Hierarchy
==============================================

What:  Application-specific exceptions for the different error scenarios.
How:   Each exception carries a client-safe message and an optional context
       dict. Global exception handlers (registered in main.py) catch these
       and return structured JSON responses with the right status code.
Who:   Raised by services, the auth gate and image hosts; caught by handlers.

Exception Hierarchy:
    BlogdeskError (base)
    ├── ValidationError      → 400 Bad Request (carries per-field errors)
    ├── ConflictError        → 400 Bad Request (uniqueness violation)
    ├── UnauthorizedError    → 401 Unauthorized
    ├── NotFoundError        → 404 Not Found
    ├── ImageHostError       → 500 Internal Server Error
    └── DatabaseError        → 500 Internal Server Error
"""

from typing import Any, Dict, List, Optional


class BlogdeskError(Exception):
    """
    Base exception for all Blogdesk application errors.

    Attributes:
        message:  Client-facing description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to client)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(BlogdeskError):
    """
    Raised when client input fails validation.

    HTTP: 400 Bad Request, body `{"message": ..., "errors": [...]}`.

    Each entry of `errors` is `{"field", "message", "location"}`. Passing a
    single `field` builds a one-entry list from the message.
    """

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        errors: Optional[List[Dict[str, str]]] = None,
        location: str = "body",
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field
        if errors is None:
            errors = [{"field": field, "message": message, "location": location}] if field else []
        self.errors = errors


class ConflictError(BlogdeskError):
    """
    Raised when a write violates a uniqueness constraint.

    When:  Creating or renaming a category to a name/slug already in use.
    HTTP:  400 Bad Request (the client can pick another name).
    """

    def __init__(
        self,
        message: str = "Resource already exists",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class UnauthorizedError(BlogdeskError):
    """
    Raised by the auth gate when a request may not reach an admin handler.

    HTTP: 401 Unauthorized. The reason stays in `context` (server logs only).
    """

    def __init__(
        self,
        message: str = "Not authorized",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(BlogdeskError):
    """
    Raised when a requested resource does not exist (or is soft-deleted on
    a path that hides deleted records).

    HTTP:    404 Not Found
    Message: "<Resource> not found", e.g. "Blog not found".
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"{resource.capitalize()} not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)
        self.resource = resource
        self.resource_id = resource_id


class ImageHostError(BlogdeskError):
    """
    Raised when the external image host rejects or fails an upload/delete.

    HTTP: 500 Internal Server Error with a generic message. No retries are
    attempted; the upstream status and body are kept in `context`.
    """

    def __init__(
        self,
        message: str = "Image host operation failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DatabaseError(BlogdeskError):
    """
    Raised when database operations fail unexpectedly.

    The client always receives a generic message; the original exception type
    and identifiers are logged server-side only.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
