"""
Pressroom Backend: Custom Exception Hierarchy
=============================================

What:  Application-specific exceptions, one per HTTP outcome the API can produce.
Why:   Services raise domain errors; global handlers (main.py) turn them into
       consistent JSON bodies with the right status code.
How:   Each exception carries a human-readable message and an optional context dict.

Exception Hierarchy:
    PressroomError (base)
    ├── ValidationError        → 400 Bad Request
    ├── AuthenticationError    → 401 Unauthorized (no token, wrong password)
    ├── ForbiddenError         → 403 Forbidden (bad/expired token, not the owner)
    ├── NotFoundError          → 404 Not Found
    ├── ConflictError          → 409 Conflict (duplicate username)
    ├── UpstreamServiceError   → 500 (object storage, SMTP, browser), message passed through
    └── DatabaseError          → 500 (generic message, details logged only)
"""

from typing import Any, Dict, Optional


class PressroomError(Exception):
    """
    Base exception for all Pressroom application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged, returned only for client errors)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(PressroomError):
    """
    Raised when client input fails validation.

    When:    Missing/blank required fields, unsupported upload type, oversized file.
    HTTP:    400 Bad Request (FastAPI's own 422 is remapped to 400 as well).
    """

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class AuthenticationError(PressroomError):
    """
    Raised when the caller did not prove who they are.

    When:    No bearer token on a protected route, or a wrong password at login.
    HTTP:    401 Unauthorized
    """

    def __init__(
        self,
        message: str = "Authentication required",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class ForbiddenError(PressroomError):
    """
    Raised when the caller is identified but not allowed to proceed.

    When:    Token signature/expiry check failed, or the caller does not own the post.
    HTTP:    403 Forbidden
    """

    def __init__(
        self,
        message: str = "Unauthorized action",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(PressroomError):
    """
    Raised when a requested resource does not exist.

    SQLAlchemy returns None (or rowcount 0) for missing rows; the service layer
    converts that into NotFoundError so routes stay free of None checks.
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"{resource.capitalize()} not found"
        if resource_id:
            message = f"{resource.capitalize()} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class ConflictError(PressroomError):
    """Raised when a create would violate a uniqueness rule (HTTP 409)."""

    def __init__(
        self,
        message: str = "Resource already exists",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class UpstreamServiceError(PressroomError):
    """
    Raised when an external collaborator fails.

    What:    Object storage upload/download, SMTP delivery or page rendering failed.
    HTTP:    500 Internal Server Error, with the message passed through to the client.
    Retry:   None. The failure is terminal for the request.

    Attributes:
        service: Which collaborator failed ("storage", "mail", "renderer")
    """

    def __init__(
        self,
        service: str,
        message: str = "An upstream service failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["service"] = service
        super().__init__(message=message, context=ctx)
        self.service = service


class DatabaseError(PressroomError):
    """
    Raised when database operations fail unexpectedly.

    The message returned to the client is always generic. Constraint names and
    SQL are logged server-side only.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
