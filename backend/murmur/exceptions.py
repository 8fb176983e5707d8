"""
Murmur Backend — Custom Exception Hierarchy
=============================================

What:  Application-specific exceptions for each error scenario.
How:   Each exception carries a user-safe message and an optional context dict.
       Global exception handlers (registered in main.py) map them to HTTP
       status codes and structured JSON error bodies.
Who:   Raised by services and dependencies; caught by global handlers.

Exception Hierarchy:
    MurmurError (base)
    ├── ValidationError           → 400 Bad Request
    ├── ConflictError             → 400 Bad Request (duplicate account data)
    ├── InvalidCredentialsError   → 400 Bad Request (generic login failure)
    ├── AuthenticationError       → 401 Unauthorized
    ├── AuthorizationError        → 403 Forbidden
    ├── NotFoundError             → 404 Not Found
    ├── RateLimitExceededError    → 429 Too Many Requests
    ├── MediaStorageError         → 502 Bad Gateway
    └── DatabaseError             → 500 Internal Server Error

`context` is logged server-side and returned only for client-fixable
errors (validation, conflict); it never carries secrets or SQL.
"""

from typing import Any, Dict, Optional


class MurmurError(Exception):
    """
    Base exception for all Murmur application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(MurmurError):
    """
    Raised when client input fails a business rule.

    When:    Empty post, missing comment text, short password, self-follow,
             malformed image payload.
    HTTP:    400 Bad Request

    Example response:
        {
            "error": "validation_error",
            "message": "Post must have text or image",
            "details": {"field": "text"}
        }
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


class ConflictError(MurmurError):
    """
    Raised when a unique account attribute is already taken.

    When:    Registration with an existing email/username, or a profile update
             that would collide with another account.
    HTTP:    400 Bad Request
    """

    def __init__(
        self,
        message: str = "Resource already exists",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class InvalidCredentialsError(MurmurError):
    """
    Raised when an email/password pair does not verify.

    The message is identical for an unknown email and a wrong password so the
    response does not reveal which accounts exist.
    HTTP:    400 Bad Request
    """

    def __init__(
        self,
        message: str = "Invalid email or password",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class AuthenticationError(MurmurError):
    """
    Raised when a protected route is called without a usable session.

    When:    Cookie missing, signature invalid, token expired.
    HTTP:    401 Unauthorized

    Attributes:
        clear_session: Ask the handler to expire the session cookie in the
                       response (set for expired tokens).
    """

    def __init__(
        self,
        message: str = "Unauthorized",
        clear_session: bool = False,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
        self.clear_session = clear_session


class AuthorizationError(MurmurError):
    """
    Raised when an authenticated user acts on a resource they do not own.

    HTTP:    403 Forbidden
    """

    def __init__(
        self,
        message: str = "You are not allowed to perform this action",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(MurmurError):
    """
    Raised when a referenced resource does not exist.

    SQLAlchemy returns None for missing rows; services convert that into
    NotFoundError so routes stay free of status-code logic.
    HTTP:    404 Not Found
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"{resource.capitalize()} not found"
        if resource_id:
            message = f"{resource.capitalize()} '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class MediaStorageError(MurmurError):
    """
    Raised when the media host cannot store or delete an image.

    When:    After tenacity retries are exhausted, or on a non-retryable
             host error (bad credentials, missing bucket, disk full).
    HTTP:    502 Bad Gateway
    """

    def __init__(
        self,
        message: str = "Image storage is temporarily unavailable. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DatabaseError(MurmurError):
    """
    Raised when database operations fail unexpectedly.

    The message returned to the client is always generic; details are
    logged server-side only.
    HTTP:    500 Internal Server Error
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class RateLimitExceededError(MurmurError):
    """
    Raised when a client exceeds the per-IP request rate limit.

    HTTP:    429 Too Many Requests (with Retry-After header)
    """

    def __init__(
        self,
        retry_after: int = 60,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = (
            f"Rate limit exceeded. Please wait {retry_after} seconds before making more requests."
        )
        ctx = context or {}
        ctx["retry_after"] = retry_after
        super().__init__(message=message, context=ctx)
        self.retry_after = retry_after
