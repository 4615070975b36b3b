"""
SkillSwap Backend: Custom Exception Hierarchy
=============================================

What:  Application-specific exceptions, one per error kind the API reports.
How:   Each exception class carries a message and optional context dict.
       Global exception handlers (registered in main.py) catch these and
       return structured JSON error responses with correct HTTP status codes.
Who:   Raised by services and the auth dependency; caught by global handlers.

Exception Hierarchy:
    SkillSwapError (base)
    ├── ValidationError          → 400 Bad Request (missing field, self-request)
    ├── InvalidStateError        → 400 Bad Request (request no longer pending)
    ├── ConflictError            → 400 Bad Request (duplicate pending request)
    ├── AuthenticationError      → 401 Unauthorized
    ├── ForbiddenError           → 403 Forbidden (wrong participant role)
    ├── NotFoundError            → 404 Not Found
    ├── FileStorageError         → 500 Internal Server Error
    └── DatabaseError            → 500 Internal Server Error

The three 400 kinds share a status code but keep distinct `error` codes in the
response body so clients can tell them apart.
"""

from typing import Any, Dict, Optional


class SkillSwapError(Exception):
    """
    Base exception for all SkillSwap application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged, returned only for 400-class errors)
    """

    status_code: int = 500
    error_code: str = "server_error"

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(SkillSwapError):
    """
    Raised when client input fails a business rule.

    When:    Missing or blank required fields, a request addressed to oneself,
             an unsupported photo type or size.
    HTTP:    400 Bad Request

    FastAPI still answers 422 for payloads that do not match the schema at all;
    this exception covers the rules the schema cannot express.
    """

    status_code = 400
    error_code = "validation_error"

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = dict(context or {})
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class InvalidStateError(SkillSwapError):
    """
    Raised when a transition is attempted on a request that is not pending.

    HTTP:    400 Bad Request
    """

    status_code = 400
    error_code = "invalid_state"

    def __init__(
        self,
        message: str = "This request has already been processed",
        current_status: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = dict(context or {})
        if current_status:
            ctx["current_status"] = current_status
        super().__init__(message=message, context=ctx)
        self.current_status = current_status


class ConflictError(SkillSwapError):
    """
    Raised when a pending request already exists for the same requester/accepter pair.

    HTTP:    400 Bad Request (the original API never used 409 for this case)
    """

    status_code = 400
    error_code = "conflict"

    def __init__(
        self,
        message: str = "You already have a pending request with this user",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class AuthenticationError(SkillSwapError):
    """
    Raised when the bearer token is missing, malformed, expired or badly signed.

    HTTP:    401 Unauthorized
    """

    status_code = 401
    error_code = "unauthorized"

    def __init__(
        self,
        message: str = "Authentication required",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class ForbiddenError(SkillSwapError):
    """
    Raised when the acting user lacks the role a transition requires.

    When:    Accept/reject by anyone but the accepter, delete by anyone but the
             requester, editing someone else's profile.
    HTTP:    403 Forbidden
    """

    status_code = 403
    error_code = "forbidden"

    def __init__(
        self,
        message: str = "You are not allowed to perform this action",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(SkillSwapError):
    """
    Raised when a requested resource does not exist.

    HTTP:    404 Not Found

    SQLAlchemy returns None for missing records; services convert that into
    this exception.
    """

    status_code = 404
    error_code = "not_found"

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        message: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        if message is None:
            message = f"The requested {resource} was not found"
            if resource_id:
                message = f"{resource} with ID '{resource_id}' was not found"
        ctx = dict(context or {})
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class FileStorageError(SkillSwapError):
    """
    Raised when file system operations on profile photos fail.

    HTTP:    500 Internal Server Error
    """

    def __init__(
        self,
        message: str = "File storage operation failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DatabaseError(SkillSwapError):
    """
    Raised when database operations fail unexpectedly.

    HTTP:    500 Internal Server Error

    Security Note:
        The message returned to the client is always generic.
        Detailed error info is logged server-side only.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
