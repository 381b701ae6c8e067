"""
Family Cookbook Backend — Custom Exception Hierarchy
======================================================

What:  Application-specific exceptions for each failure the API can report.
How:   Each exception carries a user-facing message and an optional context
       dict. Global handlers (registered in main.py) turn them into JSON
       error responses with the status code listed below.
Who:   Raised by services and dependencies; caught by the global handlers.

Exception Hierarchy:
    CookbookError (base)                → 500
    ├── ValidationError                 → 400 Bad Request
    ├── AuthenticationRequiredError     → 401 Unauthorized
    ├── InvalidCredentialsError         → 401 Unauthorized
    ├── NotFoundError                   → 404 Not Found
    ├── ConflictError                   → 409 Conflict
    ├── FileTooLargeError               → 413 Payload Too Large
    ├── UnsupportedFileTypeError        → 415 Unsupported Media Type
    ├── ExtractionError                 → 500 Internal Server Error
    ├── FileStorageError                → 500 Internal Server Error
    └── DatabaseError                   → 500 Internal Server Error

Every class sets `status_code` and `error_code`, so main.py can register a
single handler for the whole hierarchy and still log 5xx and 4xx differently.
"""

from typing import Any, Dict, Iterable, Optional


class CookbookError(Exception):
    """
    Base exception for all application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged; returned only for 4xx errors)
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


class ValidationError(CookbookError):
    """
    Raised when client input breaks a business rule.

    Schema-level problems (missing JSON fields, wrong types, out-of-range
    ratings) are caught earlier by FastAPI and reported as 422.
    """

    status_code = 400
    error_code = "validation_error"

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


class AuthenticationRequiredError(CookbookError):
    """Raised by the auth gate when a protected route has no valid session."""

    status_code = 401
    error_code = "authentication_required"

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message=message)


class InvalidCredentialsError(CookbookError):
    """
    Raised when login fails.

    The same message is used for an unknown username and a wrong password,
    so the response does not reveal which accounts exist.
    """

    status_code = 401
    error_code = "invalid_credentials"

    def __init__(self, message: str = "Invalid username or password"):
        super().__init__(message=message)


class NotFoundError(CookbookError):
    """
    Raised when a requested resource does not exist.

    SQLAlchemy returns None for missing rows; services convert that None into
    this exception at every lookup so no handler dereferences a missing row.
    """

    status_code = 404
    error_code = "not_found"

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[Any] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id is not None:
            message = f"{resource} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id is not None:
            ctx["resource_id"] = str(resource_id)
        super().__init__(message=message, context=ctx)


class ConflictError(CookbookError):
    """Raised when a state transition is not allowed (e.g. publishing twice)."""

    status_code = 409
    error_code = "conflict"


def format_size(num_bytes: int) -> str:
    """Human-readable size: "10MB", "1.5MB", "4KB", "300 bytes"."""
    for unit, scale in (("MB", 1024 * 1024), ("KB", 1024)):
        if num_bytes >= scale:
            return f"{num_bytes / scale:.1f}".rstrip("0").rstrip(".") + unit
    return f"{num_bytes} bytes"


class FileTooLargeError(CookbookError):
    """Raised when an upload exceeds the configured size cap."""

    status_code = 413
    error_code = "file_too_large"

    def __init__(self, max_size: int, actual_size: Optional[int] = None):
        ctx: Dict[str, Any] = {"max_size_bytes": max_size}
        if actual_size is not None:
            ctx["actual_size_bytes"] = actual_size
        super().__init__(
            message=f"File exceeds the maximum upload size of {format_size(max_size)}",
            context=ctx,
        )
        self.max_size = max_size


class UnsupportedFileTypeError(CookbookError):
    """Raised for uploads whose extension has no registered extractor."""

    status_code = 415
    error_code = "unsupported_file_type"

    def __init__(self, extension: str, allowed: Iterable[str]):
        allowed_list = sorted(allowed)
        shown = extension or "(none)"
        super().__init__(
            message=(
                f"File type '{shown}' is not supported. "
                f"Allowed types: {', '.join(allowed_list)}"
            ),
            context={"extension": extension, "allowed": allowed_list},
        )
        self.extension = extension


class ExtractionError(CookbookError):
    """
    Raised when a document parser fails on an uploaded file.

    The message names the file type only; the parser's own exception text
    goes into the context and the server log.
    """

    status_code = 500
    error_code = "extraction_failed"

    def __init__(
        self,
        message: str = "Could not extract text from the uploaded document",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class FileStorageError(CookbookError):
    """Raised when writing the temporary upload to disk fails."""

    def __init__(
        self,
        message: str = "File storage operation failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DatabaseError(CookbookError):
    """
    Raised when a database operation fails unexpectedly.

    The client always receives a generic message; the SQL error stays in the
    server log.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
