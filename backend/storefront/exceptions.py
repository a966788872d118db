"""
Storefront Backend: Custom Exception Hierarchy
=================================================

What:  Errors raised by services and dependencies of the storefront API.
How:   Every error carries a client-safe `message` and a `context` dict that
       is only logged. The handlers in main.py map each class to a status
       code and the {error, message, details, request_id} body.

Exception Hierarchy:
    StorefrontError (base)
    ├── ValidationError          → 400 Bad Request (client can fix)
    ├── AuthenticationError      → 401 Unauthorized
    ├── PermissionDeniedError    → 403 Forbidden
    ├── NotFoundError            → 404 Not Found
    ├── ObjectStorageError       → 500 Internal Server Error
    ├── DatabaseError            → 500 Internal Server Error
    └── EmailTransportError      → never reaches HTTP; normalized by the email service
"""

from typing import Any, Dict, Optional


class StorefrontError(Exception):
    """
    Base exception for all Storefront application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
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


class ValidationError(StorefrontError):
    """
    Raised when client input fails validation.

    When:    Missing upload, unsupported file type, size exceeded, empty public id.
    HTTP:    400 Bad Request
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


class AuthenticationError(StorefrontError):
    """Raised when an admin-only route is called without credentials (401)."""

    def __init__(
        self,
        message: str = "Authentication required",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class PermissionDeniedError(StorefrontError):
    """Raised when credentials are present but not sufficient (403)."""

    def __init__(
        self,
        message: str = "Admin access required",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(StorefrontError):
    """
    Raised when a requested resource does not exist.

    When:    GET /api/products/{id} with an unknown UUID, or a missing stored file.
    HTTP:    404 Not Found
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id:
            message = f"{resource} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class ObjectStorageError(StorefrontError):
    """
    Raised when the object storage collaborator fails.

    When:    Upload or delete against the storage backend fails, or the
             temporary upload file cannot be written.
    HTTP:    500 Internal Server Error
    """

    def __init__(
        self,
        message: str = "Upload failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DatabaseError(StorefrontError):
    """
    Raised when database operations fail unexpectedly.

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


class EmailTransportError(StorefrontError):
    """
    Raised by the SMTP transport when a send attempt fails.

    Attributes:
        code: Categorized network failure ("ESOCKET", "ETIMEDOUT",
              "ECONNREFUSED") or None for every other failure
              (authentication rejection, refused recipient, protocol error).

    The email service catches this and turns it into a NotificationOutcome;
    it is never mapped to an HTTP response.
    """

    def __init__(
        self,
        message: str = "Email delivery failed",
        code: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if code:
            ctx["code"] = code
        super().__init__(message=message, context=ctx)
        self.code = code
