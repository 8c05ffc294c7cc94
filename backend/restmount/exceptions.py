"""
restmount — Custom Exception Hierarchy
========================================

What:  Defines the failure conditions of resource registration and the
       generated CRUD endpoints.
How:   Each exception carries a message and optional context dict, plus the
       HTTP status it maps to. `API.handle_error` is the single place that
       turns them into `{"error": "<message>"}` responses.
Who:   Raised by the registration engine, CRUD handlers and storage layer.
When:  At startup (registration) or during request processing.

Exception Hierarchy:
    RestMountError (base)
    ├── InvalidResourceKindError  → registration time, never translated
    ├── InvalidIdentityError      → 400 Bad Request
    ├── DecodeFailureError        → 400 Bad Request
    ├── NotFoundError             → 404 Not Found
    ├── MethodNotAllowedError     → 405 Method Not Allowed
    ├── QueryFailureError         → 500 Internal Server Error
    ├── PersistFailureError       → 500 Internal Server Error
    ├── DeleteFailureError        → 500 Internal Server Error
    └── StorageError              → 500 (raised by storage, wrapped by handlers)
"""

from typing import Any, Dict, Optional


class RestMountError(Exception):
    """
    Base exception for all restmount errors.

    Attributes:
        message:      User-facing error description (returned in the response)
        context:      Additional debug info (logged but NOT returned to client)
        status_code:  HTTP status used when the error is translated
    """

    status_code: int = 500

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class InvalidResourceKindError(RestMountError):
    """
    Raised by `API.add_resource` when the descriptor is not a mapped record.

    What:    A programming error: the caller passed something that is neither
             a SQLAlchemy mapped class nor an instance of one, or a model
             whose identity spans more than one column.
    When:    Registration time. It is never caught by the library and aborts
             application startup.
    """

    def __init__(
        self,
        descriptor: Any = None,
        message: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        if message is None:
            message = (
                f"Cannot register {descriptor!r} as a resource: pass a mapped "
                f"model class such as Post or a template instance such as Post()"
            )
        ctx = context or {}
        ctx["descriptor"] = repr(descriptor)
        super().__init__(message=message, context=ctx)


class InvalidIdentityError(RestMountError):
    """
    Raised when the `:id` path segment cannot be parsed as an identity.

    HTTP:    400 Bad Request
    """

    status_code = 400

    def __init__(
        self,
        raw_id: str = "",
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["raw_id"] = raw_id
        super().__init__(message=f"Invalid identity '{raw_id}'", context=ctx)
        self.raw_id = raw_id


class DecodeFailureError(RestMountError):
    """
    Raised when a request body is not a well-formed record document.

    When:    Malformed JSON, a non-object document, or a value whose type
             does not fit the column it targets.
    HTTP:    400 Bad Request
    """

    status_code = 400

    def __init__(
        self,
        message: str = "Failed to decode json",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(RestMountError):
    """
    Raised when no record exists at the requested identity.

    HTTP:    404 Not Found
    """

    status_code = 404

    def __init__(
        self,
        message: str = "record not found",
        resource: Optional[str] = None,
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if resource:
            ctx["resource"] = resource
        if resource_id is not None:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class MethodNotAllowedError(RestMountError):
    """
    A registered path was requested with a verb it has no binding for.

    HTTP:    405 Method Not Allowed
    """

    status_code = 405

    def __init__(
        self,
        message: str = "Method Not Allowed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class StorageError(RestMountError):
    """
    Raised by the storage layer when the database rejects an operation.

    The driver exception is chained (`raise ... from exc`) and its
    type name recorded in `context`. Handlers translate this into the
    operation-specific failure below; the detail never reaches the client.
    """

    def __init__(
        self,
        operation: str = "query",
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["operation"] = operation
        super().__init__(message=f"Storage {operation} failed", context=ctx)
        self.operation = operation


class QueryFailureError(RestMountError):
    """Listing or reading records failed inside the store (HTTP 500)."""

    def __init__(
        self,
        message: str = "Failed to get objects",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class PersistFailureError(RestMountError):
    """Creating or updating a record failed inside the store (HTTP 500)."""

    def __init__(
        self,
        message: str = "Failed to create object",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DeleteFailureError(RestMountError):
    """Deleting a record failed inside the store (HTTP 500)."""

    def __init__(
        self,
        message: str = "Failed to delete object",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
