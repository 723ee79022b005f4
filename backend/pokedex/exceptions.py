"""
Pokédex API: Custom Exception Hierarchy
========================================

What:  Application-specific exceptions for the error scenarios of the API.
How:   Each exception carries a user-facing message and an optional context
       dict. Global handlers registered in main.py translate them into the
       JSON error envelope ``{"error": ..., "request_id": ...}`` with the
       matching HTTP status code.
Who:   Raised by services, the transaction scope and route helpers.

Exception Hierarchy:
    PokedexError (base)
    ├── ValidationError       → 400 Bad Request
    ├── NotFoundError         → 404 Not Found
    ├── StorageError          → 500 Internal Server Error
    ├── DatabaseError         → 500 Internal Server Error
    └── RequestTimeoutError   → 504 Gateway Timeout

The ``context`` dict is logged server-side and never returned to the client.
"""

from typing import Any, Dict, Optional


class PokedexError(Exception):
    """
    Base exception for all Pokédex application errors.

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


class ValidationError(PokedexError):
    """
    Raised when client input fails validation.

    When:    Missing id on update, malformed multipart payload, unsupported
             image type, oversized upload.
    HTTP:    400 Bad Request

    Raised before any database access, so nothing needs rolling back.
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


class NotFoundError(PokedexError):
    """
    Raised when a requested resource does not exist.

    When:    GET/PUT/DELETE by id with no matching row, or a name filter
             (``/pokemon/types/{type}``) that matches nothing.
    HTTP:    404 Not Found

    SQLAlchemy returns None / empty results for missing rows; services
    convert that into this exception so the route never sends a 200 with
    an empty body.
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[Any] = None,
        message: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        if message is None:
            message = f"{resource} not found"
            if resource_id is not None:
                message = f"{resource} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id is not None:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class StorageError(PokedexError):
    """
    Raised when the object store (or local temporary spooling) fails.

    When:    S3 upload failed after retries, credentials rejected, temp
             directory not writable.
    HTTP:    500 Internal Server Error

    Raised before the Pokémon transaction is opened, so an upload failure
    means no row is ever written.
    """

    def __init__(
        self,
        message: str = "Image upload failed. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DatabaseError(PokedexError):
    """
    Raised when a database operation fails unexpectedly.

    When:    Constraint violation, lost connection, malformed query.
    HTTP:    500 Internal Server Error

    The open transaction has already been rolled back when this is raised
    (see ``pokedex.database.transaction``). The driver error itself only
    goes to the log.
    """

    def __init__(
        self,
        message: str = "Internal server error",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class RequestTimeoutError(PokedexError):
    """
    Raised when a unit of work exceeds ``REQUEST_TIMEOUT_SECONDS``.

    HTTP:    504 Gateway Timeout

    The pending statement is cancelled and the transaction rolled back
    before this propagates.
    """

    def __init__(
        self,
        operation: str = "request",
        timeout: Optional[float] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["operation"] = operation
        if timeout is not None:
            ctx["timeout"] = timeout
        super().__init__(
            message="The request took too long to complete and was cancelled.",
            context=ctx,
        )
        self.timeout = timeout
