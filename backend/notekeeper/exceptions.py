"""
NoteKeeper Backend — Custom Exception Hierarchy
=================================================

What:  Application-specific exceptions for each error class the API exposes.
Why:   Services raise meaningful errors; global handlers (registered in
       main.py) turn them into status codes and a uniform JSON body without
       try/except in every route.
How:   Each exception carries a client-safe message and an optional context
       dict. Context is logged server-side and never returned to the client.

Exception Hierarchy:
    NoteKeeperError (base)
    ├── ValidationError         → 400 Bad Request (client can fix)
    ├── AuthenticationError     → 401 Unauthorized (missing/invalid token)
    ├── AuthResolverError       → 500 Internal Server Error (lookup failed)
    ├── NotFoundError           → 404 Not Found (absent or not owned)
    ├── MethodNotAllowedError   → 405 Method Not Allowed (+ Allow header)
    └── DatabaseError           → 500 Internal Server Error

Design Decision:
    AuthenticationError and AuthResolverError are siblings, not parent and
    child, so a rejected credential can never be mistaken for an outage (and
    vice versa) anywhere between the resolver and the HTTP layer.
"""

from typing import Any, Dict, Iterable, Optional


class NoteKeeperError(Exception):
    """
    Base exception for all NoteKeeper application errors.

    Attributes:
        message:  Client-safe description (returned in the API response)
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


class ValidationError(NoteKeeperError):
    """
    Raised when client input fails validation.

    When:    Malformed JSON body, blank note name, undecodable path segment.
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


class AuthenticationError(NoteKeeperError):
    """
    Raised when the bearer credential is missing, malformed or unknown.

    HTTP:    401 Unauthorized
    """

    def __init__(
        self,
        message: str = "missing or invalid bearer token",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class AuthResolverError(NoteKeeperError):
    """
    Raised when the token lookup itself fails (store unreachable, query
    error, timeout). The credential was neither accepted nor rejected.

    HTTP:    500 Internal Server Error
    """

    def __init__(
        self,
        message: str = "internal error",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(NoteKeeperError):
    """
    Raised when a requested note does not exist for the caller.

    A note owned by another user produces exactly the same error, so
    ownership is never revealed.

    HTTP:    404 Not Found
    """

    def __init__(
        self,
        resource: str = "resource",
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        ctx = context or {}
        ctx["resource"] = resource
        super().__init__(message=message, context=ctx)


class MethodNotAllowedError(NoteKeeperError):
    """
    Raised when a known path is called with an unsupported method.

    HTTP:    405 Method Not Allowed, `Allow` lists the supported methods
    """

    def __init__(
        self,
        allowed: Iterable[str],
        context: Optional[Dict[str, Any]] = None,
    ):
        self.allowed = tuple(allowed)
        super().__init__(message="method not allowed", context=context)

    @property
    def allow_header(self) -> str:
        return ", ".join(self.allowed)


class DatabaseError(NoteKeeperError):
    """
    Raised when database operations fail unexpectedly.

    When:    Connection lost, query failure, store timeout.
    HTTP:    500 Internal Server Error

    Security Note:
        The message returned to the client is always generic. Driver errors,
        SQL text and constraint names are logged server-side only.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
