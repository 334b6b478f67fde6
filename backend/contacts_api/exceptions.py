"""
Contact API — Custom Exception Hierarchy
==========================================

What:  Application-specific exceptions for failures that are NOT part of the
       normal request contract.
Why:   Not-found, conflict and validation outcomes are ordinary results
       (see services/contact_store.py) and never raised. What remains here
       are genuine failures that must reach the centralized handlers in
       main.py without leaking internals to the client.

Exception Hierarchy:
    ContactsAPIError (base)            → 500 via global handler
    ├── DatabaseError                  → 500 Internal Server Error
    └── DatabaseUnavailableError       → fatal at startup (process exits)
"""

from typing import Any, Dict, Optional


class ContactsAPIError(Exception):
    """
    Base exception for all Contact API errors.

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


class DatabaseError(ContactsAPIError):
    """
    Raised when a store operation fails for an unclassified reason.

    What:    Connection lost mid-query, deadlock, unexpected constraint, etc.
    HTTP:    500 Internal Server Error

    The client always receives a generic message; the driver error is kept in
    `context` and logged server-side only.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DatabaseUnavailableError(ContactsAPIError):
    """
    Raised during startup when the database cannot be reached.

    Propagates out of the lifespan so the ASGI server aborts startup and the
    process exits with a non-zero status instead of serving a dead store.
    """

    def __init__(
        self,
        message: str = "Could not connect to the database",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
