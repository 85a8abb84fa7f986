"""Error taxonomy shared by the store, the sync adapter and the forms.

Form controllers catch every one of these and turn it into a user-visible
notice; nothing here is expected to reach the Streamlit script unhandled.
"""

from typing import Any, Dict, Optional


class JournalError(Exception):
    """Base class for all journal errors.

    Attributes:
        message: Human-readable error message, safe to show to the user.
        details: Optional extra context for logs.
    """

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class ValidationError(JournalError):
    """A draft failed client-side validation; no remote call was made."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message, details={"field": field} if field else None)
        self.field = field


class NotAuthenticated(JournalError):
    """No user session could be resolved at write time."""

    def __init__(self, message: str = "Please sign in to save your changes"):
        super().__init__(message)


class NotFound(JournalError):
    """An id did not resolve to a row the current user owns."""

    def __init__(self, kind: str, identifier: Any):
        super().__init__(
            f"{kind} with id '{identifier}' not found",
            details={"kind": kind, "id": identifier},
        )
        self.kind = kind
        self.identifier = identifier


class RemoteFailure(JournalError):
    """The data service rejected or failed a call."""

    def __init__(self, message: str, status_code: Optional[int] = None, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details=details)
        self.status_code = status_code


class RemoteUnavailable(RemoteFailure):
    """The data service could not be reached."""


class Unauthorized(RemoteFailure):
    """The data service refused the caller's credentials."""
