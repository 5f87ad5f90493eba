"""
Failure classes shared by the service layer, and transient-error classification.

Precondition and not-found failures subclass ValueError so routes can turn
them into 4xx responses the same way they handle any other validation error.
"""

from typing import Optional

from sqlalchemy.exc import DBAPIError, DisconnectionError

TRANSIENT_ERROR_MARKERS = ("unavailable", "offline")


class NotFoundError(ValueError):
    """Raised when a document an operation requires does not exist."""


class PreconditionError(ValueError):
    """Raised when an operation's precondition fails; nothing has been written."""


class BackendUnavailableError(RuntimeError):
    """Raised when the backing store is temporarily unreachable."""

    code = "unavailable"

    def __init__(self, message: str = "Backend unavailable", code: Optional[str] = None):
        super().__init__(message)
        if code:
            self.code = code


def is_transient_error(exc: BaseException) -> bool:
    """
    Decide whether an error means the backend is temporarily unreachable.

    Args:
        exc: Exception raised by a store read or write

    Returns:
        True for "unavailable"/"offline" class errors that are worth retrying
    """
    if isinstance(exc, (BackendUnavailableError, ConnectionError, DisconnectionError)):
        return True
    if isinstance(exc, DBAPIError) and exc.connection_invalidated:
        return True

    code = getattr(exc, "code", None)
    if isinstance(code, str) and code.lower() in TRANSIENT_ERROR_MARKERS:
        return True

    message = str(exc).lower()
    return any(marker in message for marker in TRANSIENT_ERROR_MARKERS)
