"""Error taxonomy for the Katika backend.

Every failure a route can report maps onto one of the classes below.  The
FastAPI application registers a handler for :class:`KatikaError` and a
fallback for everything else; both build their JSON body through
:func:`error_payload` so that the response shape is the same everywhere:

========================  ======  ========================================
Exception                 Status  Extra keys
========================  ======  ========================================
NotFoundError             404     (none)
ValidationFailedError     400     ``details`` (list of field messages)
DuplicateKeyError         400     ``field``
InvalidTokenError         401     (none)
TokenExpiredError         401     (none)
UploadTooLargeError       400     ``maxSize``
UnexpectedUploadError     400     (none)
GenerationError           500     (none)
any other exception       500     ``stack`` outside production
========================  ======  ========================================
"""

from __future__ import annotations

import traceback


class KatikaError(Exception):
    """Base class for errors that carry their own HTTP status."""

    status_code: int = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def extra(self) -> dict:
        """Additional keys merged into the error response body."""
        return {}


class NotFoundError(KatikaError):
    status_code = 404


class ValidationFailedError(KatikaError):
    """Schema constraint violations, reported as a list of messages."""

    status_code = 400

    def __init__(self, details: list[str], message: str = "Validation failed"):
        super().__init__(message)
        self.details = list(details)

    def extra(self) -> dict:
        return {"details": self.details}


class DuplicateKeyError(KatikaError):
    """A unique field collided with an existing record."""

    status_code = 400

    def __init__(self, field: str, message: str | None = None):
        super().__init__(message or f"{field} already exists")
        self.field = field

    def extra(self) -> dict:
        return {"field": self.field}


class InvalidTokenError(KatikaError):
    status_code = 401

    def __init__(self, message: str = "Invalid token"):
        super().__init__(message)


class TokenExpiredError(KatikaError):
    status_code = 401

    def __init__(self, message: str = "Token expired"):
        super().__init__(message)


class UploadTooLargeError(KatikaError):
    status_code = 400

    def __init__(self, max_size: str = "10MB", message: str = "File too large"):
        super().__init__(message)
        self.max_size = max_size

    def extra(self) -> dict:
        return {"maxSize": self.max_size}


class UnexpectedUploadError(KatikaError):
    status_code = 400

    def __init__(self, message: str = "Too many files or unexpected field name"):
        super().__init__(message)


class GenerationError(KatikaError):
    """A document could not be rendered or its record could not be saved."""

    status_code = 500


def error_payload(exc: Exception, *, production: bool) -> tuple[int, dict]:
    """Convert an exception into ``(status_code, json_body)``.

    Known errors keep their own status and extra keys.  Anything else becomes
    a 500 that echoes the exception message; the formatted stack is added
    only when ``production`` is false.

    Args:
        exc: The exception raised while handling a request.
        production: Whether the server runs in production mode.

    Returns:
        Tuple of HTTP status code and response body.
    """
    if isinstance(exc, KatikaError):
        return exc.status_code, {"error": exc.message, **exc.extra()}

    body = {"error": str(exc) or "Internal Server Error"}
    if not production:
        body["stack"] = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    return 500, body
