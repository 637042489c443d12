"""
Error taxonomy for calls against the admin API.

Every failure a resource can hit maps to one of these classes, and every
class carries a human-readable message suitable for showing inline.
"""

from typing import Any, List, Optional


NETWORK_ERROR = "Network error. Please check your connection."
UNAUTHORIZED = "You are not authorized to perform this action."
NOT_FOUND = "The requested resource was not found."
SERVER_ERROR = "Server error. Please try again later."
VALIDATION_ERROR = "Please check your input and try again."


class SpadminError(Exception):
    """Base class for all errors raised by spadmin."""
    pass


class ConfigError(SpadminError):
    """Raised when an environment setting cannot be parsed."""
    pass


class ValidationError(SpadminError):
    """Raised when a payload fails local validation before any request."""

    def __init__(self, errors: List[str]):
        self.errors = list(errors)
        message = "; ".join(self.errors) if self.errors else VALIDATION_ERROR
        super().__init__(message)


class ApiError(SpadminError):
    """A request against the API failed."""

    default_message = SERVER_ERROR

    def __init__(self, message: Optional[str] = None, status: Optional[int] = None):
        self.status = status
        self.message = message or self.default_message
        super().__init__(self.message)


class NetworkError(ApiError):
    """The request never completed (DNS, refused connection, timeout)."""

    default_message = NETWORK_ERROR


class AuthError(ApiError):
    """401 or 403."""

    default_message = UNAUTHORIZED


class NotFoundError(ApiError):
    """404."""

    default_message = NOT_FOUND


class ServerError(ApiError):
    """5xx and any other non-success status."""

    default_message = SERVER_ERROR


def server_message(body: Any) -> Optional[str]:
    """Pull the server's own message out of an error body, if it sent one."""
    if not isinstance(body, dict):
        return None
    for key in ("message", "error"):
        value = body.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None


def error_from_status(status: int, body: Any = None) -> ApiError:
    """
    Build the ApiError subclass matching an HTTP status.

    Args:
        status: HTTP status code of the failed response
        body: Decoded response body (dict, text or None)

    Returns:
        ApiError instance (not raised)
    """
    message = server_message(body)
    if status in (401, 403):
        return AuthError(message, status=status)
    if status == 404:
        return NotFoundError(message, status=status)
    return ServerError(message, status=status)


def describe(exc: BaseException) -> str:
    """Map any exception to the string shown to the operator."""
    if isinstance(exc, ApiError):
        return exc.message
    if isinstance(exc, ValidationError):
        return str(exc)
    text = str(exc).strip()
    return text or "An error occurred"
