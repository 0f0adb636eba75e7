from enum import Enum
from typing import Optional, Any


class ErrorKind(str, Enum):
    CONFIGURATION = "configuration"
    NOT_AUTHENTICATED = "not_authenticated"
    NOT_FOUND = "not_found"
    NETWORK = "network"
    REJECTED = "rejected"
    TRANSITION_REJECTED = "transition_rejected"


def message_text(value: Any) -> Optional[str]:
    """Server messages arrive as a string, a list of strings, or junk."""
    if isinstance(value, str):
        return value.strip() or None
    if isinstance(value, (list, tuple)):
        parts = [str(v).strip() for v in value if v is not None and str(v).strip()]
        return "; ".join(parts) or None
    return None


class BookingError(Exception):
    """
    Base for every failure surfaced by the booking layer.
    `message` is safe to show to the user.
    """
    kind: ErrorKind = ErrorKind.NETWORK
    default_message = "Something went wrong"

    def __init__(self, message: Optional[str] = None, status_code: Optional[int] = None):
        self.message = message_text(message) or self.default_message
        self.status_code = status_code
        super().__init__(self.message)


class ConfigurationError(BookingError):
    kind = ErrorKind.CONFIGURATION
    default_message = "Backend URL is not configured"


class NotAuthenticated(BookingError):
    kind = ErrorKind.NOT_AUTHENTICATED
    default_message = "You are not signed in"


class NotFound(BookingError):
    kind = ErrorKind.NOT_FOUND
    default_message = "Nothing found"


class NetworkError(BookingError):
    kind = ErrorKind.NETWORK
    default_message = "Could not reach the server"


class RequestRejected(BookingError):
    kind = ErrorKind.REJECTED
    default_message = "The server rejected the request"


class TransitionRejected(RequestRejected):
    kind = ErrorKind.TRANSITION_REJECTED
    default_message = "Failed to update booking status"
