"""Error taxonomy for the approval gateway.

Every error carries a human-readable message and the HTTP status the API
layer answers with. ``DispatchFailure`` never reaches a caller: dispatch
helpers raise it internally and log it.
"""

from typing import Optional


class GatewayError(Exception):
    """Base class for errors raised by the approval gateway."""

    status_code = 500
    category = "Internal Server Error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(GatewayError):
    """Malformed or missing input."""

    status_code = 400
    category = "Bad Request"


class NotFoundError(GatewayError):
    """Unknown submission identifier or setting key."""

    status_code = 404
    category = "Not Found"


class InvalidStateError(GatewayError):
    """Raised when a transition is illegal for the record's current status."""

    status_code = 400
    category = "Bad Request"

    def __init__(self, message: str, current_status: Optional[str] = None):
        super().__init__(message)
        self.current_status = current_status


class DispatchFailure(GatewayError):
    """Notification or callback delivery failed."""

    def __init__(self, message: str, target: Optional[str] = None):
        super().__init__(message)
        self.target = target


class InternalError(GatewayError):
    """Unexpected persistence or runtime fault."""
