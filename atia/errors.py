"""
ATIA Dashboard Error Taxonomy

Every failure surfaced to the dashboard is one of four kinds:

- validation: rejected locally before any network call
- transport: the service was never reached (timeout or connection failure)
- protocol: the service answered, but with a failure status or error field
- shape: the service answered 2xx, but the body is not a valid record

Shape errors are protocol errors as far as the user is concerned; the
separate kind tag keeps them distinguishable in logs.
"""

from enum import Enum


class ErrorKind(str, Enum):
    """Kind tag carried by every dashboard error."""

    VALIDATION = "validation"
    TRANSPORT = "transport"
    PROTOCOL = "protocol"
    SHAPE = "shape"


class TransportCause(str, Enum):
    """Why a request never got a response."""

    TIMEOUT = "timeout"
    CONNECTION = "connection"


GENERIC_FAILURE_MESSAGE = "Request to the threat intelligence service failed"


class DashboardError(Exception):
    """Base class for all classified dashboard errors."""

    kind: ErrorKind = ErrorKind.PROTOCOL

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    @property
    def user_message(self) -> str:
        """Human-readable message for banners and notices."""
        return self.message


class ValidationError(DashboardError):
    """Input rejected before reaching the network."""

    kind = ErrorKind.VALIDATION


class TransportError(DashboardError):
    """No response was received from the service."""

    kind = ErrorKind.TRANSPORT

    def __init__(self, endpoint: str, cause: TransportCause, detail: str = ""):
        self.endpoint = endpoint
        self.cause = cause
        self.detail = detail
        if cause is TransportCause.TIMEOUT:
            message = f"Request to {endpoint} timed out"
        else:
            message = f"Could not connect to {endpoint}"
        super().__init__(message)


class ProtocolError(DashboardError):
    """The service responded, but not with a usable success."""

    kind = ErrorKind.PROTOCOL

    def __init__(
        self,
        message: str | None = None,
        status_code: int | None = None,
        reason: str | None = None,
        server_message: str | None = None,
    ):
        self.status_code = status_code
        self.reason = reason
        self.server_message = server_message
        super().__init__(message or self._compose_message())

    def _compose_message(self) -> str:
        if self.server_message:
            return self.server_message
        if self.status_code is not None:
            status_line = f"HTTP {self.status_code}"
            if self.reason:
                status_line = f"{status_line} {self.reason}"
            return status_line
        return GENERIC_FAILURE_MESSAGE


class ShapeError(ProtocolError):
    """A 2xx body that does not parse into the canonical model."""

    kind = ErrorKind.SHAPE

    def __init__(self, message: str):
        super().__init__(message=message)

    @property
    def user_message(self) -> str:
        return f"Unexpected response from service: {self.message}"


def describe_error(exc: BaseException, fallback: str = GENERIC_FAILURE_MESSAGE) -> str:
    """Get the user-facing message for any exception."""
    if isinstance(exc, DashboardError):
        return exc.user_message
    return fallback
