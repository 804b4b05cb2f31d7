"""Custom exception hierarchy for the CORS gateway."""

from typing import Any


class GatewayError(Exception):
    """Base exception for errors reported to the caller as JSON.

    Attributes:
        message: Human-readable message
        status_code: HTTP status returned to the caller
        kind: Short error kind placed in the ``error`` field
        extra: Additional fields merged into the JSON payload
        headers: Extra response headers (e.g. Allow on 405)
    """

    status_code: int = 500
    kind: str = "Internal Error"

    def __init__(self, message: str, *, headers: dict[str, str] | None = None, **extra: Any) -> None:
        super().__init__(message)
        self.message = message
        self.headers = headers or {}
        self.extra = extra

    def to_payload(self) -> dict[str, Any]:
        """Return the JSON body for this error."""
        return {"error": self.kind, "message": self.message, **self.extra}


class PolicyViolation(GatewayError):
    """Target is missing or not on the allow-list."""

    status_code = 403
    kind = "Forbidden"


class MalformedInput(GatewayError):
    """Target URL or a size header cannot be parsed."""

    status_code = 400
    kind = "Bad Request"


class RequestTooLarge(GatewayError):
    """Request body exceeds size limit."""

    status_code = 413
    kind = "Request Too Large"


class ResponseTooLarge(GatewayError):
    """Upstream response body exceeds size limit."""

    status_code = 502
    kind = "Response Too Large"


class UpstreamError(GatewayError):
    """Raised when the upstream call fails.

    Attributes:
        target: Host of the upstream that failed (optional)
    """

    status_code = 502
    kind = "Bad Gateway"

    def __init__(self, message: str, target: str | None = None) -> None:
        super().__init__(message)
        self.target = target


class UpstreamTimeoutError(UpstreamError):
    """Raised when the upstream does not answer within the timeout."""

    status_code = 504
    kind = "Gateway Timeout"


class UpstreamConnectionError(UpstreamError):
    """Raised when unable to reach the upstream or the transfer fails."""


class UnsupportedMethod(GatewayError):
    """Method is not served on the proxy route."""

    status_code = 405
    kind = "Method Not Allowed"
