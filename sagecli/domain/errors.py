"""Error types raised by the AI request gateway.

Transport adapters raise `TransportError` (or `RetryableTransportError`)
carrying a status code and a failure class. The retry executor classifies
those and surfaces either `FatalRequestError` or `RetriesExhaustedError`
to the call sites.
"""

from typing import Optional

# Failure classes populated by the transport layer
RATE_LIMIT = "rate_limit"
SERVER_ERROR = "server_error"
CLIENT_ERROR = "client_error"
AUTH = "auth"
CONNECTION = "connection"
TIMEOUT = "timeout"
INVALID_RESPONSE = "invalid_response"
UNKNOWN = "unknown"


class GatewayError(Exception):
    """Base class for all errors surfaced by the gateway."""


class TransportError(GatewayError):
    """A failed outbound call, tagged by the transport that made it."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        failure_class: str = UNKNOWN,
    ):
        self.status_code = status_code
        self.failure_class = failure_class
        super().__init__(message)

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}({str(self)!r}, status_code={self.status_code}, "
            f"failure_class={self.failure_class!r})"
        )


class RetryableTransportError(TransportError):
    """Rate-limit failure; retried unless the policy excludes its status code."""


class FatalRequestError(GatewayError):
    """Raised when a call fails with an error that must not be retried."""

    def __init__(self, cause: BaseException):
        self.cause = cause
        super().__init__(f"Request failed: {cause}")

    @property
    def status_code(self) -> Optional[int]:
        return getattr(self.cause, "status_code", None)


class RetriesExhaustedError(GatewayError):
    """Raised when every permitted attempt failed with a retryable error."""

    def __init__(self, last_error: BaseException, attempts: int):
        self.last_error = last_error
        self.attempts = attempts
        super().__init__(f"Max retries ({attempts}) exceeded. Last error: {last_error}")

    @property
    def is_rate_limited(self) -> bool:
        """True when the final failure was a rate limit (callers show a cool-down)."""
        if isinstance(self.last_error, TransportError):
            return self.last_error.status_code == 429 or self.last_error.failure_class == RATE_LIMIT
        return getattr(self.last_error, "status_code", None) == 429
