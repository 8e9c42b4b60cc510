"""
Error Handling Module
---------------------
Typed errors with classification and retry logic.
Client errors (4xx) are never retried.
"""

from enum import Enum, auto
from typing import Any, Dict, List, Optional


class ErrorCategory(Enum):
    """Categories of errors for handling decisions."""
    NETWORK_ERROR = auto()      # Connection failed or dropped
    TIMEOUT_ERROR = auto()      # Request timed out
    RATE_LIMITED = auto()       # HTTP 429
    AUTH_ERROR = auto()         # HTTP 401/403
    NOT_FOUND = auto()          # HTTP 404
    VALIDATION_ERROR = auto()   # HTTP 422 or any other 4xx
    SERVER_ERROR = auto()       # HTTP 5xx
    DECODE_ERROR = auto()       # Body did not match the expected shape
    CONFIG_ERROR = auto()       # Missing credentials or bad settings


class ChallongeError(Exception):
    """Base class for every error raised by the client."""

    category: ErrorCategory = ErrorCategory.NETWORK_ERROR

    @property
    def recoverable(self) -> bool:
        return RetryPolicy.MAX_RETRIES.get(self.category, 0) > 0


class ConfigurationError(ChallongeError):
    """Client cannot be built from the available settings."""
    category = ErrorCategory.CONFIG_ERROR


class TransportError(ChallongeError):
    """The request never produced an HTTP response."""

    def __init__(self, message: str, timeout: bool = False):
        super().__init__(message)
        self.category = ErrorCategory.TIMEOUT_ERROR if timeout else ErrorCategory.NETWORK_ERROR


class StatusError(ChallongeError):
    """Generic non-success response from the REST API."""

    category = ErrorCategory.VALIDATION_ERROR

    def __init__(self, status_code: int, body: Optional[Any] = None, message: Optional[str] = None):
        self.status_code = status_code
        self.body = body
        self.errors: List[str] = _extract_errors(body)
        if message is None:
            message = f"HTTP {status_code}"
            if self.errors:
                message = f"{message}: {'; '.join(self.errors)}"
        super().__init__(message)


class AuthenticationError(StatusError):
    category = ErrorCategory.AUTH_ERROR


class NotFoundError(StatusError):
    category = ErrorCategory.NOT_FOUND


class ValidationError(StatusError):
    """Challonge rejected the submitted attributes (HTTP 422)."""
    category = ErrorCategory.VALIDATION_ERROR


class RateLimitError(StatusError):
    category = ErrorCategory.RATE_LIMITED


class ServerError(StatusError):
    category = ErrorCategory.SERVER_ERROR


class DecodeError(ChallongeError):
    """JSON payload did not decode into the expected entity."""

    category = ErrorCategory.DECODE_ERROR

    def __init__(self, message: str, value: Any = None):
        super().__init__(message)
        self.value = value

    def __str__(self) -> str:
        text = super().__str__()
        if self.value is None:
            return text
        preview = repr(self.value)
        if len(preview) > 200:
            preview = preview[:197] + "..."
        return f"{text} (value: {preview})"


def _extract_errors(body: Any) -> List[str]:
    # Challonge reports validation failures as {"errors": ["...", ...]}
    if isinstance(body, dict):
        errors = body.get("errors")
        if isinstance(errors, list):
            return [str(e) for e in errors]
        if isinstance(errors, str):
            return [errors]
    return []


_STATUS_ERRORS: Dict[int, type] = {
    401: AuthenticationError,
    403: AuthenticationError,
    404: NotFoundError,
    422: ValidationError,
    429: RateLimitError,
}


def error_for_status(status_code: int, body: Optional[Any] = None) -> StatusError:
    """Build the exception matching an HTTP status code."""
    if status_code >= 500:
        return ServerError(status_code, body)
    error_cls = _STATUS_ERRORS.get(status_code, StatusError)
    return error_cls(status_code, body)


class RetryPolicy:
    """
    Retry policy for different error categories.

    A failed attempt is retried once when the failure is transient
    (dropped keep-alive connections are the common case).
    """

    # Maximum retries per error category
    MAX_RETRIES: Dict[ErrorCategory, int] = {
        ErrorCategory.NETWORK_ERROR: 1,
        ErrorCategory.TIMEOUT_ERROR: 1,
        ErrorCategory.SERVER_ERROR: 1,
        ErrorCategory.RATE_LIMITED: 1,
        ErrorCategory.AUTH_ERROR: 0,       # No retry - needs new credentials
        ErrorCategory.NOT_FOUND: 0,
        ErrorCategory.VALIDATION_ERROR: 0, # No retry - fix input
        ErrorCategory.DECODE_ERROR: 0,
        ErrorCategory.CONFIG_ERROR: 0,
    }

    # Delay between retries (seconds)
    RETRY_DELAYS: Dict[ErrorCategory, float] = {
        ErrorCategory.NETWORK_ERROR: 0.5,
        ErrorCategory.TIMEOUT_ERROR: 1.0,
        ErrorCategory.SERVER_ERROR: 1.0,
        ErrorCategory.RATE_LIMITED: 5.0,
    }

    @classmethod
    def should_retry(cls, category: ErrorCategory, attempt: int, max_retries: Optional[int] = None) -> bool:
        """
        Check if a request should be retried.

        `attempt` counts retries already made (0 for the first failure).
        `max_retries` caps the per-category limit when given.
        """
        limit = cls.MAX_RETRIES.get(category, 0)
        if max_retries is not None:
            limit = min(limit, max_retries)
        return attempt < limit

    @classmethod
    def get_delay(cls, category: ErrorCategory) -> float:
        """Get delay before retry in seconds."""
        return cls.RETRY_DELAYS.get(category, 1.0)
