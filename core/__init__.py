# Core module - Error taxonomy and retry policy
# Every failure surfaces as a ChallongeError subclass

from .errors import (
    ChallongeError, ConfigurationError, TransportError, StatusError,
    AuthenticationError, NotFoundError, ValidationError, RateLimitError,
    ServerError, DecodeError, ErrorCategory, RetryPolicy, error_for_status,
)

__all__ = [
    "ChallongeError", "ConfigurationError", "TransportError", "StatusError",
    "AuthenticationError", "NotFoundError", "ValidationError", "RateLimitError",
    "ServerError", "DecodeError", "ErrorCategory", "RetryPolicy", "error_for_status",
]
