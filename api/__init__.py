# API module - Challonge REST API client
# One method per endpoint, rate limited, credentials isolated

from .challonge import Challonge
from .client import APIClient, APIConfig, APIResponse, APIStatus
from .rate_limiter import RateLimiter, RateLimitConfig

__all__ = [
    "Challonge", "APIClient", "APIConfig", "APIResponse", "APIStatus",
    "RateLimiter", "RateLimitConfig",
]
