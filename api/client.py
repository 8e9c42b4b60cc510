"""
API Client Framework
--------------------
HTTP transport for the Challonge REST API with rate limiting, retries and
HTTP Basic authentication. Credentials never appear in logs.
"""

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Dict, Mapping, Optional, Tuple
from urllib.parse import urlencode
import asyncio
import json as jsonlib
import time

import httpx

from core.errors import (
    ChallongeError, ConfigurationError, DecodeError, ErrorCategory,
    RateLimitError, RetryPolicy, TransportError, error_for_status,
)
from infra.logging import RequestContext, get_logger
from models.base import FormPairs

from .rate_limiter import RateLimitConfig, RateLimiter

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"


class APIStatus(Enum):
    """Status of an API response."""
    SUCCESS = auto()
    RATE_LIMITED = auto()
    AUTH_ERROR = auto()
    NOT_FOUND = auto()
    VALIDATION_ERROR = auto()
    SERVER_ERROR = auto()
    TIMEOUT = auto()
    NETWORK_ERROR = auto()
    DECODE_ERROR = auto()


_STATUS_CATEGORIES: Dict[APIStatus, ErrorCategory] = {
    APIStatus.RATE_LIMITED: ErrorCategory.RATE_LIMITED,
    APIStatus.AUTH_ERROR: ErrorCategory.AUTH_ERROR,
    APIStatus.NOT_FOUND: ErrorCategory.NOT_FOUND,
    APIStatus.VALIDATION_ERROR: ErrorCategory.VALIDATION_ERROR,
    APIStatus.SERVER_ERROR: ErrorCategory.SERVER_ERROR,
    APIStatus.TIMEOUT: ErrorCategory.TIMEOUT_ERROR,
    APIStatus.NETWORK_ERROR: ErrorCategory.NETWORK_ERROR,
    APIStatus.DECODE_ERROR: ErrorCategory.DECODE_ERROR,
}


def classify_status(status_code: int) -> APIStatus:
    """Map an HTTP status code to an APIStatus."""
    if 200 <= status_code < 300:
        return APIStatus.SUCCESS
    if status_code == 429:
        return APIStatus.RATE_LIMITED
    if status_code in (401, 403):
        return APIStatus.AUTH_ERROR
    if status_code == 404:
        return APIStatus.NOT_FOUND
    if status_code >= 500:
        return APIStatus.SERVER_ERROR
    return APIStatus.VALIDATION_ERROR


@dataclass
class APIConfig:
    """Configuration for an API client."""
    name: str
    base_url: str
    username: str
    api_key: str
    timeout_seconds: float = 30.0
    max_retries: int = 1
    retry_delay_factor: float = 1.0  # Scales RetryPolicy delays
    rate_limit_requests: int = 60  # Max requests per minute
    rate_limit_burst: int = 10
    user_agent: str = "challonge-client/1.0"
    headers: Dict[str, str] = field(default_factory=dict)

    def __repr__(self) -> str:
        return (
            f"APIConfig(name={self.name!r}, base_url={self.base_url!r}, "
            f"username={self.username!r}, api_key='***')"
        )


@dataclass
class APIResponse:
    """Response from one HTTP attempt."""
    status: APIStatus
    data: Optional[Any] = None
    error: Optional[str] = None
    status_code: int = 0
    response_time_ms: float = 0.0
    retry_after: Optional[float] = None

    @property
    def success(self) -> bool:
        return self.status == APIStatus.SUCCESS

    @property
    def category(self) -> Optional[ErrorCategory]:
        return _STATUS_CATEGORIES.get(self.status)

    def to_error(self) -> ChallongeError:
        """Exception describing this failed response."""
        if self.status == APIStatus.TIMEOUT:
            return TransportError(self.error or "Request timed out", timeout=True)
        if self.status == APIStatus.NETWORK_ERROR:
            return TransportError(self.error or "Network error")
        if self.status == APIStatus.DECODE_ERROR:
            return DecodeError(self.error or "Malformed response body", self.data)
        if self.status == APIStatus.RATE_LIMITED and not self.status_code:
            return RateLimitError(429, self.data, message=self.error)
        return error_for_status(self.status_code, self.data)


class APIClient:
    """
    Base API client with rate limiting and error handling.

    Rules:
    - Credentials passed in at construction, sent as HTTP Basic auth
    - All requests rate-limited
    - Transient failures retried per RetryPolicy
    """

    def __init__(
        self,
        config: APIConfig,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        rate_limiter: Optional[RateLimiter] = None,
    ):
        self.config = config
        self._transport = transport
        self._logger = get_logger(f"api.{config.name}")
        self._rate_limiter = rate_limiter or RateLimiter(RateLimitConfig(
            requests_per_minute=config.rate_limit_requests,
            burst_size=config.rate_limit_burst,
        ))

    @property
    def is_configured(self) -> bool:
        """Check if API client is properly configured."""
        return bool(self.config.username and self.config.api_key)

    def _get_headers(self) -> Dict[str, str]:
        headers = {
            "Accept": "application/json",
            "User-Agent": self.config.user_agent,
        }
        headers.update(self.config.headers)
        return headers

    def _url(self, endpoint: str) -> str:
        return f"{self.config.base_url.rstrip('/')}/{endpoint.lstrip('/')}"

    async def get(self, endpoint: str, params: Optional[Mapping[str, str]] = None) -> Any:
        """Make a GET request."""
        return await self.request("GET", endpoint, params=params)

    async def post(
        self,
        endpoint: str,
        data: Optional[FormPairs] = None,
        params: Optional[Mapping[str, str]] = None,
        files: Optional[Dict[str, Tuple[str, bytes, str]]] = None,
    ) -> Any:
        """Make a POST request."""
        return await self.request("POST", endpoint, params=params, data=data, files=files)

    async def put(
        self,
        endpoint: str,
        data: Optional[FormPairs] = None,
        files: Optional[Dict[str, Tuple[str, bytes, str]]] = None,
    ) -> Any:
        """Make a PUT request."""
        return await self.request("PUT", endpoint, data=data, files=files)

    async def delete(self, endpoint: str) -> Any:
        """Make a DELETE request."""
        return await self.request("DELETE", endpoint)

    async def request(
        self,
        method: str,
        endpoint: str,
        params: Optional[Mapping[str, str]] = None,
        data: Optional[FormPairs] = None,
        files: Optional[Dict[str, Tuple[str, bytes, str]]] = None,
    ) -> Any:
        """
        Make a request, retrying transient failures.

        Returns the decoded JSON body (None for an empty body).
        Raises a ChallongeError subclass once retries are exhausted.
        """
        if not self.is_configured:
            raise ConfigurationError("Challonge username and API key are required")

        with RequestContext():
            attempt = 0
            while True:
                response = await self._request(method, endpoint, params, data, files, attempt)
                if response.success:
                    return response.data

                error = response.to_error()
                log_extra = {
                    "method": method,
                    "endpoint": endpoint,
                    "status_code": response.status_code,
                    "attempt": attempt,
                }

                if not RetryPolicy.should_retry(error.category, attempt, self.config.max_retries):
                    self._logger.error(f"{method} {endpoint} failed: {error}", extra=log_extra)
                    raise error

                delay = response.retry_after
                if delay is None:
                    delay = RetryPolicy.get_delay(error.category)
                delay *= self.config.retry_delay_factor

                self._logger.warning(
                    f"{method} {endpoint} failed ({error.category.name}), retrying in {delay:.1f}s",
                    extra=log_extra,
                )
                await asyncio.sleep(delay)
                attempt += 1

    async def _request(
        self,
        method: str,
        endpoint: str,
        params: Optional[Mapping[str, str]],
        data: Optional[FormPairs],
        files: Optional[Dict[str, Tuple[str, bytes, str]]],
        attempt: int,
    ) -> APIResponse:
        """Make one HTTP attempt and classify the outcome."""
        if not await self._rate_limiter.acquire(timeout=self.config.timeout_seconds):
            self._logger.warning(f"Local rate limit wait exceeded for {method} {endpoint}")
            return APIResponse(status=APIStatus.RATE_LIMITED, error="Local rate limit exceeded")

        url = self._url(endpoint)
        headers = self._get_headers()
        content: Optional[str] = None
        form: Optional[Dict[str, str]] = None

        # Ordered pairs are encoded by hand so repeated keys (bulk add) keep
        # their grouping; multipart bodies go through httpx
        if files:
            form = dict(data or [])
        elif data is not None:
            content = urlencode(data)
            headers["Content-Type"] = FORM_CONTENT_TYPE

        start_time = time.monotonic()

        try:
            async with httpx.AsyncClient(
                timeout=self.config.timeout_seconds,
                transport=self._transport,
                auth=httpx.BasicAuth(self.config.username, self.config.api_key),
            ) as client:
                response = await client.request(
                    method=method,
                    url=url,
                    params=params,
                    content=content,
                    data=form,
                    files=files,
                    headers=headers,
                )
        except httpx.TimeoutException:
            return APIResponse(status=APIStatus.TIMEOUT, error="Request timed out")
        except httpx.TransportError as e:
            return APIResponse(status=APIStatus.NETWORK_ERROR, error=f"Network error: {e}")

        response_time = (time.monotonic() - start_time) * 1000
        status = classify_status(response.status_code)

        self._logger.debug(
            f"{method} {endpoint} -> {response.status_code} ({response_time:.0f}ms)",
            extra={
                "method": method,
                "endpoint": endpoint,
                "status_code": response.status_code,
                "response_time_ms": round(response_time, 1),
                "attempt": attempt,
            },
        )

        body: Optional[Any] = None
        if response.content:
            try:
                body = response.json()
            except (jsonlib.JSONDecodeError, UnicodeDecodeError):
                if status == APIStatus.SUCCESS:
                    return APIResponse(
                        status=APIStatus.DECODE_ERROR,
                        data=response.text[:500],
                        error="Response body is not valid JSON",
                        status_code=response.status_code,
                        response_time_ms=response_time,
                    )
                body = response.text

        return APIResponse(
            status=status,
            data=body,
            error=None if status == APIStatus.SUCCESS else f"HTTP {response.status_code}",
            status_code=response.status_code,
            response_time_ms=response_time,
            retry_after=_retry_after(response) if status == APIStatus.RATE_LIMITED else None,
        )


def _retry_after(response: httpx.Response) -> Optional[float]:
    value = response.headers.get("Retry-After")
    if value is None:
        return None
    try:
        return max(0.0, float(value))
    except ValueError:
        return None
