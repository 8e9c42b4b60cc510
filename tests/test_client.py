"""
API Client Tests
----------------
Transport behaviour: error mapping, retries and response decoding.

Tests cover:
- HTTP status to exception mapping
- Retry once on transient failures, never on 4xx
- Network failures and timeouts
- Malformed response bodies
"""

import asyncio
from pathlib import Path
import sys

import httpx
import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from api.client import APIClient, APIConfig, APIResponse, APIStatus, classify_status
from api.rate_limiter import RateLimitConfig, RateLimiter
from core.errors import (
    AuthenticationError, ConfigurationError, DecodeError, ErrorCategory,
    NotFoundError, RateLimitError, ServerError, StatusError, TransportError,
    ValidationError,
)


def make_client(handler, max_retries: int = 1, **kwargs) -> APIClient:
    config = APIConfig(
        name="test",
        base_url="https://api.challonge.com/v1",
        username="testuser",
        api_key="testkey",
        max_retries=max_retries,
        retry_delay_factor=0.0,
        rate_limit_requests=6000,
        rate_limit_burst=100,
        **kwargs,
    )
    return APIClient(config, transport=httpx.MockTransport(handler))


class TestStatusClassification:
    """Tests for HTTP status handling."""

    @pytest.mark.parametrize("code,status", [
        (200, APIStatus.SUCCESS),
        (204, APIStatus.SUCCESS),
        (401, APIStatus.AUTH_ERROR),
        (403, APIStatus.AUTH_ERROR),
        (404, APIStatus.NOT_FOUND),
        (406, APIStatus.VALIDATION_ERROR),
        (422, APIStatus.VALIDATION_ERROR),
        (429, APIStatus.RATE_LIMITED),
        (500, APIStatus.SERVER_ERROR),
        (503, APIStatus.SERVER_ERROR),
    ])
    def test_classify(self, code, status):
        assert classify_status(code) == status

    @pytest.mark.parametrize("code,error_cls", [
        (401, AuthenticationError),
        (404, NotFoundError),
        (422, ValidationError),
    ])
    def test_client_errors_raise(self, fake_api, code, error_cls):
        fake_api.reply(code, {"errors": ["something is wrong"]})
        client = make_client(fake_api)

        with pytest.raises(error_cls) as exc_info:
            asyncio.run(client.get("tournaments.json"))

        assert exc_info.value.status_code == code

    def test_validation_messages(self, fake_api):
        """Challonge's errors list is kept on the exception."""
        fake_api.reply(422, {"errors": ["Name can't be blank", "URL is already taken"]})
        client = make_client(fake_api)

        with pytest.raises(ValidationError) as exc_info:
            asyncio.run(client.post("tournaments.json", data=[("tournament[name]", "")]))

        assert exc_info.value.errors == ["Name can't be blank", "URL is already taken"]
        assert "URL is already taken" in str(exc_info.value)

    def test_non_json_error_body(self, fake_api):
        """An HTML error page is kept as text."""
        fake_api.reply(404, content=b"<html>Not Found</html>")
        client = make_client(fake_api)

        with pytest.raises(NotFoundError) as exc_info:
            asyncio.run(client.get("tournaments/unknown.json"))

        assert exc_info.value.body == "<html>Not Found</html>"


class TestRetries:
    """Tests for retrying failed attempts."""

    def test_server_error_retried_once(self, fake_api):
        fake_api.reply(500).reply(200, [])
        client = make_client(fake_api)

        assert asyncio.run(client.get("tournaments.json")) == []
        assert len(fake_api.requests) == 2

    def test_server_error_gives_up(self, fake_api):
        fake_api.reply(502).reply(503)
        client = make_client(fake_api)

        with pytest.raises(ServerError) as exc_info:
            asyncio.run(client.get("tournaments.json"))

        assert exc_info.value.status_code == 503
        assert len(fake_api.requests) == 2

    def test_client_error_not_retried(self, fake_api):
        fake_api.reply(422, {"errors": ["bad"]})
        client = make_client(fake_api)

        with pytest.raises(ValidationError):
            asyncio.run(client.get("tournaments.json"))

        assert len(fake_api.requests) == 1

    def test_dropped_connection_retried(self, fake_api):
        """A reset keep-alive connection is retried with a fresh one."""
        fake_api.fail(httpx.ConnectError).reply(200, [])
        client = make_client(fake_api)

        assert asyncio.run(client.get("tournaments.json")) == []
        assert len(fake_api.requests) == 2

    def test_network_error(self, fake_api):
        fake_api.fail(httpx.ConnectError).fail(httpx.ConnectError)
        client = make_client(fake_api)

        with pytest.raises(TransportError) as exc_info:
            asyncio.run(client.get("tournaments.json"))

        assert exc_info.value.category == ErrorCategory.NETWORK_ERROR

    def test_timeout(self, fake_api):
        fake_api.fail(httpx.ReadTimeout, "timed out").fail(httpx.ReadTimeout, "timed out")
        client = make_client(fake_api)

        with pytest.raises(TransportError) as exc_info:
            asyncio.run(client.get("tournaments.json"))

        assert exc_info.value.category == ErrorCategory.TIMEOUT_ERROR
        assert len(fake_api.requests) == 2

    def test_rate_limited_retried(self, fake_api):
        fake_api.reply(429, headers={"Retry-After": "0"}).reply(200, [])
        client = make_client(fake_api)

        assert asyncio.run(client.get("tournaments.json")) == []
        assert len(fake_api.requests) == 2

    def test_retries_disabled(self, fake_api):
        fake_api.reply(500)
        client = make_client(fake_api, max_retries=0)

        with pytest.raises(ServerError):
            asyncio.run(client.get("tournaments.json"))

        assert len(fake_api.requests) == 1


class TestResponses:
    """Tests for response bodies."""

    def test_empty_body(self, fake_api):
        fake_api.reply(200)
        client = make_client(fake_api)

        assert asyncio.run(client.delete("tournaments/1.json")) is None

    def test_invalid_json(self, fake_api):
        """A success response that is not JSON fails without retrying."""
        fake_api.reply(200, content=b"<html>maintenance</html>")
        client = make_client(fake_api)

        with pytest.raises(DecodeError):
            asyncio.run(client.get("tournaments.json"))

        assert len(fake_api.requests) == 1

    def test_url_joining(self, fake_api):
        fake_api.reply(200, [])
        client = make_client(fake_api)

        asyncio.run(client.get("/tournaments.json"))

        assert fake_api.last.url.path == "/v1/tournaments.json"

    def test_custom_headers(self, fake_api):
        fake_api.reply(200, [])
        client = make_client(fake_api, headers={"X-Trace": "abc"})

        asyncio.run(client.get("tournaments.json"))

        assert fake_api.last.headers["X-Trace"] == "abc"
        assert fake_api.last.headers["User-Agent"] == "challonge-client/1.0"


class TestClientGuards:
    """Tests for local failures."""

    def test_unconfigured(self, fake_api):
        client = make_client(fake_api)
        client.config.api_key = ""

        with pytest.raises(ConfigurationError):
            asyncio.run(client.get("tournaments.json"))

        assert fake_api.requests == []

    def test_local_rate_limit(self, fake_api):
        """An exhausted local bucket fails without reaching the network."""
        config = APIConfig(
            name="test",
            base_url="https://api.challonge.com/v1",
            username="testuser",
            api_key="testkey",
            timeout_seconds=0.05,
            max_retries=0,
        )
        limiter = RateLimiter(RateLimitConfig(requests_per_minute=1, burst_size=1))
        limiter.try_acquire()
        client = APIClient(config, transport=httpx.MockTransport(fake_api), rate_limiter=limiter)

        with pytest.raises(RateLimitError):
            asyncio.run(client.get("tournaments.json"))

        assert fake_api.requests == []

    def test_response_to_error(self):
        response = APIResponse(status=APIStatus.VALIDATION_ERROR, data={"errors": "bad"}, status_code=406)

        error = response.to_error()

        assert type(error) is StatusError
        assert error.errors == ["bad"]
