"""
Tests for BaseAPIClient - status mapping, retries and circuit breaker.
"""

import httpx
import pytest

from wiki_search.infrastructure.sources.base_client import DEFAULT_USER_AGENT, BaseAPIClient
from wiki_search.shared.async_utils import CircuitBreaker
from wiki_search.shared.exceptions import (
    NetworkError,
    NotFoundError,
    ParseError,
    RateLimitError,
    ServiceUnavailableError,
)


class Recorder:
    """MockTransport handler replaying a list of responses (or exceptions)."""

    def __init__(self, *outcomes):
        self.outcomes = list(outcomes)
        self.requests = []

    def __call__(self, request):
        self.requests.append(request)
        outcome = self.outcomes.pop(0) if len(self.outcomes) > 1 else self.outcomes[0]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


@pytest.fixture
def make_client(mock_http_client):
    def _create(handler, **kwargs):
        kwargs.setdefault("retry_base_delay", 0)
        return BaseAPIClient(
            base_url="https://wiki.example.org",
            client=mock_http_client(handler),
            **kwargs,
        )

    return _create


class TestSuccess:
    @pytest.mark.asyncio
    async def test_json_payload(self, make_client):
        handler = Recorder(httpx.Response(200, json={"ok": True}))
        client = make_client(handler)

        assert await client._make_request("/w/api.php", params={"q": "x"}) == {"ok": True}
        assert str(handler.requests[0].url) == "https://wiki.example.org/w/api.php?q=x"

    @pytest.mark.asyncio
    async def test_text_payload(self, make_client):
        client = make_client(Recorder(httpx.Response(200, text="<p>Hi</p>")))
        assert await client._make_request("/page", expect_json=False) == "<p>Hi</p>"

    @pytest.mark.asyncio
    async def test_full_url_passthrough(self, make_client):
        handler = Recorder(httpx.Response(200, json=[]))
        client = make_client(handler)
        await client._make_request("https://other.example.org/api")
        assert handler.requests[0].url.host == "other.example.org"

    @pytest.mark.asyncio
    async def test_user_agent_header(self, make_client):
        handler = Recorder(httpx.Response(200, json={}))
        await make_client(handler)._make_request("/")
        assert handler.requests[0].headers["User-Agent"] == DEFAULT_USER_AGENT

    @pytest.mark.asyncio
    async def test_custom_headers_override(self, make_client):
        handler = Recorder(httpx.Response(200, json={}))
        await make_client(handler, headers={"User-Agent": "tests/1.0"})._make_request("/")
        assert handler.requests[0].headers["User-Agent"] == "tests/1.0"


class TestStatusMapping:
    @pytest.mark.asyncio
    async def test_404_not_found(self, make_client):
        handler = Recorder(httpx.Response(404))
        with pytest.raises(NotFoundError):
            await make_client(handler)._make_request("/missing")
        assert len(handler.requests) == 1

    @pytest.mark.asyncio
    async def test_5xx_service_unavailable(self, make_client):
        handler = Recorder(httpx.Response(503))
        with pytest.raises(ServiceUnavailableError, match="HTTP 503"):
            await make_client(handler)._make_request("/")
        assert len(handler.requests) == 1

    @pytest.mark.asyncio
    async def test_other_4xx_network_error(self, make_client):
        with pytest.raises(NetworkError, match="HTTP 403"):
            await make_client(Recorder(httpx.Response(403)))._make_request("/")

    @pytest.mark.asyncio
    async def test_invalid_json(self, make_client):
        with pytest.raises(ParseError):
            await make_client(Recorder(httpx.Response(200, text="not json")))._make_request("/")


class TestRetries:
    @pytest.mark.asyncio
    async def test_429_retried_then_succeeds(self, make_client):
        handler = Recorder(
            httpx.Response(429, headers={"Retry-After": "0"}),
            httpx.Response(200, json={"ok": True}),
        )
        assert await make_client(handler)._make_request("/") == {"ok": True}
        assert len(handler.requests) == 2

    @pytest.mark.asyncio
    async def test_429_exhausted(self, make_client):
        handler = Recorder(httpx.Response(429, headers={"Retry-After": "0"}))
        with pytest.raises(RateLimitError):
            await make_client(handler, max_retries=2)._make_request("/")
        assert len(handler.requests) == 3

    @pytest.mark.asyncio
    async def test_connection_error_retried(self, make_client):
        handler = Recorder(httpx.ConnectError("refused"), httpx.Response(200, json=[1]))
        assert await make_client(handler)._make_request("/") == [1]
        assert len(handler.requests) == 2

    @pytest.mark.asyncio
    async def test_connection_error_exhausted(self, make_client):
        handler = Recorder(httpx.ConnectError("refused"))
        with pytest.raises(NetworkError, match="connection failed"):
            await make_client(handler, max_retries=1)._make_request("/")
        assert len(handler.requests) == 2


class TestCircuitBreakerIntegration:
    @pytest.mark.asyncio
    async def test_server_errors_open_breaker(self, make_client):
        handler = Recorder(httpx.Response(500))
        breaker = CircuitBreaker(failure_threshold=2, recovery_timeout=60)
        client = make_client(handler, circuit_breaker=breaker)

        for _ in range(2):
            with pytest.raises(ServiceUnavailableError):
                await client._make_request("/")

        with pytest.raises(RateLimitError):
            await client._make_request("/")
        assert len(handler.requests) == 2

    @pytest.mark.asyncio
    async def test_not_found_does_not_trip_breaker(self, make_client):
        breaker = CircuitBreaker(failure_threshold=1)
        client = make_client(Recorder(httpx.Response(404)), circuit_breaker=breaker)

        for _ in range(3):
            with pytest.raises(NotFoundError):
                await client._make_request("/")
        assert breaker.state == "closed"


class TestLifecycle:
    @pytest.mark.asyncio
    async def test_shared_client_not_closed(self, mock_http_client):
        shared = mock_http_client(Recorder(httpx.Response(200, json={})))
        async with BaseAPIClient(client=shared):
            pass
        assert not shared.is_closed
        await shared.aclose()

    @pytest.mark.asyncio
    async def test_own_client_closed(self):
        client = BaseAPIClient()
        await client.close()
        assert client._client.is_closed
