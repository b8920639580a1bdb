"""
Base API Client - Common HTTP request pattern with retry, rate limiting, and circuit breaker.

Shared by every MediaWiki search backend and article source:
- Automatic retry on 429 (rate limit) with Retry-After support
- Retry with exponential backoff on connection errors
- Rate limiting (configurable interval between requests)
- Circuit breaker for fault tolerance
- Failures raised as typed exceptions so callers decide how to recover
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any

import httpx
from typing_extensions import Self

from wiki_search.shared.async_utils import CircuitBreaker
from wiki_search.shared.exceptions import (
    NetworkError,
    NotFoundError,
    ParseError,
    RateLimitError,
    ServiceUnavailableError,
)

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = "wiki-search-mcp/1.0 (https://github.com/wiki-search-mcp)"


class BaseAPIClient:
    """
    Base class for MediaWiki API clients.

    Provides common infrastructure:
    - httpx.AsyncClient management (own client, or an injected shared one)
    - Rate limiting with configurable interval
    - Retry on 429 and on connection errors with exponential backoff
    - Circuit breaker for fault tolerance

    Status handling in ``_make_request``:
        404              -> NotFoundError
        429 (exhausted)  -> RateLimitError
        5xx              -> ServiceUnavailableError
        other 4xx        -> NetworkError
        bad JSON         -> ParseError

    Example:
        class MyClient(BaseAPIClient):
            _service_name = "MyWiki"

            async def get_page(self, title: str) -> str:
                return await self._make_request(f"/page/{title}", expect_json=False)
    """

    _service_name: str = "MediaWiki"

    def __init__(
        self,
        base_url: str = "",
        timeout: float = 30.0,
        min_interval: float = 0.0,
        headers: dict[str, str] | None = None,
        client: httpx.AsyncClient | None = None,
        circuit_breaker: CircuitBreaker | None = None,
        max_retries: int = 3,
        retry_base_delay: float = 1.0,
    ) -> None:
        """
        Initialize base client.

        Args:
            base_url: Base URL for the API (optional, can pass full URLs)
            timeout: Request timeout in seconds
            min_interval: Minimum seconds between requests (rate limiting)
            headers: Default headers for all requests
            client: Shared httpx client. When given, this instance does not close it.
            circuit_breaker: Optional circuit breaker. If None, a default one is
                created (threshold=10, recovery=60s).
            max_retries: Retries on 429 and connection errors
            retry_base_delay: Base delay of the exponential backoff in seconds
        """
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._min_interval = min_interval
        self._last_request_time = 0.0
        self._max_retries = max_retries
        self._retry_base_delay = retry_base_delay
        self._headers = {"User-Agent": DEFAULT_USER_AGENT, **(headers or {})}
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            timeout=self._timeout,
            follow_redirects=True,
            limits=httpx.Limits(
                max_connections=20,
                max_keepalive_connections=10,
                keepalive_expiry=30.0,
            ),
        )
        self._circuit_breaker = circuit_breaker or CircuitBreaker(failure_threshold=10, recovery_timeout=60.0)

    @property
    def service_name(self) -> str:
        return self._service_name

    async def _rate_limit(self) -> None:
        """Enforce minimum interval between requests."""
        if self._min_interval <= 0:
            return
        elapsed = time.time() - self._last_request_time
        if elapsed < self._min_interval:
            await asyncio.sleep(self._min_interval - elapsed)
        self._last_request_time = time.time()

    def _build_url(self, url: str) -> str:
        """Build full URL from path or full URL."""
        if url.startswith(("http://", "https://")):
            return url
        return f"{self._base_url}{url}"

    def _backoff(self, attempt: int) -> float:
        return self._retry_base_delay * (2**attempt)

    async def _make_request(
        self,
        url: str,
        *,
        params: dict[str, Any] | None = None,
        expect_json: bool = True,
    ) -> Any:
        """
        Make a GET request with retry and circuit breaker protection.

        Args:
            url: Full URL or path (appended to base_url)
            params: Query string parameters
            expect_json: If True, parse response as JSON; otherwise return text

        Returns:
            Parsed JSON payload or response text

        Raises:
            NotFoundError, RateLimitError, ServiceUnavailableError,
            NetworkError, ParseError
        """
        full_url = self._build_url(url)

        for attempt in range(self._max_retries + 1):
            await self._rate_limit()
            try:
                async with self._circuit_breaker:
                    response = await self._execute_request(full_url, params=params)
                    if response.status_code >= 500:
                        raise ServiceUnavailableError(
                            f"HTTP {response.status_code}: {response.reason_phrase}",
                            service=self._service_name,
                        )
            except httpx.RequestError as e:
                if attempt < self._max_retries:
                    delay = self._backoff(attempt)
                    logger.warning(
                        f"{self._service_name} request error (attempt {attempt + 1}): {e}, retrying in {delay:.1f}s"
                    )
                    await asyncio.sleep(delay)
                    continue
                logger.error(f"{self._service_name} request failed: {e}")
                raise NetworkError(f"{self._service_name} connection failed: {e}") from e

            if response.status_code == 429:
                retry_after = self._get_retry_after(response, attempt)
                if attempt < self._max_retries:
                    logger.warning(
                        f"{self._service_name}: Rate limited (429), "
                        f"retry {attempt + 1}/{self._max_retries} in {retry_after:.1f}s"
                    )
                    await asyncio.sleep(retry_after)
                    continue
                raise RateLimitError(f"Rate limited by {self._service_name}", retry_after=retry_after)

            if response.status_code == 404:
                raise NotFoundError(self._service_name, full_url)

            if response.status_code >= 400:
                raise NetworkError(f"{self._service_name} HTTP {response.status_code}: {response.reason_phrase}")

            return self._parse_response(response, expect_json)

        raise NetworkError(f"{self._service_name}: retries exhausted for {full_url}")

    async def _execute_request(
        self,
        url: str,
        *,
        params: dict[str, Any] | None = None,
    ) -> httpx.Response:
        """Execute the actual HTTP request. Override for custom behavior."""
        return await self._client.get(url, params=params, headers=self._headers)

    def _parse_response(self, response: httpx.Response, expect_json: bool) -> Any:
        """Parse response body."""
        if not expect_json:
            return response.text
        try:
            return response.json()
        except ValueError as e:
            raise ParseError("Invalid JSON response", source=self._service_name) from e

    def _get_retry_after(self, response: httpx.Response, attempt: int) -> float:
        """Extract Retry-After from response headers, with exponential backoff fallback."""
        try:
            return float(response.headers.get("Retry-After", self._backoff(attempt)))
        except (ValueError, TypeError):
            return self._backoff(attempt)

    async def close(self) -> None:
        """Close the underlying HTTP client if this instance created it."""
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.close()
