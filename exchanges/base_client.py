"""
Base REST API Client

Shared aiohttp plumbing for every exchange client:
- Session lifecycle via async context manager
- GET with bounded timeout and retry for transient failures
- Mapping of transport/HTTP failures onto the ExchangeError taxonomy
- A throttle for secondary endpoints that exchanges rate-limit strictly

Retry policy:
    - Timeouts, connection errors and HTTP 5xx: retried up to max_retries
      attempts, delay = retry_backoff * attempt
    - HTTP 429 / 418: RateLimitedError immediately (never retried)
    - Other HTTP statuses: ExchangeHTTPError immediately

Subclasses set `exchange` and `BASE_URL` and add vendor envelope checks
(retCode / code fields) on top of _get().
"""

import aiohttp
import asyncio
import time
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Callable, Dict, Optional

from core.exceptions import (
    ExchangeHTTPError,
    ExchangeTimeoutError,
    ExchangeTransportError,
    PayloadSchemaError,
    RateLimitedError,
    SessionNotOpenError,
)
from core.logging import get_logger, log_api_request, log_api_response


RATE_LIMIT_STATUSES = (429, 418)


class BaseAPIClient:
    """
    Async HTTP client base for exchange REST APIs.

    Attributes:
        exchange: Lowercase exchange name used in logs and errors
        BASE_URL: Default API base URL
        session: aiohttp ClientSession (created in __aenter__)

    Example:
        >>> async with BybitAPIClient() as client:
        ...     products = await client.get_flexible_products("USDT")
    """

    exchange: str = "unknown"
    BASE_URL: str = ""

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: float = 10.0,
        max_retries: int = 2,
        retry_backoff: float = 0.5,
        throttle_interval: float = 0.25
    ):
        """
        Args:
            base_url: Override for BASE_URL
            timeout: Total timeout per request in seconds
            max_retries: Attempts per request for transient failures
            retry_backoff: Base retry delay in seconds
            throttle_interval: Minimum spacing between throttled calls in seconds
        """
        self.base_url = (base_url or self.BASE_URL).rstrip("/")
        self.timeout = timeout
        self.max_retries = max(1, max_retries)
        self.retry_backoff = retry_backoff
        self.throttle_interval = throttle_interval
        self.logger = get_logger(type(self).__module__)
        self.session: Optional[aiohttp.ClientSession] = None

        self._throttle_lock = asyncio.Lock()
        self._last_throttled_call = 0.0

    # ============================================
    # Context Manager for Session Management
    # ============================================

    async def __aenter__(self):
        """Enter async context - creates HTTP session."""
        self.session = aiohttp.ClientSession()
        self.logger.debug(f"{type(self).__name__} session created")
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Exit async context - closes HTTP session."""
        if self.session:
            await self.session.close()
            self.session = None
            self.logger.debug(f"{type(self).__name__} session closed")

    # ============================================
    # HTTP Request Handler with Retry Logic
    # ============================================

    async def _get(
        self,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
        query: Optional[Callable[[], str]] = None,
        auth_headers: Optional[Callable[[], Dict[str, str]]] = None
    ) -> Any:
        """
        Make a GET request and return the decoded JSON body.

        Args:
            path: Endpoint path, optionally with a pre-built query string
            params: Query parameters (leave None when path already carries them)
            headers: Extra request headers
            query: Builds the query string for each attempt
            auth_headers: Builds signature headers for each attempt

        Signed endpoints pass query or auth_headers so every retry carries a
        fresh timestamp and signature.

        Returns:
            Parsed JSON response

        Raises:
            SessionNotOpenError: The session was never opened (initialize() failed or was skipped)
            RateLimitedError: HTTP 429/418
            ExchangeHTTPError: Other non-200 statuses
            ExchangeTimeoutError: Timed out on every attempt
            ExchangeTransportError: Connection failed on every attempt
            PayloadSchemaError: Body is not valid JSON
        """
        if not self.session:
            raise SessionNotOpenError(self.exchange, "client session not initialized")

        request_headers = {"Content-Type": "application/json"}
        if headers:
            request_headers.update(headers)

        endpoint = path.split("?", 1)[0]
        log_api_request(self.exchange, endpoint, params)

        for attempt in range(1, self.max_retries + 1):
            url = f"{self.base_url}{path}"
            if query is not None:
                url = f"{url}?{query()}"

            attempt_headers = request_headers
            if auth_headers is not None:
                attempt_headers = {**request_headers, **auth_headers()}

            started = time.monotonic()
            try:
                async with self.session.get(
                    url,
                    params=params,
                    headers=attempt_headers,
                    timeout=aiohttp.ClientTimeout(total=self.timeout)
                ) as resp:
                    log_api_response(self.exchange, endpoint, resp.status, time.monotonic() - started)

                    if resp.status == 200:
                        try:
                            return await resp.json(content_type=None)
                        except ValueError as e:
                            raise PayloadSchemaError(self.exchange, f"invalid JSON from {endpoint}: {e}")

                    text = await resp.text()

                    if resp.status in RATE_LIMIT_STATUSES:
                        raise RateLimitedError(self.exchange, resp.status, f"throttled on {endpoint}")

                    if resp.status >= 500 and attempt < self.max_retries:
                        delay = self.retry_backoff * attempt
                        self.logger.warning(
                            f"HTTP {resp.status} on {endpoint}. "
                            f"Retrying in {delay:.1f}s... (attempt {attempt}/{self.max_retries})"
                        )
                        await asyncio.sleep(delay)
                        continue

                    raise ExchangeHTTPError(self.exchange, resp.status, text[:200])

            except asyncio.TimeoutError:
                if attempt >= self.max_retries:
                    raise ExchangeTimeoutError(
                        self.exchange, f"timeout on {endpoint} after {self.max_retries} attempts"
                    )
                self.logger.warning(f"Timeout on {endpoint} (attempt {attempt}/{self.max_retries})")
                await asyncio.sleep(self.retry_backoff * attempt)

            except aiohttp.ClientError as e:
                if attempt >= self.max_retries:
                    raise ExchangeTransportError(
                        self.exchange, f"request to {endpoint} failed: {e}"
                    )
                self.logger.warning(f"Request failed on {endpoint}: {e} (attempt {attempt}/{self.max_retries})")
                await asyncio.sleep(self.retry_backoff * attempt)

        raise ExchangeTransportError(self.exchange, f"failed to fetch {endpoint} after {self.max_retries} attempts")

    # ============================================
    # Throttling for Secondary Endpoints
    # ============================================

    @asynccontextmanager
    async def throttled(self) -> AsyncIterator[None]:
        """
        Serialize calls to a strictly rate-limited endpoint.

        Only one throttled call runs at a time, and consecutive calls start at
        least throttle_interval seconds apart.

        Example:
            >>> async with self.throttled():
            ...     data = await self._get("/history", params)
        """
        async with self._throttle_lock:
            wait = self._last_throttled_call + self.throttle_interval - time.monotonic()
            if wait > 0:
                await asyncio.sleep(wait)
            try:
                yield
            finally:
                self._last_throttled_call = time.monotonic()
