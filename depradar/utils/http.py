"""
HTTP client utilities for depradar.

This module provides an asynchronous HTTP client shared by the npm
registry and GitHub release clients. It bounds in-flight requests and
turns every failed call into a :class:`NetworkError` whose message mirrors
the status line, e.g. ``"404 Not Found"`` or ``"429 Too Many Requests"``.

By default a failed call is not repeated; the caller degrades the affected
result instead. Retries for transient failures (timeouts, transport errors,
``5xx``) and for ``429`` responses are opt-in via ``max_retries`` and
``max_429_retries``; ``Retry-After`` waits are capped.
"""

from __future__ import annotations

import time
import httpx
import random
import asyncio
from typing import Any, Dict, List, Optional, cast

from depradar.utils.logger import get_logger
from depradar.__version__ import __version__
from depradar.exceptions import NetworkError
from depradar.constants import (
    DEFAULT_TIMEOUT,
    DEFAULT_MAX_429_RETRIES,
    DEFAULT_MAX_RETRIES,
    MAX_RETRY_AFTER,
    USER_AGENT_TEMPLATE,
)

logger = get_logger("http")


def status_message(response: httpx.Response) -> str:
    """Return ``"<code> <reason>"`` for *response*."""
    reason = response.reason_phrase or httpx.codes.get_reason_phrase(
        response.status_code
    )
    return f"{response.status_code} {reason}".strip()


class HTTPClient:
    """Asynchronous HTTP client with retries, rate limiting, and concurrency control.

    Args:
        timeout: Request timeout in seconds.
        max_retries: Retry attempts for timeouts, transport errors and 5xx.
            Zero (the default) fails on the first error.
        max_429_retries: Retry attempts after a 429 response. Zero (the
            default) fails at once with ``"429 Too Many Requests"``.
        rate_limit_delay: Minimum delay (seconds) between requests.
        verify_ssl: Whether to verify SSL certificates.
        user_agent: Custom User-Agent header value.
        max_concurrency: Maximum number of concurrent requests.

    Example:
        >>> async with HTTPClient() as client:
        ...     data = await client.get_json("https://registry.npmjs.org/react")
    """

    def __init__(
        self,
        *,
        timeout: int = DEFAULT_TIMEOUT,
        max_retries: int = DEFAULT_MAX_RETRIES,
        max_429_retries: int = DEFAULT_MAX_429_RETRIES,
        rate_limit_delay: float = 0.0,
        verify_ssl: bool = True,
        user_agent: Optional[str] = None,
        max_concurrency: int = 10,
    ) -> None:
        self.timeout = timeout
        self.max_retries = max_retries
        self.rate_limit_delay = rate_limit_delay
        self.verify_ssl = verify_ssl
        self.user_agent = user_agent or USER_AGENT_TEMPLATE.format(version=__version__)
        self.max_concurrency = max_concurrency

        self._client: Optional[httpx.AsyncClient] = None
        self._last_request_time: float = 0.0
        self._rate_limit_lock = asyncio.Lock()
        self._semaphore = asyncio.Semaphore(max_concurrency)
        self._max_429_retries: int = max_429_retries

    async def __aenter__(self) -> "HTTPClient":
        await self._ensure_client()
        return self

    async def __aexit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        await self.close()

    async def _ensure_client(self) -> None:
        """Initialize the underlying httpx client if needed."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout),
                http2=True,
                verify=self.verify_ssl,
                follow_redirects=True,
                headers={
                    "User-Agent": self.user_agent,
                    "Accept": "application/json",
                },
            )

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def _rate_limit(self) -> None:
        """Enforce a minimum delay between outgoing requests."""
        if self.rate_limit_delay <= 0:
            return

        async with self._rate_limit_lock:
            now = time.time()
            elapsed = now - self._last_request_time

            if elapsed < self.rate_limit_delay:
                delay = self.rate_limit_delay - elapsed
                self._last_request_time = now + delay
                await asyncio.sleep(delay)
            else:
                self._last_request_time = now

    async def _request_with_retry(
        self,
        method: str,
        url: str,
        **kwargs: Any,
    ) -> httpx.Response:
        """Execute an HTTP request with retry and backoff logic."""
        await self._ensure_client()
        assert self._client is not None

        last_exc: Optional[Exception] = None
        last_message = "request failed"
        retry_429_count = 0
        attempt = 0

        while attempt <= self.max_retries:
            try:
                await self._rate_limit()

                async with self._semaphore:
                    response = await self._client.request(method, url, **kwargs)

            except httpx.TimeoutException as exc:
                last_exc = exc
                last_message = "Request timed out"
                logger.warning(
                    "Request timeout (%d/%d): %s",
                    attempt + 1,
                    self.max_retries + 1,
                    url,
                )

            except httpx.TransportError as exc:
                last_exc = exc
                last_message = f"Network error: {exc}"
                logger.warning(
                    "Network error (%d/%d): %s",
                    attempt + 1,
                    self.max_retries + 1,
                    exc,
                )

            else:
                if response.status_code == 429:
                    retry_429_count += 1
                    if retry_429_count > self._max_429_retries:
                        raise NetworkError(
                            status_message(response),
                            url=url,
                            status_code=429,
                        )
                    retry_after = _retry_after_seconds(response)
                    logger.warning(
                        "Rate limited (429), retrying after %ds (%d/%d)",
                        retry_after,
                        retry_429_count,
                        self._max_429_retries,
                    )
                    await asyncio.sleep(retry_after)
                    continue

                if response.status_code < 400:
                    return response

                if response.status_code < 500:
                    raise NetworkError(
                        status_message(response),
                        url=url,
                        status_code=response.status_code,
                        response_body=response.text,
                    )

                last_exc = None
                last_message = status_message(response)
                logger.warning(
                    "HTTP %d error (%d/%d): %s",
                    response.status_code,
                    attempt + 1,
                    self.max_retries + 1,
                    url,
                )

            if attempt < self.max_retries:
                delay = (2**attempt) + random.uniform(0.0, 0.3)
                logger.debug("Retrying in %.2fs", delay)
                await asyncio.sleep(delay)
            attempt += 1

        raise NetworkError(last_message, url=url) from last_exc

    async def get(self, url: str, **kwargs: Any) -> httpx.Response:
        """Perform a GET request with retry logic."""
        return await self._request_with_retry("GET", url, **kwargs)

    async def get_json(self, url: str, **kwargs: Any) -> Dict[str, Any]:
        """Fetch a URL whose body must be a JSON object."""
        data = await self._get_decoded(url, **kwargs)

        if not isinstance(data, dict):
            raise NetworkError(f"Expected JSON object from {url}", url=url)

        return cast(Dict[str, Any], data)

    async def get_json_list(self, url: str, **kwargs: Any) -> List[Any]:
        """Fetch a URL whose body must be a JSON array."""
        data = await self._get_decoded(url, **kwargs)

        if not isinstance(data, list):
            raise NetworkError(f"Expected JSON array from {url}", url=url)

        return data

    async def _get_decoded(self, url: str, **kwargs: Any) -> Any:
        response = await self.get(url, **kwargs)

        try:
            return response.json()
        except ValueError as exc:
            raise NetworkError(
                f"Invalid JSON response from {url}",
                url=url,
                response_body=response.text,
            ) from exc


def _retry_after_seconds(response: httpx.Response) -> int:
    """Read ``Retry-After`` as whole seconds, defaulting to 1.

    The wait is clamped to ``0..MAX_RETRY_AFTER``.
    """
    try:
        seconds = int(response.headers.get("Retry-After", "1"))
    except ValueError:
        return 1
    return min(max(seconds, 0), MAX_RETRY_AFTER)
