"""Cache-aware GET with retry and exponential backoff on rate limiting."""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional

import httpx

from frontend.cache import TTLCache
from frontend.errors import (
    ExhaustedRetries,
    MalformedResponse,
    RateLimited,
    TransientUpstream,
    UpstreamStatusError,
)

logger = logging.getLogger(__name__)

Sleep = Callable[[float], Awaitable[None]]

DEFAULT_RETRIES = 3
DEFAULT_BACKOFF_MS = 1000


def extract_payload(body: Any) -> tuple[Any, bool]:
    """Pick the result out of a decoded response body.

    Returns the payload and whether it may be cached. Lists are cacheable only
    when non-empty; a single ``data`` object is always cacheable; anything else
    collapses to an uncached empty list.
    """
    if isinstance(body, list):
        return body, bool(body)
    if isinstance(body, dict):
        data = body.get("data")
        if isinstance(data, list):
            return data, bool(data)
        if data is not None:
            return data, True
    return [], False


class RetryingFetcher:
    """Performs one logical GET against the upstream, consulting the cache first.

    A 429 sleeps ``backoff * 2**attempt`` (attempts numbered from 1) and counts
    as one of the ``retries`` iterations. Any other failure sleeps a flat
    ``backoff`` unless it was the last attempt, in which case ExhaustedRetries
    is raised with the last failure chained.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        cache: TTLCache,
        retries: int = DEFAULT_RETRIES,
        backoff_ms: int = DEFAULT_BACKOFF_MS,
        sleep: Optional[Sleep] = None,
    ):
        self.client = client
        self.cache = cache
        self.retries = retries
        self.backoff_ms = backoff_ms
        self._sleep = sleep or asyncio.sleep

    async def _attempt(self, url: str) -> Any:
        try:
            response = await self.client.get(url)
        except httpx.HTTPError as e:
            raise TransientUpstream(f"Transport error: {e}", url) from e

        if response.status_code == 429:
            raise RateLimited("HTTP 429", url)
        if not response.is_success:
            raise UpstreamStatusError(response.status_code, url)

        try:
            return response.json()
        except ValueError as e:
            raise MalformedResponse("Invalid JSON response", url) from e

    async def fetch(
        self,
        url: str,
        retries: Optional[int] = None,
        backoff_ms: Optional[int] = None,
    ) -> Any:
        """Return the payload for ``url``, from cache or from the network."""
        cached = self.cache.get(url)
        if cached is not None:
            return cached

        retries = self.retries if retries is None else retries
        backoff_ms = self.backoff_ms if backoff_ms is None else backoff_ms
        last_error: Optional[TransientUpstream] = None

        for attempt in range(1, retries + 1):
            is_last = attempt == retries
            try:
                body = await self._attempt(url)
            except RateLimited as e:
                last_error = e
                if is_last:
                    break
                wait_ms = backoff_ms * 2 ** attempt
                logger.warning(f"Rate limited on {url}. Backing off {wait_ms}ms (attempt {attempt}/{retries})")
                await self._sleep(wait_ms / 1000)
                continue
            except TransientUpstream as e:
                last_error = e
                if is_last:
                    break
                logger.warning(f"Request failed: {e}. Retrying in {backoff_ms}ms (attempt {attempt}/{retries})")
                await self._sleep(backoff_ms / 1000)
                continue

            payload, cacheable = extract_payload(body)
            if cacheable:
                self.cache.set(url, payload)
            return payload

        logger.error(f"Request failed after {retries} attempts: {url}")
        raise ExhaustedRetries(url, retries) from last_error
