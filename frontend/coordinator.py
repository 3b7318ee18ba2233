"""
Fetch coordinator context.

Bundles the response cache, the retrying fetcher, the two-lane request queue
and the HTTP client they share into one explicitly constructed object, so
nothing about rate limiting lives in module globals.

Usage:
    async with FetchCoordinator(settings) as coordinator:
        rows = await coordinator.queued_fetch(coordinator.endpoints.top(), "background")
"""
from __future__ import annotations

import logging
from typing import Any, Optional

import httpx

from frontend.cache import TTLCache
from frontend.config import BACKGROUND
from frontend.fetch import RetryingFetcher, Sleep
from frontend.queue import RequestQueue
from frontend.settings import CoordinatorSettings
from frontend.upstream import JikanEndpoints

logger = logging.getLogger(__name__)

USER_AGENT = "AniCrunch/1.0"


class FetchCoordinator:
    """Owns every piece of shared upstream-access state for one UI session."""

    def __init__(
        self,
        settings: Optional[CoordinatorSettings] = None,
        client: Optional[httpx.AsyncClient] = None,
        sleep: Optional[Sleep] = None,
    ):
        self.settings = settings or CoordinatorSettings()
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(
            timeout=self.settings.http_timeout_s,
            headers={"User-Agent": USER_AGENT, "Accept": "application/json"},
        )
        self.cache = TTLCache(
            ttl_ms=self.settings.cache_ttl_ms,
            max_entries=self.settings.cache_max_entries,
        )
        self.fetcher = RetryingFetcher(
            self.client,
            self.cache,
            retries=self.settings.max_retries,
            backoff_ms=self.settings.base_backoff_ms,
            sleep=sleep,
        )
        self.queue = RequestQueue(
            self.fetcher.fetch,
            critical_delay_ms=self.settings.critical_delay_ms,
            background_delay_ms=self.settings.background_delay_ms,
            sleep=sleep,
        )
        self.endpoints = JikanEndpoints(self.settings.upstream_base_url)
        logging.getLogger("frontend").setLevel(self.settings.log_level)
        logger.info(
            f"FetchCoordinator initialized (critical={self.settings.critical_delay_ms}ms, "
            f"background={self.settings.background_delay_ms}ms, retries={self.settings.max_retries})"
        )

    async def __aenter__(self) -> "FetchCoordinator":
        self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    def start(self) -> None:
        self.queue.start()

    async def close(self) -> None:
        """Stop the lanes, drop cached responses and close the HTTP client."""
        await self.queue.close()
        self.cache.clear()
        if self._owns_client:
            await self.client.aclose()

    async def queued_fetch(self, url: str, priority: str = BACKGROUND) -> Any:
        """Fetch ``url`` through the given lane."""
        return await self.queue.queued_fetch(url, priority)

    async def fetch_with_retry(self, url: str) -> Any:
        """Fetch ``url`` immediately, bypassing the lanes."""
        return await self.fetcher.fetch(url)
