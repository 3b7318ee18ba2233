"""Cached proxy for upstream anime search."""
import logging
from typing import Any

import httpx

from api.config import SEARCH_RESULT_LIMIT
from api.search_cache import SearchCache

logger = logging.getLogger(__name__)


class UpstreamUnavailable(Exception):
    """The upstream search could not be reached or answered with an error."""


class SearchProxy:
    """Forwards searches to the Jikan API and keeps results for ``ttl_seconds``.

    Only non-empty results are cached, so a transient empty answer is retried
    on the next request.
    """

    def __init__(
        self,
        base_url: str,
        ttl_seconds: int = 600,
        client: httpx.AsyncClient | None = None,
        timeout: float = 30.0,
    ):
        self.base_url = base_url.rstrip("/")
        self.cache = SearchCache(ttl_seconds=ttl_seconds)
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(
            timeout=timeout,
            headers={"User-Agent": "AniCrunchBackend/1.0", "Accept": "application/json"},
        )

    @staticmethod
    def cache_key(query: str) -> str:
        return f"search:{query.strip().lower()}"

    async def search(self, query: str) -> list[dict[str, Any]]:
        key = self.cache_key(query)
        cached = self.cache.get(key)
        if cached is not None:
            return cached

        try:
            response = await self.client.get(
                f"{self.base_url}/anime",
                params={"q": query, "limit": SEARCH_RESULT_LIMIT, "sfw": "true"},
            )
            response.raise_for_status()
            body = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(f"Upstream search failed for {query!r}: {e}")
            raise UpstreamUnavailable(str(e)) from e

        data = body.get("data") if isinstance(body, dict) else None
        results = data if isinstance(data, list) else []
        if results:
            self.cache.set(key, results)
        logger.info(f"Upstream search {query!r}: {len(results)} results")
        return results

    async def close(self) -> None:
        if self._owns_client:
            await self.client.aclose()
