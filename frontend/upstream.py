"""URL builders for the Jikan endpoints the UI reads from."""
from __future__ import annotations

from typing import Optional
from urllib.parse import urlencode

from frontend.config import (
    GENRE_PAGE_SIZE,
    HERO_LIMIT,
    ROW_LIMIT,
    SEARCH_FALLBACK_LIMIT,
    TOP_RAIL_LIMIT,
    WEEKDAYS,
)


class JikanEndpoints:
    """Builds fully-qualified request URLs, which double as cache keys."""

    def __init__(self, base_url: str):
        self.base_url = base_url.rstrip("/")

    def _url(self, path: str, params: Optional[dict] = None) -> str:
        url = f"{self.base_url}{path}"
        if params:
            url = f"{url}?{urlencode(params)}"
        return url

    def search(self, query: str, limit: int = SEARCH_FALLBACK_LIMIT) -> str:
        return self._url("/anime", {"q": query, "limit": limit})

    def genre(self, genre_id: int, page: int = 1, limit: int = GENRE_PAGE_SIZE) -> str:
        """Popularity-ordered, SFW page of one genre."""
        return self._url("/anime", {
            "genres": genre_id,
            "order_by": "popularity",
            "sfw": "true",
            "limit": limit,
            "page": page,
        })

    def current_season(self, limit: int = ROW_LIMIT) -> str:
        return self._url("/seasons/now", {"sfw": "true", "limit": limit})

    def top_airing(self, limit: int = ROW_LIMIT) -> str:
        return self._url("/top/anime", {"filter": "airing", "sfw": "true", "limit": limit})

    def hero(self, limit: int = HERO_LIMIT) -> str:
        return self.top_airing(limit)

    def top(self, limit: int = TOP_RAIL_LIMIT) -> str:
        return self._url("/top/anime", {"sfw": "true", "limit": limit})

    def schedule(self, day: str) -> str:
        if day not in WEEKDAYS:
            raise ValueError(f"Invalid day: {day}. Must be one of {WEEKDAYS}")
        return self._url("/schedules", {"filter": day, "sfw": "true"})

    def anime(self, mal_id: int) -> str:
        return self._url(f"/anime/{int(mal_id)}")

    def random(self) -> str:
        return self._url("/random/anime", {"sfw": "true"})
