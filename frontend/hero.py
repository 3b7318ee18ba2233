"""Rotating featured banner at the top of the home page."""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Optional

from frontend.config import HERO_GENRE_COUNT, HERO_INTERVAL_MS, HERO_SYNOPSIS_CHARS
from frontend.render import pick_image_url, pick_names

logger = logging.getLogger(__name__)


@dataclass
class HeroSlide:
    mal_id: Optional[int]
    title: str
    background_url: str
    meta: str
    synopsis: str
    genres: list[str] = field(default_factory=list)

    @classmethod
    def from_jikan(cls, data: dict) -> "HeroSlide":
        synopsis = data.get("synopsis") or "No synopsis available."
        if len(synopsis) > HERO_SYNOPSIS_CHARS:
            synopsis = synopsis[:HERO_SYNOPSIS_CHARS] + "..."
        return cls(
            mal_id=data.get("mal_id"),
            title=data.get("title") or "Unknown Title",
            background_url=pick_image_url(data),
            meta=f"⭐ {data.get('score') or 'N/A'} • {data.get('episodes') or '?'} eps",
            synopsis=synopsis,
            genres=pick_names(data.get("genres"))[:HERO_GENRE_COUNT],
        )


class HeroBanner:
    """Cycles through featured entries every ``interval_ms``.

    Autoplay pauses while the pointer hovers the banner, and any manual
    navigation (arrow or dot) restarts the timer.
    """

    def __init__(self, interval_ms: int = HERO_INTERVAL_MS):
        self.interval_ms = interval_ms
        self.slides: list[HeroSlide] = []
        self.index = 0
        self.hovered = False
        self._autoplay: Optional[asyncio.Task] = None

    @property
    def current(self) -> Optional[HeroSlide]:
        if not self.slides:
            return None
        return self.slides[self.index]

    @property
    def autoplaying(self) -> bool:
        return self._autoplay is not None and not self._autoplay.done()

    @property
    def dots(self) -> list[bool]:
        return [i == self.index for i in range(len(self.slides))]

    def set_items(self, items: list[dict]) -> None:
        self.slides = [HeroSlide.from_jikan(item) for item in items]
        self.index = 0
        if self.slides:
            self.start_autoplay()

    def _show(self, index: int) -> None:
        count = len(self.slides)
        self.index = ((index % count) + count) % count

    def go_to(self, index: int) -> None:
        """Jump to a slide and restart the autoplay timer."""
        if not self.slides:
            return
        self._show(index)
        if not self.hovered:
            self.start_autoplay()

    def next(self) -> None:
        self.go_to(self.index + 1)

    def prev(self) -> None:
        self.go_to(self.index - 1)

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval_ms / 1000)
            if self.slides:
                self._show(self.index + 1)

    def start_autoplay(self) -> None:
        self.stop_autoplay()
        self._autoplay = asyncio.get_running_loop().create_task(self._run(), name="hero-autoplay")

    def stop_autoplay(self) -> None:
        if self._autoplay is not None:
            self._autoplay.cancel()
            self._autoplay = None

    def pointer_enter(self) -> None:
        self.hovered = True
        self.stop_autoplay()

    def pointer_leave(self) -> None:
        self.hovered = False
        if self.slides:
            self.start_autoplay()
