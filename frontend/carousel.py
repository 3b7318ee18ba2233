"""Client-side paging of home page card rows."""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Optional

from frontend.config import CARDS_PER_PAGE
from frontend.render import AnimeCard, ErrorState, RetryAction

logger = logging.getLogger(__name__)


@dataclass
class CarouselState:
    current_page: int = 0
    total_cards: int = 0


@dataclass
class Carousel:
    """A named row of cards shown one page at a time.

    Navigation is clamped to ``[0, total_pages - 1]``; stepping outside that
    range is a no-op.
    """
    name: str
    page_size: int = CARDS_PER_PAGE
    state: CarouselState = field(default_factory=CarouselState)
    cards: list[AnimeCard] = field(default_factory=list)
    loaded: bool = False
    error: Optional[ErrorState] = None

    @property
    def total_pages(self) -> int:
        return math.ceil(self.state.total_cards / self.page_size)

    @property
    def can_prev(self) -> bool:
        return self.state.current_page > 0

    @property
    def can_next(self) -> bool:
        return self.state.current_page < self.total_pages - 1

    @property
    def visible_cards(self) -> list[AnimeCard]:
        start = self.state.current_page * self.page_size
        return self.cards[start:start + self.page_size]

    def set_items(self, items: list[dict]) -> None:
        self.cards = [AnimeCard.from_jikan(item) for item in items]
        self.state = CarouselState(current_page=0, total_cards=len(self.cards))
        self.loaded = True
        self.error = None

    def show_error(self, message: str, retry: Optional[RetryAction] = None) -> None:
        self.cards = []
        self.state = CarouselState()
        self.error = ErrorState(message, retry)

    def navigate(self, direction: int) -> bool:
        """Step one page left (-1) or right (+1). Returns whether the page changed."""
        new_page = self.state.current_page + direction
        if new_page < 0 or new_page >= self.total_pages:
            return False
        self.state.current_page = new_page
        logger.debug(f"Carousel {self.name} -> page {new_page + 1}/{self.total_pages}")
        return True

    def next(self) -> bool:
        return self.navigate(1)

    def prev(self) -> bool:
        return self.navigate(-1)
