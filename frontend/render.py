"""
Presentation state for cards, result grids, sections and notifications.

Views are plain objects the controller mutates; a UI toolkit (or a test)
reads them to draw the page. Nothing here performs I/O.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Optional

RetryAction = Callable[[], Awaitable[None]]

LOAD_MORE_LABEL = "Load More"
LOADING_LABEL = "Loading..."
ERROR_RETRY_LABEL = "Error - Retry"
NO_MORE_LABEL = "No more results"


def pick_image_url(item: dict, prefer_large: bool = True) -> str:
    images = item.get("images", {}) or {}
    jpg_images = images.get("jpg", {}) or {}
    if prefer_large:
        return jpg_images.get("large_image_url") or jpg_images.get("image_url") or ""
    return jpg_images.get("image_url") or ""


def pick_names(items: Optional[list]) -> list[str]:
    if not items:
        return []
    return [item.get("name") for item in items if item.get("name")]


@dataclass
class AnimeCard:
    """Card projection of an upstream anime item."""
    mal_id: Optional[int]
    title: str
    image_url: str
    score: Any
    year: Any
    type: str

    @classmethod
    def from_jikan(cls, data: dict) -> "AnimeCard":
        return cls(
            mal_id=data.get("mal_id"),
            title=data.get("title") or "Untitled",
            image_url=pick_image_url(data),
            score=data.get("score") or "N/A",
            year=data.get("year") or "Unknown",
            type=data.get("type") or "TV",
        )

    @property
    def detail_url(self) -> Optional[str]:
        if self.mal_id:
            return f"/anime.html?id={self.mal_id}"
        return None


@dataclass
class TopItem:
    """Entry of the ranked "top anime" rail."""
    rank: int
    mal_id: Optional[int]
    title: str
    image_url: str
    score: Any

    @classmethod
    def from_jikan(cls, rank: int, data: dict) -> "TopItem":
        return cls(
            rank=rank,
            mal_id=data.get("mal_id"),
            title=data.get("title") or "Unknown",
            image_url=pick_image_url(data, prefer_large=False),
            score=data.get("score") or "N/A",
        )


@dataclass
class ScheduleCard:
    mal_id: Optional[int]
    title: str
    image_url: str
    time: str
    genres: str

    @classmethod
    def from_jikan(cls, data: dict) -> "ScheduleCard":
        broadcast = data.get("broadcast", {}) or {}
        genres = ", ".join(pick_names(data.get("genres"))[:2])
        return cls(
            mal_id=data.get("mal_id"),
            title=data.get("title") or "Unknown",
            image_url=pick_image_url(data, prefer_large=False),
            time=f"{broadcast.get('time') or 'TBA'} JST",
            genres=genres or "N/A",
        )


@dataclass
class ErrorState:
    message: str
    retry: Optional[RetryAction] = None


@dataclass
class LoadMoreButton:
    on_click: RetryAction
    label: str = LOAD_MORE_LABEL
    disabled: bool = False


@dataclass
class ResultsPanel:
    """The search/genre results grid."""
    visible: bool = False
    header: str = ""
    cards: list[AnimeCard] = field(default_factory=list)
    loading: bool = False
    empty_message: Optional[str] = None
    error: Optional[ErrorState] = None
    load_more: Optional[LoadMoreButton] = None

    def show_loading(self, header: str) -> None:
        """Replace the panel with a header and a loading placeholder."""
        self.visible = True
        self.header = header
        self.cards = []
        self.loading = True
        self.empty_message = None
        self.error = None
        self.load_more = None

    def render_grid(self, items: list[dict], append: bool = False) -> None:
        self.loading = False
        self.empty_message = None
        self.error = None
        cards = [AnimeCard.from_jikan(item) for item in items]
        if append:
            self.cards.extend(cards)
        else:
            self.cards = cards

    def show_empty(self, message: str) -> None:
        self.loading = False
        self.cards = []
        self.load_more = None
        self.empty_message = message

    def show_error(self, message: str, retry: Optional[RetryAction] = None) -> None:
        self.loading = False
        self.error = ErrorState(message, retry)

    def show_load_more(self, on_click: RetryAction) -> None:
        self.load_more = LoadMoreButton(on_click)

    def remove_load_more(self) -> None:
        self.load_more = None

    def clear(self) -> None:
        self.visible = False
        self.header = ""
        self.cards = []
        self.loading = False
        self.empty_message = None
        self.error = None
        self.load_more = None


@dataclass
class SectionPanel:
    """A home page section (top rail, schedule grid) with its own error state."""
    name: str
    items: list = field(default_factory=list)
    loading: bool = False
    empty_message: Optional[str] = None
    error: Optional[ErrorState] = None

    def show_loading(self) -> None:
        self.loading = True
        self.items = []
        self.empty_message = None
        self.error = None

    def fill(self, items: list) -> None:
        self.loading = False
        self.error = None
        self.empty_message = None
        self.items = items

    def show_empty(self, message: str) -> None:
        self.loading = False
        self.items = []
        self.empty_message = message

    def show_error(self, message: str, retry: Optional[RetryAction] = None) -> None:
        self.loading = False
        self.items = []
        self.error = ErrorState(message, retry)


@dataclass
class Toast:
    message: str
    kind: str = "info"


class Notifications:
    """Toast area; a new toast replaces the one on screen."""

    KINDS = ("success", "error", "warning", "info")

    def __init__(self):
        self.current: Optional[Toast] = None

    def show(self, message: str, kind: str = "info") -> Toast:
        if kind not in self.KINDS:
            kind = "info"
        self.current = Toast(message, kind)
        return self.current

    def dismiss(self) -> None:
        self.current = None
