"""The single authoritative record of what the UI is displaying."""
from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Union


class ViewMode(str, Enum):
    HOME = "home"
    SEARCH = "search"
    GENRE = "genre"


@dataclass(frozen=True)
class ViewState:
    """Immutable view record; transitions build a new one instead of mutating.

    ``current_query`` is the search text in search mode and the genre id in
    genre mode.
    """
    mode: ViewMode = ViewMode.HOME
    current_query: Union[str, int] = ""
    current_page: int = 1
    is_loading: bool = False
    has_more: bool = True

    @classmethod
    def home(cls) -> "ViewState":
        return cls()

    @classmethod
    def search(cls, query: str) -> "ViewState":
        return cls(mode=ViewMode.SEARCH, current_query=query, current_page=1, is_loading=True, has_more=True)

    @classmethod
    def genre(cls, genre_id: int) -> "ViewState":
        return cls(mode=ViewMode.GENRE, current_query=genre_id, current_page=1, is_loading=True, has_more=True)

    def evolve(self, **changes) -> "ViewState":
        return replace(self, **changes)
