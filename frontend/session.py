"""
View session controller.

Owns the single ViewState and turns user actions (typing a search, clicking a
genre chip, "Load More", clearing) into queued fetches with the right lane and
cancellation scope. It is the only writer of ViewState and of the results
panel, and every asynchronous completion re-checks its abort scope before
touching either, so a superseded query can never render.

Lane choice:
    - critical: hero banner, search fallback to the upstream, random pick
    - background: carousel rows, top rail, genre pages, schedules
"""
from __future__ import annotations

import asyncio
import logging
from functools import partial
from typing import Any, Optional, Union
from urllib.parse import quote

from frontend.backend import BackendClient
from frontend.cancellation import AbortScope, ScopeHolder
from frontend.carousel import Carousel
from frontend.config import (
    ALL_CHIP,
    BACKGROUND,
    CAROUSEL_ROWS,
    CRITICAL,
    GENRES,
    MIN_QUERY_LENGTH,
    WEEKDAYS,
)
from frontend.coordinator import FetchCoordinator
from frontend.debounce import Debouncer
from frontend.errors import AuthRequired, FetchError, LoadCancelled
from frontend.hero import HeroBanner
from frontend.render import (
    ERROR_RETRY_LABEL,
    LOADING_LABEL,
    NO_MORE_LABEL,
    ErrorState,
    LoadMoreButton,
    Notifications,
    ResultsPanel,
    ScheduleCard,
    SectionPanel,
    TopItem,
)
from frontend.settings import CoordinatorSettings
from frontend.view import ViewMode, ViewState

logger = logging.getLogger(__name__)


def _as_list(payload: Any) -> list:
    if isinstance(payload, list):
        return payload
    if payload:
        return [payload]
    return []


class ViewSessionController:
    """Coordinates the single-page UI on top of a FetchCoordinator.

    Args:
        coordinator: Shared queue, cache and fetcher.
        backend: Client for the AniCrunch backend (auth, search proxy, watchlist).
        settings: View tunables; defaults to the coordinator's settings.
        has_results_panel: False on pages without a results grid (the schedule
            page), where qualifying searches become a redirect to the home page.
    """

    def __init__(
        self,
        coordinator: FetchCoordinator,
        backend: BackendClient,
        settings: Optional[CoordinatorSettings] = None,
        has_results_panel: bool = True,
    ):
        self.coordinator = coordinator
        self.backend = backend
        self.settings = settings or coordinator.settings

        self.view_state = ViewState.home()
        self.scopes = ScopeHolder()
        self._schedule_scopes = ScopeHolder()

        self.results: Optional[ResultsPanel] = ResultsPanel() if has_results_panel else None
        self.home_visible = True
        self.search_text = ""
        self.search_clear_visible = False
        self.active_chip: Union[str, int, None] = ALL_CHIP

        self.hero = HeroBanner(self.settings.hero_interval_ms)
        self.hero_error: Optional[ErrorState] = None
        self.carousels = {name: Carousel(name, self.settings.cards_per_page) for name in CAROUSEL_ROWS}
        self.top_rail = SectionPanel("topAnime")
        self.schedule = SectionPanel("schedule")
        self.active_day: Optional[str] = None

        self.notifications = Notifications()
        self.user: Optional[str] = None
        self.login_prompt = False
        self.redirect: Optional[str] = None

        self._home_deferred = False
        self._home_task: Optional[asyncio.Task] = None
        self._search_debouncer = Debouncer(self.search, self.settings.search_debounce_ms)

    # =========================================================================
    # View state
    # =========================================================================
    def _set_view(self, state: ViewState) -> None:
        if state.mode != self.view_state.mode:
            logger.info(f"View mode {self.view_state.mode.value} -> {state.mode.value}")
        self.view_state = state

    def _enter_results_mode(self, header: str) -> None:
        self.home_visible = False
        self.hero.stop_autoplay()
        self.results.show_loading(header)

    def reset_to_home(self) -> None:
        """Back to the home layout: results cleared, "All" chip active, no live scope."""
        self.scopes.invalidate()
        self._set_view(ViewState.home())
        self.active_chip = ALL_CHIP
        self.home_visible = True
        if self.results is not None:
            self.results.clear()
        self.search_text = ""
        self.search_clear_visible = False
        if self.hero.slides and not self.hero.hovered:
            self.hero.start_autoplay()
        if self._home_deferred:
            # Opened straight into a search: the home rows were never requested.
            self._home_deferred = False
            self._home_task = asyncio.get_running_loop().create_task(self.load_home(), name="home-load")

    def clear_search(self) -> None:
        """Clear button or Escape key."""
        self._search_debouncer.cancel()
        self.reset_to_home()

    # =========================================================================
    # Search
    # =========================================================================
    def on_search_input(self, text: str) -> asyncio.Task:
        """Feed a keystroke; the search runs once typing pauses."""
        self.search_text = text
        return self._search_debouncer(text.strip())

    async def flush_search(self) -> None:
        """Wait for the pending debounced search to finish."""
        await self._search_debouncer.flush()

    async def search(self, query: str) -> None:
        """Run a search immediately (the debounced input ends up here)."""
        self.search_clear_visible = len(query) > 0

        if self.results is None:
            if len(query) >= MIN_QUERY_LENGTH:
                self.redirect = f"/?search={quote(query)}"
            return

        if len(query) < MIN_QUERY_LENGTH:
            if self.view_state.mode == ViewMode.SEARCH:
                self.reset_to_home()
            return

        scope = self.scopes.renew(f"search:{query}")
        self.active_chip = None
        self._set_view(ViewState.search(query))
        self._enter_results_mode(f'Results for "{query}"')
        await self._load_search_page(query, scope)

    async def _search_backend(self, query: str) -> list:
        try:
            return await self.backend.search(query)
        except FetchError as e:
            logger.warning(f"Backend search failed for {query!r}, falling back to upstream: {e}")
            return []

    async def _load_search_page(self, query: str, scope: AbortScope) -> None:
        try:
            data = await scope.guard(self._search_backend(query))
            if not data:
                url = self.coordinator.endpoints.search(query)
                data = _as_list(await scope.guard(self.coordinator.queued_fetch(url, CRITICAL)))
        except LoadCancelled:
            logger.debug(f"Discarding superseded search results for {query!r}")
            return
        except FetchError as e:
            logger.error(f"Search failed for {query!r}: {e}")
            self._set_view(self.view_state.evolve(is_loading=False))
            self.results.show_error("Failed to load search results", retry=partial(self.search, query))
            return

        self._set_view(self.view_state.evolve(is_loading=False, has_more=False))
        if not data:
            self.results.show_empty("No results found.")
            return
        self.results.render_grid(data)
        logger.info(f"Rendered {len(data)} results for {query!r}")

    def open_first_result(self) -> Optional[str]:
        """Enter key in the search box opens the first result card."""
        if self.view_state.mode != ViewMode.SEARCH or not self.results or not self.results.cards:
            return None
        self.redirect = self.results.cards[0].detail_url
        return self.redirect

    # =========================================================================
    # Genre filter
    # =========================================================================
    async def filter_by_genre(self, genre_id: int) -> None:
        """Switch to the first page of a genre, most popular first."""
        if self.results is None:
            return
        genre = next((g for g in GENRES if g["id"] == genre_id), None)
        title = f"{genre['icon']} {genre['name']}" if genre else f"Genre {genre_id}"

        scope = self.scopes.renew(f"genre:{genre_id}")
        self.active_chip = genre_id
        self._set_view(ViewState.genre(genre_id))
        self._enter_results_mode(f"{title} Anime")
        await self._load_genre_page(genre_id, 1, scope)

    async def load_more(self) -> None:
        """Append the next genre page; ignored while a page is loading."""
        state = self.view_state
        scope = self.scopes.current
        button = self.results.load_more if self.results else None
        if (
            state.mode != ViewMode.GENRE
            or state.is_loading
            or not state.has_more
            or button is None
            or scope is None
        ):
            return

        button.label = LOADING_LABEL
        button.disabled = True
        self._set_view(state.evolve(is_loading=True))
        await self._load_genre_page(state.current_query, state.current_page + 1, scope, button)

    async def _load_genre_page(
        self,
        genre_id: int,
        page: int,
        scope: AbortScope,
        button: Optional[LoadMoreButton] = None,
    ) -> None:
        page_size = self.settings.genre_page_size
        url = self.coordinator.endpoints.genre(genre_id, page, page_size)
        try:
            data = _as_list(await scope.guard(self.coordinator.queued_fetch(url, BACKGROUND)))
        except LoadCancelled:
            logger.debug(f"Discarding superseded genre page {page} for genre {genre_id}")
            return
        except FetchError as e:
            logger.error(f"Genre {genre_id} page {page} failed: {e}")
            self._set_view(self.view_state.evolve(is_loading=False))
            if button is not None:
                button.label = ERROR_RETRY_LABEL
                button.disabled = False
            else:
                self.results.show_error("Failed to load anime", retry=partial(self.filter_by_genre, genre_id))
            return

        if not data:
            self._set_view(self.view_state.evolve(is_loading=False, has_more=False))
            if page == 1:
                self.results.show_empty("No anime found. Try a different genre")
            elif button is not None:
                button.label = NO_MORE_LABEL
                button.disabled = True
            return

        has_more = len(data) == page_size
        self.results.render_grid(data, append=page > 1)
        self._set_view(self.view_state.evolve(current_page=page, is_loading=False, has_more=has_more))
        if has_more:
            self.results.show_load_more(self.load_more)
        else:
            self.results.remove_load_more()
        logger.info(f"Genre {genre_id} page {page}: {len(data)} items (total {len(self.results.cards)})")

    # =========================================================================
    # Home page
    # =========================================================================
    async def open(self, search_param: Optional[str] = None) -> None:
        """Initial page load: a ``?search=`` redirect runs the search, else the home rows load."""
        await self.refresh_user()
        if search_param and self.results is not None:
            self._home_deferred = True
            self.search_text = search_param
            await self.search(search_param.strip())
        else:
            await self.load_home()

    async def load_home(self) -> None:
        """Load hero, rows and top rail; each section fails on its own."""
        endpoints = self.coordinator.endpoints
        await asyncio.gather(
            self.load_hero(),
            self.load_section("seasonal", endpoints.current_season()),
            self.load_section("trending", endpoints.top_airing()),
            self.load_top_anime(),
        )

    async def load_hero(self) -> None:
        try:
            data = _as_list(await self.coordinator.queued_fetch(self.coordinator.endpoints.hero(), CRITICAL))
        except FetchError as e:
            logger.error(f"Hero load error: {e}")
            self.hero_error = ErrorState("Failed to load featured anime", retry=self.load_hero)
            return
        self.hero_error = None
        if data:
            self.hero.set_items(data)
            if not self.home_visible or self.hero.hovered:
                self.hero.stop_autoplay()

    async def load_section(self, name: str, url: str, force: bool = False) -> None:
        """Fill a carousel row once; ``force`` reloads it (retry)."""
        carousel = self.carousels.setdefault(name, Carousel(name, self.settings.cards_per_page))
        if carousel.loaded and not force:
            return
        try:
            data = _as_list(await self.coordinator.queued_fetch(url, BACKGROUND))
        except FetchError as e:
            logger.error(f"Section {name} load error: {e}")
            carousel.show_error("Failed to load", retry=partial(self.load_section, name, url, force=True))
            return
        carousel.set_items(data)

    def navigate_carousel(self, name: str, direction: int) -> bool:
        carousel = self.carousels.get(name)
        if carousel is None:
            return False
        return carousel.navigate(direction)

    async def load_top_anime(self) -> None:
        self.top_rail.show_loading()
        try:
            data = _as_list(await self.coordinator.queued_fetch(self.coordinator.endpoints.top(), BACKGROUND))
        except FetchError as e:
            logger.error(f"Top anime load error: {e}")
            self.top_rail.show_error("Failed to load", retry=self.load_top_anime)
            return
        self.top_rail.fill([TopItem.from_jikan(i + 1, item) for i, item in enumerate(data)])

    # =========================================================================
    # Schedule page
    # =========================================================================
    async def load_schedule(self, day: Optional[str]) -> None:
        normalized = (day or "").strip().lower()
        if normalized not in WEEKDAYS:
            self.schedule.show_error("Invalid day selected")
            return

        scope = self._schedule_scopes.renew(f"schedule:{normalized}")
        self.active_day = normalized
        self.schedule.show_loading()
        url = self.coordinator.endpoints.schedule(normalized)
        try:
            data = _as_list(await scope.guard(self.coordinator.queued_fetch(url, BACKGROUND)))
        except LoadCancelled:
            return
        except FetchError as e:
            logger.error(f"Schedule load error: {e}")
            self.schedule.show_error("Failed to load schedule", retry=partial(self.load_schedule, normalized))
            return

        if not data:
            self.schedule.show_empty("No anime airing this day")
            return
        self.schedule.fill([ScheduleCard.from_jikan(item) for item in data])

    # =========================================================================
    # Random pick
    # =========================================================================
    async def spin(self) -> Optional[int]:
        """Pick a random anime and set the redirect to its detail page."""
        url = self.coordinator.endpoints.random()
        self.coordinator.cache.delete(url)
        try:
            anime = await self.coordinator.queued_fetch(url, CRITICAL)
        except FetchError as e:
            logger.error(f"Spin error: {e}")
            anime = None

        mal_id = anime.get("mal_id") if isinstance(anime, dict) else None
        if not mal_id:
            self.notifications.show("Spin failed! Please try again.", "error")
            return None
        self.redirect = f"/anime.html?id={mal_id}"
        return mal_id

    # =========================================================================
    # Account
    # =========================================================================
    async def refresh_user(self) -> Optional[str]:
        try:
            self.user = await self.backend.me()
        except FetchError as e:
            logger.debug(f"Not authenticated: {e}")
            self.user = None
        return self.user

    async def logout(self) -> None:
        try:
            await self.backend.logout()
        except FetchError as e:
            logger.warning(f"Logout request failed: {e}")
        self.user = None
        self.redirect = "/"

    async def add_to_watchlist(self, anime_id: int) -> str:
        """Add an anime from the hero banner; returns the button label to show."""
        try:
            await self.backend.add_to_watchlist(anime_id)
        except AuthRequired:
            self.login_prompt = True
            self.notifications.show("Log in to use your watchlist", "warning")
            return "Error"
        except FetchError as e:
            logger.error(f"Watchlist add failed for {anime_id}: {e}")
            return "Error"
        self.notifications.show("Added to watchlist", "success")
        return "✓ Added!"

    async def close(self) -> None:
        """Tear down timers and invalidate live scopes."""
        self._search_debouncer.cancel()
        if self._home_task is not None and not self._home_task.done():
            self._home_task.cancel()
        self.hero.stop_autoplay()
        self.scopes.invalidate()
        self._schedule_scopes.invalidate()
