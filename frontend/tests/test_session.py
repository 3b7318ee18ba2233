"""Tests for the view session controller."""
import asyncio
import dataclasses

import pytest

from fakes import make_items, wait_until
from frontend.render import ERROR_RETRY_LABEL, LOAD_MORE_LABEL, NO_MORE_LABEL
from frontend.session import ViewSessionController
from frontend.view import ViewMode, ViewState


def titles(controller):
    return [card.title for card in controller.results.cards]


class TestViewState:
    def test_frozen(self):
        state = ViewState.home()
        with pytest.raises(dataclasses.FrozenInstanceError):
            state.current_page = 2

    def test_transitions(self):
        state = ViewState.genre(4)
        assert state.mode == ViewMode.GENRE
        assert state.is_loading
        loaded = state.evolve(is_loading=False, current_page=2)
        assert loaded.current_page == 2
        assert state.current_page == 1


class TestSearch:
    """Debounced search with backend proxy and upstream fallback."""

    async def test_typing_burst_issues_one_search(self, controller, backend_api, jikan):
        backend_api.route("/api/search", {"data": make_items(2)})

        for text in ("na", "nar", "naru"):
            controller.on_search_input(text)
        await controller.flush_search()

        assert [r.url.params["q"] for r in backend_api.hits("/api/search")] == ["naru"]
        assert jikan.requests == []
        assert controller.results.header == 'Results for "naru"'
        assert len(controller.results.cards) == 2

    async def test_superseded_search_is_discarded(self, controller, jikan):
        """A late response for an old query never renders."""
        gate = asyncio.Event()
        jikan.route("/anime", {"data": make_items(3, prefix="Naruto")}, gate=gate, q="naruto")
        jikan.route("/anime", {"data": make_items(2, 100, prefix="One Piece")}, q="one piece")

        first = asyncio.create_task(controller.search("naruto"))
        await wait_until(lambda: jikan.hits("/anime", q="naruto"))
        second = asyncio.create_task(controller.search("one piece"))
        await wait_until(lambda: controller.view_state.current_query == "one piece")
        gate.set()
        await asyncio.gather(first, second)

        assert controller.results.header == 'Results for "one piece"'
        assert titles(controller) == ["One Piece 100", "One Piece 101"]
        assert controller.view_state.mode == ViewMode.SEARCH
        assert not controller.view_state.is_loading

    async def test_empty_backend_falls_back_to_upstream(self, controller, backend_api, jikan, coordinator):
        backend_api.route("/api/search", {"data": []})
        jikan.route("/anime", {"data": make_items(5, prefix="Attack")}, q="attack")

        await controller.search("attack")

        assert len(controller.results.cards) == 5
        assert coordinator.queue.stats()["critical"]["completed"] == 1
        assert controller.view_state.has_more is False
        assert controller.results.load_more is None

    async def test_backend_results_skip_upstream(self, controller, backend_api, jikan):
        backend_api.route("/api/search", {"data": make_items(3)})
        await controller.search("frieren")
        assert len(controller.results.cards) == 3
        assert jikan.requests == []

    async def test_no_results(self, controller, jikan):
        jikan.route("/anime", {"data": []}, q="zzzz")
        await controller.search("zzzz")
        assert controller.results.empty_message == "No results found."
        assert controller.results.cards == []

    async def test_failure_shows_retry(self, controller, jikan):
        jikan.route("/anime", (500, {}), q="naruto")
        await controller.search("naruto")

        error = controller.results.error
        assert error.message == "Failed to load search results"
        assert not controller.view_state.is_loading

        jikan.route("/anime", {"data": make_items(1)}, q="naruto")
        await error.retry()
        assert controller.results.error is None
        assert len(controller.results.cards) == 1

    async def test_short_query_returns_home(self, controller, backend_api):
        backend_api.route("/api/search", {"data": make_items(1)})
        await controller.search("naruto")
        assert not controller.home_visible

        await controller.search("na")
        assert controller.view_state == ViewState.home()
        assert controller.home_visible
        assert controller.active_chip == "all"
        assert not controller.results.visible

    async def test_short_query_on_home_does_nothing(self, controller, backend_api, jikan):
        await controller.search("na")
        assert controller.view_state.mode == ViewMode.HOME
        assert backend_api.requests == []
        assert jikan.requests == []
        assert controller.search_clear_visible

    async def test_clear_cancels_pending_search(self, controller, backend_api):
        controller.on_search_input("naruto")
        controller.clear_search()
        await controller.flush_search()

        assert backend_api.requests == []
        assert controller.search_text == ""
        assert controller.view_state.mode == ViewMode.HOME

    async def test_open_first_result(self, controller, backend_api):
        assert controller.open_first_result() is None
        backend_api.route("/api/search", {"data": make_items(2, 40)})
        await controller.search("naruto")
        assert controller.open_first_result() == "/anime.html?id=40"

    async def test_page_without_results_panel_redirects(self, coordinator, backend, backend_api):
        controller = ViewSessionController(coordinator, backend, has_results_panel=False)

        await controller.search("na")
        assert controller.redirect is None

        await controller.search("one piece")
        assert controller.redirect == "/?search=one%20piece"
        assert backend_api.requests == []

    async def test_open_with_search_param(self, controller, backend_api):
        backend_api.route("/api/me", {"user": {"username": "alice"}})
        backend_api.route("/api/search", {"data": make_items(1)})

        await controller.open(search_param="naruto")

        assert controller.user == "alice"
        assert controller.search_text == "naruto"
        assert controller.view_state.mode == ViewMode.SEARCH

    async def test_clearing_redirected_search_loads_home(self, controller, backend_api, jikan):
        backend_api.route("/api/search", {"data": make_items(1)})
        jikan.route("/top/anime", {"data": make_items(7)}, filter="airing", limit=7)
        jikan.route("/top/anime", {"data": make_items(25, 100)}, filter="airing", limit=25)
        jikan.route("/seasons/now", {"data": make_items(13, 200)})
        jikan.route("/top/anime", {"data": make_items(10, 300)}, limit=10)

        await controller.open(search_param="naruto")
        assert jikan.requests == []

        controller.clear_search()
        await wait_until(lambda: len(controller.top_rail.items) == 10)
        await wait_until(lambda: controller.carousels["seasonal"].loaded and controller.carousels["trending"].loaded)
        await wait_until(lambda: len(controller.hero.slides) == 7)
        assert controller.home_visible
        fetched = len(jikan.requests)

        await controller.search("bleach")
        controller.clear_search()
        await asyncio.sleep(0.05)
        assert len(jikan.requests) == fetched


class TestGenreFilter:
    """Genre pages, load more and their failure states."""

    def _pages(self, jikan, genre_id, sizes):
        start = 1
        for page, size in enumerate(sizes, start=1):
            jikan.route("/anime", {"data": make_items(size, start)}, genres=genre_id, page=page)
            start += size

    async def test_pages_append_until_short_page(self, controller, jikan):
        self._pages(jikan, 1, [24, 24, 10])

        await controller.filter_by_genre(1)
        assert controller.results.header == "⚔️ Action Anime"
        assert controller.active_chip == 1
        assert len(controller.results.cards) == 24
        assert controller.results.load_more.label == LOAD_MORE_LABEL

        await controller.results.load_more.on_click()
        assert len(controller.results.cards) == 48

        await controller.results.load_more.on_click()
        assert len(controller.results.cards) == 58
        assert [card.mal_id for card in controller.results.cards] == list(range(1, 59))
        assert controller.results.load_more is None
        assert controller.view_state.current_page == 3
        assert controller.view_state.has_more is False

        await controller.load_more()
        assert len(jikan.requests) == 3

    async def test_genre_requests_use_background_lane(self, controller, jikan, coordinator):
        self._pages(jikan, 4, [3])
        await controller.filter_by_genre(4)
        assert coordinator.queue.stats()["background"]["completed"] == 1
        assert coordinator.queue.stats()["critical"]["completed"] == 0

    async def test_load_more_ignored_while_loading(self, controller, jikan):
        self._pages(jikan, 1, [24])
        gate = asyncio.Event()
        jikan.route("/anime", {"data": make_items(5, 25)}, gate=gate, genres=1, page=2)
        await controller.filter_by_genre(1)

        pending = asyncio.create_task(controller.load_more())
        await wait_until(lambda: controller.view_state.is_loading)
        await controller.load_more()
        gate.set()
        await pending

        assert len(jikan.hits("/anime", page=2)) == 1
        assert len(controller.results.cards) == 29

    async def test_load_more_failure_can_retry(self, controller, jikan):
        self._pages(jikan, 1, [24])
        jikan.route("/anime", (500, {}), (500, {}), (500, {}), {"data": make_items(24, 25)}, genres=1, page=2)
        await controller.filter_by_genre(1)

        button = controller.results.load_more
        await button.on_click()
        assert button.label == ERROR_RETRY_LABEL
        assert not button.disabled
        assert not controller.view_state.is_loading
        assert len(controller.results.cards) == 24

        await button.on_click()
        assert len(controller.results.cards) == 48
        assert controller.view_state.current_page == 2

    async def test_empty_later_page(self, controller, jikan):
        self._pages(jikan, 1, [24, 0])
        await controller.filter_by_genre(1)

        button = controller.results.load_more
        await button.on_click()
        assert button.label == NO_MORE_LABEL
        assert button.disabled
        assert controller.view_state.has_more is False
        assert len(controller.results.cards) == 24

    async def test_empty_genre(self, controller, jikan):
        self._pages(jikan, 14, [0])
        await controller.filter_by_genre(14)
        assert controller.results.empty_message == "No anime found. Try a different genre"

    async def test_first_page_failure(self, controller, jikan):
        jikan.route("/anime", (500, {}), genres=2, page=1)
        await controller.filter_by_genre(2)

        error = controller.results.error
        assert error.message == "Failed to load anime"

        self._pages(jikan, 2, [4])
        await error.retry()
        assert len(controller.results.cards) == 4

    async def test_switching_genre_discards_old_page(self, controller, jikan):
        gate = asyncio.Event()
        jikan.route("/anime", {"data": make_items(24, prefix="Action")}, gate=gate, genres=1, page=1)
        jikan.route("/anime", {"data": make_items(5, 100, prefix="Adventure")}, genres=2, page=1)

        first = asyncio.create_task(controller.filter_by_genre(1))
        await wait_until(lambda: jikan.hits("/anime", genres=1))
        second = asyncio.create_task(controller.filter_by_genre(2))
        await wait_until(lambda: controller.view_state.current_query == 2)
        gate.set()
        await asyncio.gather(first, second)

        assert controller.results.header == "🗺️ Adventure Anime"
        assert titles(controller) == [f"Adventure {i}" for i in range(100, 105)]
        assert controller.results.load_more is None

    async def test_search_after_genre_invalidates_load_more(self, controller, jikan, backend_api):
        self._pages(jikan, 1, [24])
        backend_api.route("/api/search", {"data": make_items(1)})
        await controller.filter_by_genre(1)
        button = controller.results.load_more

        await controller.search("naruto")
        await button.on_click()

        assert controller.view_state.mode == ViewMode.SEARCH
        assert len(controller.results.cards) == 1


class TestHome:
    """Hero, carousels and the top rail."""

    def _home_routes(self, jikan):
        jikan.route("/top/anime", {"data": make_items(7)}, filter="airing", limit=7)
        jikan.route("/top/anime", {"data": make_items(25, 100)}, filter="airing", limit=25)
        jikan.route("/seasons/now", {"data": make_items(13, 200)})
        jikan.route("/top/anime", {"data": make_items(10, 300)}, limit=10)

    async def test_load_home(self, controller, jikan):
        self._home_routes(jikan)
        await controller.load_home()

        assert len(controller.hero.slides) == 7
        assert controller.hero.autoplaying
        assert controller.hero_error is None
        assert controller.carousels["seasonal"].total_pages == 3
        assert controller.carousels["trending"].state.total_cards == 25
        assert [item.rank for item in controller.top_rail.items] == list(range(1, 11))

    async def test_sections_fail_independently(self, controller, jikan):
        self._home_routes(jikan)
        jikan.route("/seasons/now", (500, {}))
        await controller.load_home()

        seasonal = controller.carousels["seasonal"]
        assert seasonal.error.message == "Failed to load"
        assert controller.carousels["trending"].loaded

        jikan.route("/seasons/now", {"data": make_items(3)})
        await seasonal.error.retry()
        assert seasonal.loaded
        assert seasonal.error is None

    async def test_section_loads_once(self, controller, jikan, coordinator):
        jikan.route("/seasons/now", {"data": make_items(3)})
        url = coordinator.endpoints.current_season()
        await controller.load_section("seasonal", url)
        coordinator.cache.clear()
        await controller.load_section("seasonal", url)
        assert len(jikan.requests) == 1

    async def test_hero_failure(self, controller, jikan):
        jikan.route("/top/anime", (500, {}), filter="airing", limit=7)
        await controller.load_hero()
        assert controller.hero_error.message == "Failed to load featured anime"
        assert controller.hero.slides == []

    async def test_top_rail_failure(self, controller, jikan):
        jikan.route("/top/anime", (500, {}), limit=10)
        await controller.load_top_anime()
        assert controller.top_rail.error.message == "Failed to load"

    async def test_navigate_carousel(self, controller, jikan):
        jikan.route("/seasons/now", {"data": make_items(13)})
        await controller.load_section("seasonal", controller.coordinator.endpoints.current_season())
        assert controller.navigate_carousel("seasonal", 1)
        assert not controller.navigate_carousel("unknown", 1)

    async def test_results_mode_pauses_hero(self, controller, jikan, backend_api):
        self._home_routes(jikan)
        backend_api.route("/api/search", {"data": make_items(1)})
        await controller.load_home()

        await controller.search("naruto")
        assert not controller.hero.autoplaying

        controller.clear_search()
        assert controller.hero.autoplaying


class TestSchedule:
    async def test_load_schedule(self, controller, jikan):
        items = make_items(2)
        items[0]["broadcast"] = {"time": "23:00"}
        jikan.route("/schedules", {"data": items}, filter="monday")

        await controller.load_schedule("Monday")

        assert controller.active_day == "monday"
        assert [card.time for card in controller.schedule.items] == ["23:00 JST", "TBA JST"]

    async def test_invalid_day(self, controller, jikan):
        await controller.load_schedule("someday")
        assert controller.schedule.error.message == "Invalid day selected"
        assert jikan.requests == []

    async def test_empty_day(self, controller, jikan):
        jikan.route("/schedules", {"data": []}, filter="sunday")
        await controller.load_schedule("sunday")
        assert controller.schedule.empty_message == "No anime airing this day"

    async def test_failure_retry(self, controller, jikan):
        jikan.route("/schedules", (500, {}), filter="friday")
        await controller.load_schedule("friday")
        error = controller.schedule.error
        assert error.message == "Failed to load schedule"

        jikan.route("/schedules", {"data": make_items(1)}, filter="friday")
        await error.retry()
        assert len(controller.schedule.items) == 1


class TestSpinAndAccount:
    """Random pick, session and watchlist actions."""

    async def test_spin_is_never_cached(self, controller, jikan):
        jikan.route("/random/anime", {"data": {"mal_id": 42}}, {"data": {"mal_id": 7}})

        assert await controller.spin() == 42
        assert controller.redirect == "/anime.html?id=42"
        assert await controller.spin() == 7

    async def test_spin_failure(self, controller, jikan):
        jikan.route("/random/anime", (500, {}))
        assert await controller.spin() is None
        toast = controller.notifications.current
        assert toast.message == "Spin failed! Please try again."
        assert toast.kind == "error"

    async def test_refresh_and_logout(self, controller, backend_api):
        backend_api.route("/api/me", {"user": {"username": "alice"}})
        backend_api.route("/api/logout", {"success": True})

        assert await controller.refresh_user() == "alice"
        await controller.logout()
        assert controller.user is None
        assert controller.redirect == "/"

    async def test_anonymous_user(self, controller, backend_api):
        backend_api.route("/api/me", {"user": None})
        assert await controller.refresh_user() is None

    async def test_add_to_watchlist(self, controller, backend_api):
        backend_api.route("/api/watchlist/add", {"success": True})
        assert await controller.add_to_watchlist(21) == "✓ Added!"
        assert controller.notifications.current.kind == "success"

    async def test_add_to_watchlist_requires_login(self, controller, backend_api):
        backend_api.route("/api/watchlist/add", (401, {"message": "Login required"}))
        assert await controller.add_to_watchlist(21) == "Error"
        assert controller.login_prompt
        assert controller.notifications.current.kind == "warning"
