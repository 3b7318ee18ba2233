"""Client for the AniCrunch backend (auth, search proxy, watchlist)."""
from __future__ import annotations

import logging
from typing import Any, Optional

import httpx

from frontend.errors import AuthRequired, BackendError

logger = logging.getLogger(__name__)


class BackendClient:
    """Session-cookie authenticated calls to the backend.

    The cookie jar of the underlying ``httpx.AsyncClient`` carries the session
    cookie set by login/signup, the way a browser does with
    ``credentials: "include"``.
    """

    def __init__(
        self,
        base_url: str,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = 30.0,
    ):
        self.base_url = base_url.rstrip("/")
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(base_url=self.base_url, timeout=timeout)

    async def __aenter__(self) -> "BackendClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def close(self) -> None:
        if self._owns_client:
            await self.client.aclose()

    def _url(self, path: str) -> str:
        return f"{self.base_url}{path}"

    async def _request(self, method: str, path: str, **kwargs) -> Any:
        url = self._url(path)
        try:
            response = await self.client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            raise BackendError(f"Backend unreachable: {e}", url=url) from e

        if response.status_code == 401:
            raise AuthRequired(self._message(response, "Login required"), 401, url)
        if not response.is_success:
            raise BackendError(self._message(response, f"HTTP {response.status_code}"), response.status_code, url)

        try:
            return response.json()
        except ValueError as e:
            raise BackendError("Invalid JSON response", response.status_code, url) from e

    @staticmethod
    def _message(response: httpx.Response, default: str) -> str:
        try:
            body = response.json()
        except ValueError:
            return default
        if isinstance(body, dict):
            return body.get("message") or body.get("detail") or default
        return default

    # =========================================================================
    # Auth
    # =========================================================================
    async def me(self) -> Optional[str]:
        """Return the logged-in username, or None for an anonymous session."""
        body = await self._request("GET", "/api/me")
        user = body.get("user") if isinstance(body, dict) else None
        return user.get("username") if user else None

    async def login(self, username: str, password: str) -> str:
        body = await self._request("POST", "/api/login", json={"username": username, "password": password})
        return body["user"]

    async def signup(self, username: str, password: str) -> str:
        body = await self._request("POST", "/api/signup", json={"username": username, "password": password})
        return body["user"]

    async def logout(self) -> None:
        await self._request("POST", "/api/logout")

    # =========================================================================
    # Search proxy
    # =========================================================================
    async def search(self, query: str) -> list[dict]:
        """Search through the backend's cached proxy."""
        body = await self._request("GET", "/api/search", params={"q": query})
        data = body.get("data") if isinstance(body, dict) else None
        return data if isinstance(data, list) else []

    # =========================================================================
    # Watchlist
    # =========================================================================
    async def watchlist(self) -> list[int]:
        body = await self._request("GET", "/api/watchlist")
        return [int(anime_id) for anime_id in body]

    async def add_to_watchlist(self, anime_id: int) -> None:
        await self._request("POST", "/api/watchlist/add", json={"animeId": int(anime_id)})
        logger.info(f"Added anime {anime_id} to watchlist")

    async def remove_from_watchlist(self, anime_id: int) -> None:
        await self._request("POST", "/api/watchlist/remove", json={"animeId": int(anime_id)})
        logger.info(f"Removed anime {anime_id} from watchlist")
