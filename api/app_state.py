"""
Application state container.

Holds the runtime objects created at startup (the upstream search proxy and
its HTTP client) so endpoints receive them through dependency injection
instead of module globals.

Usage:
    # In lifespan function:
    state = init_app_state()
    state.search_proxy = SearchProxy(settings.upstream_base_url)
    app.state.app_state = state

    # In endpoints (via dependency):
    def get_app_state(request: Request) -> AppState:
        return request.app.state.app_state
"""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any

from api.search_proxy import SearchProxy

logger = logging.getLogger(__name__)


@dataclass
class AppState:
    """
    Container for all application runtime state.

    Attributes:
        search_proxy: Cached proxy to the upstream search endpoint
        database_dialect: Name of the configured SQL dialect
        started_at: Unix timestamp of startup
        is_initialized: Whether startup has completed
    """

    search_proxy: SearchProxy | None = None
    database_dialect: str | None = None
    started_at: float = field(default_factory=time.time)
    is_initialized: bool = False

    @property
    def search_ready(self) -> bool:
        return self.search_proxy is not None

    async def close(self) -> None:
        if self.search_proxy is not None:
            await self.search_proxy.close()
            self.search_proxy = None
        self.is_initialized = False

    def get_health_status(self) -> dict[str, Any]:
        """
        Generate health check status for all components.

        Returns:
            Dictionary with status of the search proxy and database
        """
        status = {
            "status": "ok",
            "version": "1.0.0",
            "uptime_seconds": round(time.time() - self.started_at, 1),
            "services": {}
        }

        if self.search_ready:
            status["services"]["search"] = {
                "status": "ok",
                "cached_queries": len(self.search_proxy.cache),
            }
        else:
            status["services"]["search"] = {"status": "error", "error": "Search proxy not initialized"}
            status["status"] = "degraded"

        if self.database_dialect:
            status["services"]["database"] = {"status": "ok", "dialect": self.database_dialect}
        else:
            status["services"]["database"] = {"status": "error", "error": "Database not configured"}
            status["status"] = "degraded"

        return status


# Singleton instance for direct imports (use sparingly - prefer dependency injection)
_app_state: AppState | None = None


def get_app_state() -> AppState:
    """
    Get the global AppState instance.

    Raises:
        RuntimeError: If AppState hasn't been initialized
    """
    if _app_state is None:
        raise RuntimeError("AppState not initialized. Call init_app_state() first.")
    return _app_state


def init_app_state() -> AppState:
    """
    Initialize the global AppState instance.

    Should be called once during application startup.
    """
    global _app_state
    _app_state = AppState()
    return _app_state
