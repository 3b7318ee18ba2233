"""Headless AniCrunch frontend: rate-limited fetch coordination and view state."""
from frontend.cache import TTLCache
from frontend.cancellation import AbortScope
from frontend.coordinator import FetchCoordinator
from frontend.backend import BackendClient
from frontend.errors import ExhaustedRetries, FetchError, LoadCancelled
from frontend.fetch import RetryingFetcher
from frontend.queue import RequestQueue
from frontend.session import ViewSessionController
from frontend.settings import CoordinatorSettings

__all__ = [
    "TTLCache",
    "AbortScope",
    "FetchCoordinator",
    "BackendClient",
    "ExhaustedRetries",
    "FetchError",
    "LoadCancelled",
    "RetryingFetcher",
    "RequestQueue",
    "ViewSessionController",
    "CoordinatorSettings",
]
