"""Exceptions raised by the fetch coordinator and the backend client."""
from __future__ import annotations

from typing import Optional


class FetchError(Exception):
    """Base class for failures a view should render as a retry affordance."""

    def __init__(self, message: str, url: Optional[str] = None):
        super().__init__(message)
        self.url = url


class TransientUpstream(FetchError):
    """A single attempt failed in a way that is worth retrying."""


class RateLimited(TransientUpstream):
    """Upstream answered 429 Too Many Requests."""


class UpstreamStatusError(TransientUpstream):
    """Upstream answered with a non-2xx status other than 429."""

    def __init__(self, status_code: int, url: Optional[str] = None):
        super().__init__(f"HTTP {status_code}", url)
        self.status_code = status_code


class MalformedResponse(TransientUpstream):
    """Response body was not valid JSON."""


class ExhaustedRetries(FetchError):
    """Every attempt of a fetch failed; the last cause is chained."""

    def __init__(self, url: str, attempts: int):
        super().__init__(f"Request failed after {attempts} attempts: {url}", url)
        self.attempts = attempts


class BackendError(FetchError):
    """The AniCrunch backend rejected a request."""

    def __init__(self, message: str, status_code: Optional[int] = None, url: Optional[str] = None):
        super().__init__(message, url)
        self.status_code = status_code


class AuthRequired(BackendError):
    """The backend answered 401; the user has to log in."""


class LoadCancelled(Exception):
    """The abort scope of a load was invalidated before its result was applied.

    Not a FetchError: cancellation is never shown to the user.
    """
