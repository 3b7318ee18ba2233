"""Search result cache for the upstream proxy."""
import time
from typing import Any


class SearchCache:
    """Keeps search results for ``ttl_seconds`` after they are stored.

    Expired entries are dropped when read. Once more than ``max_entries``
    are held the cache is emptied before the next insert.
    """

    def __init__(self, ttl_seconds: int = 600, max_entries: int = 500):
        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self._entries: dict[str, tuple[float, Any]] = {}

    def get(self, key: str) -> Any | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        expires_at, value = entry
        if time.monotonic() >= expires_at:
            del self._entries[key]
            return None
        return value

    def set(self, key: str, value: Any) -> None:
        if len(self._entries) > self.max_entries:
            self._entries.clear()
        self._entries[key] = (time.monotonic() + self.ttl_seconds, value)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
