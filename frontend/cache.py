"""In-memory TTL cache for upstream responses."""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)

DEFAULT_TTL_MS = 300_000
DEFAULT_MAX_ENTRIES = 100


@dataclass
class CacheEntry:
    """A cached payload and the monotonic time (in ms) it stops being valid."""
    key: str
    payload: Any
    expires_at: float


class TTLCache:
    """Maps request URLs to payloads that expire after a fixed lifetime.

    Expired entries are evicted lazily when looked up. When ``set`` is called
    while more than ``max_entries`` entries are stored, the whole cache is
    cleared before the new entry is inserted; there is no LRU ordering.
    """

    def __init__(
        self,
        ttl_ms: int = DEFAULT_TTL_MS,
        max_entries: int = DEFAULT_MAX_ENTRIES,
        clock: Optional[Callable[[], float]] = None,
    ):
        self.ttl_ms = ttl_ms
        self.max_entries = max_entries
        self._clock = clock or time.monotonic
        self._entries: dict[str, CacheEntry] = {}

    def _now_ms(self) -> float:
        return self._clock() * 1000

    def get(self, key: str) -> Optional[Any]:
        """Return the cached payload, or None if missing or expired."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._now_ms() >= entry.expires_at:
            logger.debug(f"Cache expired for key: {key}")
            del self._entries[key]
            return None
        logger.debug(f"Cache hit for key: {key}")
        return entry.payload

    def set(self, key: str, payload: Any, ttl_ms: Optional[int] = None) -> None:
        """Store a payload, overwriting any existing entry for the key."""
        if len(self._entries) > self.max_entries:
            logger.info(f"Cache exceeded {self.max_entries} entries, clearing")
            self._entries.clear()

        ttl = self.ttl_ms if ttl_ms is None else ttl_ms
        self._entries[key] = CacheEntry(key=key, payload=payload, expires_at=self._now_ms() + ttl)

    def delete(self, key: str) -> None:
        self._entries.pop(key, None)

    def clear(self) -> None:
        """Drop every entry."""
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not None
