"""Cancellation tokens for search and genre sessions."""
from __future__ import annotations

import itertools
import logging
from typing import Any, Awaitable, Optional

from frontend.errors import LoadCancelled

logger = logging.getLogger(__name__)

_scope_ids = itertools.count(1)


class AbortScope:
    """Cancellation context of one logical search or genre session.

    Aborting only stops the owner from *using* results. Requests already handed
    to a queue lane still run to completion, since the lane is shared.
    """

    def __init__(self, label: str = ""):
        self.id = next(_scope_ids)
        self.label = label
        self._aborted = False

    @property
    def aborted(self) -> bool:
        return self._aborted

    def abort(self) -> None:
        if not self._aborted:
            logger.debug(f"Abort scope {self.id} ({self.label}) invalidated")
            self._aborted = True

    def check(self) -> None:
        """Raise LoadCancelled if the scope was invalidated."""
        if self._aborted:
            raise LoadCancelled(f"Scope {self.id} ({self.label}) was superseded")

    async def guard(self, awaitable: Awaitable[Any]) -> Any:
        """Await ``awaitable``; if the scope was aborted meanwhile, raise LoadCancelled.

        Failures of a superseded request are reported as cancellation too, so
        a stale error never reaches the view.
        """
        try:
            result = await awaitable
        except Exception:
            self.check()
            raise
        self.check()
        return result

    def __repr__(self) -> str:
        state = "aborted" if self._aborted else "active"
        return f"<AbortScope id={self.id} label={self.label!r} {state}>"


class ScopeHolder:
    """Keeps at most one live AbortScope; starting a new one aborts the previous."""

    def __init__(self):
        self._current: Optional[AbortScope] = None

    @property
    def current(self) -> Optional[AbortScope]:
        return self._current

    def renew(self, label: str = "") -> AbortScope:
        self.invalidate()
        self._current = AbortScope(label)
        return self._current

    def invalidate(self) -> None:
        if self._current is not None:
            self._current.abort()
            self._current = None
