"""Site Cache Store — shared expiring entries plus a per-request local slot.

Invariants:
    - Shared entries expire `ttl_seconds` after they were stored (monotonic clock)
    - The local slot is a ContextVar: each request task sees its own value and a
      value set inside one request never leaks into another
    - delete() on a missing key is a no-op

Design Decisions:
    - In-process store: the API runs a single worker per container, and the site
      row changes rarely (moderator edits), so a five-minute staleness window on
      other workers is acceptable
"""

import time
from contextvars import ContextVar
from typing import Any, Callable

from epetitions.core.site_config import SiteConfig


class ExpiringCache:
    """Minimal key/value store with per-entry expiry."""

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._entries: dict[str, tuple[float, Any]] = {}

    def get(self, key: str) -> Any | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        expires_at, value = entry
        if self._clock() >= expires_at:
            del self._entries[key]
            return None
        return value

    def set(self, key: str, value: Any, ttl_seconds: float) -> None:
        self._entries[key] = (self._clock() + ttl_seconds, value)

    def delete(self, key: str) -> None:
        self._entries.pop(key, None)

    def clear(self) -> None:
        self._entries.clear()


shared_cache = ExpiringCache()

local_site: ContextVar[SiteConfig | None] = ContextVar("local_site", default=None)
