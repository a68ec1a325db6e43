"""Per-client cache of GET responses with staleness and prefix invalidation."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Hashable
from copy import deepcopy
from dataclasses import dataclass
from typing import Any

DEFAULT_STALE_SECONDS = 60.0
logger = logging.getLogger("mafia_empire_client")

QueryKey = tuple[Hashable, ...]


def normalize_key(key: QueryKey | str) -> QueryKey:
    if isinstance(key, str):
        return (key,)
    return tuple(key)


@dataclass(slots=True)
class _CachedQuery:
    expires_at: float
    value: Any


class QueryCache:
    """Query results keyed by path segments.

    An instance is handed to every service that needs it; nothing here is
    process-global. Invalidating ``("/api/user/drug-labs",)`` also drops
    ``("/api/user/drug-labs", 3, "production")``.
    """

    def __init__(
        self,
        stale_seconds: float = DEFAULT_STALE_SECONDS,
        *,
        clock: Callable[[], float] | None = None,
    ) -> None:
        if stale_seconds < 0:
            raise ValueError("stale_seconds must be >= 0")
        self._stale_seconds = stale_seconds
        self._clock = clock or time.monotonic
        self._items: dict[QueryKey, _CachedQuery] = {}

    def __len__(self) -> int:
        return len(self._items)

    def get(self, key: QueryKey | str) -> Any | None:
        normalized = normalize_key(key)
        stored = self._items.get(normalized)
        if stored is None:
            return None
        if stored.expires_at <= self._clock():
            del self._items[normalized]
            return None
        return deepcopy(stored.value)

    def set(self, key: QueryKey | str, value: Any) -> None:
        now = self._clock()
        self._purge_expired(now)
        self._items[normalize_key(key)] = _CachedQuery(
            expires_at=now + self._stale_seconds,
            value=deepcopy(value),
        )

    def invalidate(self, prefix: QueryKey | str) -> int:
        normalized = normalize_key(prefix)
        size = len(normalized)
        matched = [key for key in self._items if key[:size] == normalized]
        for key in matched:
            del self._items[key]
        if matched:
            logger.debug("cache invalidated prefix=%s entries=%s", normalized, len(matched))
        return len(matched)

    def clear(self) -> None:
        self._items.clear()

    def _purge_expired(self, now: float) -> None:
        expired = [key for key, item in self._items.items() if item.expires_at <= now]
        for key in expired:
            del self._items[key]


__all__ = [
    "DEFAULT_STALE_SECONDS",
    "QueryKey",
    "normalize_key",
    "QueryCache",
]
