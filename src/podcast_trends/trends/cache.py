"""In-memory TTL cache for trend snapshots, one slot per duration filter.

Each max-duration filter value owns an independent slot; "no filter" is
its own slot under the ``UNBOUNDED`` key. A slot is never served past its
expiry instant.
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Final

import structlog

if TYPE_CHECKING:
    from collections.abc import Callable

    from podcast_trends.models import TrendSnapshot

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)

UNBOUNDED: Final = "unbounded"
_DEFAULT_TTL_SECONDS = 3600  # 1 hour

CacheKey = int | str


def cache_key(max_duration_seconds: int | None) -> CacheKey:
    """Slot key for a duration filter; None maps to ``UNBOUNDED``."""
    return UNBOUNDED if max_duration_seconds is None else int(max_duration_seconds)


@dataclass(frozen=True, slots=True)
class CacheEntry:
    """A cached snapshot and the epoch second it expires."""

    snapshot: TrendSnapshot
    expires_at: float


class SnapshotCache:
    """Keyed TTL store for ``TrendSnapshot`` objects.

    Also hands out one ``asyncio.Lock`` per key so concurrent cache misses
    on the same slot can share a single live fetch.

    Attributes:
        ttl_seconds: Lifetime of a slot after it is written.
    """

    def __init__(
        self,
        ttl_seconds: int = _DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: dict[CacheKey, CacheEntry] = {}
        self._locks: dict[CacheKey, asyncio.Lock] = {}

    def get(self, key: CacheKey) -> TrendSnapshot | None:
        """Return the slot's snapshot, or None if missing or expired."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._clock() >= entry.expires_at:
            logger.debug("snapshot_cache_expired", key=key)
            return None
        logger.debug("snapshot_cache_hit", key=key)
        return entry.snapshot

    def set(self, key: CacheKey, snapshot: TrendSnapshot) -> CacheEntry:
        """Write the slot with a fresh expiry, replacing any prior entry."""
        entry = CacheEntry(snapshot=snapshot, expires_at=self._clock() + self.ttl_seconds)
        self._entries[key] = entry
        logger.debug("snapshot_cache_set", key=key, ttl_seconds=self.ttl_seconds)
        return entry

    def entry(self, key: CacheKey) -> CacheEntry | None:
        return self._entries.get(key)

    def lock(self, key: CacheKey) -> asyncio.Lock:
        if key not in self._locks:
            self._locks[key] = asyncio.Lock()
        return self._locks[key]

    def clear(self) -> int:
        count = len(self._entries)
        self._entries.clear()
        return count

    def __len__(self) -> int:
        return len(self._entries)
