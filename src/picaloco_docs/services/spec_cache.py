"""
In-memory cache for the enhanced spec.

Holds one entry: the last document that was fetched and enhanced
successfully, plus the time it was stored. The entry is swapped as a whole on
every put, so a reader sees either the old entry or the new one.

Age is measured on a monotonic clock; the wall-clock time is kept only for
display.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, Optional

from picaloco_docs.metrics import spec_cache_requests_total


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class CacheEntry:
    document: Dict[str, Any]
    fetched_at: datetime
    stored_at: float  # monotonic seconds


class SpecCache:
    """Single-entry, process-local spec cache."""

    def __init__(
        self,
        clock: Callable[[], float] = time.monotonic,
        wall_clock: Callable[[], datetime] = utcnow,
    ):
        self._clock = clock
        self._wall_clock = wall_clock
        self._entry: Optional[CacheEntry] = None

    @property
    def entry(self) -> Optional[CacheEntry]:
        return self._entry

    def get(self) -> Optional[Dict[str, Any]]:
        entry = self._entry
        return entry.document if entry else None

    def put(self, document: Dict[str, Any]) -> CacheEntry:
        entry = CacheEntry(
            document=document,
            fetched_at=self._wall_clock(),
            stored_at=self._clock(),
        )
        self._entry = entry
        return entry

    def age(self) -> Optional[timedelta]:
        entry = self._entry
        if entry is None:
            return None
        return timedelta(seconds=self._clock() - entry.stored_at)

    def is_fresh(self, max_age: timedelta) -> bool:
        age = self.age()
        return age is not None and age < max_age

    def get_fresh(self, max_age: timedelta) -> Optional[Dict[str, Any]]:
        """Cached document if it is younger than max_age, else None. Counts hits/misses."""
        entry = self._entry
        if entry is not None and timedelta(seconds=self._clock() - entry.stored_at) < max_age:
            spec_cache_requests_total.labels(result="hit").inc()
            return entry.document
        spec_cache_requests_total.labels(result="miss").inc()
        return None
