#!/usr/bin/env python3
"""
In-process reservoir cache
"""
import threading
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterable, Optional, Tuple

from models import ReservoirReading


@dataclass(frozen=True)
class CacheEntry:
    """Immutable snapshot: one batch and the time it was cached"""
    readings: Tuple[ReservoirReading, ...]
    cached_at: datetime

    def age_seconds(self, now: Optional[datetime] = None) -> float:
        now = now or datetime.now(timezone.utc)
        return (now - self.cached_at).total_seconds()

    def is_fresh(self, ttl_seconds: float, now: Optional[datetime] = None) -> bool:
        return bool(self.readings) and self.age_seconds(now) < ttl_seconds


class ReservoirCache:
    """
    Holds the latest reservoir batch.

    Writers replace the whole snapshot under a lock, so a reader always
    gets a batch together with its own timestamp.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._entry: Optional[CacheEntry] = None

    def get(self) -> Optional[CacheEntry]:
        with self._lock:
            return self._entry

    def set(
        self,
        readings: Iterable[ReservoirReading],
        cached_at: Optional[datetime] = None,
    ) -> CacheEntry:
        entry = CacheEntry(
            readings=tuple(readings),
            cached_at=cached_at or datetime.now(timezone.utc),
        )
        with self._lock:
            self._entry = entry
        return entry

    def clear(self) -> None:
        with self._lock:
            self._entry = None

    def is_fresh(self, ttl_seconds: float, now: Optional[datetime] = None) -> bool:
        """Check if cache holds data younger than ttl_seconds"""
        entry = self.get()
        return entry is not None and entry.is_fresh(ttl_seconds, now)
