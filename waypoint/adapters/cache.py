"""
In-process time-based cache.

Entries expire at an absolute UTC time. Expired entries are dropped lazily
on read.
"""

from __future__ import annotations

import threading
from datetime import datetime

from waypoint.core.ports import ClockPort


class TimedMemoryCache:
    def __init__(self, clock: ClockPort) -> None:
        self._clock = clock
        self._entries: dict[str, tuple[str, datetime]] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> str | None:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            value, expires_at = entry
            if expires_at <= self._clock.now_utc():
                del self._entries[key]
                return None
            return value

    def add(self, key: str, value: str, expires_at: datetime) -> None:
        with self._lock:
            self._entries[key] = (value, expires_at)

    def remove(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
