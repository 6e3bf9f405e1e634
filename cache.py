import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

@dataclass
class CacheEntry:
    value: Any
    stored_at: float

class ResponseCache:
    """In-memory best-effort cache with a staleness window.

    One instance is created per concern at application startup and handed to
    the code that needs it. Entries are overwritten on write and never evicted.
    """

    def __init__(self, ttl: float, clock: Callable[[], float] = time.time):
        self.ttl = ttl
        self._clock = clock
        self._entries: Dict[str, CacheEntry] = {}

    def store(self, key: str, value: Any) -> None:
        """Store a value under key, replacing any previous entry"""
        self._entries[key] = CacheEntry(value=value, stored_at=self._clock())

    def get_fresh(self, key: str) -> Optional[Any]:
        """Return the cached value if it is younger than the TTL"""
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._clock() - entry.stored_at >= self.ttl:
            return None
        return entry.value

    def clear(self) -> None:
        self._entries.clear()

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)
