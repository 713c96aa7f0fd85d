"""In-memory key/value cache with lazy time-to-live expiry."""
from dataclasses import dataclass
from typing import Any, Callable, Dict, Generic, Hashable, Optional, TypeVar

from mcapfeed.config import CACHE_TTL_SECONDS
from mcapfeed.utils import now_ms

T = TypeVar("T")


@dataclass(frozen=True)
class CacheEntry(Generic[T]):
    value: T
    timestamp: float  # milliseconds


class TTLCache(Generic[T]):
    """
    Key/value store whose entries go stale ``ttl`` seconds after being set.

    Nothing is evicted in the background: an entry is checked on read,
    and an expired entry behaves exactly like a missing one. Each
    component owns its own instance.

    Args:
        ttl: Time-to-live in seconds
        clock: Callable returning the current time in milliseconds
    """

    def __init__(self, ttl: float = CACHE_TTL_SECONDS, clock: Optional[Callable[[], float]] = None):
        self.ttl_ms = ttl * 1000
        self._clock = clock or now_ms
        self._entries: Dict[Hashable, CacheEntry[T]] = {}

    def get(self, key: Hashable) -> Optional[T]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._clock() - entry.timestamp >= self.ttl_ms:
            return None
        return entry.value

    def set(self, key: Hashable, value: T) -> None:
        self._entries[key] = CacheEntry(value=value, timestamp=self._clock())

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: Any) -> bool:
        return self.get(key) is not None
