"""
In-process cache with TTL support.

Same get/set/delete surface as a Redis-backed cache, but values are kept as
live Python objects so callers get back exactly what they stored.
"""

import threading
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, Hashable, Optional, Tuple

from app.utils.clock import utcnow


class TTLCache:
    """
    Thread-safe key/value cache with a fixed time to live.

    The lock only guards dictionary access; computing a value to store is the
    caller's business and happens outside it.
    """

    def __init__(
        self,
        default_ttl: int = 600,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.default_ttl = default_ttl
        self._clock = clock
        self._lock = threading.Lock()
        self._entries: Dict[Hashable, Tuple[Any, datetime, int]] = {}

    def get(self, key: Hashable) -> Optional[Any]:
        """
        Get cached value.

        Args:
            key: Cache key

        Returns:
            Cached value or None if not found/expired
        """
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None

            value, stored_at, ttl = entry
            if self._clock() - stored_at >= timedelta(seconds=ttl):
                del self._entries[key]
                return None
            return value

    def set(self, key: Hashable, value: Any, ttl: Optional[int] = None) -> None:
        """
        Set cached value with TTL.

        Args:
            key: Cache key
            value: Value to cache
            ttl: Time to live in seconds
        """
        ttl = ttl or self.default_ttl
        with self._lock:
            self._entries[key] = (value, self._clock(), ttl)

    def delete(self, key: Hashable) -> None:
        """Delete cached value."""
        with self._lock:
            self._entries.pop(key, None)

    def exists(self, key: Hashable) -> bool:
        """Check if key exists in cache."""
        return self.get(key) is not None

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
