"""
Short-lived memoization of normalized conversation views.

Entries expire a fixed number of seconds after they were stored. Expiry is
lazy: an expired entry is dropped the next time it is read.
"""
import json
import threading
import time
from typing import Any, Callable, Dict, Optional, Tuple

from .logging_config import cache_logger

DEFAULT_TTL_SECONDS = 300


def list_cache_key(status: Optional[str], search: Optional[str], sort: Optional[str]) -> str:
    """
    Key for one status/search/sort permutation of the conversation list.

    Parameters are JSON-encoded so an absent search (null) never collides
    with a search for the literal text "none".
    """
    params = [status if status and status != "all" else None, search or None, sort or "recent"]
    return "conversations:" + json.dumps(params, separators=(",", ":"))


def detail_cache_key(conversation_id: str) -> str:
    return f"detail:{conversation_id}"


class TTLCache:
    """Thread-safe key/value cache with a fixed time-to-live per entry."""

    def __init__(self, ttl_seconds: int = DEFAULT_TTL_SECONDS, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: Dict[str, Tuple[float, Any]] = {}
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0

    def get(self, key: str, default: Any = None) -> Any:
        """Return the cached value, or `default` when absent or expired."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self.misses += 1
                cache_logger.debug("Cache miss", key=key)
                return default

            expires_at, value = entry
            if self._clock() >= expires_at:
                del self._entries[key]
                self.misses += 1
                cache_logger.debug("Cache entry expired", key=key)
                return default

            self.hits += 1
            cache_logger.debug("Cache hit", key=key)
            return value

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            self._entries[key] = (self._clock() + self.ttl_seconds, value)

    def delete(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def clear_all(self) -> None:
        with self._lock:
            dropped = len(self._entries)
            self._entries.clear()
        cache_logger.debug("Cache flushed", dropped=dropped)

    def __contains__(self, key: str) -> bool:
        with self._lock:
            entry = self._entries.get(key)
            return entry is not None and self._clock() < entry[0]

    def __len__(self) -> int:
        with self._lock:
            now = self._clock()
            return sum(1 for expires_at, _ in self._entries.values() if now < expires_at)

    def stats(self) -> Dict[str, int]:
        return {
            "entries": len(self),
            "hits": self.hits,
            "misses": self.misses,
            "ttl_seconds": self.ttl_seconds,
        }
