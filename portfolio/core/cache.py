"""In-memory TTL cache for outbound API responses (GitHub projects, etc.).

Entries expire lazily on read; `cleanup()` sweeps expired entries that are
never read again. One instance is created per app and injected where needed.
"""
import hashlib
import logging
import threading
import time
from dataclasses import dataclass
from typing import Awaitable, Callable, Generic, TypeVar

from portfolio.models.schemas import CacheStats

logger = logging.getLogger(__name__)

T = TypeVar("T")

KEY_DELIMITER = ":"


@dataclass
class CacheEntry(Generic[T]):
    value: T
    expires_at: float


class MemoryCache(Generic[T]):
    """Process-local key/value cache with per-entry expiry.

    Each operation runs under a lock. `get_or_set` never holds it while the
    fetch function is awaited, so concurrent misses on the same key each run
    their own fetch.
    """

    def __init__(self, default_ttl_minutes: float = 30, clock: Callable[[], float] | None = None):
        self._entries: dict[str, CacheEntry[T]] = {}
        self._lock = threading.Lock()
        self._clock = clock or time.time
        self.default_ttl = default_ttl_minutes * 60

    def get(self, key: str) -> T | None:
        """Return cached value if not expired, else None."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if self._clock() > entry.expires_at:
                del self._entries[key]
                return None
            return entry.value

    def set(self, key: str, value: T, ttl_minutes: float | None = None) -> None:
        """Store a value, replacing any existing entry. TTL is in minutes."""
        ttl = self.default_ttl if ttl_minutes is None else ttl_minutes * 60
        with self._lock:
            self._entries[key] = CacheEntry(value=value, expires_at=self._clock() + ttl)

    def delete(self, key: str) -> bool:
        with self._lock:
            return self._entries.pop(key, None) is not None

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def cleanup(self) -> int:
        """Drop every entry expired as of now. Returns how many were removed."""
        with self._lock:
            now = self._clock()
            expired = [k for k, entry in self._entries.items() if now > entry.expires_at]
            for key in expired:
                del self._entries[key]
        return len(expired)

    def get_stats(self) -> CacheStats:
        """Size and keys, expired-but-unswept entries included."""
        with self._lock:
            return CacheStats(size=len(self._entries), keys=list(self._entries))

    async def get_or_set(
        self,
        key: str,
        fetch_fn: Callable[[], Awaitable[T]],
        ttl_minutes: float | None = None,
    ) -> T:
        """Return the cached value for `key`, or await `fetch_fn` and cache its result.

        Exceptions from `fetch_fn` propagate and nothing is stored, so the next
        call retries. A failure to store a fetched value is logged and the value
        is returned anyway.
        """
        cached = self.get(key)
        if cached is not None:
            logger.debug(f"Cache hit: {key}")
            return cached

        logger.debug(f"Cache miss: {key}")
        data = await fetch_fn()
        try:
            self.set(key, data, ttl_minutes)
        except Exception as e:
            logger.warning(f"Failed to cache {key}: {e}")
        return data


def build_cache_key(*parts: str | int | float | bool) -> str:
    """Join parts with ':' in order, e.g. ("a", 1, True) -> "a:1:true"."""
    return KEY_DELIMITER.join(_key_part(p) for p in parts)


def _key_part(part: str | int | float | bool) -> str:
    if isinstance(part, bool):
        return "true" if part else "false"
    if isinstance(part, float) and part.is_integer():
        return str(int(part))  # 1.0 -> "1"
    return str(part)


def hash_cache_key(value: str) -> str:
    """Shorten a long key component (URL lists, tokens) to 16 hex chars."""
    return hashlib.blake2b(value.encode("utf-8"), digest_size=8).hexdigest()
