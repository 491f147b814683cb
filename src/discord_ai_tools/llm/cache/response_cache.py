"""In-memory response cache with TTL expiration.

This module provides the memoization layer that sits in front of the
completion provider. Entries expire after a single, uniform TTL and are
evicted lazily: an expired entry is only removed when a lookup finds it.

The cache is unbounded. Every distinct key stays in memory until a lookup
observes it expired, it is overwritten, or the owner calls purge_expired()
or clear(). That is acceptable for a low-traffic site; a deployment with many
distinct prompts should call purge_expired() periodically or put a size
bound in front of it.

Usage:
    >>> cache = ResponseCache(ttl_seconds=3600)
    >>> key = ResponseCache.compute_key("Name a color", {"max_tokens": 50})
    >>> cache.put(key, "Blue")
    >>> cache.get(key)
    'Blue'
"""

import hashlib
import json
import logging
import math
import threading
import time
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

from discord_ai_tools.llm.constants import DEFAULT_CACHE_TTL_SECONDS

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class _CacheEntry:
    """A cached response and the clock reading at which it was stored.

    Args:
        value: The generated text
        stored_at: Clock value (seconds) when the entry was written
    """

    value: str
    stored_at: float

    def age(self, now: float) -> float:
        """Return the entry's age in seconds at clock reading ``now``."""
        return now - self.stored_at


@dataclass(frozen=True, slots=True)
class CacheStats:
    """Snapshot of cache counters.

    Args:
        hits: Lookups that returned a live entry
        misses: Lookups that found nothing live (expired lookups included)
        expirations: Entries removed because their TTL had elapsed
        stores: Number of put() calls
        size: Entries currently held, expired-but-unvisited ones included
    """

    hits: int = 0
    misses: int = 0
    expirations: int = 0
    stores: int = 0
    size: int = 0

    @property
    def total_requests(self) -> int:
        """Total number of lookups."""
        return self.hits + self.misses

    @property
    def hit_rate(self) -> float:
        """Fraction of lookups served from cache (0.0 when there were none)."""
        total = self.total_requests
        if total == 0:
            return 0.0
        return self.hits / total


class ResponseCache:
    """Thread-safe TTL cache mapping request keys to generated text.

    All reads and writes go through one lock, so concurrent puts to the same
    key are last-writer-wins and a get never sees a half-written entry.

    Attributes:
        ttl_seconds: Lifetime applied to every entry
    """

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_CACHE_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the cache.

        Args:
            ttl_seconds: Seconds an entry stays valid. Must be positive.
            clock: Zero-argument callable returning the current time in
                seconds. Tests pass a fake clock to control expiry.

        Raises:
            ValueError: If ttl_seconds is not a positive finite number
        """
        if not math.isfinite(ttl_seconds) or ttl_seconds <= 0:
            raise ValueError(f"ttl_seconds must be positive and finite, got {ttl_seconds}")

        self.ttl_seconds = float(ttl_seconds)
        self._clock = clock
        self._entries: dict[str, _CacheEntry] = {}
        self._lock = threading.Lock()

        self._hits = 0
        self._misses = 0
        self._expirations = 0
        self._stores = 0

    @staticmethod
    def compute_key(prompt: str, options: Mapping[str, Any] | None = None) -> str:
        """Derive the cache key for a prompt and its cacheable options.

        The options are serialized with sorted keys, so two mappings with the
        same items produce the same key regardless of insertion order.
        Options set to None are dropped before serialization.

        Args:
            prompt: Prompt text sent to the provider
            options: Cacheable generation options (no-cache token excluded)

        Returns:
            str: 64-character SHA-256 hex digest

        Raises:
            TypeError: If an option value is not JSON-serializable
        """
        cacheable = {name: value for name, value in (options or {}).items() if value is not None}
        canonical = json.dumps(
            {"prompt": prompt, "options": cacheable},
            sort_keys=True,
            separators=(",", ":"),
            ensure_ascii=False,
        )
        return hashlib.sha256(canonical.encode("utf-8")).hexdigest()

    def _is_expired(self, entry: _CacheEntry, now: float) -> bool:
        return entry.age(now) >= self.ttl_seconds

    def get(self, key: str) -> str | None:
        """Return the cached value for ``key`` if it is still live.

        An entry whose age has reached the TTL is deleted and treated as
        absent.

        Args:
            key: Cache key from compute_key()

        Returns:
            The cached text, or None on a miss
        """
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self._misses += 1
                return None

            if self._is_expired(entry, self._clock()):
                del self._entries[key]
                self._expirations += 1
                self._misses += 1
                logger.debug(f"Evicted expired cache entry {key[:16]}...")
                return None

            self._hits += 1
            return entry.value

    def put(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``, replacing any existing entry.

        Args:
            key: Cache key from compute_key()
            value: Text to cache
        """
        with self._lock:
            self._entries[key] = _CacheEntry(value=value, stored_at=self._clock())
            self._stores += 1

    def delete(self, key: str) -> bool:
        """Remove the entry for ``key``.

        Returns:
            bool: True if an entry was removed, False if none existed
        """
        with self._lock:
            return self._entries.pop(key, None) is not None

    def purge_expired(self) -> int:
        """Remove every expired entry.

        Nothing calls this automatically; owners that want to bound memory
        can call it on their own schedule.

        Returns:
            int: Number of entries removed
        """
        with self._lock:
            now = self._clock()
            expired = [key for key, entry in self._entries.items() if self._is_expired(entry, now)]
            for key in expired:
                del self._entries[key]
            self._expirations += len(expired)

        if expired:
            logger.debug(f"Purged {len(expired)} expired cache entries")
        return len(expired)

    def clear(self) -> None:
        """Remove all entries. Counters are kept."""
        with self._lock:
            self._entries.clear()

    def get_stats(self) -> CacheStats:
        """Return a snapshot of the cache counters."""
        with self._lock:
            return CacheStats(
                hits=self._hits,
                misses=self._misses,
                expirations=self._expirations,
                stores=self._stores,
                size=len(self._entries),
            )

    def __contains__(self, key: object) -> bool:
        """Check for a live entry without touching counters or evicting."""
        with self._lock:
            entry = self._entries.get(key)  # type: ignore[call-overload]
            return entry is not None and not self._is_expired(entry, self._clock())

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __repr__(self) -> str:
        return f"ResponseCache(ttl_seconds={self.ttl_seconds}, size={len(self)})"
