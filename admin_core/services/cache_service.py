# File: admin_core/services/cache_service.py

"""
Caching service for read-heavy lookups.

Provides an in-process TTL cache with a bounded key count. Entries expire
lazily on access and in bulk through ``remove_expired``. When the key bound is
reached the least recently used entry is evicted.

Values are deep-copied on the way in and on the way out, so callers can never
mutate what another caller will read. ``None`` is a legitimate cached value;
``get_or_load`` can store it to remember negative lookups.

Key features:
- Namespaced cache keys
- Time-to-live (TTL) support
- Key and prefix invalidation
- Cache statistics
"""

import copy
import logging
import time
from datetime import datetime
from typing import Any, Awaitable, Callable, Dict, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

MISSING = object()


class CacheEntry:
    """Represents a cached item with metadata."""

    def __init__(self, key: str, value: Any, ttl: Optional[int] = None):
        """
        Initialize cache entry.

        Args:
            key: Cache key
            value: Cached value
            ttl: Time to live in seconds (None for no expiration)
        """
        self.key = key
        self.value = value
        self.created_at = time.monotonic()
        self.expires_at = self.created_at + ttl if ttl is not None else None
        self.access_count = 0
        self.last_accessed = self.created_at

    @property
    def is_expired(self) -> bool:
        if self.expires_at is None:
            return False
        return time.monotonic() > self.expires_at

    def touch(self) -> None:
        self.last_accessed = time.monotonic()
        self.access_count += 1


class MemoryCache:
    """In-memory TTL cache with LRU eviction."""

    def __init__(self, max_size: int = 1000):
        self.cache: Dict[str, CacheEntry] = {}
        self.max_size = max_size
        self.stats = {
            "hits": 0,
            "misses": 0,
            "sets": 0,
            "evictions": 0,
            "expirations": 0,
            "invalidations": 0,
        }

    def get(self, key: str) -> Any:
        """
        Get value from cache.

        Args:
            key: Cache key

        Returns:
            Cached value, or MISSING if absent or expired
        """
        entry = self.cache.get(key)

        if entry is None:
            self.stats["misses"] += 1
            return MISSING

        if entry.is_expired:
            self.stats["expirations"] += 1
            self.stats["misses"] += 1
            del self.cache[key]
            return MISSING

        entry.touch()
        self.stats["hits"] += 1
        return entry.value

    def set(self, key: str, value: Any, ttl: Optional[int] = None) -> bool:
        if len(self.cache) >= self.max_size and key not in self.cache:
            # Expired entries go first, then the least recently used one
            if not self.remove_expired():
                self._evict_lru_item()

        self.cache[key] = CacheEntry(key, value, ttl)
        self.stats["sets"] += 1
        return True

    def delete(self, key: str) -> bool:
        if key in self.cache:
            del self.cache[key]
            self.stats["invalidations"] += 1
            return True
        return False

    def clear(self) -> int:
        removed = len(self.cache)
        self.cache.clear()
        self.stats["invalidations"] += removed
        return removed

    def get_stats(self) -> Dict[str, Any]:
        total_requests = self.stats["hits"] + self.stats["misses"]
        return {
            "backend": "memory",
            "keys": len(self.cache),
            "max_size": self.max_size,
            "hits": self.stats["hits"],
            "misses": self.stats["misses"],
            "hit_rate": self.stats["hits"] / total_requests if total_requests else 0,
            "stats": dict(self.stats),
        }

    def _evict_lru_item(self) -> bool:
        if not self.cache:
            return False

        lru_key = min(self.cache.items(), key=lambda x: x[1].last_accessed)[0]
        del self.cache[lru_key]
        self.stats["evictions"] += 1
        return True

    def remove_expired(self) -> int:
        """
        Remove all expired items from cache.

        Returns:
            Number of items removed
        """
        keys_to_delete = [key for key, entry in self.cache.items() if entry.is_expired]
        for key in keys_to_delete:
            del self.cache[key]

        self.stats["expirations"] += len(keys_to_delete)
        return len(keys_to_delete)


class CacheService:
    """
    Service for managing application caching.

    Provides functionality for:
    - Key-value caching with TTL
    - Namespaced cache keys
    - Cache invalidation
    - Statistics
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None, namespace: str = "admin"):
        """
        Initialize cache service.

        Args:
            config: Optional cache configuration (default_ttl, max_size)
            namespace: Cache namespace prefix
        """
        self.config = config or {}
        self.namespace = namespace
        self.default_ttl = self.config.get("default_ttl", 300)
        self.backend = MemoryCache(max_size=self.config.get("max_size", 1000))

        logger.info(
            f"Cache service '{namespace}' initialized (ttl={self.default_ttl}s, max_size={self.backend.max_size})"
        )

    def get(self, key: str, default: Any = None) -> Any:
        value = self.backend.get(self._format_key(key))
        if value is MISSING:
            return default
        return copy.deepcopy(value)

    def contains(self, key: str) -> bool:
        """True if the key holds a live entry, even one whose value is None."""
        entry = self.backend.cache.get(self._format_key(key))
        return entry is not None and not entry.is_expired

    def set(self, key: str, value: Any, ttl: Optional[int] = None) -> bool:
        """
        Set value in cache.

        Args:
            key: Cache key
            value: Value to cache
            ttl: Time to live in seconds (None for default)

        Returns:
            True if set successfully
        """
        if ttl is None:
            ttl = self.default_ttl
        return self.backend.set(self._format_key(key), copy.deepcopy(value), ttl)

    def invalidate(self, key: str) -> bool:
        return self.backend.delete(self._format_key(key))

    def invalidate_pattern(self, prefix: str) -> int:
        """
        Invalidate all keys starting with a prefix.

        Args:
            prefix: Key prefix, without namespace

        Returns:
            Number of keys invalidated
        """
        namespace_prefix = self._format_key(prefix)
        keys_to_delete = [key for key in list(self.backend.cache) if key.startswith(namespace_prefix)]

        count = 0
        for key in keys_to_delete:
            if self.backend.delete(key):
                count += 1
        return count

    async def get_or_load(
        self,
        key: str,
        loader: Callable[[], Awaitable[T]],
        ttl: Optional[int] = None,
        cache_none: bool = False,
    ) -> T:
        """
        Get value from cache or load and store it.

        Args:
            key: Cache key
            loader: Coroutine function producing the value on a miss
            ttl: Time to live in seconds (None for default)
            cache_none: Store a None result instead of retrying next time

        Returns:
            Cached value or newly loaded value
        """
        value = self.backend.get(self._format_key(key))
        if value is not MISSING:
            return copy.deepcopy(value)

        value = await loader()
        if value is not None or cache_none:
            self.set(key, value, ttl)
        return value

    def get_stats(self) -> Dict[str, Any]:
        stats = self.backend.get_stats()
        stats["namespace"] = self.namespace
        stats["generated_at"] = datetime.now().isoformat()
        return stats

    def clear(self) -> int:
        removed = self.backend.clear()
        logger.info(f"Cache '{self.namespace}' cleared ({removed} keys)")
        return removed

    def remove_expired(self) -> int:
        return self.backend.remove_expired()

    def _format_key(self, key: str) -> str:
        return f"{self.namespace}:{key}"
