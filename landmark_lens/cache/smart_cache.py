"""
Size- and memory-bounded cache with TTL, priority and snapshots.

Entries expire lazily on read and proactively on a periodic sweep.
Two capacity bounds apply: entry count and estimated memory. Memory
eviction drops the least valuable entries (priority, then access count);
count eviction drops a single entry chosen by priority and a
priority-shifted recency.

The internal map and memory counter are mutated synchronously and are
only safe on a single event loop.

Sandi Metz Principles:
- Single Responsibility: In-memory caching policy
- Small methods: Eviction, sizing and persistence isolated
- Dependency Injection: Clock and snapshot store injected
"""

import asyncio
import re
import time
from dataclasses import asdict, dataclass
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Optional, Pattern, Union

import pydantic_core

from landmark_lens.cache.snapshot_store import SnapshotStore
from landmark_lens.models.cache_entry import CacheEntry, CacheSnapshot, CacheStats
from landmark_lens.utils.logger import get_logger, log_cache_hit, log_cache_miss

logger = get_logger(__name__)

HOUR_MS = 60 * 60 * 1000
DAY_MS = 24 * HOUR_MS

# Used when a value cannot be serialized for size estimation
FALLBACK_ENTRY_SIZE = 1024


def now_ms() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


def estimate_size(value: Any) -> int:
    """
    Estimate the serialized size of a value in bytes.

    Args:
        value: Value to measure

    Returns:
        Byte length of its JSON form, or a fixed estimate if it cannot be serialized
    """
    try:
        return len(pydantic_core.to_json(value))
    except Exception:
        return FALLBACK_ENTRY_SIZE


@dataclass
class CacheOptions:
    """Cache configuration."""

    max_size: int = 100
    max_memory: int = 50 * 1024 * 1024
    default_ttl_ms: int = DAY_MS
    enable_persistence: bool = False
    storage_key: str = "ar_cache"
    cleanup_interval_seconds: float = 300.0
    snapshot_max_age_ms: int = 7 * DAY_MS


@dataclass
class PreloadItem:
    """Entry to load ahead of use."""

    key: str
    loader: Callable[[], Awaitable[Any]]
    ttl_ms: Optional[int] = None
    priority: Optional[int] = None


class SmartCache:
    """
    In-memory cache with priority-aware eviction.

    Optionally snapshots itself to a durable slot on every mutation.
    """

    def __init__(
        self,
        options: Optional[CacheOptions] = None,
        snapshot_store: Optional[SnapshotStore] = None,
        clock: Callable[[], int] = now_ms,
    ):
        """
        Initialize cache.

        Args:
            options: Cache options (uses defaults if None)
            snapshot_store: Durable slot used when persistence is enabled
            clock: Millisecond clock
        """
        self._options = options or CacheOptions()
        self._store = snapshot_store
        self._clock = clock
        self._cache: Dict[str, CacheEntry] = {}
        self._hits = 0
        self._misses = 0
        self._evictions = 0
        self._total_memory = 0
        self._cleanup_task: Optional[asyncio.Task] = None

        if self._persistence_enabled:
            self._load_from_storage()

    @property
    def _persistence_enabled(self) -> bool:
        return self._options.enable_persistence and self._store is not None

    @property
    def options(self) -> CacheOptions:
        """Get current options."""
        return self._options

    @property
    def size(self) -> int:
        """Get number of stored entries."""
        return len(self._cache)

    @property
    def memory_usage(self) -> int:
        """Get aggregate estimated memory in bytes."""
        return self._total_memory

    def set(
        self,
        key: str,
        value: Any,
        ttl_ms: Optional[int] = None,
        priority: Optional[int] = None,
    ) -> bool:
        """
        Store value with optional TTL and priority.

        Args:
            key: Cache key
            value: Payload
            ttl_ms: Time to live (uses default if None)
            priority: Entry priority, higher survives eviction longer (default 1)

        Returns:
            True if stored, False if the value alone exceeds the memory ceiling
        """
        now = self._clock()
        ttl = ttl_ms if ttl_ms is not None else self._options.default_ttl_ms
        size = estimate_size(value)

        if size > self._options.max_memory:
            logger.warning(
                "Value larger than cache memory ceiling",
                key=key,
                size=size,
                max_memory=self._options.max_memory,
            )
            return False

        # Replacing a key releases its old size before any eviction decision
        self._remove_entry(key)

        if self._total_memory + size > self._options.max_memory:
            self._evict_by_memory(self._total_memory + size - self._options.max_memory)

        if len(self._cache) >= self._options.max_size:
            self._evict_least_used()

        self._cache[key] = CacheEntry(
            data=value,
            timestamp=now,
            expires_at=now + ttl,
            access_count=0,
            last_accessed=now,
            priority=priority if priority is not None else 1,
            size=size,
        )
        self._total_memory += size

        self._save_to_storage()
        return True

    def get(self, key: str) -> Optional[Any]:
        """
        Retrieve value, counting a hit or miss.

        Args:
            key: Cache key

        Returns:
            Stored value, or None if missing or expired
        """
        entry = self._cache.get(key)

        if entry is None:
            self._misses += 1
            log_cache_miss(key, cache=self._options.storage_key)
            return None

        now = self._clock()
        if entry.is_expired(now):
            self.delete(key)
            self._misses += 1
            log_cache_miss(key, cache=self._options.storage_key, expired=True)
            return None

        entry.touch(now)
        self._hits += 1
        log_cache_hit(key, cache=self._options.storage_key)
        return entry.data

    def has(self, key: str) -> bool:
        """
        Check if a live entry exists without touching access statistics.

        Args:
            key: Cache key

        Returns:
            True if present and not expired
        """
        entry = self._cache.get(key)
        if entry is None:
            return False

        if entry.is_expired(self._clock()):
            self.delete(key)
            return False

        return True

    def delete(self, key: str) -> bool:
        """
        Delete entry.

        Args:
            key: Cache key

        Returns:
            True if an entry was removed
        """
        if not self._remove_entry(key):
            return False

        self._save_to_storage()
        return True

    def clear(self) -> None:
        """Clear all entries and the durable slot."""
        self._cache.clear()
        self._total_memory = 0
        self._evictions = 0

        if self._persistence_enabled:
            self._clear_storage()

        logger.info("Cleared cache", cache=self._options.storage_key)

    async def get_or_compute(
        self,
        key: str,
        supplier: Callable[[], Awaitable[Any]],
        ttl_ms: Optional[int] = None,
        priority: Optional[int] = None,
    ) -> Any:
        """
        Get value or compute and store it on miss.

        Args:
            key: Cache key
            supplier: Async function producing the value
            ttl_ms: Time to live for computed value
            priority: Priority for computed value

        Returns:
            Cached or computed value
        """
        cached = self.get(key)
        if cached is not None:
            return cached

        value = await supplier()
        self.set(key, value, ttl_ms=ttl_ms, priority=priority)
        return value

    def cleanup(self) -> int:
        """
        Remove every expired entry.

        Returns:
            Number of entries removed
        """
        now = self._clock()
        expired = [key for key, entry in self._cache.items() if entry.is_expired(now)]

        for key in expired:
            self._remove_entry(key)

        if expired:
            logger.debug(
                "Removed expired entries",
                cache=self._options.storage_key,
                count=len(expired),
            )
            self._save_to_storage()

        return len(expired)

    def start_cleanup(self) -> None:
        """Start the periodic expiry sweep on the running event loop."""
        if self._cleanup_task is None or self._cleanup_task.done():
            self._cleanup_task = asyncio.create_task(self._cleanup_loop())

    async def stop_cleanup(self) -> None:
        """Stop the periodic expiry sweep."""
        if self._cleanup_task is None:
            return

        self._cleanup_task.cancel()
        try:
            await self._cleanup_task
        except asyncio.CancelledError:
            pass
        self._cleanup_task = None

    async def _cleanup_loop(self) -> None:
        while True:
            await asyncio.sleep(self._options.cleanup_interval_seconds)
            self.cleanup()

    def get_stats(self) -> CacheStats:
        """
        Get cache statistics.

        Returns:
            Statistics snapshot
        """
        total = self._hits + self._misses
        timestamps = [entry.timestamp for entry in self._cache.values()]

        return CacheStats(
            total_entries=len(self._cache),
            memory_usage=self._total_memory,
            hit_rate=(self._hits / total) * 100 if total else 0.0,
            total_hits=self._hits,
            total_misses=self._misses,
            evictions=self._evictions,
            oldest_entry=min(timestamps) if timestamps else 0,
            newest_entry=max(timestamps) if timestamps else 0,
        )

    def get_by_pattern(self, pattern: Union[str, Pattern[str]]) -> Dict[str, Any]:
        """
        Get live entries whose key matches a regular expression.

        Args:
            pattern: Regex (string or compiled)

        Returns:
            Mapping of matching keys to values
        """
        regex = re.compile(pattern) if isinstance(pattern, str) else pattern
        now = self._clock()
        results: Dict[str, Any] = {}

        for key, entry in self._cache.items():
            if regex.search(key) and not entry.is_expired(now):
                entry.touch(now)
                results[key] = entry.data

        return results

    async def preload(self, items: Iterable[PreloadItem]) -> Dict[str, Any]:
        """
        Load several entries concurrently, skipping failures.

        Args:
            items: Entries to load

        Returns:
            Mapping of successfully loaded keys to values
        """
        items = list(items)
        outcomes = await asyncio.gather(
            *(item.loader() for item in items), return_exceptions=True
        )

        results: Dict[str, Any] = {}
        for item, outcome in zip(items, outcomes):
            if isinstance(outcome, Exception):
                logger.warning("Failed to preload cache entry", key=item.key, error=str(outcome))
                continue
            self.set(item.key, outcome, ttl_ms=item.ttl_ms, priority=item.priority)
            results[item.key] = outcome

        return results

    def export(self) -> Dict[str, Any]:
        """
        Export cache contents for debugging.

        Returns:
            Entries, statistics and options
        """
        return {
            "entries": [
                (key, entry.model_dump(mode="json")) for key, entry in self._cache.items()
            ],
            "stats": self.get_stats().model_dump(),
            "options": asdict(self._options),
        }

    def update_options(
        self,
        max_size: Optional[int] = None,
        max_memory: Optional[int] = None,
        default_ttl_ms: Optional[int] = None,
    ) -> None:
        """
        Update limits, evicting down to them if needed.

        Args:
            max_size: New entry limit
            max_memory: New memory limit in bytes
            default_ttl_ms: New default TTL
        """
        if max_size is not None:
            self._options.max_size = max_size
            while len(self._cache) > max_size:
                self._evict_least_used()

        if max_memory is not None:
            self._options.max_memory = max_memory
            if self._total_memory > max_memory:
                self._evict_by_memory(self._total_memory - max_memory)

        if default_ttl_ms is not None:
            self._options.default_ttl_ms = default_ttl_ms

        logger.info(
            "Updated cache options",
            cache=self._options.storage_key,
            max_size=self._options.max_size,
            max_memory=self._options.max_memory,
        )

    def _remove_entry(self, key: str) -> bool:
        entry = self._cache.pop(key, None)
        if entry is None:
            return False
        self._total_memory -= entry.size
        return True

    def _evict_by_memory(self, required_size: int) -> None:
        """
        Evict least valuable entries until enough memory is freed.

        Args:
            required_size: Bytes to free
        """
        candidates: List[tuple[str, CacheEntry]] = sorted(
            self._cache.items(),
            key=lambda item: (item[1].priority, item[1].access_count),
        )

        freed = 0
        for key, entry in candidates:
            if freed >= required_size:
                break
            self._remove_entry(key)
            freed += entry.size
            self._evictions += 1

        logger.debug(
            "Evicted entries by memory",
            cache=self._options.storage_key,
            freed=freed,
            required=required_size,
        )

    def _evict_least_used(self) -> None:
        """Evict one entry: lowest priority, then fewest hits, then oldest effective time."""
        if not self._cache:
            return

        def rank(item: tuple[str, CacheEntry]) -> tuple[int, int, int]:
            entry = item[1]
            # One hour of recency per priority level
            effective_time = entry.last_accessed - entry.priority * HOUR_MS
            return entry.priority, entry.access_count, effective_time

        victim_key, _ = min(self._cache.items(), key=rank)
        self._remove_entry(victim_key)
        self._evictions += 1

        logger.debug(
            "Evicted least used entry", cache=self._options.storage_key, key=victim_key
        )

    def _save_to_storage(self) -> None:
        if not self._persistence_enabled:
            return

        snapshot = CacheSnapshot(
            entries=list(self._cache.items()),
            stats={
                "hits": self._hits,
                "misses": self._misses,
                "evictions": self._evictions,
                "total_memory": self._total_memory,
            },
            timestamp=self._clock(),
        )
        try:
            self._store.save(self._options.storage_key, snapshot.model_dump_json())
        except Exception as e:
            logger.warning(
                "Failed to save cache to storage",
                cache=self._options.storage_key,
                error=str(e),
            )

    def _load_from_storage(self) -> None:
        try:
            stored = self._store.load(self._options.storage_key)
            if not stored:
                return

            snapshot = CacheSnapshot.model_validate_json(stored)
            now = self._clock()

            if now - snapshot.timestamp > self._options.snapshot_max_age_ms:
                logger.info("Discarding stale cache snapshot", cache=self._options.storage_key)
                self._clear_storage()
                return

            for key, entry in snapshot.entries:
                if not entry.is_expired(now):
                    self._cache[key] = entry
                    self._total_memory += entry.size

            # Hits and misses start fresh for a new session
            self._evictions = snapshot.stats.get("evictions", 0)

            logger.info(
                "Loaded cache snapshot",
                cache=self._options.storage_key,
                entries=len(self._cache),
            )
        except Exception as e:
            logger.warning(
                "Failed to load cache from storage",
                cache=self._options.storage_key,
                error=str(e),
            )
            self._cache.clear()
            self._total_memory = 0
            self._clear_storage()

    def _clear_storage(self) -> None:
        try:
            self._store.remove(self._options.storage_key)
        except Exception as e:
            logger.warning(
                "Failed to clear cache storage",
                cache=self._options.storage_key,
                error=str(e),
            )
