"""
Cache package.

Bounded in-memory caches with optional durable snapshots.
"""

from landmark_lens.cache.smart_cache import (
    CacheOptions,
    PreloadItem,
    SmartCache,
    estimate_size,
)
from landmark_lens.cache.snapshot_store import (
    FileSnapshotStore,
    InMemorySnapshotStore,
    SnapshotStore,
)
from landmark_lens.cache.specialized import LocationCache, RecognitionCache

__all__ = [
    "CacheOptions",
    "FileSnapshotStore",
    "InMemorySnapshotStore",
    "LocationCache",
    "PreloadItem",
    "RecognitionCache",
    "SmartCache",
    "SnapshotStore",
    "estimate_size",
]
