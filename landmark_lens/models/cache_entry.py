"""
Cache entry models.

Sandi Metz Principles:
- Single Responsibility: Cache data structure
- Clear naming: Descriptive fields
- Serializable: Snapshot round-trips through JSON
"""

from typing import Any, Dict, List, Tuple

from pydantic import BaseModel, Field


class CacheEntry(BaseModel):
    """Cache entry with expiry, priority and access statistics."""

    data: Any = Field(..., description="Cached payload")
    timestamp: int = Field(..., description="Creation time (epoch ms)")
    expires_at: int = Field(..., description="Expiry time (epoch ms)")
    access_count: int = Field(default=0, ge=0, description="Number of reads")
    last_accessed: int = Field(..., description="Last read time (epoch ms)")
    priority: int = Field(default=1, description="Higher is more valuable")
    size: int = Field(default=0, ge=0, description="Estimated size in bytes")

    def is_expired(self, now: int) -> bool:
        """Check if entry has passed its expiry."""
        return now > self.expires_at

    def touch(self, now: int) -> None:
        """Record a read."""
        self.access_count += 1
        self.last_accessed = now


class CacheStats(BaseModel):
    """Cache statistics."""

    total_entries: int = 0
    memory_usage: int = 0
    hit_rate: float = Field(default=0.0, description="Hit rate percentage (0-100)")
    total_hits: int = 0
    total_misses: int = 0
    evictions: int = 0
    oldest_entry: int = 0
    newest_entry: int = 0


class CacheSnapshot(BaseModel):
    """Durable form of a cache: live entries, counters and save time."""

    entries: List[Tuple[str, CacheEntry]] = Field(default_factory=list)
    stats: Dict[str, int] = Field(default_factory=dict)
    timestamp: int = Field(..., description="Save time (epoch ms)")
