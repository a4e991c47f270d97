"""
Caches specialised for recognition results and Wikipedia lookups.

Sandi Metz Principles:
- Single Responsibility: Domain key and policy choices
- Small classes: Thin wrappers over SmartCache
- Clear naming: Intent-revealing accessors
"""

from typing import List, Optional

from pydantic import ValidationError

from landmark_lens.cache.smart_cache import DAY_MS, CacheOptions, SmartCache
from landmark_lens.cache.snapshot_store import SnapshotStore
from landmark_lens.models.location import EnrichedLocationData
from landmark_lens.models.recognition import RecognitionResult
from landmark_lens.utils.logger import get_logger

logger = get_logger(__name__)


def recognition_priority(confidence: float) -> int:
    """
    Map recognition confidence to cache priority.

    Args:
        confidence: Confidence 0-100

    Returns:
        3 for >= 90, 2 for >= 70, otherwise 1
    """
    if confidence >= 90:
        return 3
    if confidence >= 70:
        return 2
    return 1


def recognition_ttl_ms(confidence: float) -> int:
    """
    Map recognition confidence to time to live.

    Args:
        confidence: Confidence 0-100

    Returns:
        Seven days for >= 80, otherwise one day
    """
    return 7 * DAY_MS if confidence >= 80 else DAY_MS


class RecognitionCache(SmartCache):
    """Cache of recognition results keyed by image identity."""

    def __init__(
        self,
        options: Optional[CacheOptions] = None,
        snapshot_store: Optional[SnapshotStore] = None,
        **kwargs,
    ):
        super().__init__(
            options=options
            or CacheOptions(
                max_size=200,
                max_memory=100 * 1024 * 1024,
                default_ttl_ms=7 * DAY_MS,
                enable_persistence=snapshot_store is not None,
                storage_key="ar_recognition_cache",
            ),
            snapshot_store=snapshot_store,
            **kwargs,
        )

    def set_landmark_result(
        self, image_key: str, result: RecognitionResult, confidence: float
    ) -> bool:
        """
        Store a recognition result; higher confidence lives longer.

        Args:
            image_key: Image cache key
            result: Result to store
            confidence: Result confidence 0-100

        Returns:
            True if stored
        """
        return self.set(
            f"landmark_{image_key}",
            result,
            ttl_ms=recognition_ttl_ms(confidence),
            priority=recognition_priority(confidence),
        )

    def get_landmark_result(self, image_key: str) -> Optional[RecognitionResult]:
        """
        Get a stored recognition result.

        Args:
            image_key: Image cache key

        Returns:
            Result or None
        """
        data = self.get(f"landmark_{image_key}")
        if data is None or isinstance(data, RecognitionResult):
            return data

        # Entries restored from a snapshot hold plain JSON
        try:
            return RecognitionResult.model_validate(data)
        except ValidationError as e:
            logger.warning("Dropping unreadable cached result", key=image_key, error=str(e))
            self.delete(f"landmark_{image_key}")
            return None


class LocationCache(SmartCache):
    """Cache of enriched location data and nearby place lists."""

    def __init__(
        self,
        options: Optional[CacheOptions] = None,
        snapshot_store: Optional[SnapshotStore] = None,
        **kwargs,
    ):
        super().__init__(
            options=options
            or CacheOptions(
                max_size=500,
                max_memory=50 * 1024 * 1024,
                default_ttl_ms=30 * DAY_MS,
                enable_persistence=snapshot_store is not None,
                storage_key="ar_wikipedia_cache",
            ),
            snapshot_store=snapshot_store,
            **kwargs,
        )

    def set_location_data(self, landmark_name: str, data: EnrichedLocationData) -> bool:
        """Store enriched data for a landmark name."""
        return self.set(f"location_{landmark_name.lower()}", data, priority=2)

    def get_location_data(self, landmark_name: str) -> Optional[EnrichedLocationData]:
        """Get enriched data for a landmark name (case-insensitive)."""
        key = f"location_{landmark_name.lower()}"
        data = self.get(key)
        if data is None or isinstance(data, EnrichedLocationData):
            return data

        try:
            return EnrichedLocationData.model_validate(data)
        except ValidationError as e:
            logger.warning("Dropping unreadable cached location", key=key, error=str(e))
            self.delete(key)
            return None

    def set_nearby_places(self, coordinates_key: str, places: List[str]) -> bool:
        """Store nearby place titles for a rounded coordinate key."""
        return self.set(f"nearby_{coordinates_key}", places, ttl_ms=7 * DAY_MS, priority=1)

    def get_nearby_places(self, coordinates_key: str) -> Optional[List[str]]:
        """Get nearby place titles for a rounded coordinate key."""
        return self.get(f"nearby_{coordinates_key}")
