"""
Recognition performance tracking.

Tracks timings in one-minute windows and derives tuning recommendations.

Sandi Metz Principles:
- Single Responsibility: Performance tracking
- Observable: Expose averages and recommendations
- Non-intrusive: Context-manager instrumentation
"""

import time
from contextlib import asynccontextmanager
from dataclasses import dataclass, fields
from typing import Any, AsyncIterator, Callable, Dict, List, Optional

import httpx

from landmark_lens.cache.smart_cache import now_ms
from landmark_lens.config import config
from landmark_lens.utils.logger import get_logger

logger = get_logger(__name__)

WINDOW_MS = 60 * 1000
RETENTION_MS = 60 * 60 * 1000
FALLBACK_LATENCY_MS = 500.0

# Recommendation thresholds
SLOW_IMAGE_PROCESSING_MS = 2000
SLOW_API_CALL_MS = 3000
SLOW_NETWORK_MS = 1000
WORKER_HINT_IMAGE_PROCESSING_MS = 1000


@dataclass
class PerformanceSample:
    """Latest value per metric within one window."""

    timestamp: int
    image_processing_ms: float = 0.0
    api_call_ms: float = 0.0
    total_recognition_ms: float = 0.0
    cache_hit_rate: float = 0.0
    network_latency_ms: float = 0.0


METRIC_NAMES = tuple(f.name for f in fields(PerformanceSample) if f.name != "timestamp")


class PerformanceTracker:
    """
    Collects timing samples for image, API and network work.

    Each metric keeps its most recent value per window; windows older
    than an hour are dropped.
    """

    def __init__(
        self,
        clock: Callable[[], int] = now_ms,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize tracker.

        Args:
            clock: Millisecond clock
            http_client: Optional client for latency checks
        """
        self._clock = clock
        self._http_client = http_client
        self._samples: List[PerformanceSample] = []

    def record(self, metric: str, value: float) -> None:
        """
        Record a metric value in the current window.

        Args:
            metric: One of METRIC_NAMES
            value: Measured value
        """
        if metric not in METRIC_NAMES:
            raise ValueError(f"Unknown metric: {metric}")

        now = self._clock()
        sample = next((s for s in self._samples if now - s.timestamp < WINDOW_MS), None)
        if sample is None:
            sample = PerformanceSample(timestamp=now)
            self._samples.append(sample)

        setattr(sample, metric, value)
        self._samples = [s for s in self._samples if now - s.timestamp < RETENTION_MS]

    @asynccontextmanager
    async def measure(self, metric: str) -> AsyncIterator[None]:
        """
        Time the enclosed block and record it, even if it raises.

        Args:
            metric: One of METRIC_NAMES
        """
        start = time.perf_counter()
        try:
            yield
        finally:
            self.record(metric, (time.perf_counter() - start) * 1000)

    async def measure_network_latency(self, url: Optional[str] = None) -> float:
        """
        Measure round trip with a HEAD request.

        Args:
            url: Target URL (uses the Wikipedia endpoint if None)

        Returns:
            Latency in ms, or a conservative estimate if the request fails
        """
        target = url or config.wikipedia_api_url
        start = time.perf_counter()
        try:
            if self._http_client is not None:
                await self._http_client.head(target)
            else:
                async with httpx.AsyncClient(timeout=5.0) as client:
                    await client.head(target)
        except httpx.HTTPError as e:
            logger.debug("Latency check failed", url=target, error=str(e))
            return FALLBACK_LATENCY_MS

        latency = (time.perf_counter() - start) * 1000
        self.record("network_latency_ms", latency)
        return latency

    def get_performance_stats(self, background_worker_enabled: bool = True) -> Dict[str, Any]:
        """
        Get averages over retained windows.

        Args:
            background_worker_enabled: Whether image work runs off the event loop

        Returns:
            Averages, recent windows and recommendations
        """
        if not self._samples:
            return {
                "average_image_processing_ms": 0.0,
                "average_api_call_ms": 0.0,
                "average_network_latency_ms": 0.0,
                "windows": 0,
                "recommendations": [],
            }

        count = len(self._samples)
        avg_image = sum(s.image_processing_ms for s in self._samples) / count
        avg_api = sum(s.api_call_ms for s in self._samples) / count
        avg_latency = sum(s.network_latency_ms for s in self._samples) / count

        return {
            "average_image_processing_ms": round(avg_image, 2),
            "average_api_call_ms": round(avg_api, 2),
            "average_network_latency_ms": round(avg_latency, 2),
            "windows": count,
            "recommendations": self._recommendations(
                avg_image, avg_api, avg_latency, background_worker_enabled
            ),
        }

    @staticmethod
    def _recommendations(
        avg_image: float, avg_api: float, avg_latency: float, background_worker_enabled: bool
    ) -> List[str]:
        recommendations = []
        if avg_image > SLOW_IMAGE_PROCESSING_MS:
            recommendations.append(
                "Consider enabling image compression to reduce processing time"
            )
        if avg_api > SLOW_API_CALL_MS:
            recommendations.append("Enable request batching to improve API performance")
        if avg_latency > SLOW_NETWORK_MS:
            recommendations.append("Enable aggressive caching due to slow network conditions")
        if avg_image > WORKER_HINT_IMAGE_PROCESSING_MS and not background_worker_enabled:
            recommendations.append(
                "Enable the background worker for better image processing performance"
            )
        return recommendations

    @property
    def samples(self) -> List[PerformanceSample]:
        """Get retained windows, oldest first."""
        return list(self._samples)

    def reset(self) -> None:
        """Drop all samples."""
        self._samples = []
