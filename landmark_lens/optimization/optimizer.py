"""
Performance optimizer facade.

Composes image optimization, request pacing and performance tracking
behind one object owned by the application.
"""

from dataclasses import asdict, replace
from typing import Any, Awaitable, Callable, Dict, Optional, TypeVar, Union

from landmark_lens.models.image import ImageFile
from landmark_lens.optimization.image_optimizer import (
    BackgroundExecution,
    ExecutionStrategy,
    ImageOptimizer,
    OptimizedImage,
)
from landmark_lens.optimization.options import OptimizationConfig
from landmark_lens.optimization.performance_monitor import PerformanceTracker
from landmark_lens.optimization.request_queue import RequestPriority, RequestQueue
from landmark_lens.utils.logger import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


class PerformanceOptimizer:
    """Entry point for image optimization, request batching and timings."""

    def __init__(
        self,
        config: Optional[OptimizationConfig] = None,
        tracker: Optional[PerformanceTracker] = None,
        executor_factory: Callable[[], ExecutionStrategy] = BackgroundExecution,
        queue: Optional[RequestQueue] = None,
    ):
        self._config = config or OptimizationConfig()
        self.tracker = tracker or PerformanceTracker()
        self.image_optimizer = ImageOptimizer(
            self._config, tracker=self.tracker, executor_factory=executor_factory
        )
        self.queue = queue or RequestQueue(
            batch_size=self._config.batch_size,
            request_delay_ms=self._config.request_delay_ms,
            batch_delay_ms=self._config.batch_delay_ms,
        )

    async def optimize_image(self, image: ImageFile) -> OptimizedImage:
        """Shrink an image before upload."""
        return await self.image_optimizer.optimize(image)

    async def optimize_api_request(
        self,
        request_fn: Callable[[], Awaitable[T]],
        priority: Union[RequestPriority, str] = RequestPriority.MEDIUM,
    ) -> T:
        """
        Run an API request, queued unless batching is off or priority is high.

        Args:
            request_fn: Zero-argument coroutine function
            priority: Queue placement

        Returns:
            The request's result
        """

        async def measured() -> T:
            async with self.tracker.measure("api_call_ms"):
                return await request_fn()

        if not self._config.batch_api_requests:
            return await measured()
        return await self.queue.submit(measured, RequestPriority(priority))

    def record_recognition(self, duration_ms: float, cache_hit_rate: float) -> None:
        """Record an end-to-end recognition timing."""
        self.tracker.record("total_recognition_ms", duration_ms)
        self.tracker.record("cache_hit_rate", cache_hit_rate)

    def get_performance_stats(self) -> Dict[str, Any]:
        """Get averages, recommendations and queue state."""
        return {
            **self.tracker.get_performance_stats(
                background_worker_enabled=self.image_optimizer.uses_background_worker
            ),
            "queue": self.queue.get_stats(),
        }

    def update_config(self, **changes: Any) -> OptimizationConfig:
        """
        Update selected settings.

        Args:
            **changes: OptimizationConfig field overrides

        Returns:
            The new configuration
        """
        self._config = replace(self._config, **changes)
        self.image_optimizer.reconfigure(self._config)
        self.queue.batch_size = self._config.batch_size
        self.queue.request_delay_ms = self._config.request_delay_ms
        self.queue.batch_delay_ms = self._config.batch_delay_ms
        logger.info("Optimization config updated", **changes)
        return self._config

    def get_config(self) -> Dict[str, Any]:
        """Get current configuration as a dict."""
        return asdict(self._config)

    async def cleanup(self) -> None:
        """Stop the worker and queue and drop samples."""
        self.image_optimizer.shutdown()
        await self.queue.close()
        self.tracker.reset()
