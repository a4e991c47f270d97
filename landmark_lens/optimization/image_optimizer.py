"""
Image resizing and re-encoding.

Sandi Metz Principles:
- Single Responsibility: Shrink images before upload
- Small methods: Decode, resize and encode isolated
- Dependency Injection: Execution strategy and tracker injected
"""

import asyncio
import io
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Callable, Optional, Protocol, Tuple

from PIL import Image, UnidentifiedImageError

from landmark_lens.exceptions import ImageOptimizationError
from landmark_lens.models.image import ImageFile
from landmark_lens.optimization.options import OptimizationConfig
from landmark_lens.optimization.performance_monitor import PerformanceTracker
from landmark_lens.utils.logger import get_logger

logger = get_logger(__name__)

QUALITY_FORMATS = ("JPEG", "WEBP")


class ExecutionStrategy(Protocol):
    """Runs CPU-bound work for the optimizer."""

    async def run(self, func: Callable[..., Any], *args: Any) -> Any:
        ...

    def shutdown(self) -> None:
        ...


class InlineExecution:
    """Runs work directly on the calling thread."""

    async def run(self, func: Callable[..., Any], *args: Any) -> Any:
        return func(*args)

    def shutdown(self) -> None:
        return None


class BackgroundExecution:
    """Runs work on a dedicated worker thread so the event loop stays responsive."""

    def __init__(self, max_workers: int = 1):
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="image-optimizer"
        )

    async def run(self, func: Callable[..., Any], *args: Any) -> Any:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self._executor, func, *args)

    def shutdown(self) -> None:
        self._executor.shutdown(wait=False)


@dataclass(frozen=True)
class OptimizedImage:
    """Optimizer output."""

    image: ImageFile
    compression_ratio: float


def compress_image_bytes(
    content: bytes, max_dimension: int, quality: float
) -> Tuple[bytes, str]:
    """
    Resize and re-encode encoded image bytes.

    Args:
        content: Encoded image
        max_dimension: Longest allowed edge in pixels
        quality: Encoder quality factor 0-1

    Returns:
        (encoded bytes, MIME type)

    Raises:
        ImageOptimizationError: If the image cannot be decoded or encoded
    """
    if not content:
        raise ImageOptimizationError("Failed to compress image: file is empty")

    try:
        with Image.open(io.BytesIO(content)) as source:
            source.load()
            image_format = source.format or "JPEG"
            image = source.copy()

        image.thumbnail((max_dimension, max_dimension), Image.Resampling.LANCZOS)

        output = io.BytesIO()
        if image_format in QUALITY_FORMATS:
            if image_format == "JPEG" and image.mode not in ("RGB", "L"):
                image = image.convert("RGB")
            image.save(output, image_format, quality=round(quality * 100), optimize=True)
        elif image_format == "PNG":
            image.save(output, image_format, optimize=True)
        else:
            image.save(output, image_format)
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as e:
        raise ImageOptimizationError(f"Failed to compress image: {e}") from e

    mime_type = Image.MIME.get(image_format, "application/octet-stream")
    return output.getvalue(), mime_type


class ImageOptimizer:
    """
    Shrinks images to the configured dimension and quality.

    Prefers a background worker; falls back to inline execution when the
    worker cannot be started.
    """

    def __init__(
        self,
        config: Optional[OptimizationConfig] = None,
        tracker: Optional[PerformanceTracker] = None,
        executor_factory: Callable[[], ExecutionStrategy] = BackgroundExecution,
    ):
        """
        Initialize optimizer.

        Args:
            config: Optimization configuration
            tracker: Optional tracker receiving processing times
            executor_factory: Builds the background execution strategy
        """
        self._config = config or OptimizationConfig()
        self._tracker = tracker
        self._executor_factory = executor_factory
        self._execution: ExecutionStrategy = self._init_execution()

    def _init_execution(self) -> ExecutionStrategy:
        if not self._config.enable_background_worker:
            return InlineExecution()

        try:
            return self._executor_factory()
        except (RuntimeError, OSError) as e:
            logger.warning("Background image worker unavailable, running inline", error=str(e))
            return InlineExecution()

    async def optimize(self, image: ImageFile) -> OptimizedImage:
        """
        Optimize an image for upload.

        Args:
            image: Source image

        Returns:
            Optimized image and new/old size ratio (1.0 when untouched)

        Raises:
            ImageOptimizationError: If the image cannot be processed
        """
        start = time.perf_counter()
        try:
            if (
                image.size <= self._config.max_image_bytes
                and not self._config.enable_image_compression
            ):
                return OptimizedImage(image=image, compression_ratio=1.0)

            content, mime_type = await self._execution.run(
                compress_image_bytes,
                image.content,
                self._config.max_dimension,
                self._config.compression_quality,
            )
            optimized = ImageFile(
                name=image.name,
                content=content,
                last_modified=image.last_modified,
                content_type=mime_type,
            )
            ratio = len(content) / image.size
            logger.debug(
                "Image optimized",
                name=image.name,
                original_bytes=image.size,
                optimized_bytes=len(content),
                ratio=round(ratio, 3),
            )
            return OptimizedImage(image=optimized, compression_ratio=ratio)
        finally:
            if self._tracker is not None:
                self._tracker.record(
                    "image_processing_ms", (time.perf_counter() - start) * 1000
                )

    def reconfigure(self, config: OptimizationConfig) -> None:
        """
        Apply new settings, restarting the worker if its toggle changed.

        Args:
            config: New optimization configuration
        """
        worker_changed = config.enable_background_worker != self._config.enable_background_worker
        self._config = config
        if worker_changed:
            self._execution.shutdown()
            self._execution = self._init_execution()

    @property
    def uses_background_worker(self) -> bool:
        """Check whether work runs off the event loop."""
        return not isinstance(self._execution, InlineExecution)

    def shutdown(self) -> None:
        """Release the worker."""
        self._execution.shutdown()
