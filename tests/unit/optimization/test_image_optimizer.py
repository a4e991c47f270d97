"""
Tests for image optimization.
"""

import io

import pytest
from PIL import Image

from landmark_lens.exceptions import ImageOptimizationError
from landmark_lens.models.image import ImageFile
from landmark_lens.optimization.image_optimizer import (
    BackgroundExecution,
    ImageOptimizer,
    InlineExecution,
    compress_image_bytes,
)
from landmark_lens.optimization.options import OptimizationConfig
from landmark_lens.optimization.performance_monitor import PerformanceTracker


def dimensions(content: bytes):
    with Image.open(io.BytesIO(content)) as image:
        return image.size, image.format


class TestCompressImageBytes:
    """Test resize and re-encode."""

    def test_jpeg_resized_preserving_aspect(self, image_bytes):
        """Test longest edge is clamped."""
        content, mime_type = compress_image_bytes(image_bytes(400, 200), 100, 0.8)

        assert dimensions(content) == ((100, 50), "JPEG")
        assert mime_type == "image/jpeg"

    def test_small_image_not_enlarged(self, image_bytes):
        """Test images under the limit keep their size."""
        content, _ = compress_image_bytes(image_bytes(40, 30), 1920, 0.8)

        assert dimensions(content)[0] == (40, 30)

    def test_png_stays_png(self, image_bytes):
        """Test format is preserved."""
        content, mime_type = compress_image_bytes(image_bytes(300, 300, "PNG"), 150, 0.8)

        assert dimensions(content) == ((150, 150), "PNG")
        assert mime_type == "image/png"

    def test_empty_input(self):
        """Test empty payload."""
        with pytest.raises(ImageOptimizationError, match="empty"):
            compress_image_bytes(b"", 100, 0.8)

    def test_undecodable_input(self):
        """Test garbage payload."""
        with pytest.raises(ImageOptimizationError):
            compress_image_bytes(b"definitely not an image", 100, 0.8)

    def test_oversized_pixel_count(self, image_bytes, monkeypatch):
        """Test images beyond the decoder pixel limit are reported as optimization errors."""
        monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 100)

        with pytest.raises(ImageOptimizationError):
            compress_image_bytes(image_bytes(64, 48), 16, 0.8)


class TestImageOptimizer:
    """Test the optimizer wrapper."""

    @pytest.fixture
    def tracker(self, clock) -> PerformanceTracker:
        """Create tracker on a fake clock."""
        return PerformanceTracker(clock=clock)

    @pytest.mark.asyncio
    async def test_optimize_records_timing(self, image_bytes, tracker):
        """Test output metadata and processing sample."""
        optimizer = ImageOptimizer(
            OptimizationConfig(max_dimension=64, enable_background_worker=False),
            tracker=tracker,
        )
        source = ImageFile(name="big.jpg", content=image_bytes(640, 480), last_modified=42)

        optimized = await optimizer.optimize(source)

        assert optimized.image.name == "big.jpg"
        assert optimized.image.last_modified == 42
        assert optimized.compression_ratio < 1.0
        assert dimensions(optimized.image.content)[0] == (64, 48)
        assert len(tracker.samples) == 1

    @pytest.mark.asyncio
    async def test_untouched_when_small_and_compression_off(self, image_bytes):
        """Test no-op path."""
        optimizer = ImageOptimizer(
            OptimizationConfig(enable_image_compression=False, enable_background_worker=False)
        )
        source = ImageFile(name="small.jpg", content=image_bytes())

        optimized = await optimizer.optimize(source)

        assert optimized.image is source
        assert optimized.compression_ratio == 1.0

    @pytest.mark.asyncio
    async def test_oversize_compressed_even_when_compression_off(self, image_bytes):
        """Test the size ceiling forces a re-encode."""
        content = image_bytes(200, 200)
        optimizer = ImageOptimizer(
            OptimizationConfig(
                enable_image_compression=False,
                max_image_bytes=len(content) - 1,
                max_dimension=50,
                enable_background_worker=False,
            )
        )

        optimized = await optimizer.optimize(ImageFile(name="a.jpg", content=content))

        assert dimensions(optimized.image.content)[0] == (50, 50)

    @pytest.mark.asyncio
    async def test_background_worker(self, image_bytes):
        """Test work on the worker thread."""
        optimizer = ImageOptimizer(OptimizationConfig(max_dimension=32))
        try:
            optimized = await optimizer.optimize(
                ImageFile(name="a.jpg", content=image_bytes(128, 128))
            )
        finally:
            optimizer.shutdown()

        assert optimizer.uses_background_worker is True
        assert dimensions(optimized.image.content)[0] == (32, 32)

    def test_worker_failure_falls_back_inline(self):
        """Test inline execution when the worker cannot start."""

        def broken_factory():
            raise RuntimeError("can't start new thread")

        optimizer = ImageOptimizer(OptimizationConfig(), executor_factory=broken_factory)

        assert optimizer.uses_background_worker is False

    def test_reconfigure_switches_execution(self):
        """Test toggling the worker."""
        optimizer = ImageOptimizer(
            OptimizationConfig(enable_background_worker=False),
            executor_factory=BackgroundExecution,
        )
        assert optimizer.uses_background_worker is False

        optimizer.reconfigure(OptimizationConfig(enable_background_worker=True))
        assert optimizer.uses_background_worker is True

        optimizer.shutdown()

    @pytest.mark.asyncio
    async def test_failure_still_records_timing(self, tracker):
        """Test the sample is recorded when decoding fails."""
        optimizer = ImageOptimizer(
            OptimizationConfig(enable_background_worker=False),
            tracker=tracker,
            executor_factory=InlineExecution,
        )

        with pytest.raises(ImageOptimizationError):
            await optimizer.optimize(ImageFile(name="bad.jpg", content=b"nope"))

        assert len(tracker.samples) == 1
