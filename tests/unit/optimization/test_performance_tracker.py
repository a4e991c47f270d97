"""
Tests for performance tracking.
"""

import httpx
import pytest

from landmark_lens.optimization.performance_monitor import (
    FALLBACK_LATENCY_MS,
    RETENTION_MS,
    WINDOW_MS,
    PerformanceTracker,
)


class TestPerformanceTracker:
    """Test windowed samples and recommendations."""

    @pytest.fixture
    def tracker(self, clock) -> PerformanceTracker:
        """Create tracker on a fake clock."""
        return PerformanceTracker(clock=clock)

    def test_values_in_same_window_share_a_sample(self, tracker, clock):
        """Test one sample per minute."""
        tracker.record("api_call_ms", 100)
        clock.advance(WINDOW_MS - 1)
        tracker.record("image_processing_ms", 200)

        assert len(tracker.samples) == 1
        assert tracker.samples[0].api_call_ms == 100
        assert tracker.samples[0].image_processing_ms == 200

    def test_new_window_after_a_minute(self, tracker, clock):
        """Test windows roll over."""
        tracker.record("api_call_ms", 100)
        clock.advance(WINDOW_MS)
        tracker.record("api_call_ms", 300)

        assert len(tracker.samples) == 2

    def test_old_windows_pruned(self, tracker, clock):
        """Test retention of one hour."""
        tracker.record("api_call_ms", 100)
        clock.advance(RETENTION_MS)
        tracker.record("api_call_ms", 300)

        assert len(tracker.samples) == 1
        assert tracker.samples[0].api_call_ms == 300

    def test_unknown_metric(self, tracker):
        """Test metric names are validated."""
        with pytest.raises(ValueError):
            tracker.record("bogus", 1)

    def test_empty_stats(self, tracker):
        """Test zeros without samples."""
        stats = tracker.get_performance_stats()

        assert stats["windows"] == 0
        assert stats["recommendations"] == []

    def test_averages_and_recommendations(self, tracker, clock):
        """Test slow timings produce hints."""
        tracker.record("image_processing_ms", 2500)
        tracker.record("api_call_ms", 3500)
        tracker.record("network_latency_ms", 1500)
        clock.advance(WINDOW_MS)
        tracker.record("image_processing_ms", 2500)
        tracker.record("api_call_ms", 3500)
        tracker.record("network_latency_ms", 1500)

        stats = tracker.get_performance_stats(background_worker_enabled=False)

        assert stats["average_api_call_ms"] == 3500
        assert stats["windows"] == 2
        assert stats["recommendations"] == [
            "Consider enabling image compression to reduce processing time",
            "Enable request batching to improve API performance",
            "Enable aggressive caching due to slow network conditions",
            "Enable the background worker for better image processing performance",
        ]

    def test_fast_timings_have_no_recommendations(self, tracker):
        """Test healthy timings."""
        tracker.record("image_processing_ms", 50)
        tracker.record("api_call_ms", 300)

        assert tracker.get_performance_stats()["recommendations"] == []

    @pytest.mark.asyncio
    async def test_measure_records_on_error(self, tracker):
        """Test instrumentation survives failures."""
        with pytest.raises(RuntimeError):
            async with tracker.measure("api_call_ms"):
                raise RuntimeError("boom")

        assert len(tracker.samples) == 1

    @pytest.mark.asyncio
    async def test_network_latency_check(self, clock):
        """Test HEAD request latency is recorded."""
        methods = []

        def handler(request: httpx.Request) -> httpx.Response:
            methods.append(request.method)
            return httpx.Response(200)

        tracker = PerformanceTracker(
            clock=clock, http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler))
        )

        latency = await tracker.measure_network_latency("https://latency.test")

        assert methods == ["HEAD"]
        assert latency >= 0
        assert len(tracker.samples) == 1

    @pytest.mark.asyncio
    async def test_network_latency_check_failure(self, clock):
        """Test failed request returns the conservative estimate."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("offline")

        tracker = PerformanceTracker(
            clock=clock, http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler))
        )

        assert await tracker.measure_network_latency("https://latency.test") == FALLBACK_LATENCY_MS
        assert tracker.samples == []

    def test_reset(self, tracker):
        """Test samples are dropped."""
        tracker.record("api_call_ms", 1)
        tracker.reset()

        assert tracker.samples == []
