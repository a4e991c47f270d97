"""
Tests for error classification.
"""

import asyncio

import httpx
import pytest

from landmark_lens.exceptions import (
    EnrichmentError,
    FallbackError,
    ImageSourceError,
    LandmarkNotFoundError,
    RecognitionTimeoutError,
    VisionAPIError,
    VisionConfigurationError,
)
from landmark_lens.models.error import ErrorCategory, ErrorCode, ErrorSeverity
from landmark_lens.pipeline.error_classifier import ErrorClassifier


class TestClassify:
    """Test category assignment."""

    @pytest.fixture
    def classifier(self) -> ErrorClassifier:
        """Create classifier."""
        return ErrorClassifier()

    def test_failed_to_fetch_is_network(self, classifier: ErrorClassifier):
        """Test browser-style fetch failure."""
        details = classifier.classify("Failed to fetch")

        assert details.category == ErrorCategory.NETWORK
        assert details.code == ErrorCode.NETWORK_ERROR
        assert details.recoverable is True

    def test_rate_limit_waits_longer_than_network(self, classifier: ErrorClassifier):
        """Test rate limits get a much longer retry delay."""
        network = classifier.classify("Failed to fetch")
        rate_limited = classifier.classify("429 rate limit exceeded")

        assert rate_limited.category == ErrorCategory.API
        assert rate_limited.code == ErrorCode.RATE_LIMIT_EXCEEDED
        assert classifier.get_retry_delay(rate_limited) == 60000
        assert classifier.get_retry_delay(network) == 2000

    def test_transport_exception_is_network(self, classifier: ErrorClassifier):
        """Test httpx transport failures."""
        details = classifier.classify(httpx.ConnectError("boom"))

        assert details.category == ErrorCategory.NETWORK
        assert details.context["error_type"] == "ConnectError"

    def test_timeout_is_flagged(self, classifier: ErrorClassifier):
        """Test timeouts are network errors marked as such."""
        details = classifier.classify(RecognitionTimeoutError("Recognition timeout after 10 ms"))

        assert details.category == ErrorCategory.NETWORK
        assert details.context["timeout"] is True

    def test_asyncio_timeout_without_message(self, classifier: ErrorClassifier):
        """Test empty-message exceptions fall back to the type name."""
        details = classifier.classify(asyncio.TimeoutError())

        assert details.category == ErrorCategory.NETWORK
        assert details.message == "TimeoutError"

    def test_vision_api_error(self, classifier: ErrorClassifier):
        """Test vision failures are recoverable API errors."""
        details = classifier.classify(
            VisionAPIError("Google Vision API error: 500 Internal Server Error")
        )

        assert details.category == ErrorCategory.API
        assert details.code == ErrorCode.VISION_API_ERROR
        assert details.recoverable is True
        assert details.severity == ErrorSeverity.HIGH

    def test_missing_vision_key_not_recoverable(self, classifier: ErrorClassifier):
        """Test missing credential is critical."""
        details = classifier.classify(
            VisionConfigurationError("Google Vision API key is not configured")
        )

        assert details.code == ErrorCode.VISION_API_ERROR
        assert details.recoverable is False
        assert details.severity == ErrorSeverity.CRITICAL

    def test_enrichment_error(self, classifier: ErrorClassifier):
        """Test Wikipedia failures."""
        details = classifier.classify(EnrichmentError("Failed to search Wikipedia: 500"))

        assert details.category == ErrorCategory.API
        assert details.code == ErrorCode.WIKIPEDIA_API_ERROR

    def test_generic_api_error(self, classifier: ErrorClassifier):
        """Test API keywords without a known service."""
        details = classifier.classify("503 service unavailable")

        assert details.code == ErrorCode.API_ERROR
        assert classifier.get_retry_delay(details) == 5000

    def test_permission(self, classifier: ErrorClassifier):
        """Test permission refusals."""
        details = classifier.classify("User denied Geolocation")

        assert details.category == ErrorCategory.PERMISSION
        assert details.severity == ErrorSeverity.HIGH

    def test_validation(self, classifier: ErrorClassifier):
        """Test unreadable input."""
        details = classifier.classify(ImageSourceError("Invalid image: file is empty"))

        assert details.category == ErrorCategory.VALIDATION
        assert details.severity == ErrorSeverity.LOW

    def test_user(self, classifier: ErrorClassifier):
        """Test no-landmark outcomes."""
        low = classifier.classify(
            LandmarkNotFoundError("Low confidence: no landmark above threshold")
        )
        fallback = classifier.classify(
            FallbackError("Fallback recognition failed: no landmark found near current position")
        )

        assert low.category == ErrorCategory.USER
        assert fallback.category == ErrorCategory.USER
        assert low.code == ErrorCode.NO_LANDMARK_DETECTED

    def test_unknown_is_system(self, classifier: ErrorClassifier):
        """Test anything unrecognised."""
        details = classifier.classify(KeyError("x"))

        assert details.category == ErrorCategory.SYSTEM
        assert classifier.get_retry_delay(details) == 3000

    def test_context_is_attached(self, classifier: ErrorClassifier):
        """Test caller context is kept."""
        details = classifier.classify("Failed to fetch", {"operation": "recognize"})

        assert details.context["operation"] == "recognize"

    def test_default_retry_delay(self):
        """Test codes without a specific delay."""
        classifier = ErrorClassifier(default_retry_delay_ms=1234)
        details = classifier.classify("no landmark detected")

        assert classifier.get_retry_delay(details) == 1234


class TestErrorLog:
    """Test the bounded error log."""

    def test_log_is_bounded_newest_first(self):
        """Test oldest entries are dropped."""
        classifier = ErrorClassifier(max_log_size=2)
        classifier.classify("first network error")
        classifier.classify("second network error")
        classifier.classify("third network error")

        messages = [details.message for details in classifier.recent_errors]
        assert messages == ["third network error", "second network error"]

    def test_sink_receives_errors(self):
        """Test injected sink."""
        received = []
        classifier = ErrorClassifier(sink=received.append)

        classifier.classify("Failed to fetch")

        assert len(received) == 1

    def test_logging_disabled(self):
        """Test nothing is recorded when disabled."""
        received = []
        classifier = ErrorClassifier(enable_logging=False, sink=received.append)

        classifier.classify("Failed to fetch")

        assert classifier.recent_errors == []
        assert received == []

    def test_stats(self):
        """Test counts by category and severity."""
        classifier = ErrorClassifier()
        classifier.classify("Failed to fetch")
        classifier.classify("network down")
        classifier.classify("no landmark detected")

        stats = classifier.get_error_stats()

        assert stats["total_errors"] == 3
        assert stats["errors_by_category"] == {"network": 2, "user": 1}
        assert stats["errors_by_severity"] == {"medium": 2, "low": 1}
        assert len(stats["recent_errors"]) == 3

    def test_clear_log(self):
        """Test clearing the log."""
        classifier = ErrorClassifier()
        classifier.classify("Failed to fetch")
        classifier.clear_log()

        assert classifier.get_error_stats()["total_errors"] == 0


class TestPresentation:
    """Test UI formatting and suggestions."""

    def test_format_for_ui_bounds_suggestions(self):
        """Test at most three suggestions are shown."""
        classifier = ErrorClassifier()
        details = classifier.classify("no landmark detected")

        display = classifier.format_for_ui(details)

        assert len(details.suggestions) == 4
        assert len(display.suggestions) == 3
        assert display.title == "No Landmark Found"
        assert display.can_retry is True
        assert display.retry_after_ms == 1000

    def test_unrecoverable_has_no_retry_hint(self):
        """Test retry affordance is hidden."""
        classifier = ErrorClassifier()
        details = classifier.classify(
            VisionConfigurationError("Google Vision API key is not configured")
        )

        display = classifier.format_for_ui(details)

        assert display.can_retry is False
        assert display.retry_after_ms is None

    def test_short_suggestions(self):
        """Test per-code suggestion lists."""
        assert ErrorClassifier.get_error_suggestions(ErrorCode.NETWORK_ERROR)[0] == (
            "Check your internet connection"
        )
        assert ErrorClassifier.get_error_suggestions(ErrorCode.SYSTEM_ERROR)[0] == (
            "Try refreshing the page"
        )


class TestWithRetry:
    """Test classified retry helper."""

    @pytest.mark.asyncio
    async def test_retries_recoverable(self, fake_sleep):
        """Test recoverable errors wait the category delay."""
        classifier = ErrorClassifier()
        calls = 0

        async def flaky():
            nonlocal calls
            calls += 1
            if calls < 3:
                raise ConnectionError("connection reset")
            return "ok"

        assert await classifier.with_retry(flaky, sleep=fake_sleep) == "ok"
        assert fake_sleep.calls == [2.0, 2.0]

    @pytest.mark.asyncio
    async def test_stops_on_unrecoverable(self, fake_sleep):
        """Test unrecoverable errors are raised immediately."""
        classifier = ErrorClassifier()
        calls = 0

        async def broken():
            nonlocal calls
            calls += 1
            raise VisionConfigurationError("Google Vision API key is not configured")

        with pytest.raises(VisionConfigurationError):
            await classifier.with_retry(broken, sleep=fake_sleep)

        assert calls == 1
        assert fake_sleep.calls == []

    @pytest.mark.asyncio
    async def test_raises_after_last_attempt(self, fake_sleep):
        """Test attempts are bounded."""
        classifier = ErrorClassifier()

        async def failing():
            raise ConnectionError("offline")

        with pytest.raises(ConnectionError):
            await classifier.with_retry(failing, max_attempts=2, sleep=fake_sleep)

        assert len(fake_sleep.calls) == 1
