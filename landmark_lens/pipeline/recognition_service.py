"""
Landmark recognition orchestration.

Runs cache lookup, recognition with retries, enrichment and the
position-based fallback, and turns every failure into classified
error details.

Sandi Metz Principles:
- Single Responsibility: Coordinate the recognition pipeline
- Dependency Injection: Every collaborator is injected
- Small methods: One pipeline stage per method
"""

import asyncio
import time
from typing import Awaitable, Callable, List, Optional

from landmark_lens.cache.specialized import RecognitionCache
from landmark_lens.config import config
from landmark_lens.enrichment.wikipedia import WikipediaClient
from landmark_lens.exceptions import (
    EnrichmentError,
    FallbackError,
    ImageOptimizationError,
    ImageSourceError,
    LandmarkNotFoundError,
    RecognitionFailedError,
    VisionConfigurationError,
)
from landmark_lens.models.error import ErrorCategory
from landmark_lens.models.image import ImageFile, ImageSource
from landmark_lens.models.landmark import Coordinates, DetectedLandmark, LandmarkSource
from landmark_lens.models.location import EnrichedLocationData
from landmark_lens.models.recognition import (
    ProcessingMetrics,
    RecognitionOptions,
    RecognitionResult,
    ServiceStatus,
)
from landmark_lens.optimization.optimizer import PerformanceOptimizer
from landmark_lens.optimization.request_queue import RequestPriority
from landmark_lens.pipeline.error_classifier import ErrorClassifier
from landmark_lens.pipeline.geolocation import GeolocationProvider, locate_within
from landmark_lens.pipeline.retry import RetryPolicy
from landmark_lens.pipeline.timeout_handler import TimeoutHandler
from landmark_lens.utils.hasher import generate_cache_key
from landmark_lens.utils.logger import (
    get_logger,
    log_cache_hit,
    log_cache_miss,
    log_recognition,
)
from landmark_lens.vision.provider import BaseVisionProvider

logger = get_logger(__name__)

LOW_CONFIDENCE_MESSAGE = "Low confidence: no landmark above threshold"
NO_FALLBACK_MESSAGE = "Fallback recognition failed: no landmark found near current position"
FALLBACK_SEARCH_LIMIT = 5

# Failures a repeated identical request cannot fix
NON_RETRYABLE_ERRORS = (VisionConfigurationError, ImageSourceError)


def default_options() -> RecognitionOptions:
    """Build recognition options from application config."""
    return RecognitionOptions(
        max_retries=config.max_retries,
        confidence_threshold=config.confidence_threshold,
        enable_fallback=config.enable_fallback,
        enable_cache=config.enable_cache,
        timeout_ms=config.timeout_ms,
    )


class LandmarkRecognitionService:
    """
    Identifies landmarks in images and attaches encyclopedic context.

    Each call checks the result cache, then tries recognition up to
    max_retries + 1 times with linear backoff, then falls back to a
    proximity search around the caller's position. The whole call is
    bounded by timeout_ms.
    """

    def __init__(
        self,
        vision: BaseVisionProvider,
        enrichment: WikipediaClient,
        cache: Optional[RecognitionCache] = None,
        classifier: Optional[ErrorClassifier] = None,
        geolocation: Optional[GeolocationProvider] = None,
        optimizer: Optional[PerformanceOptimizer] = None,
        retry_base_delay_seconds: Optional[float] = None,
        fallback_confidence: Optional[float] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        """
        Initialize recognition service.

        Args:
            vision: Landmark detection provider
            enrichment: Wikipedia client
            cache: Result cache (in-memory RecognitionCache if None)
            classifier: Error classifier (new instance if None)
            geolocation: Position source for the fallback (no fallback position if None)
            optimizer: Optional image optimizer and request tracker
            retry_base_delay_seconds: Backoff unit (uses config if None)
            fallback_confidence: Confidence given to fallback results (uses config if None)
            sleep: Awaitable sleep used for backoff
        """
        self._vision = vision
        self._enrichment = enrichment
        self._cache = cache if cache is not None else RecognitionCache()
        self._classifier = classifier or ErrorClassifier()
        self._geolocation = geolocation
        self._optimizer = optimizer
        self._base_delay = (
            retry_base_delay_seconds
            if retry_base_delay_seconds is not None
            else config.retry_base_delay_seconds
        )
        self._fallback_confidence = (
            fallback_confidence if fallback_confidence is not None else config.fallback_confidence
        )
        self._sleep = sleep
        self._timeout_handler = TimeoutHandler(config.timeout_ms)
        self._metrics = ProcessingMetrics()

    async def recognize_landmark(
        self, image_source: ImageSource, options: Optional[RecognitionOptions] = None
    ) -> RecognitionResult:
        """
        Recognize the landmark in an image.

        Args:
            image_source: Image file or URL
            options: Per-call options (config defaults if None)

        Returns:
            Result; failures carry classified error details
        """
        options = options or default_options()
        start = time.perf_counter()
        cache_key = generate_cache_key(image_source)

        if options.enable_cache:
            cached = self._cache.get_landmark_result(cache_key)
            if cached is not None:
                log_cache_hit(cache_key, cache="recognition")
                result = cached.model_copy(
                    update={"cache_used": True, "processing_time_ms": self._elapsed_ms(start)}
                )
                self._record(result, cache_hit=True)
                return result
            log_cache_miss(cache_key, cache="recognition")

        try:
            source = await self._prepare_source(image_source)
            outcome = await self._timeout_handler.execute(
                lambda: self._recognize_with_retries(source, options),
                timeout_ms=options.timeout_ms,
            )
        except Exception as e:
            details = self._classifier.classify(
                e, {"operation": "recognize_landmark", "cache_key": cache_key}
            )
            result = RecognitionResult.failure(details, self._elapsed_ms(start))
            self._record(result)
            return result

        result = outcome.model_copy(
            update={"processing_time_ms": self._elapsed_ms(start), "cache_used": False}
        )
        if options.enable_cache:
            self._cache.set_landmark_result(cache_key, result, result.confidence)

        self._record(result)
        return result

    async def recognize_landmark_or_raise(
        self, image_source: ImageSource, options: Optional[RecognitionOptions] = None
    ) -> RecognitionResult:
        """
        Recognize the landmark in an image, raising on failure.

        Raises:
            RecognitionFailedError: Carrying the classified error details
        """
        result = await self.recognize_landmark(image_source, options)
        if not result.success:
            raise RecognitionFailedError(result.error_details)
        return result

    async def _prepare_source(self, image_source: ImageSource) -> ImageSource:
        """Shrink file sources; an optimization failure keeps the original."""
        if self._optimizer is None or not isinstance(image_source, ImageFile):
            return image_source

        try:
            optimized = await self._optimizer.optimize_image(image_source)
        except ImageOptimizationError as e:
            logger.warning("Image optimization skipped", name=image_source.name, error=str(e))
            return image_source
        return optimized.image

    async def _recognize_with_retries(
        self, source: ImageSource, options: RecognitionOptions
    ) -> RecognitionResult:
        """
        Try recognition until a confident candidate appears or attempts run out.

        Raises:
            Exception: The last recognition failure when nothing else succeeded
        """
        policy = RetryPolicy(max_retries=options.max_retries, base_delay_seconds=self._base_delay)
        last_error: Optional[Exception] = None

        for attempt in range(1, policy.total_attempts + 1):
            try:
                landmarks = await self._detect(source)
            except Exception as e:
                last_error = e
                logger.warning(
                    "Recognition attempt failed",
                    attempt=attempt,
                    attempts=policy.total_attempts,
                    error=str(e),
                )
                if isinstance(e, NON_RETRYABLE_ERRORS):
                    break
                if policy.should_retry(attempt):
                    await self._sleep(policy.delay_for(attempt))
                continue

            best = landmarks[0] if landmarks else None
            if best is not None and best.confidence >= options.confidence_threshold:
                return await self._success(best, fallback_used=False)

            logger.info(
                "No confident landmark",
                attempt=attempt,
                best_confidence=best.confidence if best else None,
                threshold=options.confidence_threshold,
            )

        if options.enable_fallback:
            try:
                return await self._try_fallback()
            except (FallbackError, EnrichmentError) as e:
                logger.info("Fallback recognition failed", error=str(e))
                if last_error is None:
                    raise

        if last_error is not None:
            raise last_error
        raise LandmarkNotFoundError(LOW_CONFIDENCE_MESSAGE)

    async def _detect(self, source: ImageSource) -> List[DetectedLandmark]:
        if self._optimizer is None:
            return await self._vision.detect_landmarks(source, config.vision_max_results)
        return await self._optimizer.optimize_api_request(
            lambda: self._vision.detect_landmarks(source, config.vision_max_results),
            RequestPriority.HIGH,
        )

    async def _success(self, landmark: DetectedLandmark, fallback_used: bool) -> RecognitionResult:
        return RecognitionResult(
            success=True,
            landmark=landmark,
            location_data=await self._enrich(landmark),
            confidence=landmark.confidence,
            fallback_used=fallback_used,
        )

    async def _enrich(self, landmark: DetectedLandmark) -> Optional[EnrichedLocationData]:
        """Fetch context; any failure leaves the result without location data."""
        try:
            return await self._enrichment.get_enriched_location_data(
                landmark.name, landmark.coordinates
            )
        except Exception as e:
            logger.warning("Enrichment skipped", landmark=landmark.name, error=str(e))
            self._classifier.classify(e, {"operation": "enrich", "landmark": landmark.name})
            return None

    async def _try_fallback(self) -> RecognitionResult:
        """
        Pick the closest encyclopedia page to the caller's position.

        Raises:
            FallbackError: If no position or no nearby page is available
            EnrichmentError: If the proximity search fails
        """
        position: Optional[Coordinates] = await locate_within(
            self._geolocation, config.geolocation_timeout_seconds
        )
        if position is None:
            raise FallbackError(NO_FALLBACK_MESSAGE)

        nearby = await self._enrichment.search_by_coordinates(
            position.lat, position.lng, radius=config.fallback_radius_m, limit=FALLBACK_SEARCH_LIMIT
        )
        if not nearby:
            raise FallbackError(NO_FALLBACK_MESSAGE)

        closest = nearby[0]
        landmark = DetectedLandmark(
            name=closest.title,
            confidence=self._fallback_confidence,
            coordinates=closest.coordinates,
            source=LandmarkSource.GPS_FALLBACK,
        )
        logger.info("Fallback landmark selected", name=landmark.name, distance_m=closest.dist)
        return await self._success(landmark, fallback_used=True)

    def _record(self, result: RecognitionResult, cache_hit: bool = False) -> None:
        """Update rolling counters and the running average duration."""
        metrics = self._metrics
        metrics.total_requests += 1
        if cache_hit:
            metrics.cache_hits += 1

        if result.success:
            metrics.successful_detections += 1
        else:
            metrics.failed_detections += 1
            if result.error_details and result.error_details.category in (
                ErrorCategory.API,
                ErrorCategory.NETWORK,
            ):
                metrics.api_errors += 1

        metrics.average_processing_time_ms = (
            metrics.average_processing_time_ms * (metrics.total_requests - 1)
            + result.processing_time_ms
        ) / metrics.total_requests

        if self._optimizer is not None:
            self._optimizer.record_recognition(
                result.processing_time_ms,
                metrics.cache_hits / metrics.total_requests * 100,
            )

        log_recognition(
            success=result.success,
            duration_ms=result.processing_time_ms,
            landmark=result.landmark.name if result.landmark else None,
            cache_used=cache_hit,
            fallback_used=result.fallback_used,
            error_code=result.error_details.code.value if result.error_details else None,
        )

    @staticmethod
    def _elapsed_ms(start: float) -> float:
        return (time.perf_counter() - start) * 1000

    async def validate_services(self) -> ServiceStatus:
        """
        Check both upstream capabilities concurrently.

        Returns:
            Readiness of vision and enrichment
        """
        vision_ready, enrichment_ready = await asyncio.gather(
            self._vision.validate_api_key(), self._enrichment.is_service_available()
        )
        return ServiceStatus(
            vision_capability_ready=vision_ready, enrichment_capability_ready=enrichment_ready
        )

    def get_metrics(self) -> ProcessingMetrics:
        """Get a copy of the rolling counters."""
        return self._metrics.model_copy()

    def get_success_rate(self) -> float:
        """
        Get success rate.

        Returns:
            Percentage of successful calls (0 when nothing ran)
        """
        if self._metrics.total_requests == 0:
            return 0.0
        return self._metrics.successful_detections / self._metrics.total_requests * 100

    def clear_cache(self) -> None:
        """Drop every cached recognition result."""
        self._cache.clear()

    def set_confidence_threshold(self, threshold: float) -> None:
        """
        Set the vision provider's score filter.

        Args:
            threshold: Percentage 0-100
        """
        self._vision.set_confidence_threshold(threshold / 100)

    @property
    def classifier(self) -> ErrorClassifier:
        """Get the error classifier."""
        return self._classifier

    @property
    def cache(self) -> RecognitionCache:
        """Get the result cache."""
        return self._cache
