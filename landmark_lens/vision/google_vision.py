"""
Google Cloud Vision landmark detection client.

Sandi Metz Principles:
- Single Responsibility: Vision API interaction
- Small methods: Encoding, request and parsing isolated
- Dependency Injection: API key and HTTP client injected
"""

import base64
import time
from typing import Any, Dict, List, Optional

import httpx

from landmark_lens.config import config
from landmark_lens.exceptions import ImageSourceError, VisionAPIError, VisionConfigurationError
from landmark_lens.models.image import ImageFile, ImageSource
from landmark_lens.models.landmark import Coordinates, DetectedLandmark, LandmarkSource
from landmark_lens.utils.logger import get_logger, log_vision_call
from landmark_lens.vision.provider import BaseVisionProvider

logger = get_logger(__name__)

LANDMARK_KEYWORDS = (
    "temple",
    "fort",
    "palace",
    "monument",
    "hill",
    "mountain",
    "sanctuary",
    "park",
    "beach",
    "lake",
    "waterfall",
)

# Text-derived candidates are never trusted as much as a real detection
TEXT_FALLBACK_CONFIDENCE = 60.0
TEXT_MAX_RESULTS = 5

# 1x1 PNG used to validate the API key
KEY_CHECK_IMAGE = (
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mNkYPhfDwAChwGA60e6kgAAAABJRU5ErkJggg=="
)


class GoogleVisionClient(BaseVisionProvider):
    """
    Google Vision implementation of the vision provider.

    Requests landmark and text detection in a single annotate call.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        api_url: Optional[str] = None,
        confidence_threshold: Optional[float] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        timeout_seconds: Optional[float] = None,
    ):
        """
        Initialize Vision client.

        Args:
            api_key: Google Vision API key (uses config if None)
            api_url: Annotate endpoint (uses config if None)
            confidence_threshold: Raw score filter on a 0-1 scale (default 0.7)
            http_client: Optional shared HTTP client (created lazily if None)
            timeout_seconds: Request timeout (uses config if None)
        """
        self._api_key = api_key if api_key is not None else config.google_vision_api_key
        self._api_url = api_url or config.google_vision_api_url
        self._confidence_threshold = (
            confidence_threshold
            if confidence_threshold is not None
            else config.vision_confidence_threshold
        )
        self._timeout = timeout_seconds or config.vision_request_timeout_seconds
        self._client = http_client
        self._owns_client = http_client is None

    async def detect_landmarks(
        self, image_source: ImageSource, max_results: int = 5
    ) -> List[DetectedLandmark]:
        """
        Detect landmarks using Google Vision.

        Args:
            image_source: Image file or URL
            max_results: Maximum landmark annotations to request

        Returns:
            Candidates ordered by confidence, highest first

        Raises:
            VisionConfigurationError: If no API key is configured
            ImageSourceError: If the file is empty or the image URL answers 4xx
            httpx.HTTPError: If the image host is unreachable or answers 5xx
            VisionAPIError: On non-2xx status or an error payload
        """
        if not self._api_key:
            raise VisionConfigurationError("Google Vision API key is not configured")

        start = time.perf_counter()
        content = await self._encode_image(image_source)
        body = self._build_request(content, max_results)

        response = await self._get_client().post(
            self._api_url, params={"key": self._api_key}, json=body
        )
        if not response.is_success:
            raise VisionAPIError(
                f"Google Vision API error: {response.status_code} {response.reason_phrase}"
            )

        payload = response.json()
        first = (payload.get("responses") or [{}])[0]
        if first.get("error"):
            raise VisionAPIError(f"Vision API error: {first['error'].get('message', 'unknown')}")

        landmarks = self._process_response(first)
        log_vision_call(
            provider=self.get_name(),
            landmarks=len(landmarks),
            duration_ms=(time.perf_counter() - start) * 1000,
        )
        return landmarks

    async def _encode_image(self, image_source: ImageSource) -> str:
        """
        Encode image content as base64.

        Args:
            image_source: Image file or URL

        Returns:
            Base64 string without a data-URL prefix
        """
        if isinstance(image_source, ImageFile):
            if not image_source.content:
                raise ImageSourceError("Invalid image: file is empty")
            return base64.b64encode(image_source.content).decode("ascii")

        # Transport errors and 5xx responses propagate as retryable failures
        response = await self._get_client().get(image_source, follow_redirects=True)
        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            if e.response.status_code >= 500:
                raise
            raise ImageSourceError(f"Failed to convert URL to base64: {e}") from e

        return base64.b64encode(response.content).decode("ascii")

    @staticmethod
    def _build_request(content: str, max_results: int) -> Dict[str, Any]:
        return {
            "requests": [
                {
                    "image": {"content": content},
                    "features": [
                        {"type": "LANDMARK_DETECTION", "maxResults": max_results},
                        {"type": "TEXT_DETECTION", "maxResults": TEXT_MAX_RESULTS},
                    ],
                }
            ]
        }

    def _process_response(self, response: Dict[str, Any]) -> List[DetectedLandmark]:
        """
        Normalize annotations into ranked candidates.

        Args:
            response: First element of the annotate "responses" array

        Returns:
            Candidates ordered by confidence, highest first
        """
        landmarks: List[DetectedLandmark] = []

        for annotation in response.get("landmarkAnnotations") or []:
            score = float(annotation.get("score", 0.0))
            if score < self._confidence_threshold:
                continue

            locations = annotation.get("locations") or []
            lat_lng = locations[0].get("latLng") if locations else None
            if not lat_lng:
                continue

            landmarks.append(
                DetectedLandmark(
                    name=annotation.get("description") or "Unknown Landmark",
                    confidence=min(100.0, max(0.0, round(score * 100))),
                    coordinates=Coordinates(
                        lat=lat_lng.get("latitude", 0.0), lng=lat_lng.get("longitude", 0.0)
                    ),
                    source=LandmarkSource.GOOGLE_VISION,
                )
            )

        if not landmarks and response.get("textAnnotations"):
            text = response["textAnnotations"][0].get("description") or ""
            candidate = self._extract_landmark_from_text(text)
            if candidate:
                landmarks.append(candidate)

        return sorted(landmarks, key=lambda landmark: landmark.confidence, reverse=True)

    @staticmethod
    def _extract_landmark_from_text(text: str) -> Optional[DetectedLandmark]:
        """
        Synthesize a candidate from recognized text containing a landmark keyword.

        Args:
            text: Full recognized text

        Returns:
            Coordinate-less text-derived candidate, or None
        """
        lower = text.lower()
        if not any(keyword in lower for keyword in LANDMARK_KEYWORDS):
            return None

        first_line = text.strip().split("\n")[0].strip()
        logger.debug("Landmark inferred from text", name=first_line)
        return DetectedLandmark(
            name=first_line or "Unknown Location",
            confidence=TEXT_FALLBACK_CONFIDENCE,
            coordinates=None,
            source=LandmarkSource.TEXT_FALLBACK,
        )

    async def validate_api_key(self) -> bool:
        """
        Validate the key with a one-pixel image.

        Returns:
            True if the request succeeds
        """
        if not self._api_key:
            return False

        body = {
            "requests": [
                {
                    "image": {"content": KEY_CHECK_IMAGE},
                    "features": [{"type": "LANDMARK_DETECTION", "maxResults": 1}],
                }
            ]
        }
        try:
            response = await self._get_client().post(
                self._api_url, params={"key": self._api_key}, json=body
            )
            return response.is_success
        except httpx.HTTPError as e:
            logger.warning("Vision API key validation failed", error=str(e))
            return False

    def set_confidence_threshold(self, threshold: float) -> None:
        """
        Set raw score filter.

        Args:
            threshold: Value between 0 and 1; out-of-range values are ignored
        """
        if 0.0 <= threshold <= 1.0:
            self._confidence_threshold = threshold
            logger.info("Updated vision confidence threshold", threshold=threshold)

    def get_confidence_threshold(self) -> float:
        """Get raw score filter."""
        return self._confidence_threshold

    def get_name(self) -> str:
        """
        Get provider name.

        Returns:
            Provider name
        """
        return "google_vision"

    def _get_client(self) -> httpx.AsyncClient:
        """
        Get or create HTTP client.

        Returns:
            Async HTTP client
        """
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=httpx.Timeout(self._timeout))
        return self._client

    async def close(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None
