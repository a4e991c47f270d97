"""
Pytest configuration and fixtures.

Provides common fixtures for testing.
"""

import io
from typing import List
from unittest.mock import AsyncMock, Mock

import pytest
from PIL import Image

from landmark_lens.config import AppConfig
from landmark_lens.enrichment.wikipedia import WikipediaClient
from landmark_lens.models.image import ImageFile
from landmark_lens.models.landmark import Coordinates, DetectedLandmark
from landmark_lens.models.location import EnrichedLocationData
from landmark_lens.vision.provider import BaseVisionProvider


class FakeClock:
    """Manually advanced millisecond clock."""

    def __init__(self, start: int = 1_700_000_000_000):
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


class RecordingSleep:
    """Async sleep replacement that records requested delays."""

    def __init__(self) -> None:
        self.calls: List[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


def make_image_bytes(
    width: int = 64, height: int = 48, image_format: str = "JPEG", color=(200, 30, 30)
) -> bytes:
    """Encode a solid-colour test image."""
    mode = "RGBA" if image_format == "PNG" else "RGB"
    fill = (*color, 255) if mode == "RGBA" else color
    buffer = io.BytesIO()
    Image.new(mode, (width, height), fill).save(buffer, format=image_format)
    return buffer.getvalue()


@pytest.fixture
def test_config() -> AppConfig:
    """
    Create test configuration.

    Returns:
        Test configuration instance
    """
    return AppConfig(
        app_env="development",
        google_vision_api_key="test-key",
        enable_cache_persistence=False,
    )


@pytest.fixture
def clock() -> FakeClock:
    """Create a controllable clock."""
    return FakeClock()


@pytest.fixture
def fake_sleep() -> RecordingSleep:
    """Create a sleep that returns immediately."""
    return RecordingSleep()


@pytest.fixture
def image_bytes():
    """Factory encoding solid-colour images."""
    return make_image_bytes


@pytest.fixture
def sample_image() -> ImageFile:
    """Create a small JPEG image file."""
    return ImageFile(
        name="eiffel.jpg",
        content=make_image_bytes(),
        last_modified=1_700_000_000_000,
        content_type="image/jpeg",
    )


@pytest.fixture
def eiffel_landmark() -> DetectedLandmark:
    """Create a high-confidence detection."""
    return DetectedLandmark(
        name="Eiffel Tower",
        confidence=95.0,
        coordinates=Coordinates(lat=48.8584, lng=2.2945),
    )


@pytest.fixture
def eiffel_location() -> EnrichedLocationData:
    """Create enrichment data for the Eiffel Tower."""
    return EnrichedLocationData(
        title="Eiffel Tower",
        description="The Eiffel Tower is a wrought-iron lattice tower in Paris.",
        coordinates=Coordinates(lat=48.8584, lng=2.2945),
        wikipedia_url="https://en.wikipedia.org/wiki/Eiffel_Tower",
        nearby_places=["Champ de Mars", "Trocadéro"],
    )


@pytest.fixture
def mock_vision(eiffel_landmark: DetectedLandmark) -> Mock:
    """
    Mock vision provider.

    Returns:
        Provider whose detection yields one confident landmark
    """
    vision = Mock(spec=BaseVisionProvider)
    vision.detect_landmarks = AsyncMock(return_value=[eiffel_landmark])
    vision.validate_api_key = AsyncMock(return_value=True)
    vision.close = AsyncMock()
    return vision


@pytest.fixture
def mock_enrichment(eiffel_location: EnrichedLocationData) -> Mock:
    """
    Mock Wikipedia client.

    Returns:
        Client resolving every name to Eiffel Tower data
    """
    enrichment = Mock(spec=WikipediaClient)
    enrichment.get_enriched_location_data = AsyncMock(return_value=eiffel_location)
    enrichment.search_by_coordinates = AsyncMock(return_value=[])
    enrichment.is_service_available = AsyncMock(return_value=True)
    enrichment.close = AsyncMock()
    return enrichment
