"""
Vision provider base class and interface.

Sandi Metz Principles:
- Single Responsibility: Provider abstraction
- Interface Segregation: Minimal provider interface
- Dependency Inversion: Depend on abstraction, not concrete classes
"""

from abc import ABC, abstractmethod
from typing import List

from landmark_lens.models.image import ImageSource
from landmark_lens.models.landmark import DetectedLandmark


class BaseVisionProvider(ABC):
    """
    Abstract base class for landmark detection providers.

    Providers issue one request per call and never retry; retry policy
    belongs to the caller.
    """

    @abstractmethod
    async def detect_landmarks(
        self, image_source: ImageSource, max_results: int = 5
    ) -> List[DetectedLandmark]:
        """
        Detect landmarks in an image.

        Args:
            image_source: Image file or URL
            max_results: Maximum landmark annotations to request

        Returns:
            Candidates ordered by confidence, highest first

        Raises:
            VisionAPIError: If the provider reports a failure
        """
        pass

    @abstractmethod
    async def validate_api_key(self) -> bool:
        """
        Check that the provider accepts requests.

        Returns:
            True if a validation request succeeds
        """
        pass

    @abstractmethod
    def get_name(self) -> str:
        """
        Get provider name.

        Returns:
            Provider name (e.g., "google_vision")
        """
        pass

    def set_confidence_threshold(self, threshold: float) -> None:
        """Set the raw score filter (0-1); providers without one ignore it."""
        return None
