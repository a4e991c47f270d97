"""
Custom exceptions for the application.
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from landmark_lens.models.error import ErrorDetails


class AppError(Exception):
    """Base exception for application errors."""

    pass


class VisionAPIError(AppError):
    """Raised when the landmark detection API fails."""

    pass


class VisionConfigurationError(VisionAPIError):
    """Raised when the vision credential is missing."""

    pass


class EnrichmentError(AppError):
    """Raised when the Wikipedia lookup fails."""

    pass


class ImageSourceError(AppError):
    """Raised when an image cannot be read or downloaded."""

    pass


class ImageOptimizationError(AppError):
    """Raised when an image cannot be decoded or re-encoded."""

    pass


class LandmarkNotFoundError(AppError):
    """Raised when no candidate reaches the confidence threshold."""

    pass


class FallbackError(AppError):
    """Raised when GPS fallback recognition yields nothing."""

    pass


class RecognitionTimeoutError(AppError):
    """Raised when recognition exceeds its overall time budget."""

    pass


class ConfigurationError(AppError):
    """Raised when configuration is invalid."""

    pass


class RecognitionFailedError(AppError):
    """Raised when recognition fails; carries the classified details."""

    def __init__(self, details: "ErrorDetails"):
        self.details = details
        super().__init__(details.message)
