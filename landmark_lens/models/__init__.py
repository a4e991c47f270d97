"""
Models package for LandmarkLens.

Exports all model classes for easy imports throughout the application.
"""

# Cache models
from landmark_lens.models.cache_entry import CacheEntry, CacheSnapshot, CacheStats

# Error models
from landmark_lens.models.error import (
    ErrorCategory,
    ErrorCode,
    ErrorDetails,
    ErrorDisplay,
    ErrorResponse,
    ErrorSeverity,
)

# Image models
from landmark_lens.models.image import ImageFile, ImageSource

# Landmark models
from landmark_lens.models.landmark import Coordinates, DetectedLandmark, LandmarkSource

# Location models
from landmark_lens.models.location import (
    EnrichedLocationData,
    GeoSearchResult,
    WikiPage,
    WikiSearchResult,
)

# Recognition models
from landmark_lens.models.recognition import (
    ProcessingMetrics,
    RecognitionOptions,
    RecognitionResult,
    ServiceStatus,
)

# API models
from landmark_lens.models.response import (
    ComponentHealth,
    HealthResponse,
    ReadinessResponse,
    UrlRecognitionRequest,
)

__all__ = [
    # Cache
    "CacheEntry",
    "CacheSnapshot",
    "CacheStats",
    # Error
    "ErrorCategory",
    "ErrorCode",
    "ErrorDetails",
    "ErrorDisplay",
    "ErrorResponse",
    "ErrorSeverity",
    # Image
    "ImageFile",
    "ImageSource",
    # Landmark
    "Coordinates",
    "DetectedLandmark",
    "LandmarkSource",
    # Location
    "EnrichedLocationData",
    "GeoSearchResult",
    "WikiPage",
    "WikiSearchResult",
    # Recognition
    "ProcessingMetrics",
    "RecognitionOptions",
    "RecognitionResult",
    "ServiceStatus",
    # API
    "ComponentHealth",
    "HealthResponse",
    "ReadinessResponse",
    "UrlRecognitionRequest",
]
