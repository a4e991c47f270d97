"""
Recognition pipeline.

Orchestration, retry and timeout policy, geolocation and error
classification.
"""

from landmark_lens.pipeline.error_classifier import ErrorClassifier
from landmark_lens.pipeline.geolocation import (
    GeolocationProvider,
    NoGeolocation,
    StaticGeolocation,
    locate_within,
)
from landmark_lens.pipeline.recognition_service import (
    LandmarkRecognitionService,
    default_options,
)
from landmark_lens.pipeline.retry import RetryPolicy
from landmark_lens.pipeline.timeout_handler import TimeoutHandler

__all__ = [
    "ErrorClassifier",
    "GeolocationProvider",
    "LandmarkRecognitionService",
    "NoGeolocation",
    "RetryPolicy",
    "StaticGeolocation",
    "TimeoutHandler",
    "default_options",
    "locate_within",
]
