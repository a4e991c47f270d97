"""
Recognition request and result models.

Sandi Metz Principles:
- Small classes focused on the recognition contract
- Clear separation of options and outcome
- Invariants validated at construction
"""

from typing import Optional

from pydantic import BaseModel, Field, model_validator

from landmark_lens.models.error import ErrorDetails
from landmark_lens.models.landmark import DetectedLandmark
from landmark_lens.models.location import EnrichedLocationData


class RecognitionOptions(BaseModel):
    """Per-call recognition options."""

    max_retries: int = Field(default=2, ge=0, le=10, description="Retries after first attempt")
    confidence_threshold: float = Field(
        default=70.0, ge=0.0, le=100.0, description="Minimum confidence (0-100)"
    )
    enable_fallback: bool = Field(default=True, description="Allow GPS fallback")
    enable_cache: bool = Field(default=True, description="Use result cache")
    timeout_ms: int = Field(default=15000, ge=1, description="Overall time budget")


class RecognitionResult(BaseModel):
    """Unified outcome returned to callers and stored in the cache."""

    success: bool = Field(..., description="Whether a landmark was identified")
    landmark: Optional[DetectedLandmark] = None
    location_data: Optional[EnrichedLocationData] = None
    confidence: float = Field(default=0.0, ge=0.0, le=100.0)
    processing_time_ms: float = Field(default=0.0, ge=0.0)
    error: Optional[str] = Field(None, description="User facing error message")
    error_details: Optional[ErrorDetails] = None
    fallback_used: bool = False
    cache_used: bool = False

    @model_validator(mode="after")
    def check_landmark_present(self) -> "RecognitionResult":
        """Successful results always carry a landmark."""
        if self.success and self.landmark is None:
            raise ValueError("Successful recognition requires a landmark")
        return self

    @classmethod
    def failure(cls, details: ErrorDetails, processing_time_ms: float) -> "RecognitionResult":
        """Create failed result from classified error."""
        return cls(
            success=False,
            confidence=0.0,
            processing_time_ms=processing_time_ms,
            error=details.user_message,
            error_details=details,
        )


class ProcessingMetrics(BaseModel):
    """Rolling recognition counters."""

    total_requests: int = 0
    successful_detections: int = 0
    failed_detections: int = 0
    average_processing_time_ms: float = 0.0
    cache_hits: int = 0
    api_errors: int = 0


class ServiceStatus(BaseModel):
    """Readiness of the upstream capabilities."""

    vision_capability_ready: bool
    enrichment_capability_ready: bool

    @property
    def all_ready(self) -> bool:
        """Check if every capability is ready."""
        return self.vision_capability_ready and self.enrichment_capability_ready
