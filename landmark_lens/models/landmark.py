"""
Landmark detection models.

Sandi Metz Principles:
- Single Responsibility: Detection data structures
- Clear naming: Descriptive fields
- Immutable data: Candidates are frozen once produced
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class LandmarkSource(str, Enum):
    """Where a candidate landmark came from."""

    GOOGLE_VISION = "google_vision"
    TEXT_FALLBACK = "text_fallback"
    GPS_FALLBACK = "gps_fallback"

    @property
    def is_fallback(self) -> bool:
        """Check if source is a secondary strategy."""
        return self is not LandmarkSource.GOOGLE_VISION


class Coordinates(BaseModel):
    """Geographic point."""

    model_config = ConfigDict(frozen=True)

    lat: float = Field(..., ge=-90.0, le=90.0, description="Latitude")
    lng: float = Field(..., ge=-180.0, le=180.0, description="Longitude")

    def as_key(self, precision: int = 3) -> str:
        """Build a rounded cache key for this point."""
        return f"{round(self.lat, precision)},{round(self.lng, precision)}"


class DetectedLandmark(BaseModel):
    """Ranked landmark candidate produced by a recognition strategy."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1, description="Landmark name")
    confidence: float = Field(..., ge=0.0, le=100.0, description="Confidence 0-100")
    coordinates: Optional[Coordinates] = Field(
        None, description="Location, absent for text-derived candidates"
    )
    source: LandmarkSource = Field(
        default=LandmarkSource.GOOGLE_VISION, description="Provenance"
    )

    @property
    def is_fallback(self) -> bool:
        """Check if candidate came from a fallback strategy."""
        return self.source.is_fallback
