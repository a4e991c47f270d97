"""
Wikipedia and enriched location models.

Sandi Metz Principles:
- Small classes focused on one payload each
- Clear separation of raw API rows and enriched output
- Optional fields stay absent rather than defaulted
"""

from datetime import datetime, timezone
from typing import List, Optional

from pydantic import BaseModel, Field

from landmark_lens.models.landmark import Coordinates


class WikiSearchResult(BaseModel):
    """Row from a full-text title search."""

    pageid: int = Field(..., description="Page identifier")
    title: str = Field(..., description="Page title")
    snippet: str = Field(default="", description="Highlighted snippet")
    size: int = Field(default=0, ge=0)
    wordcount: int = Field(default=0, ge=0)
    timestamp: Optional[str] = None


class GeoSearchResult(BaseModel):
    """Row from a proximity search, ordered by distance."""

    pageid: int = Field(..., description="Page identifier")
    title: str = Field(..., description="Page title")
    lat: float
    lon: float
    dist: float = Field(default=0.0, ge=0.0, description="Distance in metres")
    primary: Optional[bool] = None

    @property
    def coordinates(self) -> Coordinates:
        """Get result location."""
        return Coordinates(lat=self.lat, lng=self.lon)


class WikiPage(BaseModel):
    """Page detail record."""

    pageid: int
    title: str
    extract: str = ""
    thumbnail: Optional[str] = Field(None, description="Thumbnail source URL")
    coordinates: Optional[Coordinates] = Field(None, description="Primary coordinates")
    categories: List[str] = Field(default_factory=list, description="Raw category titles")


class EnrichedLocationData(BaseModel):
    """Encyclopedic and geographic context for a landmark."""

    title: str = Field(..., description="Resolved page title")
    description: str = Field(..., description="Short description")
    full_description: str = Field(default="", description="Full extract")
    coordinates: Optional[Coordinates] = None
    categories: List[str] = Field(default_factory=list)
    thumbnail: Optional[str] = None
    wikipedia_url: str = Field(..., description="Canonical article URL")
    nearby_places: List[str] = Field(default_factory=list)
    cultural_significance: Optional[str] = None
    historical_context: Optional[str] = None
    best_time_to_visit: Optional[str] = None
    accessibility: Optional[str] = None
    activities: Optional[List[str]] = None
    languages: List[str] = Field(default_factory=lambda: ["English"])
    last_updated: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
