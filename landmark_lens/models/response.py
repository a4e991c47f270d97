"""
API request and response models.

Sandi Metz Principles:
- Small classes with clear purpose
- Immutable response data
- Clear naming conventions
"""

from typing import Dict, Literal, Optional

from pydantic import BaseModel, Field

from landmark_lens.models.recognition import RecognitionOptions


class UrlRecognitionRequest(BaseModel):
    """Recognition request for a remote image."""

    url: str = Field(..., min_length=1, description="Image URL")
    options: Optional[RecognitionOptions] = Field(
        None, description="Recognition options (config defaults if omitted)"
    )


class HealthResponse(BaseModel):
    """Health check response."""

    status: Literal["healthy", "unhealthy"] = Field(..., description="Service status")
    environment: str = Field(..., description="Environment name")
    version: str = Field(..., description="Application version")


class ComponentHealth(BaseModel):
    """Health status of an upstream capability."""

    status: Literal["healthy", "unhealthy"] = Field(..., description="Component status")
    message: Optional[str] = Field(None, description="Status message")


class ReadinessResponse(BaseModel):
    """Readiness of the upstream capabilities."""

    status: Literal["ready", "degraded"] = Field(..., description="Overall status")
    environment: str = Field(..., description="Environment name")
    version: str = Field(..., description="Application version")
    components: Dict[str, ComponentHealth] = Field(
        default_factory=dict, description="Capability status"
    )
