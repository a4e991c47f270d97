"""
Health check endpoints.

Sandi Metz Principles:
- Single Responsibility: Health check logic only
- Small functions: Each check isolated
- Clear naming: Descriptive endpoint names
"""

from fastapi import APIRouter, Depends

from landmark_lens.api.deps import get_recognition_service
from landmark_lens.config import config
from landmark_lens.models.response import ComponentHealth, HealthResponse, ReadinessResponse
from landmark_lens.pipeline.recognition_service import LandmarkRecognitionService
from landmark_lens.utils.logger import get_logger

router = APIRouter()
logger = get_logger(__name__)

VERSION = "0.1.0"


def _component(ready: bool, failure_message: str) -> ComponentHealth:
    if ready:
        return ComponentHealth(status="healthy")
    return ComponentHealth(status="unhealthy", message=failure_message)


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """
    Basic health check endpoint.

    Returns:
        Health status response
    """
    return HealthResponse(status="healthy", environment=config.app_env, version=VERSION)


@router.get("/ready", response_model=ReadinessResponse)
async def readiness_check(
    service: LandmarkRecognitionService = Depends(get_recognition_service),  # noqa: B008
) -> ReadinessResponse:
    """
    Check both upstream capabilities.

    A degraded status means callers should show a "services initializing"
    notice; recognition may still succeed through the fallback.

    Returns:
        Readiness response
    """
    status = await service.validate_services()
    if not status.all_ready:
        logger.warning(
            "Upstream capability not ready",
            vision=status.vision_capability_ready,
            enrichment=status.enrichment_capability_ready,
        )

    return ReadinessResponse(
        status="ready" if status.all_ready else "degraded",
        environment=config.app_env,
        version=VERSION,
        components={
            "vision": _component(
                status.vision_capability_ready, "Vision API key missing or rejected"
            ),
            "enrichment": _component(
                status.enrichment_capability_ready, "Wikipedia API unreachable"
            ),
        },
    )
