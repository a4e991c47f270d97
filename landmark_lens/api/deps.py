"""
API dependency injection.

Sandi Metz Principles:
- Single Responsibility: Dependency lookup and injection
- Dependency Inversion: Routes receive collaborators, never build them
"""

from typing import TYPE_CHECKING

from fastapi import Depends, HTTPException, Request

from landmark_lens.pipeline.error_classifier import ErrorClassifier
from landmark_lens.pipeline.recognition_service import LandmarkRecognitionService
from landmark_lens.utils.logger import get_logger

if TYPE_CHECKING:
    from landmark_lens.main import ApplicationState

logger = get_logger(__name__)


async def get_app_state(request: Request) -> "ApplicationState":
    """
    Get application state.

    Args:
        request: FastAPI request

    Returns:
        Application state

    Raises:
        HTTPException: If the application has not started
    """
    state = getattr(request.app.state, "app_state", None)
    if state is None or state.service is None:
        logger.error("Application state not initialized")
        raise HTTPException(status_code=503, detail="Service is starting up")
    return state


async def get_recognition_service(
    state: "ApplicationState" = Depends(get_app_state),  # noqa: B008
) -> LandmarkRecognitionService:
    """
    Get recognition service.

    Args:
        state: Application state (injected)

    Returns:
        Recognition service
    """
    return state.service


async def get_error_classifier(
    service: LandmarkRecognitionService = Depends(get_recognition_service),  # noqa: B008
) -> ErrorClassifier:
    """
    Get the classifier shared with the recognition service.

    Args:
        service: Recognition service (injected)

    Returns:
        Error classifier
    """
    return service.classifier
