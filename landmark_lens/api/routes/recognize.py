"""
Landmark recognition endpoints.

Sandi Metz Principles:
- Single Responsibility: HTTP request handling
- Small functions: Minimal logic in endpoints
- Dependency Injection: Service injected
"""

from typing import Optional, Union

from fastapi import APIRouter, Depends, File, Form, UploadFile
from fastapi.responses import JSONResponse

from landmark_lens.api.deps import get_error_classifier, get_recognition_service
from landmark_lens.models.error import ErrorCategory, ErrorDetails, ErrorResponse
from landmark_lens.models.image import ImageFile
from landmark_lens.models.recognition import RecognitionOptions, RecognitionResult
from landmark_lens.models.response import UrlRecognitionRequest
from landmark_lens.pipeline.error_classifier import ErrorClassifier
from landmark_lens.pipeline.recognition_service import (
    LandmarkRecognitionService,
    default_options,
)
from landmark_lens.utils.logger import get_logger

router = APIRouter()
logger = get_logger(__name__)

CATEGORY_STATUS = {
    ErrorCategory.VALIDATION: 422,
    ErrorCategory.PERMISSION: 403,
    ErrorCategory.USER: 404,
    ErrorCategory.API: 502,
    ErrorCategory.NETWORK: 503,
    ErrorCategory.SYSTEM: 500,
}
TIMEOUT_STATUS = 504


def status_for(details: ErrorDetails) -> int:
    """
    Map a classified error to an HTTP status.

    Args:
        details: Classified error

    Returns:
        HTTP status code
    """
    if details.context.get("timeout"):
        return TIMEOUT_STATUS
    return CATEGORY_STATUS.get(details.category, 500)


def render(
    result: RecognitionResult, classifier: ErrorClassifier
) -> Union[RecognitionResult, JSONResponse]:
    """Return successful results as-is and failures as error responses."""
    if result.success or result.error_details is None:
        return result

    details = result.error_details
    body = ErrorResponse(
        detail=details.user_message,
        error=details,
        display=classifier.format_for_ui(details),
    )
    return JSONResponse(status_code=status_for(details), content=body.model_dump(mode="json"))


@router.post(
    "/recognize",
    response_model=RecognitionResult,
    responses={code: {"model": ErrorResponse} for code in (403, 404, 422, 500, 502, 503, 504)},
)
async def recognize_upload(
    file: UploadFile = File(...),  # noqa: B008
    last_modified: Optional[int] = Form(None),  # noqa: B008
    max_retries: Optional[int] = Form(None, ge=0, le=10),  # noqa: B008
    confidence_threshold: Optional[float] = Form(None, ge=0.0, le=100.0),  # noqa: B008
    enable_fallback: Optional[bool] = Form(None),  # noqa: B008
    enable_cache: Optional[bool] = Form(None),  # noqa: B008
    timeout_ms: Optional[int] = Form(None, ge=1),  # noqa: B008
    service: LandmarkRecognitionService = Depends(get_recognition_service),  # noqa: B008
    classifier: ErrorClassifier = Depends(get_error_classifier),  # noqa: B008
):
    """
    Recognize the landmark in an uploaded image.

    Args:
        file: Image upload
        last_modified: Client-side modification time in epoch ms
        max_retries: Retries after the first attempt
        confidence_threshold: Minimum confidence (0-100)
        enable_fallback: Allow position-based fallback
        enable_cache: Use the result cache
        timeout_ms: Overall time budget
        service: Recognition service (injected)
        classifier: Error classifier (injected)

    Returns:
        Recognition result, or an error response with a mapped status
    """
    content = await file.read()
    image = ImageFile(
        name=file.filename or "upload",
        content=content,
        content_type=file.content_type or "image/jpeg",
        **({"last_modified": last_modified} if last_modified is not None else {}),
    )

    overrides = {
        "max_retries": max_retries,
        "confidence_threshold": confidence_threshold,
        "enable_fallback": enable_fallback,
        "enable_cache": enable_cache,
        "timeout_ms": timeout_ms,
    }
    options = default_options().model_copy(
        update={key: value for key, value in overrides.items() if value is not None}
    )

    logger.info("Recognition requested", name=image.name, bytes=image.size)
    result = await service.recognize_landmark(image, options)
    return render(result, classifier)


@router.post(
    "/recognize/url",
    response_model=RecognitionResult,
    responses={code: {"model": ErrorResponse} for code in (403, 404, 422, 500, 502, 503, 504)},
)
async def recognize_url(
    request: UrlRecognitionRequest,
    service: LandmarkRecognitionService = Depends(get_recognition_service),  # noqa: B008
    classifier: ErrorClassifier = Depends(get_error_classifier),  # noqa: B008
):
    """
    Recognize the landmark in a remote image.

    Args:
        request: URL and optional options
        service: Recognition service (injected)
        classifier: Error classifier (injected)

    Returns:
        Recognition result, or an error response with a mapped status
    """
    options: RecognitionOptions = request.options or default_options()
    logger.info("Recognition requested", url=request.url[:200])
    result = await service.recognize_landmark(request.url, options)
    return render(result, classifier)
