"""
Error classification.

Maps any failure to a structured ErrorDetails with a user message,
ordered remedies, a category, a severity and a recoverability flag.
Classification never makes control-flow decisions; it only annotates.

Sandi Metz Principles:
- Single Responsibility: Categorise failures
- Small methods: One predicate per category
- Dependency Injection: Log sink injected
"""

import asyncio
from collections import deque
from typing import Any, Awaitable, Callable, Deque, Dict, List, Optional, TypeVar, Union

import httpx

from landmark_lens.exceptions import (
    EnrichmentError,
    FallbackError,
    ImageSourceError,
    LandmarkNotFoundError,
    RecognitionTimeoutError,
    VisionConfigurationError,
)
from landmark_lens.models.error import (
    ErrorCategory,
    ErrorCode,
    ErrorDetails,
    ErrorDisplay,
    ErrorSeverity,
)
from landmark_lens.utils.logger import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

ErrorSink = Callable[[ErrorDetails], None]

NETWORK_KEYWORDS = (
    "network",
    "connection",
    "timeout",
    "offline",
    "unreachable",
    "dns",
    "fetch",
    "cors",
    "net::",
    "failed to fetch",
)
API_KEYWORDS = (
    "api",
    "unauthorized",
    "401",
    "403",
    "429",
    "500",
    "502",
    "503",
    "rate limit",
    "quota",
    "invalid key",
    "authentication",
)
PERMISSION_KEYWORDS = (
    "permission",
    "denied",
    "blocked",
    "geolocation",
    "camera",
    "microphone",
    "access denied",
    "not allowed",
)
VALIDATION_KEYWORDS = (
    "invalid file",
    "unsupported format",
    "file too large",
    "invalid image",
    "corrupt",
    "validation failed",
)
USER_KEYWORDS = (
    "no landmark",
    "not found",
    "low confidence",
    "unclear image",
    "no results",
    "cannot identify",
    "recognition failed",
)

NETWORK_EXCEPTIONS = (
    httpx.TransportError,
    asyncio.TimeoutError,
    ConnectionError,
    RecognitionTimeoutError,
)

RETRY_DELAYS_MS: Dict[ErrorCode, int] = {
    ErrorCode.NETWORK_ERROR: 2000,
    ErrorCode.RATE_LIMIT_EXCEEDED: 60000,
    ErrorCode.API_ERROR: 5000,
    ErrorCode.SYSTEM_ERROR: 3000,
}

SHORT_SUGGESTIONS: Dict[ErrorCode, List[str]] = {
    ErrorCode.NETWORK_ERROR: [
        "Check your internet connection",
        "Try again in a few moments",
        "Switch to a different network",
    ],
    ErrorCode.VISION_API_ERROR: [
        "Try again later",
        "Explore landmarks by region instead",
        "Upload a different image",
    ],
    ErrorCode.WIKIPEDIA_API_ERROR: [
        "Basic information is still available",
        "Try searching manually",
        "Check back later",
    ],
    ErrorCode.PERMISSION_DENIED: [
        "Allow camera/location permissions",
        "Check device settings",
        "Refresh and try again",
    ],
    ErrorCode.NO_LANDMARK_DETECTED: [
        "Upload a clearer image",
        "Ensure landmark is visible",
        "Try different lighting/angle",
    ],
    ErrorCode.VALIDATION_ERROR: [
        "Check image format and size",
        "Try a different image",
        "Ensure file is not corrupted",
    ],
}

DEFAULT_SUGGESTIONS = [
    "Try refreshing the page",
    "Clear cached data",
    "Contact support if issue persists",
]

CATEGORY_TITLES: Dict[ErrorCategory, str] = {
    ErrorCategory.NETWORK: "Connection Issue",
    ErrorCategory.API: "Service Unavailable",
    ErrorCategory.PERMISSION: "Permission Required",
    ErrorCategory.VALIDATION: "Invalid File",
    ErrorCategory.USER: "No Landmark Found",
    ErrorCategory.SYSTEM: "System Error",
}

MAX_DISPLAYED_SUGGESTIONS = 3


def _contains_any(message: str, keywords: tuple) -> bool:
    return any(keyword in message for keyword in keywords)


class ErrorClassifier:
    """
    Classifies failures and keeps a bounded log of recent errors.

    Constructed explicitly and passed to the components that need it.
    """

    def __init__(
        self,
        enable_logging: bool = True,
        max_log_size: int = 100,
        sink: Optional[ErrorSink] = None,
        default_retry_delay_ms: int = 1000,
    ):
        """
        Initialize classifier.

        Args:
            enable_logging: Keep classified errors in the in-memory log
            max_log_size: Log capacity, oldest entries dropped beyond it
            sink: Called with every logged error (defaults to structured logging)
            default_retry_delay_ms: Delay for codes without a specific delay
        """
        self._enable_logging = enable_logging
        self._log: Deque[ErrorDetails] = deque(maxlen=max_log_size)
        self._sink = sink or self._log_to_logger
        self._default_retry_delay_ms = default_retry_delay_ms

    def classify(
        self,
        error: Union[BaseException, str],
        context: Optional[Dict[str, Any]] = None,
    ) -> ErrorDetails:
        """
        Classify a failure.

        Args:
            error: Exception or raw message
            context: Optional context to attach

        Returns:
            Classified error details
        """
        details = self._categorize(error, dict(context or {}))

        if self._enable_logging:
            self._log.appendleft(details)
            self._sink(details)

        return details

    def _categorize(
        self, error: Union[BaseException, str], context: Dict[str, Any]
    ) -> ErrorDetails:
        message = error if isinstance(error, str) else str(error) or type(error).__name__
        lower = message.lower()

        if isinstance(error, BaseException):
            context.setdefault("error_type", type(error).__name__)

        if isinstance(error, NETWORK_EXCEPTIONS) or _contains_any(lower, NETWORK_KEYWORDS):
            if isinstance(error, RecognitionTimeoutError) or "timeout" in lower:
                context.setdefault("timeout", True)
            return self._build(
                ErrorCode.NETWORK_ERROR,
                message,
                "Network connection issue. Please check your internet connection.",
                [
                    "Check your internet connection",
                    "Try again in a few moments",
                    "Switch to a different network if available",
                ],
                ErrorCategory.NETWORK,
                ErrorSeverity.MEDIUM,
                context,
            )

        if isinstance(error, EnrichmentError) or _contains_any(lower, API_KEYWORDS):
            return self._categorize_api(error, message, lower, context)

        if _contains_any(lower, PERMISSION_KEYWORDS):
            return self._build(
                ErrorCode.PERMISSION_DENIED,
                message,
                "Permission required. Please allow access to continue.",
                [
                    "Allow camera/location permissions on your device",
                    "Check the settings for this application",
                    "Try again after granting permissions",
                ],
                ErrorCategory.PERMISSION,
                ErrorSeverity.HIGH,
                context,
            )

        if isinstance(error, ImageSourceError) or _contains_any(lower, VALIDATION_KEYWORDS):
            return self._build(
                ErrorCode.VALIDATION_ERROR,
                message,
                "Invalid input. Please check your data and try again.",
                [
                    "Ensure image is in a supported format (JPG, PNG, WebP)",
                    "Check image size (max 10MB recommended)",
                    "Try uploading a different image",
                ],
                ErrorCategory.VALIDATION,
                ErrorSeverity.LOW,
                context,
            )

        if isinstance(error, (LandmarkNotFoundError, FallbackError)) or _contains_any(
            lower, USER_KEYWORDS
        ):
            return self._build(
                ErrorCode.NO_LANDMARK_DETECTED,
                message,
                "Could not identify any landmarks in this image.",
                [
                    "Try uploading a clearer image of the landmark",
                    "Ensure the landmark is clearly visible in the photo",
                    "Take a photo closer to the landmark",
                    "Try a different angle or lighting condition",
                ],
                ErrorCategory.USER,
                ErrorSeverity.LOW,
                context,
            )

        return self._build(
            ErrorCode.SYSTEM_ERROR,
            message,
            "An unexpected error occurred. Please try again.",
            [
                "Try again in a moment",
                "Clear cached data",
                "Contact support if the problem persists",
            ],
            ErrorCategory.SYSTEM,
            ErrorSeverity.HIGH,
            context,
        )

    def _categorize_api(
        self,
        error: Union[BaseException, str],
        message: str,
        lower: str,
        context: Dict[str, Any],
    ) -> ErrorDetails:
        # Rate limits from either service
        if "rate limit" in lower or "quota" in lower or "429" in lower:
            return self._build(
                ErrorCode.RATE_LIMIT_EXCEEDED,
                message,
                "Too many requests. Please wait a moment before trying again.",
                [
                    "Wait 1-2 minutes before trying again",
                    "Use cached results if available",
                    "Explore landmarks by region instead",
                ],
                ErrorCategory.API,
                ErrorSeverity.MEDIUM,
                context,
            )

        if "vision api" in lower or "invalid api key" in lower:
            missing_key = isinstance(error, VisionConfigurationError)
            return self._build(
                ErrorCode.VISION_API_ERROR,
                message,
                "Image recognition service is temporarily unavailable.",
                [
                    "Try again in a few minutes",
                    "Explore landmarks by region instead",
                    "Contact support if the issue persists",
                ],
                ErrorCategory.API,
                ErrorSeverity.CRITICAL if missing_key else ErrorSeverity.HIGH,
                context,
                recoverable=not missing_key,
            )

        if isinstance(error, EnrichmentError) or "wikipedia" in lower or "wiki" in lower:
            return self._build(
                ErrorCode.WIKIPEDIA_API_ERROR,
                message,
                "Could not fetch detailed information about this location.",
                [
                    "Basic landmark information is still available",
                    "Try searching manually on Wikipedia",
                    "Check back later for full details",
                ],
                ErrorCategory.API,
                ErrorSeverity.MEDIUM,
                context,
            )

        return self._build(
            ErrorCode.API_ERROR,
            message,
            "Service temporarily unavailable. Please try again.",
            [
                "Try again in a few minutes",
                "Check your internet connection",
                "Use alternative features while we resolve this",
            ],
            ErrorCategory.API,
            ErrorSeverity.MEDIUM,
            context,
        )

    @staticmethod
    def _build(
        code: ErrorCode,
        message: str,
        user_message: str,
        suggestions: List[str],
        category: ErrorCategory,
        severity: ErrorSeverity,
        context: Dict[str, Any],
        recoverable: bool = True,
    ) -> ErrorDetails:
        return ErrorDetails(
            code=code,
            message=message,
            user_message=user_message,
            suggestions=suggestions,
            recoverable=recoverable,
            category=category,
            severity=severity,
            context=context,
        )

    @staticmethod
    def _log_to_logger(details: ErrorDetails) -> None:
        logger.warning(
            "Classified error",
            code=details.code.value,
            category=details.category.value,
            severity=details.severity.value,
            error=details.message,
        )

    def get_retry_delay(self, details: ErrorDetails) -> int:
        """
        Get recommended retry delay for an error.

        Args:
            details: Classified error

        Returns:
            Delay in milliseconds
        """
        return RETRY_DELAYS_MS.get(details.code, self._default_retry_delay_ms)

    @staticmethod
    def get_error_suggestions(code: ErrorCode) -> List[str]:
        """
        Get short suggestions for an error code.

        Args:
            code: Error code

        Returns:
            Suggestion list
        """
        return list(SHORT_SUGGESTIONS.get(code, DEFAULT_SUGGESTIONS))

    def format_for_ui(self, details: ErrorDetails) -> ErrorDisplay:
        """
        Format error for presentation.

        Args:
            details: Classified error

        Returns:
            Title, message, a bounded list of suggestions and retry hints
        """
        return ErrorDisplay(
            title=CATEGORY_TITLES.get(details.category, "Error"),
            message=details.user_message,
            suggestions=details.suggestions[:MAX_DISPLAYED_SUGGESTIONS],
            can_retry=details.recoverable,
            retry_after_ms=self.get_retry_delay(details) if details.recoverable else None,
            severity=details.severity,
        )

    def get_error_stats(self) -> Dict[str, Any]:
        """
        Get statistics over the error log.

        Returns:
            Totals by category and severity plus the 10 most recent errors
        """
        by_category: Dict[str, int] = {}
        by_severity: Dict[str, int] = {}

        for details in self._log:
            by_category[details.category.value] = by_category.get(details.category.value, 0) + 1
            by_severity[details.severity.value] = by_severity.get(details.severity.value, 0) + 1

        return {
            "total_errors": len(self._log),
            "errors_by_category": by_category,
            "errors_by_severity": by_severity,
            "recent_errors": list(self._log)[:10],
        }

    @property
    def recent_errors(self) -> List[ErrorDetails]:
        """Get logged errors, newest first."""
        return list(self._log)

    def clear_log(self) -> None:
        """Clear error log."""
        self._log.clear()

    @staticmethod
    def is_recoverable(details: ErrorDetails) -> bool:
        """Check if error is recoverable."""
        return details.recoverable

    async def with_retry(
        self,
        operation: Callable[[], Awaitable[T]],
        context: Optional[Dict[str, Any]] = None,
        max_attempts: int = 3,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> T:
        """
        Run an operation, waiting the category delay between failed attempts.

        Args:
            operation: Async operation
            context: Context attached to each classification
            max_attempts: Total attempts
            sleep: Async sleep function

        Returns:
            Operation result

        Raises:
            Exception: The last failure, when not recoverable or attempts are exhausted
        """
        for attempt in range(1, max_attempts + 1):
            try:
                return await operation()
            except Exception as e:
                details = self.classify(
                    e, {**(context or {}), "attempt": attempt, "max_attempts": max_attempts}
                )
                if not details.recoverable or attempt == max_attempts:
                    raise

                await sleep(self.get_retry_delay(details) / 1000)

        raise RuntimeError("max_attempts must be at least 1")
