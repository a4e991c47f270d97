"""
Structured logging configuration.

Following Sandi Metz principles:
- Single Responsibility: Logging setup and event helpers
- Small functions: One helper per pipeline event
"""

import logging
import sys
from typing import Any, Optional

import structlog


def setup_logging(log_level: str = "INFO", json_logs: bool = False) -> None:
    """
    Configure structured logging.

    Request-scoped values bound with structlog.contextvars (such as the
    request id) are merged into every event.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_logs: Render JSON lines instead of console output
    """
    level = getattr(logging, log_level.upper(), logging.INFO)
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)

    renderer = (
        structlog.processors.JSONRenderer()
        if json_logs
        else structlog.dev.ConsoleRenderer(colors=False)
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.BoundLogger:
    """
    Get a structured logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured structured logger
    """
    return structlog.get_logger(name)


def log_cache_hit(key: str, cache: str, **kwargs: Any) -> None:
    """Log a cache hit; keys are truncated to 100 characters."""
    get_logger("cache").debug("cache_hit", key=key[:100], cache=cache, **kwargs)


def log_cache_miss(key: str, cache: str, **kwargs: Any) -> None:
    """Log a cache miss; keys are truncated to 100 characters."""
    get_logger("cache").debug("cache_miss", key=key[:100], cache=cache, **kwargs)


def log_vision_call(provider: str, landmarks: int, duration_ms: float, **kwargs: Any) -> None:
    """
    Log landmark detection call.

    Args:
        provider: Vision provider name
        landmarks: Number of candidates returned
        duration_ms: Call latency in milliseconds
        **kwargs: Additional context
    """
    get_logger("vision").info(
        "vision_call",
        provider=provider,
        landmarks=landmarks,
        duration_ms=round(duration_ms, 2),
        **kwargs
    )


def log_recognition(
    success: bool,
    duration_ms: float,
    landmark: Optional[str] = None,
    cache_used: bool = False,
    fallback_used: bool = False,
    error_code: Optional[str] = None,
) -> None:
    """
    Log the outcome of one recognition call.

    Args:
        success: Whether a landmark was identified
        duration_ms: End-to-end latency in milliseconds
        landmark: Identified landmark name
        cache_used: Served from the result cache
        fallback_used: Produced by the position fallback
        error_code: Classified error code on failure
    """
    logger = get_logger("recognition")
    if success:
        logger.info(
            "recognition_succeeded",
            landmark=landmark,
            duration_ms=round(duration_ms, 2),
            cache_used=cache_used,
            fallback_used=fallback_used,
        )
    else:
        logger.warning(
            "recognition_failed", error_code=error_code, duration_ms=round(duration_ms, 2)
        )
