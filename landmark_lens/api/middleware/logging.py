"""
API Request Logging Middleware.

Assigns a request id, binds it into the structlog context so pipeline
events carry it, and logs timing and status.

Sandi Metz Principles:
- Single Responsibility: Request correlation and logging
- Configurable: Excluded paths and slow threshold
"""

import time
import uuid
from dataclasses import dataclass, field
from typing import Callable, List, Optional

import structlog
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from landmark_lens.utils.logger import get_logger

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"
MAX_REQUEST_ID_LENGTH = 64


@dataclass
class LoggingConfig:
    """Logging configuration."""

    enabled: bool = True
    excluded_paths: List[str] = field(default_factory=lambda: ["/health", "/ready"])
    slow_request_threshold_ms: float = 5000.0


def resolve_request_id(request: Request) -> str:
    """Reuse a caller-supplied request id, or mint a short one."""
    incoming = request.headers.get(REQUEST_ID_HEADER, "").strip()
    if incoming and len(incoming) <= MAX_REQUEST_ID_LENGTH:
        return incoming
    return uuid.uuid4().hex[:8]


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Correlates and logs every request; recognition uploads can be slow."""

    def __init__(self, app, config: Optional[LoggingConfig] = None):
        super().__init__(app)
        self._config = config or LoggingConfig()

    def _should_log(self, path: str) -> bool:
        return self._config.enabled and path not in self._config.excluded_paths

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """
        Process request with logging.

        Args:
            request: Incoming request
            call_next: Next middleware/handler

        Returns:
            Response carrying the request id header
        """
        request_id = resolve_request_id(request)
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=request_id)

        if not self._should_log(request.url.path):
            response = await call_next(request)
            response.headers[REQUEST_ID_HEADER] = request_id
            return response

        start_time = time.perf_counter()
        logger.info(
            "Request started",
            method=request.method,
            path=request.url.path,
            client=request.client.host if request.client else "unknown",
        )

        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(
                "Request failed",
                duration_ms=round((time.perf_counter() - start_time) * 1000, 2),
                error=str(e),
            )
            raise

        response_log = {
            "status": response.status_code,
            "duration_ms": round((time.perf_counter() - start_time) * 1000, 2),
        }
        if response_log["duration_ms"] > self._config.slow_request_threshold_ms:
            logger.warning("Slow request detected", **response_log)
        else:
            logger.info("Request completed", **response_log)

        response.headers[REQUEST_ID_HEADER] = request_id
        return response


# Default configuration
default_logging_config = LoggingConfig()
