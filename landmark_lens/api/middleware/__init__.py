"""
API Middleware module.

Contains middleware for request logging.
"""

from landmark_lens.api.middleware.logging import (
    LoggingConfig,
    RequestLoggingMiddleware,
    default_logging_config,
)

__all__ = [
    "LoggingConfig",
    "RequestLoggingMiddleware",
    "default_logging_config",
]
