"""
Optimization settings.
"""

from dataclasses import dataclass
from typing import Optional

from landmark_lens.config import AppConfig, config


@dataclass
class OptimizationConfig:
    """Image optimization and request batching configuration."""

    # Image re-encoding
    enable_image_compression: bool = True
    max_image_bytes: int = 2 * 1024 * 1024
    max_dimension: int = 1920
    compression_quality: float = 0.8

    # Execution
    enable_background_worker: bool = True

    # Request batching
    batch_api_requests: bool = True
    batch_size: int = 3
    request_delay_ms: int = 100
    batch_delay_ms: int = 500

    @classmethod
    def from_settings(cls, settings: Optional[AppConfig] = None) -> "OptimizationConfig":
        """
        Build from application settings.

        Args:
            settings: Application config (uses global config if None)

        Returns:
            Optimization config
        """
        settings = settings or config
        return cls(
            enable_image_compression=settings.enable_image_compression,
            max_image_bytes=settings.max_image_bytes,
            max_dimension=settings.max_image_dimension,
            compression_quality=settings.compression_quality,
            enable_background_worker=settings.enable_background_worker,
            batch_api_requests=settings.batch_api_requests,
            batch_size=settings.request_batch_size,
            request_delay_ms=settings.request_delay_ms,
            batch_delay_ms=settings.batch_delay_ms,
        )
