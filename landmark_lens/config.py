"""
Application configuration management.

Following Sandi Metz principles:
- Single Responsibility: Configuration loading and validation
- Small class: Grouped settings per collaborator
- Clear naming: Descriptive property names
"""

from typing import List, Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DAY_SECONDS = 24 * 60 * 60


class AppConfig(BaseSettings):
    """
    Application configuration with validation.

    Loads from environment variables with fallback to .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False, extra="ignore"
    )

    # Application settings
    app_name: str = Field(default="LandmarkLens", description="Application name")
    app_env: Literal["development", "staging", "production"] = Field(
        default="development", description="Environment"
    )
    log_level: str = Field(default="INFO", description="Logging level")
    debug: bool = Field(default=False, description="Debug mode")

    # API settings
    api_host: str = Field(default="0.0.0.0", description="API host")
    api_port: int = Field(default=8000, ge=1, le=65535, description="API port")
    allowed_origins: str = Field(
        default="http://localhost:3000,http://localhost:8000",
        description="CORS allowed origins",
    )

    # Vision settings
    google_vision_api_key: str = Field(default="", description="Google Vision API key")
    google_vision_api_url: str = Field(
        default="https://vision.googleapis.com/v1/images:annotate",
        description="Vision annotate endpoint",
    )
    vision_confidence_threshold: float = Field(
        default=0.7, ge=0.0, le=1.0, description="Minimum raw landmark score"
    )
    vision_max_results: int = Field(default=5, ge=1, le=50, description="Max landmarks")
    vision_request_timeout_seconds: float = Field(
        default=10.0, gt=0, description="Vision request timeout"
    )

    # Wikipedia settings
    wikipedia_api_url: str = Field(
        default="https://en.wikipedia.org/w/api.php", description="MediaWiki action API"
    )
    wikipedia_base_url: str = Field(
        default="https://en.wikipedia.org/wiki/", description="Article URL prefix"
    )
    wikipedia_request_timeout_seconds: float = Field(
        default=10.0, gt=0, description="Wikipedia request timeout"
    )
    wikipedia_health_timeout_seconds: float = Field(
        default=5.0, gt=0, description="Wikipedia availability check timeout"
    )

    # Recognition defaults
    max_retries: int = Field(default=2, ge=0, le=10, description="Vision retries")
    confidence_threshold: float = Field(
        default=70.0, ge=0.0, le=100.0, description="Confidence gate (0-100)"
    )
    enable_fallback: bool = Field(default=True, description="Enable GPS fallback")
    enable_cache: bool = Field(default=True, description="Enable result cache")
    timeout_ms: int = Field(default=15000, ge=1, description="Overall timeout in ms")
    retry_base_delay_seconds: float = Field(
        default=1.0, ge=0.0, description="Backoff unit per attempt"
    )
    fallback_confidence: float = Field(
        default=60.0, ge=0.0, le=100.0, description="Confidence of GPS fallback"
    )
    fallback_radius_m: int = Field(default=5000, ge=1, description="Fallback radius")
    geolocation_timeout_seconds: float = Field(
        default=5.0, gt=0, description="Position lookup budget"
    )
    default_latitude: float | None = Field(
        default=None, ge=-90.0, le=90.0, description="Static device latitude"
    )
    default_longitude: float | None = Field(
        default=None, ge=-180.0, le=180.0, description="Static device longitude"
    )

    # Cache settings
    recognition_cache_max_size: int = Field(default=200, ge=1, description="Entries")
    recognition_cache_max_memory: int = Field(
        default=100 * 1024 * 1024, ge=1, description="Bytes"
    )
    location_cache_max_size: int = Field(default=500, ge=1, description="Entries")
    location_cache_max_memory: int = Field(
        default=50 * 1024 * 1024, ge=1, description="Bytes"
    )
    enable_cache_persistence: bool = Field(
        default=True, description="Snapshot caches to disk"
    )
    cache_persistence_dir: str = Field(
        default=".landmark_cache", description="Snapshot directory"
    )
    cache_snapshot_max_age_seconds: int = Field(
        default=7 * DAY_SECONDS, ge=0, description="Snapshot freshness window"
    )
    cache_cleanup_interval_seconds: float = Field(
        default=300.0, gt=0, description="Expiry sweep interval"
    )

    # Image optimization settings
    enable_image_compression: bool = Field(default=True, description="Re-encode")
    max_image_bytes: int = Field(
        default=2 * 1024 * 1024, ge=1, description="Size ceiling in bytes"
    )
    max_image_dimension: int = Field(default=1920, ge=16, description="Max edge px")
    compression_quality: float = Field(
        default=0.8, gt=0.0, le=1.0, description="Encoder quality factor"
    )
    enable_background_worker: bool = Field(
        default=True, description="Resize on a worker thread"
    )

    # Request batching
    batch_api_requests: bool = Field(default=True, description="Queue API requests")
    request_batch_size: int = Field(default=3, ge=1, description="Batch size")
    request_delay_ms: int = Field(default=100, ge=0, description="Inter-request delay")
    batch_delay_ms: int = Field(default=500, ge=0, description="Inter-batch delay")

    @property
    def allowed_origins_list(self) -> List[str]:
        """Get allowed origins as list."""
        return [origin.strip() for origin in self.allowed_origins.split(",")]

    @property
    def vision_configured(self) -> bool:
        """Check whether a vision credential is present."""
        return bool(self.google_vision_api_key)

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.app_env == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.app_env == "production"


# Global configuration instance
config = AppConfig()
