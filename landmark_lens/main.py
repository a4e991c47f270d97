"""
Main FastAPI application.

Following Sandi Metz:
- Single Responsibility: Application setup and configuration
- Small methods: Each lifecycle stage isolated
- Clear naming: Descriptive function names
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from landmark_lens.api.middleware import RequestLoggingMiddleware, default_logging_config
from landmark_lens.api.routes import health, metrics, recognize
from landmark_lens.api.routes.health import VERSION
from landmark_lens.cache.smart_cache import DAY_MS, CacheOptions
from landmark_lens.cache.snapshot_store import FileSnapshotStore, SnapshotStore
from landmark_lens.cache.specialized import LocationCache, RecognitionCache
from landmark_lens.config import config
from landmark_lens.enrichment.wikipedia import WikipediaClient
from landmark_lens.models.landmark import Coordinates
from landmark_lens.optimization.optimizer import PerformanceOptimizer
from landmark_lens.optimization.options import OptimizationConfig
from landmark_lens.pipeline.error_classifier import ErrorClassifier
from landmark_lens.pipeline.geolocation import (
    GeolocationProvider,
    NoGeolocation,
    StaticGeolocation,
)
from landmark_lens.pipeline.recognition_service import LandmarkRecognitionService
from landmark_lens.utils.logger import get_logger, setup_logging
from landmark_lens.vision.google_vision import GoogleVisionClient

setup_logging(config.log_level, json_logs=config.is_production)
logger = get_logger(__name__)


def build_geolocation() -> GeolocationProvider:
    """Use the configured device position, if any."""
    if config.default_latitude is None or config.default_longitude is None:
        return NoGeolocation()
    return StaticGeolocation(
        Coordinates(lat=config.default_latitude, lng=config.default_longitude)
    )


class ApplicationState:
    """
    Manages application-wide state.

    Single Responsibility: Lifecycle management of shared resources.
    """

    def __init__(self) -> None:
        self.classifier: Optional[ErrorClassifier] = None
        self.vision: Optional[GoogleVisionClient] = None
        self.enrichment: Optional[WikipediaClient] = None
        self.recognition_cache: Optional[RecognitionCache] = None
        self.location_cache: Optional[LocationCache] = None
        self.optimizer: Optional[PerformanceOptimizer] = None
        self.service: Optional[LandmarkRecognitionService] = None

    async def startup(self) -> None:
        """Initialize application resources."""
        logger.info("Starting LandmarkLens", env=config.app_env)
        if not config.vision_configured:
            logger.warning("Google Vision API key missing; recognition will use fallback only")

        store: Optional[SnapshotStore] = (
            FileSnapshotStore(config.cache_persistence_dir)
            if config.enable_cache_persistence
            else None
        )
        self.recognition_cache = RecognitionCache(
            CacheOptions(
                max_size=config.recognition_cache_max_size,
                max_memory=config.recognition_cache_max_memory,
                default_ttl_ms=7 * DAY_MS,
                enable_persistence=store is not None,
                storage_key="ar_recognition_cache",
                cleanup_interval_seconds=config.cache_cleanup_interval_seconds,
                snapshot_max_age_ms=config.cache_snapshot_max_age_seconds * 1000,
            ),
            snapshot_store=store,
        )
        self.location_cache = LocationCache(
            CacheOptions(
                max_size=config.location_cache_max_size,
                max_memory=config.location_cache_max_memory,
                default_ttl_ms=30 * DAY_MS,
                enable_persistence=store is not None,
                storage_key="ar_wikipedia_cache",
                cleanup_interval_seconds=config.cache_cleanup_interval_seconds,
                snapshot_max_age_ms=config.cache_snapshot_max_age_seconds * 1000,
            ),
            snapshot_store=store,
        )
        self.recognition_cache.start_cleanup()
        self.location_cache.start_cleanup()

        self.classifier = ErrorClassifier()
        self.vision = GoogleVisionClient()
        self.enrichment = WikipediaClient(location_cache=self.location_cache)
        self.optimizer = PerformanceOptimizer(OptimizationConfig.from_settings(config))
        self.service = LandmarkRecognitionService(
            vision=self.vision,
            enrichment=self.enrichment,
            cache=self.recognition_cache,
            classifier=self.classifier,
            geolocation=build_geolocation(),
            optimizer=self.optimizer,
        )
        logger.info("LandmarkLens started successfully")

    async def shutdown(self) -> None:
        """Cleanup application resources."""
        logger.info("Shutting down LandmarkLens")
        for cache in (self.recognition_cache, self.location_cache):
            if cache is not None:
                await cache.stop_cleanup()
        if self.optimizer is not None:
            await self.optimizer.cleanup()
        for client in (self.vision, self.enrichment):
            if client is not None:
                await client.close()
        logger.info("LandmarkLens shut down successfully")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler."""
    state = ApplicationState()
    await state.startup()
    app.state.app_state = state

    yield

    await state.shutdown()


def create_application() -> FastAPI:
    """
    Create and configure FastAPI application.

    Returns:
        Configured FastAPI application instance.
    """
    app = FastAPI(
        title=config.app_name,
        description="Landmark recognition with encyclopedic enrichment",
        version=VERSION,
        docs_url="/docs" if config.is_development else None,
        redoc_url="/redoc" if config.is_development else None,
        lifespan=lifespan,
    )

    # Request logging
    app.add_middleware(RequestLoggingMiddleware, config=default_logging_config)

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.allowed_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )

    # Include routers
    app.include_router(health.router, tags=["health"])
    app.include_router(recognize.router, prefix="/api/v1", tags=["recognition"])
    app.include_router(metrics.router, prefix="/api/v1", tags=["metrics"])

    return app


app = create_application()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "landmark_lens.main:app",
        host=config.api_host,
        port=config.api_port,
        reload=config.is_development,
    )
