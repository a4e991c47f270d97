"""
Metrics endpoint for monitoring.

Sandi Metz Principles:
- Single Responsibility: Metrics exposure
- Observable: All key metrics tracked
"""

from typing import Any, Dict

from fastapi import APIRouter, Depends

from landmark_lens.api.deps import get_app_state
from landmark_lens.api.routes.health import VERSION
from landmark_lens.config import config
from landmark_lens.utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter()


@router.get("/metrics")
async def get_metrics(state=Depends(get_app_state)) -> Dict[str, Any]:  # noqa: B008
    """
    Get application metrics.

    Returns:
        Recognition counters, performance averages, cache and error statistics
    """
    service = state.service
    metrics = service.get_metrics()

    caches = {}
    for name, cache in (
        ("recognition", state.recognition_cache),
        ("location", state.location_cache),
    ):
        if cache is not None:
            caches[name] = cache.get_stats().model_dump()

    error_stats = service.classifier.get_error_stats()
    error_stats["recent_errors"] = [
        details.model_dump(mode="json") for details in error_stats["recent_errors"]
    ]

    return {
        "application": {
            "name": config.app_name,
            "environment": config.app_env,
            "version": VERSION,
        },
        "recognition": {
            **metrics.model_dump(),
            "success_rate": round(service.get_success_rate(), 2),
        },
        "performance": (
            state.optimizer.get_performance_stats() if state.optimizer is not None else {}
        ),
        "cache": caches,
        "errors": error_stats,
        "config": {
            "confidence_threshold": config.confidence_threshold,
            "max_retries": config.max_retries,
            "timeout_ms": config.timeout_ms,
            "fallback_enabled": config.enable_fallback,
            "cache_enabled": config.enable_cache,
        },
    }
