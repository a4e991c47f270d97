"""
Performance optimization.

Image shrinking, request pacing and performance tracking.
"""

from landmark_lens.optimization.image_optimizer import (
    BackgroundExecution,
    ImageOptimizer,
    InlineExecution,
    OptimizedImage,
)
from landmark_lens.optimization.optimizer import PerformanceOptimizer
from landmark_lens.optimization.options import OptimizationConfig
from landmark_lens.optimization.performance_monitor import (
    PerformanceSample,
    PerformanceTracker,
)
from landmark_lens.optimization.request_queue import RequestPriority, RequestQueue

__all__ = [
    "BackgroundExecution",
    "ImageOptimizer",
    "InlineExecution",
    "OptimizationConfig",
    "OptimizedImage",
    "PerformanceOptimizer",
    "PerformanceSample",
    "PerformanceTracker",
    "RequestPriority",
    "RequestQueue",
]
