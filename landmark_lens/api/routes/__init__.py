"""
API Routes module.

Contains all API endpoint routers.
"""

from landmark_lens.api.routes import health, metrics, recognize

__all__ = ["health", "metrics", "recognize"]
