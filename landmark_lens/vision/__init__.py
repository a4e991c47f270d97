"""
Landmark detection providers.
"""

from landmark_lens.vision.google_vision import GoogleVisionClient
from landmark_lens.vision.provider import BaseVisionProvider

__all__ = ["BaseVisionProvider", "GoogleVisionClient"]
