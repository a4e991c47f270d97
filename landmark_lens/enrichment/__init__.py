"""
Encyclopedic enrichment of detected landmarks.
"""

from landmark_lens.enrichment.wikipedia import WikipediaClient

__all__ = ["WikipediaClient"]
