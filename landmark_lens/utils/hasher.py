"""
Cache key generation utilities.

Sandi Metz Principles:
- Single Responsibility: Key derivation
- Small functions: Each does one thing
- Pure functions: No side effects
"""

import base64

from landmark_lens.models.image import ImageFile, ImageSource


def _encode(value: str) -> str:
    return base64.urlsafe_b64encode(value.encode("utf-8")).decode("ascii")


def generate_file_key(image: ImageFile) -> str:
    """
    Generate key from file metadata.

    Identity is approximated by name, size and modification time; the
    bytes are not hashed.

    Args:
        image: Image file

    Returns:
        Cache key (file_<base64>)
    """
    return f"file_{_encode(f'{image.name}_{image.size}_{image.last_modified}')}"


def generate_url_key(url: str) -> str:
    """
    Generate key from an image URL.

    Args:
        url: Image URL

    Returns:
        Cache key (url_<base64>)
    """
    return f"url_{_encode(url)}"


def generate_cache_key(source: ImageSource) -> str:
    """
    Generate cache key for an image source.

    Args:
        source: Image file or URL

    Returns:
        Deterministic cache key
    """
    if isinstance(source, ImageFile):
        return generate_file_key(source)
    return generate_url_key(source)
