"""
Image source models.

An image source is either an uploaded file (bytes plus metadata) or a
remote URL string.
"""

import mimetypes
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Union


@dataclass(frozen=True)
class ImageFile:
    """In-memory image file with the metadata used for cache identity."""

    name: str
    content: bytes = field(repr=False)
    last_modified: int = field(default_factory=lambda: int(time.time() * 1000))
    content_type: str = "image/jpeg"

    @property
    def size(self) -> int:
        """Get payload size in bytes."""
        return len(self.content)

    @classmethod
    def from_path(cls, path: Union[str, Path]) -> "ImageFile":
        """
        Read an image file from disk.

        Args:
            path: Local file path

        Returns:
            Image file with name, bytes and modification time
        """
        file_path = Path(path)
        content_type = mimetypes.guess_type(file_path.name)[0] or "image/jpeg"
        return cls(
            name=file_path.name,
            content=file_path.read_bytes(),
            last_modified=int(file_path.stat().st_mtime * 1000),
            content_type=content_type,
        )


ImageSource = Union[ImageFile, str]
