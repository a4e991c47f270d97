"""
Durable slots for cache snapshots.

Sandi Metz Principles:
- Single Responsibility: Store and load one serialized record per key
- Interface Segregation: Three-method protocol
- Dependency Inversion: Cache depends on the protocol, not on files
"""

from pathlib import Path
from typing import Dict, Optional, Protocol, Union

from landmark_lens.utils.logger import get_logger

logger = get_logger(__name__)


class SnapshotStore(Protocol):
    """Key/value slot holding one serialized snapshot per key."""

    def load(self, key: str) -> Optional[str]:
        """Return stored payload or None."""
        ...

    def save(self, key: str, payload: str) -> None:
        """Replace stored payload."""
        ...

    def remove(self, key: str) -> None:
        """Delete stored payload if present."""
        ...


class InMemorySnapshotStore:
    """Process-local snapshot slot, mainly for tests."""

    def __init__(self) -> None:
        self._slots: Dict[str, str] = {}

    def load(self, key: str) -> Optional[str]:
        return self._slots.get(key)

    def save(self, key: str, payload: str) -> None:
        self._slots[key] = payload

    def remove(self, key: str) -> None:
        self._slots.pop(key, None)

    def __contains__(self, key: str) -> bool:
        return key in self._slots


class FileSnapshotStore:
    """
    Snapshot slot backed by one JSON file per key.

    Files are written next to each other under a single directory.
    """

    def __init__(self, directory: Union[str, Path]):
        """
        Initialize file store.

        Args:
            directory: Directory holding snapshot files (created on demand)
        """
        self._directory = Path(directory)

    def _path(self, key: str) -> Path:
        return self._directory / f"{key}.json"

    def load(self, key: str) -> Optional[str]:
        """
        Read snapshot file.

        Args:
            key: Storage key

        Returns:
            File contents or None if missing
        """
        path = self._path(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def save(self, key: str, payload: str) -> None:
        """
        Write snapshot file atomically.

        Args:
            key: Storage key
            payload: Serialized snapshot
        """
        self._directory.mkdir(parents=True, exist_ok=True)
        path = self._path(key)
        tmp_path = path.with_suffix(".tmp")
        tmp_path.write_text(payload, encoding="utf-8")
        tmp_path.replace(path)

    def remove(self, key: str) -> None:
        """
        Delete snapshot file.

        Args:
            key: Storage key
        """
        path = self._path(key)
        if path.exists():
            path.unlink()
            logger.debug("Removed cache snapshot", file=str(path))
