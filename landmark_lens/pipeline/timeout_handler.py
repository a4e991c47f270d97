"""
Recognition timeout handler.

Sandi Metz Principles:
- Single Responsibility: Bound the duration of an operation
- Small methods: Each method < 10 lines
- Clear naming: Self-documenting code
"""

import asyncio
from typing import Awaitable, Callable, Optional, TypeVar

from landmark_lens.exceptions import RecognitionTimeoutError
from landmark_lens.utils.logger import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


class TimeoutHandler:
    """
    Races an operation against a time ceiling.

    The operation is cancelled when the ceiling is reached; its outcome
    is unknown to the caller and safe to retry.
    """

    def __init__(self, timeout_ms: int = 15000):
        """
        Initialize timeout handler.

        Args:
            timeout_ms: Default ceiling in milliseconds
        """
        self._timeout_ms = timeout_ms

    async def execute(
        self,
        operation: Callable[[], Awaitable[T]],
        timeout_ms: Optional[int] = None,
    ) -> T:
        """
        Execute operation with timeout.

        Args:
            operation: Async function to execute
            timeout_ms: Optional override ceiling (uses default if None)

        Returns:
            Operation result

        Raises:
            RecognitionTimeoutError: If the ceiling is reached first
        """
        timeout = timeout_ms or self._timeout_ms

        try:
            return await asyncio.wait_for(operation(), timeout=timeout / 1000)
        except asyncio.TimeoutError as e:
            logger.error("Recognition timeout", timeout_ms=timeout)
            raise RecognitionTimeoutError(f"Recognition timeout after {timeout} ms") from e

    def get_timeout(self) -> int:
        """Get default ceiling in milliseconds."""
        return self._timeout_ms

    def update_timeout(self, timeout_ms: int) -> None:
        """
        Update default ceiling.

        Args:
            timeout_ms: New ceiling in milliseconds
        """
        self._timeout_ms = timeout_ms
        logger.info("Updated timeout", timeout_ms=timeout_ms)
