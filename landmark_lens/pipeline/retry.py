"""
Retry policy for recognition attempts.

Sandi Metz Principles:
- Single Responsibility: Attempt budget and backoff schedule
- Small methods: Each method < 10 lines
- Immutable: Policy fixed per call
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class RetryPolicy:
    """
    Linear backoff schedule.

    The wait after failed attempt n is base_delay_seconds * n.
    """

    max_retries: int = 2
    base_delay_seconds: float = 1.0

    @property
    def total_attempts(self) -> int:
        """Get first attempt plus retries."""
        return self.max_retries + 1

    def delay_for(self, attempt: int) -> float:
        """
        Calculate wait after a failed attempt.

        Args:
            attempt: Failed attempt number (1-indexed)

        Returns:
            Delay in seconds
        """
        return self.base_delay_seconds * attempt

    def should_retry(self, attempt: int) -> bool:
        """Check whether another attempt follows attempt n."""
        return attempt < self.total_attempts
