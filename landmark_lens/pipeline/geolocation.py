"""
Device position providers.

A position lookup either yields coordinates or nothing; missing
permission, missing hardware and timeouts all mean "no position".
"""

import asyncio
from typing import Optional, Protocol, runtime_checkable

from landmark_lens.models.landmark import Coordinates
from landmark_lens.utils.logger import get_logger

logger = get_logger(__name__)


@runtime_checkable
class GeolocationProvider(Protocol):
    """Source of the caller's current position."""

    async def current_position(self) -> Optional[Coordinates]:
        ...


class StaticGeolocation:
    """Fixed position, typically configured for a kiosk or test device."""

    def __init__(self, coordinates: Optional[Coordinates] = None):
        self._coordinates = coordinates

    async def current_position(self) -> Optional[Coordinates]:
        return self._coordinates


class NoGeolocation:
    """Provider for deployments without any position source."""

    async def current_position(self) -> Optional[Coordinates]:
        return None


async def locate_within(
    provider: Optional[GeolocationProvider], timeout_seconds: float
) -> Optional[Coordinates]:
    """
    Ask a provider for the current position within a time budget.

    Args:
        provider: Position source, or None
        timeout_seconds: Lookup budget

    Returns:
        Coordinates, or None on timeout, refusal or provider failure
    """
    if provider is None:
        return None

    try:
        return await asyncio.wait_for(provider.current_position(), timeout=timeout_seconds)
    except asyncio.TimeoutError:
        logger.info("Position lookup timed out", timeout=timeout_seconds)
    except Exception as e:
        logger.info("Position unavailable", error=str(e))
    return None
