"""
Tests for position providers.
"""

import asyncio

import pytest

from landmark_lens.models.landmark import Coordinates
from landmark_lens.pipeline.geolocation import (
    GeolocationProvider,
    NoGeolocation,
    StaticGeolocation,
    locate_within,
)


class SlowGeolocation:
    async def current_position(self):
        await asyncio.sleep(5)


class RefusingGeolocation:
    async def current_position(self):
        raise PermissionError("User denied Geolocation")


class TestLocateWithin:
    """Test bounded position lookup."""

    @pytest.mark.asyncio
    async def test_static_position(self):
        """Test configured position is returned."""
        position = Coordinates(lat=48.8584, lng=2.2945)

        assert await locate_within(StaticGeolocation(position), 1.0) == position

    @pytest.mark.asyncio
    async def test_no_provider(self):
        """Test missing provider yields nothing."""
        assert await locate_within(None, 1.0) is None
        assert await locate_within(NoGeolocation(), 1.0) is None

    @pytest.mark.asyncio
    async def test_timeout_yields_none(self):
        """Test slow provider is abandoned."""
        assert await locate_within(SlowGeolocation(), 0.01) is None

    @pytest.mark.asyncio
    async def test_refusal_yields_none(self):
        """Test provider errors are absorbed."""
        assert await locate_within(RefusingGeolocation(), 1.0) is None

    def test_protocol(self):
        """Test providers satisfy the protocol."""
        assert isinstance(StaticGeolocation(), GeolocationProvider)
        assert isinstance(NoGeolocation(), GeolocationProvider)
