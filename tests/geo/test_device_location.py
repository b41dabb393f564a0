import asyncio

import pytest

from geo.device_location import DEVICE_LOCATION_NAME, FALLBACK_LOCATION_NAME, locate_device

FALLBACK = (105.8342, 21.0285)


async def test_device_fix_is_named_your_location():
    async def provider():
        return (105.85, 21.03)

    location = await locate_device(provider, FALLBACK)

    assert location.coordinates == (105.85, 21.03)
    assert location.name == DEVICE_LOCATION_NAME == "Your location"


async def test_missing_provider_falls_back():
    location = await locate_device(None, FALLBACK)

    assert location.coordinates == FALLBACK
    assert location.name == FALLBACK_LOCATION_NAME == "Default location"


async def test_no_fix_falls_back():
    async def provider():
        return None

    location = await locate_device(provider, FALLBACK)

    assert location.coordinates == FALLBACK


async def test_provider_error_falls_back():
    async def provider():
        raise PermissionError("User denied geolocation")

    location = await locate_device(provider, FALLBACK)

    assert location.name == FALLBACK_LOCATION_NAME


@pytest.mark.unit
async def test_timeout_falls_back():
    async def provider():
        await asyncio.sleep(10)
        return (105.85, 21.03)

    location = await locate_device(provider, FALLBACK, timeout_seconds=0.01)

    assert location.coordinates == FALLBACK
    assert location.name == FALLBACK_LOCATION_NAME
