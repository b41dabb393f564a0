"""One-shot device geolocation with a fixed fallback."""

import asyncio
import logging
from collections.abc import Awaitable, Callable

from domain import NamedLocation

logger = logging.getLogger(__name__)

DEVICE_LOCATION_NAME = "Your location"
FALLBACK_LOCATION_NAME = "Default location"

LocationProvider = Callable[[], Awaitable[tuple[float, float] | None]]


async def locate_device(
    provider: LocationProvider | None,
    fallback: tuple[float, float],
    timeout_seconds: float = 5.0,
) -> NamedLocation:
    """Resolve the rider's position, degrading to ``fallback`` on any failure.

    The provider returns a (lon, lat) coordinate, or None when the device has
    no fix. A missing provider, a timeout, or a provider error all yield the
    fallback coordinate labeled as the default location.
    """
    if provider is None:
        logger.info("Geolocation not supported, using default location")
        return NamedLocation(coordinates=fallback, name=FALLBACK_LOCATION_NAME)

    try:
        coordinates = await asyncio.wait_for(provider(), timeout=timeout_seconds)
    except TimeoutError:
        logger.warning("Geolocation timed out after %.1fs, using default location", timeout_seconds)
        coordinates = None
    except Exception as e:
        logger.warning("Geolocation failed, using default location: %s", e)
        coordinates = None

    if coordinates is None:
        return NamedLocation(coordinates=fallback, name=FALLBACK_LOCATION_NAME)
    return NamedLocation(coordinates=coordinates, name=DEVICE_LOCATION_NAME)
