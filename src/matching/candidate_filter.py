"""Geographic pre-filters over the driver snapshot.

Both filters preserve the input order of ``drivers``; the match ranking
relies on it to break distance ties.
"""

import logging
from collections.abc import Iterable

from domain import Driver
from geo.distance import distance_km, is_within_proximity

logger = logging.getLogger(__name__)

DEFAULT_THRESHOLD_KM = 3.0
DEFAULT_NEARBY_THRESHOLD_M = 100.0


def is_route_compatible(
    rider_start: tuple[float, float],
    rider_end: tuple[float, float],
    driver: Driver,
    threshold_km: float = DEFAULT_THRESHOLD_KM,
) -> bool:
    """True when both endpoint legs are independently within the threshold.

    The pickup leg compares the rider's start with the driver's current
    location; the destination leg compares the two destinations. A short
    combined distance does not compensate for one leg being too far.
    """
    pickup_leg_km = distance_km(rider_start, driver.current_location.coordinates)
    if pickup_leg_km > threshold_km:
        return False
    destination_leg_km = distance_km(rider_end, driver.destination.coordinates)
    return destination_leg_km <= threshold_km


def find_candidates(
    rider_start: tuple[float, float],
    rider_end: tuple[float, float],
    drivers: Iterable[Driver],
    threshold_km: float = DEFAULT_THRESHOLD_KM,
) -> list[Driver]:
    """Available drivers whose route is compatible with the rider's trip."""
    candidates = [
        driver
        for driver in drivers
        if driver.available and is_route_compatible(rider_start, rider_end, driver, threshold_km)
    ]
    logger.debug("Found %d candidates within %.1fkm", len(candidates), threshold_km)
    return candidates


def find_nearby(
    point: tuple[float, float],
    drivers: Iterable[Driver],
    threshold_meters: float = DEFAULT_NEARBY_THRESHOLD_M,
) -> list[Driver]:
    """Available drivers currently within ``threshold_meters`` of ``point``.

    Destination is ignored; this only feeds the nearby-driver map pins.
    """
    return [
        driver
        for driver in drivers
        if driver.available
        and is_within_proximity(point, driver.current_location.coordinates, threshold_meters)
    ]
