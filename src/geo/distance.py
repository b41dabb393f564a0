"""Great-circle distances between (lon, lat) coordinates.

The candidate filter compares both route endpoints against a threshold in
kilometers; nearby-driver pins use a threshold in meters around the pickup.
"""

from math import asin, cos, radians, sin, sqrt

EARTH_RADIUS_M = 6_371_000
METERS_PER_DEGREE_LAT = 111_320


def distance_meters(a: tuple[float, float], b: tuple[float, float]) -> float:
    """Haversine distance in meters. Symmetric, and zero for identical points."""
    lon1, lat1 = map(radians, a)
    lon2, lat2 = map(radians, b)
    h = sin((lat2 - lat1) / 2) ** 2 + cos(lat1) * cos(lat2) * sin((lon2 - lon1) / 2) ** 2
    return 2 * EARTH_RADIUS_M * asin(min(1.0, sqrt(h)))


def distance_km(a: tuple[float, float], b: tuple[float, float]) -> float:
    return distance_meters(a, b) / 1000.0


def is_within_proximity(
    a: tuple[float, float],
    b: tuple[float, float],
    threshold_m: float,
) -> bool:
    """Check whether two coordinates lie within ``threshold_m`` meters.

    A degree-space box rejects far points before the trigonometry. The box
    is widened by 1% so it never rejects a point the haversine check would
    accept; its longitude side grows with 1/cos(lat).
    """
    lat_span = threshold_m / METERS_PER_DEGREE_LAT * 1.01
    if abs(b[1] - a[1]) > lat_span:
        return False
    cos_lat = min(cos(radians(a[1])), cos(radians(b[1])))
    if cos_lat > 1e-6 and abs(b[0] - a[0]) > lat_span / cos_lat:
        return False
    return distance_meters(a, b) <= threshold_m
