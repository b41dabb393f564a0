"""Unit conversion boundary between the directions service and match fields.

The directions service reports meters and seconds; matches and pricing work
in kilometers and minutes. Convert here and nowhere else.
"""

METERS_PER_KM = 1000.0
SECONDS_PER_MINUTE = 60.0


def meters_to_km(meters: float) -> float:
    return meters / METERS_PER_KM


def seconds_to_minutes(seconds: float) -> float:
    return seconds / SECONDS_PER_MINUTE
