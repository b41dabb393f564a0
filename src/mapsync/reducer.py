"""Builds map command lists from booking state changes.

Functions here are pure: they only describe what the map should do. The
booking flow hands the result to a MapSyncExecutor inside the same
transition.
"""

from collections.abc import Sequence

from domain import Driver, NamedLocation
from mapsync.commands import (
    AddMarker,
    AddRouteLayer,
    ClearMarkers,
    FitBounds,
    FlyTo,
    LonLat,
    MapCommand,
    MarkerRole,
    Padding,
    RemoveMarker,
    RemoveRouteLayer,
    RouteSlot,
)

# Rider pins have one marker each, keyed by role
SELF_MARKER_ID = "self"
PICKUP_MARKER_ID = "pickup"
DESTINATION_MARKER_ID = "destination"

_ROLE_MARKER_IDS = {
    MarkerRole.SELF: SELF_MARKER_ID,
    MarkerRole.PICKUP: PICKUP_MARKER_ID,
    MarkerRole.DESTINATION: DESTINATION_MARKER_ID,
}


def driver_marker_id(role: MarkerRole, driver_id: str) -> str:
    return f"{role.value}:{driver_id}"


def place_location_marker(role: MarkerRole, location: NamedLocation) -> list[MapCommand]:
    """Replace the single marker of a rider role with one at ``location``."""
    marker_id = _ROLE_MARKER_IDS[role]
    return [
        RemoveMarker(marker_id=marker_id),
        AddMarker(
            role=role,
            marker_id=marker_id,
            coordinates=location.coordinates,
            label=location.name,
        ),
    ]


def remove_location_marker(role: MarkerRole) -> list[MapCommand]:
    return [RemoveMarker(marker_id=_ROLE_MARKER_IDS[role])]


def show_driver_markers(role: MarkerRole, drivers: Sequence[Driver]) -> list[MapCommand]:
    """Replace all markers of a driver role.

    Matched drivers are labeled "1", "2", ... in rank order; nearby drivers
    carry no label.
    """
    commands: list[MapCommand] = [ClearMarkers(role=role)]
    for rank, driver in enumerate(drivers, start=1):
        label = str(rank) if role is MarkerRole.MATCHED_DRIVER else None
        commands.append(
            AddMarker(
                role=role,
                marker_id=driver_marker_id(role, driver.id),
                coordinates=driver.current_location.coordinates,
                label=label,
            )
        )
    return commands


def clear_driver_markers(role: MarkerRole) -> list[MapCommand]:
    return [ClearMarkers(role=role)]


def show_route(slot: RouteSlot, geometry: Sequence[LonLat]) -> list[MapCommand]:
    """Draw a route in its slot, removing whatever the slot held before."""
    return [RemoveRouteLayer(slot=slot), AddRouteLayer(slot=slot, geometry=tuple(geometry))]


def remove_route(slot: RouteSlot) -> list[MapCommand]:
    return [RemoveRouteLayer(slot=slot)]


def route_bounds(geometry: Sequence[LonLat]) -> tuple[float, float, float, float]:
    lons = [lon for lon, _ in geometry]
    lats = [lat for _, lat in geometry]
    return (min(lons), min(lats), max(lons), max(lats))


def fit_route(geometry: Sequence[LonLat], vertical: int, horizontal: int) -> list[MapCommand]:
    if not geometry:
        return []
    padding = Padding(top=vertical, bottom=vertical, left=horizontal, right=horizontal)
    return [FitBounds(bounds=route_bounds(geometry), padding=padding)]


def focus_driver(driver: Driver, zoom: float) -> list[MapCommand]:
    return [FlyTo(center=driver.current_location.coordinates, zoom=zoom)]


def focus_location(location: NamedLocation, zoom: float) -> list[MapCommand]:
    return [FlyTo(center=location.coordinates, zoom=zoom)]


def discard_search(keep_direct_route: bool = False) -> list[MapCommand]:
    """Remove matched-driver pins and the combined route (and optionally the direct route)."""
    commands: list[MapCommand] = [
        ClearMarkers(role=MarkerRole.MATCHED_DRIVER),
        RemoveRouteLayer(slot=RouteSlot.COMBINED),
    ]
    if not keep_direct_route:
        commands.append(RemoveRouteLayer(slot=RouteSlot.DIRECT))
    return commands


def clear_session(default_center: LonLat, default_zoom: float) -> list[MapCommand]:
    """Return the map to its resting view after the rider clears the booking."""
    return [
        RemoveMarker(marker_id=PICKUP_MARKER_ID),
        RemoveMarker(marker_id=DESTINATION_MARKER_ID),
        ClearMarkers(role=MarkerRole.NEARBY_DRIVER),
        *discard_search(),
        FlyTo(center=default_center, zoom=default_zoom),
    ]
