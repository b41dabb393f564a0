import logging
from collections.abc import Iterable

from mapsync.commands import (
    GATED_ROLES,
    LINE_STYLES,
    AddMarker,
    AddRouteLayer,
    ClearMarkers,
    FitBounds,
    FlyTo,
    MapCommand,
    MarkerRole,
    RemoveMarker,
    RemoveRouteLayer,
    RouteSlot,
    SetMarkersHidden,
)
from mapsync.surface import MapSurface, Unsubscribe

logger = logging.getLogger(__name__)

DEFAULT_MARKER_ZOOM_CEILING = 17.0


class MapSyncExecutor:
    """Applies map commands to a surface, tracking what is currently drawn.

    Every command is idempotent against the tracked state: removing a marker
    or layer that is not there does nothing, and adding one that already
    exists replaces it, so layers never stack. Driver markers are hidden
    while the zoom level is above the ceiling and shown again at or below
    it; hiding never removes or moves a marker.
    """

    def __init__(
        self,
        surface: MapSurface,
        marker_zoom_ceiling: float = DEFAULT_MARKER_ZOOM_CEILING,
    ):
        self._surface = surface
        self._marker_zoom_ceiling = marker_zoom_ceiling
        self._markers: dict[str, MarkerRole] = {}
        self._layers: set[RouteSlot] = set()
        self._drivers_hidden = self._should_hide(surface.get_zoom())
        self._unsubscribe: Unsubscribe | None = None

    @property
    def drivers_hidden(self) -> bool:
        return self._drivers_hidden

    def attach(self) -> None:
        """Start following the surface's zoom level."""
        if self._unsubscribe is None:
            self._unsubscribe = self._surface.on_zoom(self.handle_zoom_change)
            self.handle_zoom_change(self._surface.get_zoom())

    def detach(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def markers(self, role: MarkerRole | None = None) -> list[str]:
        return [
            marker_id
            for marker_id, marker_role in self._markers.items()
            if role is None or marker_role is role
        ]

    def has_layer(self, slot: RouteSlot) -> bool:
        return slot in self._layers

    def handle_zoom_change(self, zoom: float) -> None:
        hidden = self._should_hide(zoom)
        if hidden != self._drivers_hidden:
            logger.debug("Zoom %.1f: %s driver markers", zoom, "hiding" if hidden else "showing")
            self.apply([SetMarkersHidden(roles=GATED_ROLES, hidden=hidden)])

    def apply(self, commands: Iterable[MapCommand]) -> None:
        for command in commands:
            self._apply_one(command)

    def release_all(self) -> None:
        """Remove every marker and layer this executor has drawn."""
        for marker_id in list(self._markers):
            self._remove_marker(marker_id)
        for slot in list(self._layers):
            self._remove_layer(slot)

    def _apply_one(self, command: MapCommand) -> None:
        if isinstance(command, AddMarker):
            self._add_marker(command)
        elif isinstance(command, RemoveMarker):
            self._remove_marker(command.marker_id)
        elif isinstance(command, ClearMarkers):
            for marker_id in self.markers(command.role):
                self._remove_marker(marker_id)
        elif isinstance(command, SetMarkersHidden):
            self._set_hidden(command.roles, command.hidden)
        elif isinstance(command, AddRouteLayer):
            self._remove_layer(command.slot)
            self._surface.add_line_layer(command.slot, command.geometry, LINE_STYLES[command.slot])
            self._layers.add(command.slot)
        elif isinstance(command, RemoveRouteLayer):
            self._remove_layer(command.slot)
        elif isinstance(command, FitBounds):
            self._surface.fit_bounds(command.bounds, command.padding)
        elif isinstance(command, FlyTo):
            self._surface.fly_to(command.center, command.zoom)
        else:
            raise TypeError(f"Unknown map command: {command!r}")

    def _add_marker(self, command: AddMarker) -> None:
        self._remove_marker(command.marker_id)
        hidden = command.role.zoom_gated and self._drivers_hidden
        self._surface.add_marker(
            command.marker_id, command.role, command.coordinates, command.label, hidden
        )
        self._markers[command.marker_id] = command.role

    def _remove_marker(self, marker_id: str) -> None:
        if self._markers.pop(marker_id, None) is not None:
            self._surface.remove_marker(marker_id)

    def _remove_layer(self, slot: RouteSlot) -> None:
        if slot in self._layers:
            self._surface.remove_line_layer(slot)
            self._layers.discard(slot)

    def _set_hidden(self, roles: frozenset[MarkerRole], hidden: bool) -> None:
        # Only gated roles respond; pickup, destination and self stay visible
        gated = roles & GATED_ROLES
        if gated == GATED_ROLES:
            self._drivers_hidden = hidden
        for marker_id, role in self._markers.items():
            if role in gated:
                self._surface.set_marker_hidden(marker_id, hidden)

    def _should_hide(self, zoom: float) -> bool:
        return zoom > self._marker_zoom_ceiling
