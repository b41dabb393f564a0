"""Map rendering surface contract.

The engine never owns the surface lifecycle; the surrounding shell creates
and destroys it and hands it to a MapSyncExecutor.
"""

from collections.abc import Callable
from typing import Any, Protocol

from mapsync.commands import LineStyle, LonLat, MarkerRole, Padding, RouteSlot

ZoomListener = Callable[[float], None]
Unsubscribe = Callable[[], None]


class MapSurface(Protocol):
    def add_marker(
        self,
        marker_id: str,
        role: MarkerRole,
        coordinates: LonLat,
        label: str | None,
        hidden: bool,
    ) -> None: ...

    def remove_marker(self, marker_id: str) -> None: ...

    def set_marker_hidden(self, marker_id: str, hidden: bool) -> None: ...

    def add_line_layer(self, slot: RouteSlot, geometry: tuple[LonLat, ...], style: LineStyle) -> None: ...

    def remove_line_layer(self, slot: RouteSlot) -> None: ...

    def fit_bounds(self, bounds: tuple[float, float, float, float], padding: Padding) -> None: ...

    def fly_to(self, center: LonLat, zoom: float) -> None: ...

    def get_zoom(self) -> float: ...

    def on_zoom(self, listener: ZoomListener) -> Unsubscribe: ...


class RecordingMapSurface:
    """In-memory surface that records operations for a remote map to replay.

    Used by the HTTP API (the browser applies the recorded operations to its
    map) and by tests.
    """

    def __init__(self, zoom: float = 13.0) -> None:
        self.zoom = zoom
        self.markers: dict[str, dict[str, Any]] = {}
        self.layers: dict[RouteSlot, tuple[LonLat, ...]] = {}
        self.operations: list[dict[str, Any]] = []
        self._listeners: list[ZoomListener] = []

    def add_marker(
        self,
        marker_id: str,
        role: MarkerRole,
        coordinates: LonLat,
        label: str | None,
        hidden: bool,
    ) -> None:
        self.markers[marker_id] = {
            "role": role,
            "coordinates": coordinates,
            "label": label,
            "hidden": hidden,
        }
        self._record(
            "add_marker",
            marker_id=marker_id,
            role=role.value,
            coordinates=list(coordinates),
            label=label,
            hidden=hidden,
        )

    def remove_marker(self, marker_id: str) -> None:
        self.markers.pop(marker_id, None)
        self._record("remove_marker", marker_id=marker_id)

    def set_marker_hidden(self, marker_id: str, hidden: bool) -> None:
        if marker_id in self.markers:
            self.markers[marker_id]["hidden"] = hidden
        self._record("set_marker_hidden", marker_id=marker_id, hidden=hidden)

    def add_line_layer(self, slot: RouteSlot, geometry: tuple[LonLat, ...], style: LineStyle) -> None:
        self.layers[slot] = geometry
        self._record(
            "add_line_layer",
            slot=slot.value,
            geometry=[list(point) for point in geometry],
            style=style.model_dump(exclude_none=True),
        )

    def remove_line_layer(self, slot: RouteSlot) -> None:
        self.layers.pop(slot, None)
        self._record("remove_line_layer", slot=slot.value)

    def fit_bounds(self, bounds: tuple[float, float, float, float], padding: Padding) -> None:
        self._record("fit_bounds", bounds=list(bounds), padding=padding.model_dump())

    def fly_to(self, center: LonLat, zoom: float) -> None:
        self._record("fly_to", center=list(center), zoom=zoom)

    def get_zoom(self) -> float:
        return self.zoom

    def on_zoom(self, listener: ZoomListener) -> Unsubscribe:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def set_zoom(self, zoom: float) -> None:
        """Simulate the user zooming the map."""
        self.zoom = zoom
        for listener in list(self._listeners):
            listener(zoom)

    def drain_operations(self) -> list[dict[str, Any]]:
        operations, self.operations = self.operations, []
        return operations

    def _record(self, op: str, **fields: Any) -> None:
        self.operations.append({"op": op, **fields})
