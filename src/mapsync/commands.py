"""Map operation commands.

Commands are plain data: the booking flow builds them through the reducer
and the executor applies them to a map surface, so the state machine can be
exercised without a real map.
"""

from enum import Enum
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field

LonLat = tuple[float, float]


class MarkerRole(str, Enum):
    SELF = "self"
    PICKUP = "pickup"
    DESTINATION = "destination"
    NEARBY_DRIVER = "nearby_driver"
    MATCHED_DRIVER = "matched_driver"

    @property
    def zoom_gated(self) -> bool:
        """Driver pins disappear when zoomed in past the ceiling; rider pins never do."""
        return self in (MarkerRole.NEARBY_DRIVER, MarkerRole.MATCHED_DRIVER)


GATED_ROLES: frozenset[MarkerRole] = frozenset(role for role in MarkerRole if role.zoom_gated)


class RouteSlot(str, Enum):
    DIRECT = "route"
    COMBINED = "combined-route"


class LineStyle(BaseModel):
    model_config = ConfigDict(frozen=True)

    color: str
    width: float
    opacity: float
    dasharray: tuple[float, ...] | None = None


LINE_STYLES: dict[RouteSlot, LineStyle] = {
    RouteSlot.DIRECT: LineStyle(color="#D64545", width=4, opacity=0.75),
    RouteSlot.COMBINED: LineStyle(color="#4A90E2", width=5, opacity=0.8, dasharray=(2, 2)),
}


class Padding(BaseModel):
    model_config = ConfigDict(frozen=True)

    top: int
    bottom: int
    left: int
    right: int


class _Command(BaseModel):
    model_config = ConfigDict(frozen=True)


class AddMarker(_Command):
    op: Literal["add_marker"] = "add_marker"
    role: MarkerRole
    marker_id: str
    coordinates: LonLat
    label: str | None = None


class RemoveMarker(_Command):
    op: Literal["remove_marker"] = "remove_marker"
    marker_id: str


class ClearMarkers(_Command):
    """Remove every marker of a role."""

    op: Literal["clear_markers"] = "clear_markers"
    role: MarkerRole


class SetMarkersHidden(_Command):
    op: Literal["set_markers_hidden"] = "set_markers_hidden"
    roles: frozenset[MarkerRole]
    hidden: bool


class AddRouteLayer(_Command):
    op: Literal["add_route_layer"] = "add_route_layer"
    slot: RouteSlot
    geometry: tuple[LonLat, ...]


class RemoveRouteLayer(_Command):
    op: Literal["remove_route_layer"] = "remove_route_layer"
    slot: RouteSlot


class FitBounds(_Command):
    op: Literal["fit_bounds"] = "fit_bounds"
    # (min_lon, min_lat, max_lon, max_lat)
    bounds: tuple[float, float, float, float]
    padding: Padding


class FlyTo(_Command):
    op: Literal["fly_to"] = "fly_to"
    center: LonLat
    zoom: float


MapCommand = Annotated[
    AddMarker
    | RemoveMarker
    | ClearMarkers
    | SetMarkersHidden
    | AddRouteLayer
    | RemoveRouteLayer
    | FitBounds
    | FlyTo,
    Field(discriminator="op"),
]
