"""Map synchronization: booking state changes expressed as map-surface commands."""

from .commands import MapCommand, MarkerRole, RouteSlot
from .executor import MapSyncExecutor
from .surface import MapSurface, RecordingMapSurface

__all__ = [
    "MapCommand",
    "MapSurface",
    "MapSyncExecutor",
    "MarkerRole",
    "RecordingMapSurface",
    "RouteSlot",
]
