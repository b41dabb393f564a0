import math
from collections.abc import Iterable

import h3

from domain import Driver
from geo.distance import is_within_proximity


class DriverGeospatialIndex:
    """Spatial index of available drivers' current locations using H3 hexagonal cells.

    Built once from a read-only driver snapshot. Queries return exactly what
    the linear ``find_nearby`` filter returns, in snapshot order, but only
    examine drivers in the cells around the query point.
    """

    def __init__(self, drivers: Iterable[Driver], h3_resolution: int = 9):
        self._h3_resolution = h3_resolution
        self._edge_length_m = h3.average_hexagon_edge_length(h3_resolution, unit="m")
        self._h3_cells: dict[str, list[int]] = {}
        self._drivers: list[Driver] = []

        for driver in drivers:
            if not driver.available:
                continue
            position = len(self._drivers)
            self._drivers.append(driver)
            cell = self._get_h3_cell(driver.current_location.coordinates)
            self._h3_cells.setdefault(cell, []).append(position)

    def __len__(self) -> int:
        return len(self._drivers)

    def find_nearby(self, point: tuple[float, float], threshold_meters: float) -> list[Driver]:
        if not self._drivers:
            return []

        center_cell = self._get_h3_cell(point)
        # Enough rings to cover the full radius; one extra for points near a cell edge
        k = max(1, math.ceil(threshold_meters / self._edge_length_m) + 1)

        positions: list[int] = []
        for cell in h3.grid_disk(center_cell, k):
            positions.extend(self._h3_cells.get(cell, ()))

        positions.sort()
        return [
            self._drivers[position]
            for position in positions
            if is_within_proximity(
                point, self._drivers[position].current_location.coordinates, threshold_meters
            )
        ]

    def _get_h3_cell(self, coordinates: tuple[float, float]) -> str:
        lon, lat = coordinates
        return h3.latlng_to_cell(lat, lon, self._h3_resolution)
