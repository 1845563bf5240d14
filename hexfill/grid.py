import math
import numbers
from abc import ABC, abstractmethod
from typing import Any, List

import h3.api.basic_int as h3

from .schemas import LatLng, Ring

# Authalic Earth radius used by H3 for its km figures.
EARTH_RADIUS_KM = 6371.007180918475

MIN_RESOLUTION = 0
MAX_RESOLUTION = 15


class GridSystem(ABC):
    """
    The grid primitives the filler needs: point -> cell, cell -> neighbors,
    cell -> center and cell -> boundary, plus the size figures the
    estimator bounds against. Coordinates are (lat, lng) radians.
    """

    min_resolution = MIN_RESOLUTION
    max_resolution = MAX_RESOLUTION

    def is_valid_resolution(self, resolution: Any) -> bool:
        if isinstance(resolution, bool) or not isinstance(resolution, numbers.Integral):
            return False
        return self.min_resolution <= resolution <= self.max_resolution

    @abstractmethod
    def point_to_cell(self, lat: float, lng: float, resolution: int) -> int:
        ...

    @abstractmethod
    def neighbors_of(self, cell: int) -> List[int]:
        """Edge-adjacent cells in a deterministic order."""

    @abstractmethod
    def center_of(self, cell: int) -> LatLng:
        ...

    @abstractmethod
    def boundary_of(self, cell: int) -> Ring:
        ...

    @abstractmethod
    def min_cell_area_rads2(self, resolution: int) -> float:
        """Lower bound on any cell's area at this resolution, unit sphere."""

    @abstractmethod
    def max_cell_radius_rads(self, resolution: int) -> float:
        """Upper bound on center-to-vertex arc of any cell at this resolution."""

    @abstractmethod
    def num_cells(self, resolution: int) -> int:
        ...


class H3Grid(GridSystem):
    """
    GridSystem over h3-py (v4 API, integer cell ids).

    Holds no state, so one instance can be shared between threads.
    """

    def point_to_cell(self, lat: float, lng: float, resolution: int) -> int:
        return h3.latlng_to_cell(math.degrees(lat), math.degrees(lng), resolution)

    def neighbors_of(self, cell: int) -> List[int]:
        # grid_disk copes with pentagons, grid_ring does not
        return sorted(c for c in h3.grid_disk(cell, 1) if c != cell)

    def center_of(self, cell: int) -> LatLng:
        lat, lng = h3.cell_to_latlng(cell)
        return math.radians(lat), math.radians(lng)

    def boundary_of(self, cell: int) -> Ring:
        return tuple((math.radians(lat), math.radians(lng)) for lat, lng in h3.cell_to_boundary(cell))

    def min_cell_area_rads2(self, resolution: int) -> float:
        # Pentagons are the most distorted cells; the area factor is applied by the caller.
        smallest_km2 = min(h3.cell_area(p, unit="km^2") for p in h3.get_pentagons(resolution))
        return smallest_km2 / (EARTH_RADIUS_KM * EARTH_RADIUS_KM)

    def max_cell_radius_rads(self, resolution: int) -> float:
        edge_km = h3.average_hexagon_edge_length(resolution, unit="km")
        return 2.0 * edge_km / EARTH_RADIUS_KM

    def num_cells(self, resolution: int) -> int:
        return h3.get_num_cells(resolution)


_DEFAULT_GRID = H3Grid()


def default_grid() -> GridSystem:
    return _DEFAULT_GRID
