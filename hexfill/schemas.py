import math
from enum import Enum
from typing import Any, List, NamedTuple, Sequence, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator
from shapely.geometry import Polygon as ShapelyPolygon

from .exceptions import InvalidContainmentMode

LatLng = Tuple[float, float]
Ring = Tuple[LatLng, ...]


class ContainmentMode(str, Enum):
    CENTER = "center"
    FULL = "full"
    OVERLAPPING = "overlapping"
    OVERLAPPING_BBOX = "overlapping_bbox"

    @classmethod
    def parse(cls, value: Any) -> "ContainmentMode":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            raise InvalidContainmentMode(value) from None


def _coerce_ring(points: Any) -> Ring:
    coords: List[LatLng] = []
    for pt in points or []:
        if not isinstance(pt, (list, tuple)) or len(pt) != 2:
            raise ValueError(f"Ring vertex must be a (lat, lng) pair, got {pt!r}")
        lat, lng = float(pt[0]), float(pt[1])
        if not (math.isfinite(lat) and math.isfinite(lng)):
            raise ValueError(f"Ring vertex must be finite, got {pt!r}")
        coords.append((lat, lng))
    # Rings are implicitly closed; drop an explicit closing vertex.
    if len(coords) > 1 and coords[0] == coords[-1]:
        coords.pop()
    return tuple(coords)


class Polygon(BaseModel):
    """
    Outer ring plus holes, vertices as (lat, lng) in radians.

    Winding order does not matter. The model is frozen: fill and estimate
    only ever read it.
    """

    model_config = ConfigDict(frozen=True)

    outer: Ring = Field(default=(), description="Outer ring ([(lat, lng), ...], radians)")
    holes: Tuple[Ring, ...] = Field(default=(), description="Hole rings, same layout as outer")

    @field_validator("outer", mode="before")
    @classmethod
    def _validate_outer(cls, value: Any) -> Ring:
        return _coerce_ring(value)

    @field_validator("holes", mode="before")
    @classmethod
    def _validate_holes(cls, value: Any) -> Tuple[Ring, ...]:
        return tuple(_coerce_ring(ring) for ring in value or [])

    @property
    def num_vertices(self) -> int:
        return len(self.outer) + sum(len(ring) for ring in self.holes)

    @classmethod
    def from_degrees(
        cls,
        outer: Sequence[Sequence[float]],
        holes: Sequence[Sequence[Sequence[float]]] = (),
    ) -> "Polygon":
        """Build from (lat, lng) pairs in degrees."""
        def to_rads(ring):
            return [(math.radians(lat), math.radians(lng)) for lat, lng in ring]

        return cls(outer=to_rads(outer), holes=[to_rads(ring) for ring in holes])

    @classmethod
    def from_shapely(cls, polygon: ShapelyPolygon) -> "Polygon":
        """
        Build from a Shapely Polygon in (lng, lat) degree order (GeoJSON layout).
        """
        if polygon.is_empty:
            return cls()

        def to_rads(coords):
            return [(math.radians(y), math.radians(x)) for x, y in coords]

        return cls(
            outer=to_rads(polygon.exterior.coords),
            holes=[to_rads(ring.coords) for ring in polygon.interiors],
        )


class FillResult(NamedTuple):
    cells: List[int]
    count: int
