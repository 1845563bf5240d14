"""
Planar geometry over (lat, lng) radians.

Containment is an even-odd ray cast in the lat/lng plane, the same model the
H3 library uses. Polygons that cross the antimeridian are handled by moving
every negative longitude up by 2*pi ("unwrapped" frame) before testing;
points are moved into the same frame first.
"""

import logging
import math
from typing import Iterable, List, NamedTuple, Optional, Sequence

import numpy as np
from shapely.geometry import MultiPolygon, box
from shapely.geometry import Polygon as ShapelyPolygon
from shapely.geometry.base import BaseGeometry
from shapely.validation import make_valid

from .schemas import LatLng, Polygon, Ring

logger = logging.getLogger(__name__)

TWO_PI = 2.0 * math.pi
HALF_PI = 0.5 * math.pi

# Smallest planar area (rads^2) treated as a real shape; one square metre is ~2.5e-14.
DEGENERATE_AREA_EPS = 1e-15
RADS2_PER_DEG2 = (math.pi / 180.0) ** 2

# Fraction of the vertex-to-centroid distance used for vertex-adjacent points.
VERTEX_NUDGE_STEP = 1e-3


class BBox(NamedTuple):
    """Bounding box in the unwrapped frame, so east >= west always."""

    north: float
    south: float
    east: float
    west: float

    @property
    def width(self) -> float:
        return self.east - self.west


def wrap_lng(lng: float) -> float:
    """Bring a longitude back into [-pi, pi]."""
    if lng > math.pi:
        return lng - TWO_PI
    if lng < -math.pi:
        return lng + TWO_PI
    return lng


def is_transmeridian(ring: Sequence[LatLng]) -> bool:
    """True when some edge jumps more than pi in longitude."""
    n = len(ring)
    for i in range(n):
        if abs(ring[i][1] - ring[(i + 1) % n][1]) > math.pi:
            return True
    return False


def bbox_area_rads2(north: float, south: float, width: float) -> float:
    """Spherical area of a lat/lng rectangle on the unit sphere."""
    width = min(max(width, 0.0), TWO_PI)
    north = min(north, HALF_PI)
    south = max(south, -HALF_PI)
    if north <= south:
        return 0.0
    return width * (math.sin(north) - math.sin(south))


class RingFrame:
    """A ring's vertices as numpy arrays, with edges precomputed for ray casting."""

    def __init__(self, ring: Ring, transmeridian: bool = False):
        self.size = len(ring)
        self.lat = np.array([p[0] for p in ring], dtype=np.float64)
        lng = np.array([p[1] for p in ring], dtype=np.float64)
        if transmeridian:
            lng = np.where(lng < 0.0, lng + TWO_PI, lng)
        self.lng = lng
        self._lat1 = np.roll(self.lat, -1)
        self._lng1 = np.roll(self.lng, -1)

    def contains(self, lat: float, lng: float) -> bool:
        """Even-odd ray cast towards +lng; lng must already be in this frame."""
        if self.size < 3:
            return False
        crosses = (self.lat > lat) != (self._lat1 > lat)
        if not crosses.any():
            return False
        lat0 = self.lat[crosses]
        lng0 = self.lng[crosses]
        lat1 = self._lat1[crosses]
        lng1 = self._lng1[crosses]
        x = lng0 + (lat - lat0) * (lng1 - lng0) / (lat1 - lat0)
        return bool(np.count_nonzero(x > lng) % 2)

    def bbox(self) -> Optional[BBox]:
        if self.size == 0:
            return None
        return BBox(
            north=float(self.lat.max()),
            south=float(self.lat.min()),
            east=float(self.lng.max()),
            west=float(self.lng.min()),
        )

    def to_lnglat_degrees(self) -> List[tuple]:
        return [(math.degrees(x), math.degrees(y)) for x, y in zip(self.lng, self.lat)]


def _distinct_count(ring: Ring) -> int:
    return len(set(ring))


def _polygon_parts(geom: BaseGeometry) -> BaseGeometry:
    if isinstance(geom, (ShapelyPolygon, MultiPolygon)):
        return geom
    if hasattr(geom, "geoms"):
        polygons = []
        for g in geom.geoms:
            if isinstance(g, MultiPolygon):
                polygons.extend(g.geoms)
            elif isinstance(g, ShapelyPolygon) and not g.is_empty:
                polygons.append(g)
        if polygons:
            return MultiPolygon(polygons)
    return ShapelyPolygon()


def _normalize_shape(shape: ShapelyPolygon) -> BaseGeometry:
    if shape.is_empty or shape.is_valid:
        return shape
    repaired = _polygon_parts(shape.buffer(0))
    if repaired.is_empty:
        # buffer(0) can drop every lobe of a figure-eight ring
        repaired = _polygon_parts(make_valid(shape))
    logger.warning("Invalid polygon repaired, area %.3g -> %.3g", shape.area, repaired.area)
    return repaired


class PolygonFrame:
    """
    Read-only view of a Polygon prepared for repeated containment tests.

    Holds the outer ring and holes in the unwrapped frame, the outer
    bounding box and a (repaired) Shapely twin in (lng, lat) degrees for the
    boundary-aware containment modes.
    """

    def __init__(self, polygon: Polygon):
        self.polygon = polygon
        self.transmeridian = is_transmeridian(polygon.outer)
        self.outer = RingFrame(polygon.outer, self.transmeridian)
        self.holes = [RingFrame(ring, self.transmeridian) for ring in polygon.holes]
        self.bbox = self.outer.bbox()
        self._shape: Optional[BaseGeometry] = None
        self._degenerate: Optional[bool] = None

    def to_frame_lng(self, lng: float) -> float:
        if self.transmeridian and lng < 0.0:
            return lng + TWO_PI
        return lng

    @property
    def is_degenerate(self) -> bool:
        """
        Fewer than 3 distinct outer vertices, or no area left once the outer
        ring is repaired. Lobes of a self-intersecting ring count separately.
        """
        if self._degenerate is None:
            if _distinct_count(self.polygon.outer) < 3:
                self._degenerate = True
            else:
                outer = _normalize_shape(ShapelyPolygon(self.outer.to_lnglat_degrees()))
                self._degenerate = outer.area * RADS2_PER_DEG2 <= DEGENERATE_AREA_EPS
        return self._degenerate

    def contains(self, lat: float, lng: float) -> bool:
        """Inside the outer ring and outside every hole."""
        lng = self.to_frame_lng(lng)
        if not self.outer.contains(lat, lng):
            return False
        for hole in self.holes:
            if hole.contains(lat, lng):
                return False
        return True

    @property
    def shape(self) -> BaseGeometry:
        """Shapely twin in (lng, lat) degrees, repaired when invalid."""
        if self._shape is None:
            self._shape = self._build_shape()
        return self._shape

    def _build_shape(self) -> BaseGeometry:
        if self.is_degenerate:
            return ShapelyPolygon()
        holes = [
            hole.to_lnglat_degrees()
            for hole, ring in zip(self.holes, self.polygon.holes)
            if _distinct_count(ring) >= 3
        ]
        return _normalize_shape(ShapelyPolygon(self.outer.to_lnglat_degrees(), holes))

    def cell_shape(self, boundary: Ring, center: LatLng) -> ShapelyPolygon:
        """
        A cell boundary as a Shapely polygon in this frame's degrees.

        Vertices are unwrapped around the cell center so cells straddling
        the antimeridian stay contiguous.
        """
        center_lng = self.to_frame_lng(center[1])
        coords = []
        for lat, lng in boundary:
            lng = self.to_frame_lng(lng)
            if lng - center_lng > math.pi:
                lng -= TWO_PI
            elif center_lng - lng > math.pi:
                lng += TWO_PI
            coords.append((math.degrees(lng), math.degrees(lat)))
        return ShapelyPolygon(coords)

    def interior_points(self) -> List[LatLng]:
        """
        Candidate interior seed points as real (lat, lng) radians.

        Representative point of each shape component first, then the
        centroid, then vertex-adjacent points when nothing else landed
        inside. Only points passing the ray cast are returned.
        """
        if self.is_degenerate:
            return []

        candidates: List[LatLng] = []
        shape = self.shape
        if not shape.is_empty:
            parts: Iterable[BaseGeometry] = getattr(shape, "geoms", [shape])
            for part in parts:
                pt = part.representative_point()
                candidates.append((math.radians(pt.y), math.radians(pt.x)))
        centroid_lat = float(self.outer.lat.mean())
        centroid_lng = float(self.outer.lng.mean())
        candidates.append((centroid_lat, centroid_lng))

        points = _inside_unique(self, candidates)
        if points:
            return points

        nudged = [
            (
                lat + (centroid_lat - lat) * VERTEX_NUDGE_STEP,
                lng + (centroid_lng - lng) * VERTEX_NUDGE_STEP,
            )
            for lat, lng in zip(self.outer.lat, self.outer.lng)
        ]
        return _inside_unique(self, nudged)


def _inside_unique(frame: PolygonFrame, points: Iterable[LatLng]) -> List[LatLng]:
    out: List[LatLng] = []
    seen = set()
    for lat, lng in points:
        lat, lng = float(lat), float(lng)
        if (lat, lng) in seen:
            continue
        seen.add((lat, lng))
        if frame.contains(lat, lng):
            out.append((lat, wrap_lng(lng)))
    return out


def cell_bbox_shape(cell_shape: ShapelyPolygon) -> ShapelyPolygon:
    """Axis-aligned lat/lng box around a cell shape."""
    return box(*cell_shape.bounds)
