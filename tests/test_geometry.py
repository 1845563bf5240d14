import math
import sys
from pathlib import Path

sys.path.append(str(Path(__file__).resolve().parent.parent))

import pytest
from pydantic import ValidationError
from shapely.geometry import Polygon as ShapelyPolygon

from hexfill.geometry import (
    PolygonFrame,
    RingFrame,
    bbox_area_rads2,
    is_transmeridian,
    wrap_lng,
)
from hexfill.schemas import ContainmentMode, Polygon


def _rads(points):
    return [(math.radians(lat), math.radians(lng)) for lat, lng in points]


def _square(lat=0.0, lng=0.0, d=1.0):
    return [(lat, lng), (lat, lng + d), (lat + d, lng + d), (lat + d, lng)]


def test_closing_vertex_is_dropped():
    ring = _square()
    polygon = Polygon.from_degrees(ring + [ring[0]])
    assert len(polygon.outer) == 4


def test_non_finite_vertex_rejected():
    with pytest.raises(ValidationError):
        Polygon(outer=[(0.0, 0.0), (0.0, float("nan")), (0.1, 0.1)])


def test_malformed_vertex_rejected():
    with pytest.raises(ValidationError):
        Polygon(outer=[(0.0, 0.0, 0.0), (0.0, 0.1, 0.0), (0.1, 0.1, 0.0)])


def test_polygon_is_frozen():
    polygon = Polygon.from_degrees(_square())
    with pytest.raises(ValidationError):
        polygon.outer = ()


def test_from_shapely_swaps_axis_order():
    shape = ShapelyPolygon(
        [(10.0, 50.0), (11.0, 50.0), (11.0, 51.0), (10.0, 51.0)],
        [[(10.2, 50.2), (10.4, 50.2), (10.4, 50.4)]],
    )
    polygon = Polygon.from_shapely(shape)
    assert polygon.outer[0] == pytest.approx((math.radians(50.0), math.radians(10.0)))
    assert len(polygon.holes) == 1
    assert polygon.num_vertices == 4 + 3


def test_containment_mode_parse():
    assert ContainmentMode.parse("FULL") is ContainmentMode.FULL
    assert ContainmentMode.parse(ContainmentMode.CENTER) is ContainmentMode.CENTER


def test_ray_cast_square():
    frame = RingFrame(tuple(_rads(_square())))
    assert frame.contains(math.radians(0.5), math.radians(0.5))
    assert not frame.contains(math.radians(1.5), math.radians(0.5))
    assert not frame.contains(math.radians(0.5), math.radians(-0.5))


def test_ray_cast_ignores_winding_order():
    clockwise = RingFrame(tuple(_rads(list(reversed(_square())))))
    assert clockwise.contains(math.radians(0.5), math.radians(0.5))


def test_hole_excludes_points():
    polygon = Polygon.from_degrees(_square(d=2.0), [_square(0.5, 0.5, 1.0)])
    frame = PolygonFrame(polygon)
    assert frame.contains(math.radians(0.25), math.radians(0.25))
    assert not frame.contains(math.radians(1.0), math.radians(1.0))


def test_transmeridian_detection_and_bbox():
    ring = _rads([(10.0, 179.0), (10.0, -179.0), (12.0, -179.0), (12.0, 179.0)])
    assert is_transmeridian(ring)
    frame = PolygonFrame(Polygon(outer=ring))
    assert frame.bbox.width == pytest.approx(math.radians(2.0))
    assert frame.contains(math.radians(11.0), math.radians(179.5))
    assert frame.contains(math.radians(11.0), math.radians(-179.5))
    assert not frame.contains(math.radians(11.0), 0.0)


def test_regular_polygon_not_transmeridian():
    assert not is_transmeridian(_rads(_square(lng=170.0, d=5.0)))


def test_wrap_lng():
    assert wrap_lng(math.pi + 0.1) == pytest.approx(-math.pi + 0.1)
    assert wrap_lng(-math.pi - 0.1) == pytest.approx(math.pi - 0.1)
    assert wrap_lng(1.0) == 1.0


def test_bbox_area_whole_sphere():
    assert bbox_area_rads2(math.pi / 2, -math.pi / 2, 2 * math.pi) == pytest.approx(4 * math.pi)
    assert bbox_area_rads2(0.1, 0.2, 1.0) == 0.0


def test_degenerate_rings():
    point = (0.1, 0.1)
    assert PolygonFrame(Polygon(outer=[point, point, point])).is_degenerate
    assert PolygonFrame(Polygon(outer=[(0.0, 0.0), (0.01, 0.01)])).is_degenerate
    assert PolygonFrame(Polygon()).is_degenerate
    assert not PolygonFrame(Polygon.from_degrees(_square())).is_degenerate


def test_symmetric_bowtie_is_not_degenerate():
    bowtie = Polygon.from_degrees([(37.0, -122.0), (38.0, -121.0), (37.0, -121.0), (38.0, -122.0)])
    frame = PolygonFrame(bowtie)
    assert not frame.is_degenerate
    assert frame.bbox.width == pytest.approx(math.radians(1.0))
    collinear = Polygon.from_degrees([(37.0, -122.0), (37.5, -121.5), (38.0, -121.0)])
    assert PolygonFrame(collinear).is_degenerate


def test_interior_points_land_inside_concave_ring():
    c_shape = Polygon.from_degrees([
        (0.0, 0.0), (0.0, 3.0), (1.0, 3.0), (1.0, 1.0),
        (2.0, 1.0), (2.0, 3.0), (3.0, 3.0), (3.0, 0.0),
    ])
    frame = PolygonFrame(c_shape)
    points = frame.interior_points()
    assert points
    for lat, lng in points:
        assert frame.contains(lat, lng)


def test_interior_points_empty_for_degenerate_ring():
    frame = PolygonFrame(Polygon(outer=[(0.1, 0.1)] * 3))
    assert frame.interior_points() == []


def test_invalid_ring_is_repaired_for_shape():
    bowtie = Polygon.from_degrees([(0.0, 0.0), (1.0, 1.0), (0.0, 1.0), (0.8, 0.0)])
    frame = PolygonFrame(bowtie)
    assert frame.shape.is_valid
    assert not frame.shape.is_empty


def test_cell_shape_stays_contiguous_across_antimeridian():
    frame = PolygonFrame(Polygon.from_degrees(_square(lng=170.0)))
    boundary = _rads([(0.0, 179.9), (0.1, -179.9), (-0.1, -179.9)])
    shape = frame.cell_shape(tuple(boundary), (0.0, math.radians(-179.95)))
    minx, _, maxx, _ = shape.bounds
    assert maxx - minx < 1.0
