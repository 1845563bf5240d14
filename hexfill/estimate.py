import logging
import math
from typing import Optional, Union

from .config import settings
from .exceptions import InvalidResolution
from .geometry import HALF_PI, TWO_PI, PolygonFrame, bbox_area_rads2
from .grid import GridSystem, default_grid
from .schemas import ContainmentMode, Polygon

logger = logging.getLogger(__name__)


def validate_resolution(resolution: int, grid: GridSystem) -> int:
    if not grid.is_valid_resolution(resolution):
        raise InvalidResolution(resolution, grid.min_resolution, grid.max_resolution)
    return int(resolution)


def estimate_max_cells(
    polygon: Polygon,
    resolution: int,
    mode: Union[ContainmentMode, str, None] = None,
    grid: Optional[GridSystem] = None,
) -> int:
    """
    Upper bound on the number of cells fill() can return for this polygon.

    Any emitted cell touches the polygon's bounding box, so it lies inside
    that box grown by a cell diameter. The grown box's spherical area over
    the smallest possible cell area bounds the count; the vertex count and a
    fixed buffer are added on top, and the total is capped at the number of
    cells in the grid.

    Args:
        polygon: Outer ring plus holes, radians.
        resolution: Grid resolution (0-15 for H3).
        mode: Containment mode; the bound holds for all of them, the value
              is only validated.
        grid: Grid primitives, H3 by default.

    Returns:
        Cell count the caller should allocate for.
    """
    grid = grid or default_grid()
    resolution = validate_resolution(resolution, grid)
    ContainmentMode.parse(mode or settings.default_mode)

    frame = PolygonFrame(polygon)
    if frame.is_degenerate:
        return settings.degenerate_estimate

    bbox = frame.bbox
    margin = settings.radius_margin_factor * grid.max_cell_radius_rads(resolution)
    north = bbox.north + margin
    south = bbox.south - margin
    if north >= HALF_PI or south <= -HALF_PI:
        width = TWO_PI
    else:
        widest_lat = max(abs(north), abs(south))
        width = bbox.width + 2.0 * margin / math.cos(widest_lat)
    area = bbox_area_rads2(north, south, width)

    min_cell_area = settings.pentagon_area_factor * grid.min_cell_area_rads2(resolution)
    estimate = int(math.ceil(area / min_cell_area))
    estimate = max(estimate, polygon.num_vertices)
    estimate += settings.estimate_buffer
    estimate = min(estimate, grid.num_cells(resolution))

    logger.debug(
        "estimate res=%s bbox_area=%.3g min_cell_area=%.3g -> %s",
        resolution, area, min_cell_area, estimate,
    )
    return estimate
