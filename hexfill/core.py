import logging
from collections import deque
from typing import Callable, Iterator, List, MutableSequence, Optional, Union

import numpy as np
from shapely.prepared import prep

from .config import settings
from .estimate import estimate_max_cells, validate_resolution
from .exceptions import BufferTooSmall, DegenerateSeed, FillCancelled
from .geometry import PolygonFrame, cell_bbox_shape
from .grid import GridSystem, default_grid
from .schemas import ContainmentMode, FillResult, Polygon

logger = logging.getLogger(__name__)

ModeLike = Union[ContainmentMode, str, None]
CancelCheck = Callable[[], bool]


def _seed_cells(frame: PolygonFrame, resolution: int, grid: GridSystem) -> List[int]:
    """
    Cells under every interior point, then under every outer vertex.

    Raises DegenerateSeed when the outer ring has no interior point.
    """
    if frame.is_degenerate:
        raise DegenerateSeed("zero-area outer ring")
    points = frame.interior_points()
    if not points:
        raise DegenerateSeed("no interior point inside outer ring")

    seeds: List[int] = []
    seen = set()
    for lat, lng in list(points) + list(frame.polygon.outer):
        cell = grid.point_to_cell(lat, lng, resolution)
        if cell not in seen:
            seen.add(cell)
            seeds.append(cell)
    return seeds


def _expand(
    frame: PolygonFrame,
    seeds: List[int],
    mode: ContainmentMode,
    grid: GridSystem,
    cancel: Optional[CancelCheck] = None,
) -> Iterator[int]:
    """
    Breadth-first frontier from the seeds, yielding covered cells.

    A cell keeps the frontier going when its center is inside the polygon or
    its lat/lng box touches the polygon, which is a superset of every
    containment mode, so thin parts of the polygon are not cut off. Each
    cell is visited once.
    """
    shape = frame.shape
    prepared = prep(shape) if not shape.is_empty else None
    interval = settings.cancel_check_interval

    visited = set(seeds)
    frontier = deque(seeds)
    processed = 0
    while frontier:
        cell = frontier.popleft()
        if cancel is not None and processed % interval == 0 and cancel():
            raise FillCancelled(processed)
        processed += 1

        center = grid.center_of(cell)
        center_inside = frame.contains(*center)

        cell_shape = None
        if prepared is not None and (mode is not ContainmentMode.CENTER or not center_inside):
            cell_shape = frame.cell_shape(grid.boundary_of(cell), center)
        bbox_hit = cell_shape is not None and prepared.intersects(cell_bbox_shape(cell_shape))

        if not (center_inside or bbox_hit):
            continue

        if mode is ContainmentMode.CENTER:
            covered = center_inside
        elif mode is ContainmentMode.OVERLAPPING_BBOX:
            covered = bbox_hit
        elif cell_shape is None:
            covered = False
        elif mode is ContainmentMode.FULL:
            covered = prepared.covers(cell_shape)
        else:
            covered = prepared.intersects(cell_shape)
        if covered:
            yield cell

        for neighbor in grid.neighbors_of(cell):
            if neighbor not in visited:
                visited.add(neighbor)
                frontier.append(neighbor)

    logger.debug("frontier exhausted after %s cells", processed)


def fill(
    polygon: Polygon,
    resolution: int,
    output_capacity: int,
    mode: ModeLike = None,
    cancel: Optional[CancelCheck] = None,
    grid: Optional[GridSystem] = None,
) -> FillResult:
    """
    Enumerate the grid cells covered by a polygon.

    Args:
        polygon: Outer ring plus holes, (lat, lng) radians.
        resolution: Grid resolution (0-15 for H3).
        output_capacity: Most cells the caller can take, normally the value
                         of estimate_max_cells() for the same inputs.
        mode: "center" (default), "full", "overlapping" or "overlapping_bbox".
        cancel: Optional zero-argument callable polled during expansion,
                e.g. threading.Event().is_set.
        grid: Grid primitives, H3 by default.

    Returns:
        FillResult(cells, count), cells in discovery order, no duplicates.

    Raises:
        InvalidResolution, InvalidContainmentMode, BufferTooSmall, FillCancelled.
        A polygon without an interior gives an empty result, not an error.
    """
    grid = grid or default_grid()
    resolution = validate_resolution(resolution, grid)
    mode = ContainmentMode.parse(mode or settings.default_mode)
    if output_capacity < 0:
        raise ValueError(f"output_capacity must be >= 0, got {output_capacity}")

    frame = PolygonFrame(polygon)
    try:
        seeds = _seed_cells(frame, resolution, grid)
    except DegenerateSeed as e:
        logger.debug("Empty fill: %s", e.payload.get("reason"))
        return FillResult([], 0)

    cells: List[int] = []
    for cell in _expand(frame, seeds, mode, grid, cancel):
        if len(cells) >= output_capacity:
            raise BufferTooSmall(output_capacity, resolution)
        cells.append(cell)

    logger.debug(
        "fill res=%s mode=%s seeds=%s cells=%s capacity=%s",
        resolution, mode.value, len(seeds), len(cells), output_capacity,
    )
    return FillResult(cells, len(cells))


def allocate_buffer(capacity: int) -> np.ndarray:
    """Zeroed uint64 buffer for fill_into()."""
    return np.zeros(capacity, dtype=np.uint64)


def fill_into(
    buffer: MutableSequence[int],
    polygon: Polygon,
    resolution: int,
    mode: ModeLike = None,
    cancel: Optional[CancelCheck] = None,
    grid: Optional[GridSystem] = None,
) -> int:
    """
    fill() writing into a caller-owned buffer; capacity is len(buffer).

    Unused slots are zeroed (0 is never a valid cell id). Nothing is written
    when the fill raises.
    """
    result = fill(polygon, resolution, len(buffer), mode=mode, cancel=cancel, grid=grid)
    for i, cell in enumerate(result.cells):
        buffer[i] = cell
    if isinstance(buffer, np.ndarray):
        buffer[result.count:] = 0
    else:
        for i in range(result.count, len(buffer)):
            buffer[i] = 0
    return result.count


def polygon_to_cells(
    polygon: Polygon,
    resolution: int,
    mode: ModeLike = None,
    grid: Optional[GridSystem] = None,
) -> List[int]:
    """
    Estimate, then fill with that capacity.
    """
    capacity = estimate_max_cells(polygon, resolution, mode=mode, grid=grid)
    return fill(polygon, resolution, capacity, mode=mode, grid=grid).cells
