from .core import allocate_buffer, fill, fill_into, polygon_to_cells
from .estimate import estimate_max_cells
from .exceptions import (
    BufferTooSmall,
    DegenerateSeed,
    FillCancelled,
    HexFillError,
    InvalidContainmentMode,
    InvalidResolution,
)
from .grid import GridSystem, H3Grid, default_grid
from .schemas import ContainmentMode, FillResult, Polygon

__version__ = "1.0.0"

__all__ = [
    "BufferTooSmall",
    "ContainmentMode",
    "DegenerateSeed",
    "FillCancelled",
    "FillResult",
    "GridSystem",
    "H3Grid",
    "HexFillError",
    "InvalidContainmentMode",
    "InvalidResolution",
    "Polygon",
    "allocate_buffer",
    "default_grid",
    "estimate_max_cells",
    "fill",
    "fill_into",
    "polygon_to_cells",
]
