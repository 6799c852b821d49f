"""
Grid Layout Module

Derives the glyph grid from the target resolution and the pixel size
of the raster surface.
"""

from dataclasses import dataclass
from typing import List, Tuple


class DegenerateGridError(ValueError):
    """Raised when a grid walk is requested with a zero or negative cell size."""


@dataclass(frozen=True)
class Resolution:
    """Desired glyph grid density."""
    columns: int
    rows: int


@dataclass(frozen=True)
class SurfaceDimensions:
    """Pixel size of the raster surface."""
    width: int
    height: int


@dataclass(frozen=True)
class CellSize:
    """Pixel size of one grid cell."""
    width: int
    height: int

    @property
    def is_degenerate(self) -> bool:
        """True when either side cannot advance a grid walk."""
        return self.width <= 0 or self.height <= 0

    def as_tuple(self) -> Tuple[int, int]:
        return (self.width, self.height)


def compute_cell_size(surface: SurfaceDimensions,
                      resolution: Resolution) -> CellSize:
    """
    Calculate the cell size for a surface and a grid resolution.

    No validation is done: a resolution larger than the surface yields
    a zero cell size, which callers detect through `is_degenerate`.

    Args:
        surface: Pixel dimensions of the raster
        resolution: Columns and rows of the glyph grid

    Returns:
        CellSize with floor(width / columns) x floor(height / rows)
    """
    return CellSize(surface.width // resolution.columns,
                    surface.height // resolution.rows)


def grid_points(surface: SurfaceDimensions,
                cell: CellSize) -> List[Tuple[int, int]]:
    """
    Return every grid coordinate of the surface in row-major order.

    Raises:
        DegenerateGridError: if the cell size is zero or negative
    """
    if cell.is_degenerate:
        raise DegenerateGridError(
            f"Cell size {cell.width}x{cell.height} cannot tile a "
            f"{surface.width}x{surface.height} surface")

    return [(x, y)
            for y in range(0, surface.height, cell.height)
            for x in range(0, surface.width, cell.width)]
