import numpy as np
from typing import List, Tuple

from .layout import CellSize, SurfaceDimensions, grid_points
from .raster import Rasterizer


THRESHOLD = 200


def dark_cells(pixels: np.ndarray,
               cell: CellSize,
               threshold: int = THRESHOLD) -> List[Tuple[int, int]]:
    """
    Decide which grid points of a pixel snapshot get a glyph.

    Only the red channel is sampled, as a brightness proxy for the
    black and white source footage. A point is dark when its red value
    is strictly below the threshold.

    Args:
        pixels: (height, width, 4) RGBA snapshot
        cell: Grid step in pixels
        threshold: Red value at and above which a cell stays blank

    Returns:
        Dark grid points in row-major order

    Raises:
        DegenerateGridError: if the cell size is zero or negative
    """
    height, width = pixels.shape[:2]
    points = grid_points(SurfaceDimensions(width, height), cell)

    data = pixels.reshape(-1)
    dark = []
    for x, y in points:
        i = (y * width + x) * 4
        if data[i] < threshold:
            dark.append((x, y))
    return dark


class MosaicEffect:
    """Re-render the raster as a grid of apples over a white field."""

    def __init__(self, threshold: int = THRESHOLD):
        self.threshold = threshold

    def process(self,
                rasterizer: Rasterizer,
                cell: CellSize) -> List[Tuple[int, int]]:
        """
        Run one mosaic pass over the frame currently on the raster.

        Args:
            rasterizer: Surface holding the freshly drawn source frame
            cell: Grid step, also used as the glyph size

        Returns:
            Grid points a glyph was drawn at
        """
        pixels = rasterizer.read_pixels()
        # Decide before clearing so a degenerate grid leaves the frame intact
        dark = dark_cells(pixels, cell, self.threshold)

        rasterizer.clear()
        for x, y in dark:
            rasterizer.draw_glyph(x, y, cell.width)
        return dark
