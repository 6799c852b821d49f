"""
Render a video as a live mosaic of apple emoji.

Each frame is drawn into an offscreen raster, sampled on a fixed grid,
thresholded on its red channel and redrawn as apples on a white field.
"""

from .effects import MosaicEffect, dark_cells
from .layout import (CellSize, DegenerateGridError, Resolution,
                     SurfaceDimensions, compute_cell_size, grid_points)
from .loop import AnimationLoop, LoopState, ManualScheduler
from .processor import PlaybackError
from .raster import Rasterizer, RenderContextError
from .settings import MosaicSettings

__all__ = [
    'AnimationLoop',
    'CellSize',
    'DegenerateGridError',
    'LoopState',
    'ManualScheduler',
    'MosaicEffect',
    'MosaicSettings',
    'PlaybackError',
    'Rasterizer',
    'RenderContextError',
    'Resolution',
    'SurfaceDimensions',
    'compute_cell_size',
    'dark_cells',
    'grid_points',
]
