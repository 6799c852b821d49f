from dataclasses import dataclass
from typing import Optional, Tuple

from .effects import THRESHOLD, MosaicEffect
from .layout import Resolution


@dataclass
class MosaicSettings:
    """Settings for a mosaic session."""
    resolution: Tuple[int, int] = (15, 15)  # (columns, rows)
    threshold: int = THRESHOLD
    fps: float = 60.0  # Display refresh rate
    loop_video: bool = False
    font_path: Optional[str] = None  # Searched on the host if None
    scale: float = 1.0  # Window display scale

    def grid(self) -> Resolution:
        return Resolution(*self.resolution)

    def effect(self) -> MosaicEffect:
        return MosaicEffect(self.threshold)

    def validate(self):
        columns, rows = self.resolution
        if columns <= 0 or rows <= 0:
            raise ValueError(
                f"Resolution must be positive, got {columns}x{rows}")
        if self.fps <= 0:
            raise ValueError(f"FPS must be positive, got {self.fps}")
        if self.scale <= 0:
            raise ValueError(f"Scale must be positive, got {self.scale}")
        return self
