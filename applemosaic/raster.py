"""
Raster Surface Module

Owns the RGBA pixel surface the mosaic is drawn on. The same surface
is used as scratch space for the source frame and as the displayed
result.
"""

import logging
import os
from typing import Dict, Optional, Union

import numpy as np
from PIL import Image, ImageDraw, ImageFont

from .layout import SurfaceDimensions

logger = logging.getLogger(__name__)

APPLE = "\U0001F34E"
BACKGROUND = (255, 255, 255, 255)
APPLE_RED = (214, 32, 39, 255)
LEAF_GREEN = (92, 160, 48, 255)

# Bitmap emoji fonts only load at the pixel sizes they ship strikes for
EMOJI_STRIKES = (109, 160, 136, 128, 96, 64)

# Glyph anchors, as Pillow two-letter anchors. Baselines are not supported.
ANCHOR_X = {"l": 0, "m": 1, "r": 2}  # halves of the sprite width
ANCHOR_Y = {"t": 0, "m": 1, "b": 2}

Frame = Union[Image.Image, np.ndarray]


class RenderContextError(RuntimeError):
    """Raised when the raster surface cannot be created."""


def find_emoji_font() -> Optional[str]:
    """
    Attempt to locate a system color emoji font.
    """
    common_paths = [
        "/System/Library/Fonts/Apple Color Emoji.ttc",  # macOS
        "C:\\Windows\\Fonts\\seguiemj.ttf",
        "/usr/share/fonts/truetype/noto/NotoColorEmoji.ttf",
        "/usr/share/fonts/noto/NotoColorEmoji.ttf",
        "/usr/share/fonts/google-noto-emoji/NotoColorEmoji.ttf",
        "/usr/share/fonts/noto-emoji/NotoColorEmoji.ttf",
    ]
    for path in common_paths:
        if os.path.exists(path):
            return path
    return None


def load_emoji_font(path: str) -> Optional[ImageFont.FreeTypeFont]:
    """Load an emoji font at the first pixel size it accepts."""
    for size in EMOJI_STRIKES:
        try:
            return ImageFont.truetype(path, size)
        except OSError:
            continue
    return None


class Rasterizer:
    """
    RGBA surface with the four drawing primitives the mosaic needs:
    clear, draw a source frame, read the pixels back, draw a glyph.
    """

    def __init__(self,
                 width: int = 300,
                 height: int = 150,
                 font_path: Optional[str] = None):
        """
        Initialize the raster surface.

        Args:
            width: Surface width in pixels
            height: Surface height in pixels
            font_path: Color emoji font to draw glyphs with. Searched on
                       the host when None.

        Raises:
            RenderContextError: if the surface cannot be created
        """
        self.font_path = font_path or find_emoji_font()
        self._font = load_emoji_font(self.font_path) if self.font_path else None
        if self._font is None:
            logger.warning("No usable emoji font found, drawing apple discs")
        else:
            logger.info("Using emoji font %s at %dpx",
                        self.font_path, self._font.size)

        self._sprites: Dict[int, Image.Image] = {}
        self.anchor = "mm"
        self._create_surface(width, height)

    @property
    def width(self) -> int:
        return self.surface.width

    @property
    def height(self) -> int:
        return self.surface.height

    @property
    def dimensions(self) -> SurfaceDimensions:
        return SurfaceDimensions(self.surface.width, self.surface.height)

    @property
    def anchor(self) -> str:
        """Where glyphs sit relative to their point, e.g. "mm" or "lt"."""
        return self._anchor

    @anchor.setter
    def anchor(self, value: str):
        if len(value) != 2 or value[0] not in ANCHOR_X or value[1] not in ANCHOR_Y:
            raise ValueError(f"Unsupported glyph anchor: {value!r}")
        self._anchor = value

    def resize(self, width: int, height: int):
        """Recreate the surface at a new size, filled with the background."""
        self._create_surface(width, height)

    def clear(self):
        """Fill the surface with the background and reset glyph alignment."""
        self.anchor = "mm"
        self.draw.rectangle(
            [0, 0, self.surface.width, self.surface.height], fill=BACKGROUND)

    def draw_source_frame(self, frame: Frame):
        """
        Scale a source frame over the whole surface, replacing every pixel.

        Args:
            frame: PIL Image or HxWx3 / HxWx4 uint8 array
        """
        if isinstance(frame, np.ndarray):
            frame = Image.fromarray(frame)
        if frame.mode != "RGBA":
            frame = frame.convert("RGBA")
        if frame.size != self.surface.size:
            frame = frame.resize(self.surface.size, Image.Resampling.BILINEAR)
        self.surface.paste(frame, (0, 0))

    def read_pixels(self) -> np.ndarray:
        """Return a (height, width, 4) uint8 snapshot of the surface."""
        return np.array(self.surface, dtype=np.uint8)

    def draw_glyph(self, x: int, y: int, size: int):
        """
        Draw one apple glyph anchored at (x, y).

        Args:
            x: Horizontal anchor position
            y: Vertical anchor position
            size: Glyph size in pixels
        """
        if size <= 0:
            return

        sprite = self._glyph_sprite(size)
        left = x - ANCHOR_X[self.anchor[0]] * sprite.width // 2
        top = y - ANCHOR_Y[self.anchor[1]] * sprite.height // 2
        self._composite(sprite, left, top)

    def to_image(self) -> Image.Image:
        """Return a copy of the surface."""
        return self.surface.copy()

    def _create_surface(self, width: int, height: int):
        if width <= 0 or height <= 0:
            raise RenderContextError(
                f"Invalid surface size: {width}x{height}")
        try:
            self.surface = Image.new("RGBA", (width, height), BACKGROUND)
            self.draw = ImageDraw.Draw(self.surface)
        except (ValueError, MemoryError) as e:
            raise RenderContextError(
                f"Could not create a {width}x{height} surface: {e}") from e

    def _composite(self, sprite: Image.Image, left: int, top: int):
        # alpha_composite only accepts non-negative offsets, so clip the
        # sprite to the part that overlaps the surface
        source = (max(0, -left), max(0, -top))
        dest = (max(0, left), max(0, top))
        if source[0] >= sprite.width or source[1] >= sprite.height:
            return
        if dest[0] >= self.surface.width or dest[1] >= self.surface.height:
            return
        self.surface.alpha_composite(sprite, dest=dest, source=source)

    def _glyph_sprite(self, size: int) -> Image.Image:
        sprite = self._sprites.get(size)
        if sprite is None:
            sprite = self._render_emoji(size) if self._font else None
            if sprite is None:
                sprite = self._render_fallback(size)
            self._sprites[size] = sprite
        return sprite

    def _render_emoji(self, size: int) -> Optional[Image.Image]:
        strike = self._font.size
        canvas = Image.new("RGBA", (strike * 2, strike * 2), (0, 0, 0, 0))
        ImageDraw.Draw(canvas).text((strike, strike), APPLE, font=self._font,
                                    fill=(0, 0, 0, 255), anchor="mm",
                                    embedded_color=True)
        bbox = canvas.getbbox()
        if bbox is None:
            return None

        glyph = canvas.crop(bbox)
        scale = size / max(glyph.width, glyph.height)
        target = (max(1, round(glyph.width * scale)),
                  max(1, round(glyph.height * scale)))
        return glyph.resize(target, Image.Resampling.LANCZOS)

    def _render_fallback(self, size: int) -> Image.Image:
        sprite = Image.new("RGBA", (size, size), (0, 0, 0, 0))
        draw = ImageDraw.Draw(sprite)
        draw.ellipse([0, size // 6, size - 1, size - 1], fill=APPLE_RED)
        if size >= 6:
            # Leaf
            draw.ellipse([size // 2, 0, size // 2 + size // 4, size // 5],
                         fill=LEAF_GREEN)
        return sprite
