import numpy as np
from PIL import Image

from applemosaic.processor import PlaybackError


def solid_frame(width, height, red, green=None, blue=None):
    green = red if green is None else green
    blue = red if blue is None else blue
    return Image.new("RGB", (width, height), (red, green, blue))


def rgba_pixels(reds):
    """Build an RGBA snapshot from a 2D list of red values."""
    reds = np.asarray(reds, dtype=np.uint8)
    pixels = np.full(reds.shape + (4,), 255, dtype=np.uint8)
    pixels[..., 0] = reds
    return pixels


class FakeVideo:
    """Video source whose metadata arrives only when `load` is called."""

    def __init__(self, width=300, height=300, frame=None, fail=False):
        self.width = width
        self.height = height
        self.frame = frame if frame is not None else solid_frame(width, height, 100)
        self.fail = fail
        self.loaded = False
        self.playing = False
        self.listeners = []

    def on_loaded_data(self, callback):
        self.listeners.append(callback)
        if self.loaded:
            callback(self.width, self.height)

    def load(self):
        self.loaded = True
        for callback in self.listeners:
            callback(self.width, self.height)

    def play(self):
        if self.fail:
            raise PlaybackError("autoplay rejected")
        self.playing = True
        return True

    def current_frame(self):
        return self.frame if self.playing else None
