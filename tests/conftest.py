import cv2
import numpy as np
import pytest

from applemosaic import raster

from .helpers import FakeVideo


@pytest.fixture(autouse=True)
def no_emoji_font(monkeypatch):
    """Draw the fallback apple so results don't depend on host fonts."""
    monkeypatch.setattr(raster, "find_emoji_font", lambda: None)


@pytest.fixture
def fake_video():
    return FakeVideo()


@pytest.fixture
def video_file(tmp_path):
    """
    A 10 fps, 64x48 MJPG clip of 6 frames alternating black and white.
    """
    path = str(tmp_path / "clip.avi")
    writer = cv2.VideoWriter(path, cv2.VideoWriter_fourcc(*"MJPG"), 10.0, (64, 48))
    if not writer.isOpened():
        pytest.skip("OpenCV cannot write MJPG video here")
    try:
        for i in range(6):
            value = 0 if i % 2 == 0 else 255
            writer.write(np.full((48, 64, 3), value, dtype=np.uint8))
    finally:
        writer.release()
    return path
