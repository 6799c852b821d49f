import logging
import os
import time

import cv2
from PIL import Image

logger = logging.getLogger(__name__)


class PlaybackError(RuntimeError):
    """Raised when a video cannot be opened or started."""


class VideoProcessor:
    def __init__(self, video_path, loop=False, clock=time.monotonic):
        if not os.path.exists(video_path):
            raise FileNotFoundError(f"Video file not found: {video_path}")

        self.video_path = video_path
        self.loop = loop
        self.cap = cv2.VideoCapture(video_path)

        if not self.cap.isOpened():
            raise PlaybackError(f"Could not open video file: {video_path}")

        self.width = int(self.cap.get(cv2.CAP_PROP_FRAME_WIDTH))
        self.height = int(self.cap.get(cv2.CAP_PROP_FRAME_HEIGHT))
        self.fps = self.cap.get(cv2.CAP_PROP_FPS)
        self.frame_count = int(self.cap.get(cv2.CAP_PROP_FRAME_COUNT))
        self.duration = self.frame_count / self.fps if self.fps > 0 else 0

        self._clock = clock
        self._started_at = None
        self._position = -1  # index of the last decoded frame
        self._frame = None
        self._loaded = False
        self._listeners = []

    def get_metadata(self):
        return {
            "width": self.width,
            "height": self.height,
            "fps": self.fps,
            "frame_count": self.frame_count,
            "duration": self.duration,
        }

    def on_loaded_data(self, callback):
        """
        Register a callback receiving (width, height) once the first frame
        is decoded. Fires immediately if that already happened.
        """
        self._listeners.append(callback)
        if self._loaded:
            callback(self.width, self.height)

    def play(self):
        """
        Start muted playback from the first frame.

        Returns:
            True once the first frame is decoded.

        Raises:
            PlaybackError: if no frame can be decoded.
        """
        self.cap.set(cv2.CAP_PROP_POS_FRAMES, 0)
        self._position = -1
        if not self._advance():
            raise PlaybackError(
                f"Could not decode a frame from {self.video_path}")

        self._started_at = self._clock()
        if not self._loaded:
            self._loaded = True
            # Container headers can lie, trust the decoded frame
            self.height, self.width = self._frame.shape[:2]
            logger.info("Loaded %s: %dx%d @ %.2f fps",
                        os.path.basename(self.video_path),
                        self.width, self.height, self.fps)
            for callback in self._listeners:
                callback(self.width, self.height)
        return True

    def current_frame(self):
        """
        Return the frame matching the elapsed playback time as an RGB
        PIL Image, or None before playback started.

        Past the end of the stream the last frame is held, unless the
        processor loops.
        """
        if self._started_at is None:
            return None

        elapsed = self._clock() - self._started_at
        target = int(elapsed * self.fps) if self.fps > 0 else self._position + 1

        if self.loop and self.frame_count > 0 and target >= self.frame_count:
            # Restart the clock on the loop boundary
            self._started_at += (target // self.frame_count) * (self.frame_count / self.fps)
            target %= self.frame_count
        elif self.frame_count > 0:
            target = min(target, self.frame_count - 1)
        if target < self._position:
            self.cap.set(cv2.CAP_PROP_POS_FRAMES, 0)
            self._position = -1

        while self._position < target:
            # Skipped frames only need to be grabbed, not converted
            if self._position < target - 1:
                if not self.cap.grab():
                    break
                self._position += 1
            elif not self._advance():
                break

        return self._to_pil(self._frame)

    def frames(self):
        """Yield every frame of the video in order, as RGB PIL Images."""
        self.cap.set(cv2.CAP_PROP_POS_FRAMES, 0)
        while True:
            ret, frame = self.cap.read()
            if not ret:
                break
            yield self._to_pil(frame)

    def close(self):
        self.cap.release()

    def _advance(self):
        ret, frame = self.cap.read()
        if not ret:
            return False
        self._frame = frame
        self._position += 1
        return True

    def _to_pil(self, frame):
        # Convert BGR to RGB
        frame_rgb = cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)
        return Image.fromarray(frame_rgb)

    def __del__(self):
        if hasattr(self, 'cap') and self.cap.isOpened():
            self.cap.release()


class FrameSequence:
    """
    Video source over an iterable of frames, one frame per refresh.
    Used for offline rendering where every frame must be processed.
    """

    def __init__(self, frames, size=None):
        self._frames = iter(frames)
        self._pending = None
        self._listeners = []
        self.size = size
        self.exhausted = False

    def on_loaded_data(self, callback):
        self._listeners.append(callback)
        if self._pending is not None:
            callback(*self.size)

    def play(self):
        self._pending = next(self._frames, None)
        if self._pending is None:
            raise PlaybackError("Frame sequence is empty")
        if self.size is None:
            self.size = self._pending.size
        for callback in self._listeners:
            callback(*self.size)
        return True

    def current_frame(self):
        """Return the next frame, or None once the sequence is exhausted."""
        frame = self._pending
        if frame is None:
            self.exhausted = True
            return None
        self._pending = next(self._frames, None)
        return frame
