"""
Mosaic Export Module

Runs the mosaic pipeline headless over every frame of a source video
and writes the result as a video file, an animated GIF or an image
sequence. Frames are written as they are rendered; only GIF output
keeps them, as palette images, until the end.
"""

import logging
import os
from typing import Callable, Iterable, List, Optional

import cv2
import numpy as np
from PIL import Image

from ..loop import AnimationLoop, LoopState, ManualScheduler
from ..processor import FrameSequence, PlaybackError, VideoProcessor
from ..raster import Rasterizer
from ..settings import MosaicSettings

logger = logging.getLogger(__name__)

GIF_EXTENSIONS = ('gif',)


class MosaicAssembler:
    """
    Render mosaic frames offline and assemble them into an output file.
    """

    # Codec mappings for different formats
    CODECS = {
        'mp4': 'mp4v',
        'avi': 'XVID',
        'mov': 'mp4v',
        'mkv': 'mp4v',
    }

    def __init__(self,
                 settings: Optional[MosaicSettings] = None,
                 max_frames: Optional[int] = None):
        """
        Initialize the assembler.

        Args:
            settings: Grid, threshold and font settings
            max_frames: Stop after this many frames (all frames if None)
        """
        self.settings = (settings or MosaicSettings()).validate()
        self.max_frames = max_frames

    def render(self,
               frames: Iterable[Image.Image],
               on_frame: Callable[[Image.Image], None]) -> int:
        """
        Run the mosaic pass over a sequence of source frames.

        Each scheduler refresh processes exactly one frame, so no frame
        is skipped regardless of how long a pass takes. Source frames
        are pulled one at a time.

        Args:
            frames: Source frames as PIL Images
            on_frame: Called with each mosaic frame as soon as it is drawn

        Returns:
            Number of frames rendered

        Raises:
            ValueError: if the source has no frames
        """
        source = FrameSequence(frames)
        scheduler = ManualScheduler()
        rasterizer = Rasterizer(font_path=self.settings.font_path)
        count = 0

        def emit(raster):
            nonlocal count
            on_frame(raster.to_image())
            count += 1
            if count % 100 == 0:
                logger.info("Rendered %d frames", count)
            if self.max_frames is not None and count >= self.max_frames:
                loop.stop()

        loop = AnimationLoop(source, rasterizer, scheduler,
                             self.settings.grid(),
                             effect=self.settings.effect(),
                             on_frame=emit)
        try:
            loop.start()
        except PlaybackError as e:
            raise ValueError("No frames to export") from e

        while loop.state == LoopState.RUNNING and not source.exhausted:
            scheduler.run_pending()
        loop.stop()

        logger.info("Rendered %d mosaic frames", count)
        return count

    def export_file(self, video_path: str, output_path: str) -> str:
        """
        Render a video file and write it at the source frame rate.

        Returns:
            Path of the created file or directory
        """
        video = VideoProcessor(video_path)
        try:
            fps = video.fps if video.fps > 0 else self.settings.fps
            return self.export(video.frames(), output_path, fps)
        finally:
            video.close()

    def export(self,
               frames: Iterable[Image.Image],
               output_path: str,
               fps: float) -> str:
        """
        Render frames and write them, choosing the format from the path.

        A path with a video extension is written with OpenCV, `.gif` with
        Pillow, anything else is treated as a directory for a PNG sequence.

        Returns:
            Path of the created file or directory
        """
        ext = os.path.splitext(output_path)[1].lower().lstrip('.')
        if ext in self.CODECS:
            return self.export_video(frames, output_path, fps)
        if ext in GIF_EXTENSIONS:
            return self.export_gif(frames, output_path, fps)
        self.export_image_sequence(frames, output_path)
        return output_path

    def export_video(self,
                     frames: Iterable[Image.Image],
                     output_path: str,
                     fps: float) -> str:
        """
        Render frames straight into a video file.

        Raises:
            ValueError: if there are no frames
            RuntimeError: if the video writer cannot be opened
        """
        ext = os.path.splitext(output_path)[1].lower().lstrip('.')
        fourcc = cv2.VideoWriter_fourcc(*self.CODECS.get(ext, 'mp4v'))
        writer = None

        def write(frame):
            nonlocal writer
            if writer is None:
                # Frame size is only known once the first frame is drawn
                writer = cv2.VideoWriter(output_path, fourcc, fps, frame.size)
                if not writer.isOpened():
                    raise RuntimeError(
                        f"Could not open video writer for {output_path}")
            writer.write(self._pil_to_cv(frame))

        try:
            count = self.render(frames, write)
        finally:
            if writer is not None:
                writer.release()

        logger.info("Wrote %d frames to %s", count, output_path)
        return output_path

    def export_gif(self,
                   frames: Iterable[Image.Image],
                   output_path: str,
                   fps: float,
                   loop: int = 0) -> str:
        """
        Export frames as animated GIF.

        Args:
            frames: Source frames
            output_path: Path for output GIF file
            fps: Frames per second
            loop: Number of loops (0 = infinite)
        """
        duration = max(1, int(1000 / fps))  # Duration per frame in ms
        frames_to_save: List[Image.Image] = []

        def keep(frame):
            frames_to_save.append(frame.convert('RGB').convert(
                'P', palette=Image.Palette.ADAPTIVE, colors=256))

        self.render(frames, keep)
        frames_to_save[0].save(
            output_path,
            save_all=True,
            append_images=frames_to_save[1:],
            duration=duration,
            loop=loop,
            optimize=True
        )

        logger.info("Wrote %d frames to %s", len(frames_to_save), output_path)
        return output_path

    def export_image_sequence(self,
                              frames: Iterable[Image.Image],
                              output_dir: str,
                              prefix: str = "frame",
                              start_number: int = 1) -> List[str]:
        """
        Export frames as a numbered PNG sequence.

        Returns:
            List of created file paths
        """
        os.makedirs(output_dir, exist_ok=True)
        paths = []

        def save(frame):
            filename = f"{prefix}_{start_number + len(paths):05d}.png"
            filepath = os.path.join(output_dir, filename)
            frame.save(filepath)
            paths.append(filepath)

        self.render(frames, save)

        logger.info("Wrote %d frames to %s", len(paths), output_dir)
        return paths

    def _pil_to_cv(self, image: Image.Image) -> np.ndarray:
        """Convert PIL Image to OpenCV BGR format."""
        if image.mode != 'RGB':
            image = image.convert('RGB')
        return cv2.cvtColor(np.array(image), cv2.COLOR_RGB2BGR)
