"""
Animation Loop Module

Drives the per-frame cycle: draw the current video frame into the
raster, run the mosaic pass over it, and ask the scheduler for the
next cycle.

Cycles are strictly serialized by the scheduler and run on the thread
that owns the loop, so the raster is never locked. Schedulers that
call back from another thread need their own mutual exclusion.
"""

import logging
from enum import Enum
from typing import Callable, List, Optional, Tuple

from .effects import MosaicEffect
from .layout import CellSize, Resolution, SurfaceDimensions, compute_cell_size
from .processor import PlaybackError
from .raster import Rasterizer

logger = logging.getLogger(__name__)


class LoopState(Enum):
    UNINITIALIZED = "uninitialized"
    WAITING_FOR_METADATA = "waiting_for_metadata"
    RUNNING = "running"
    STOPPED = "stopped"


class ManualScheduler:
    """
    Scheduler that queues frame requests until `run_pending` is called.
    Used for headless rendering and tests.
    """

    def __init__(self):
        self._pending: List[Tuple[int, Callable[[], None]]] = []
        self._next_handle = 0

    def request(self, callback: Callable[[], None]) -> int:
        self._next_handle += 1
        self._pending.append((self._next_handle, callback))
        return self._next_handle

    def cancel(self, handle: int):
        self._pending = [(h, cb) for h, cb in self._pending if h != handle]

    @property
    def pending(self) -> int:
        return len(self._pending)

    def run_pending(self) -> int:
        """
        Invoke the callbacks queued so far, one refresh worth.
        Requests made while running wait for the next call.

        Returns:
            Number of callbacks invoked
        """
        batch, self._pending = self._pending, []
        for _, callback in batch:
            callback()
        return len(batch)


class AnimationLoop:
    """
    Loop controller binding a video source, a raster and a scheduler.

    The grid depends on the decoded video size, which is only known
    once the source reports it, so the loop waits in
    WAITING_FOR_METADATA until both the size is known and playback
    has started.
    """

    def __init__(self,
                 video,
                 rasterizer: Rasterizer,
                 scheduler,
                 resolution: Resolution,
                 effect: Optional[MosaicEffect] = None,
                 on_frame: Optional[Callable[[Rasterizer], None]] = None):
        """
        Initialize the loop.

        Args:
            video: Source with on_loaded_data(), play() and current_frame()
            rasterizer: Surface the mosaic is drawn on
            scheduler: Object with request(callback) and cancel(handle)
            resolution: Glyph grid density
            effect: Mosaic pass, defaults to MosaicEffect()
            on_frame: Called with the rasterizer after every cycle
        """
        self.video = video
        self.rasterizer = rasterizer
        self.scheduler = scheduler
        self.resolution = resolution
        self.effect = effect or MosaicEffect()
        self.on_frame = on_frame

        self.state = LoopState.UNINITIALIZED
        self.surface: Optional[SurfaceDimensions] = None
        self.cell: Optional[CellSize] = None
        self.frame_count = 0
        self.last_glyphs: List[Tuple[int, int]] = []
        self._playing = False
        self._handle = None

    def start(self):
        """
        Subscribe to the video metadata and start playback.

        Raises:
            PlaybackError: if playback cannot start. The loop never runs.
        """
        if self.state != LoopState.UNINITIALIZED:
            raise RuntimeError(f"Loop already started ({self.state.value})")

        self._set_state(LoopState.WAITING_FOR_METADATA)
        self.video.on_loaded_data(self._on_loaded_data)
        try:
            self.video.play()
        except PlaybackError as e:
            logger.error("Playback failed to start: %s", e)
            raise

        self._playing = True
        self._maybe_run()

    def stop(self):
        """Cancel the pending cycle. No further cycles are requested."""
        if self.state == LoopState.STOPPED:
            return
        if self._handle is not None:
            self.scheduler.cancel(self._handle)
            self._handle = None
        self._set_state(LoopState.STOPPED)

    def cycle(self):
        """Render one frame and request the next cycle."""
        self._handle = None
        if self.state != LoopState.RUNNING:
            return

        frame = self.video.current_frame()
        if frame is not None:
            self.rasterizer.clear()
            self.rasterizer.draw_source_frame(frame)
            self.last_glyphs = self.effect.process(self.rasterizer, self.cell)
            self.frame_count += 1
            if self.on_frame is not None:
                self.on_frame(self.rasterizer)

        # on_frame may have stopped the loop
        if self.state == LoopState.RUNNING:
            self._handle = self.scheduler.request(self.cycle)

    def _on_loaded_data(self, width: int, height: int):
        if self.surface is not None:
            return

        self.surface = SurfaceDimensions(width, height)
        self.rasterizer.resize(width, height)
        self.cell = compute_cell_size(self.surface, self.resolution)
        logger.info("Surface %dx%d, grid %dx%d, cell %dx%d",
                    width, height,
                    self.resolution.columns, self.resolution.rows,
                    self.cell.width, self.cell.height)
        self._maybe_run()

    def _maybe_run(self):
        if (self.state == LoopState.WAITING_FOR_METADATA
                and self._playing and self.surface is not None):
            self._set_state(LoopState.RUNNING)
            self._handle = self.scheduler.request(self.cycle)

    def _set_state(self, state: LoopState):
        logger.info("Loop %s -> %s", self.state.value, state.value)
        self.state = state
