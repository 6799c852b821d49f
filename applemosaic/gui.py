import logging

import customtkinter as ctk

from .loop import AnimationLoop
from .processor import VideoProcessor
from .raster import Rasterizer
from .settings import MosaicSettings

logger = logging.getLogger(__name__)


class DesignToken:
    """Window colors and spacing"""

    BG = "#1A1A1A"
    WHITE = "#FEFEFE"
    GRAY_500 = "#737373"

    FONT_FAMILY = "Helvetica Neue"

    SPACE_SM = 8
    SPACE_MD = 16

    @staticmethod
    def get_font(size=14, weight="normal"):
        return (DesignToken.FONT_FAMILY, size, weight)


class TkScheduler:
    """
    Frame scheduler over a Tk widget's `after` queue.
    Callbacks run on the Tk main loop, one at a time.

    Tk only prints errors raised from `after` callbacks, so they are
    handed to `on_error` instead when one is given.
    """

    def __init__(self, widget, fps=60.0, on_error=None):
        self.widget = widget
        self.interval_ms = max(1, int(round(1000 / fps)))
        self.on_error = on_error

    def request(self, callback):
        if self.on_error is None:
            return self.widget.after(self.interval_ms, callback)
        return self.widget.after(self.interval_ms, self._guarded, callback)

    def _guarded(self, callback):
        try:
            callback()
        except Exception as e:
            self.on_error(e)

    def cancel(self, handle):
        self.widget.after_cancel(handle)


class MosaicWindow(ctk.CTk):
    def __init__(self, video_path, settings=None):
        super().__init__()

        self.settings = (settings or MosaicSettings()).validate()

        ctk.set_appearance_mode("dark")
        self.title("APPLE MOSAIC")
        self.configure(fg_color=DesignToken.BG)

        self.video = VideoProcessor(video_path, loop=self.settings.loop_video)
        self.rasterizer = Rasterizer(font_path=self.settings.font_path)
        self.error = None
        self.scheduler = TkScheduler(self, self.settings.fps,
                                     on_error=self.on_loop_error)
        self.loop = AnimationLoop(
            self.video,
            self.rasterizer,
            self.scheduler,
            self.settings.grid(),
            effect=self.settings.effect(),
            on_frame=self.show_frame,
        )

        self.create_ui()
        self.protocol("WM_DELETE_WINDOW", self.on_close)

    def create_ui(self):
        self.main = ctk.CTkFrame(self, fg_color="transparent")
        self.main.pack(fill="both", expand=True,
                       padx=DesignToken.SPACE_MD, pady=DesignToken.SPACE_MD)

        self.canvas_label = ctk.CTkLabel(
            self.main, text="", fg_color=DesignToken.WHITE)
        self.canvas_label.pack()

        self.status = ctk.StringVar(value="Loading video...")
        ctk.CTkLabel(
            self.main,
            textvariable=self.status,
            font=DesignToken.get_font(11),
            text_color=DesignToken.GRAY_500
        ).pack(anchor="w", pady=(DesignToken.SPACE_SM, 0))

    def start(self):
        self.loop.start()
        cell = self.loop.cell
        self.status.set(
            f"{self.video.width}x{self.video.height} px  |  "
            f"cell {cell.width}x{cell.height}")

    def show_frame(self, rasterizer):
        image = rasterizer.to_image()
        size = (int(image.width * self.settings.scale),
                int(image.height * self.settings.scale))
        # Keep a reference, Tk drops images that are garbage collected
        self._frame_image = ctk.CTkImage(
            light_image=image, dark_image=image, size=size)
        self.canvas_label.configure(image=self._frame_image)

    def on_close(self):
        self.loop.stop()
        self.video.close()
        self.destroy()

    def on_loop_error(self, error):
        """Stop on a failed cycle. `run_window` re-raises the error."""
        logger.error("Mosaic loop failed: %s", error)
        self.error = error
        self.loop.stop()
        self.quit()
