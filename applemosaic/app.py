import argparse
import logging
import sys

from .layout import DegenerateGridError
from .log import setup_default_logging
from .processor import PlaybackError
from .raster import RenderContextError
from .settings import MosaicSettings

logger = logging.getLogger(__name__)


def build_parser():
    parser = argparse.ArgumentParser(
        prog="applemosaic",
        description="Play a video as a mosaic of apple emoji.")
    parser.add_argument("video", help="Source video file")
    parser.add_argument("--columns", type=int, default=15,
                        help="Glyph columns (default: 15)")
    parser.add_argument("--rows", type=int, default=15,
                        help="Glyph rows (default: 15)")
    parser.add_argument("--fps", type=float, default=60.0,
                        help="Refresh rate of the live window (default: 60)")
    parser.add_argument("--loop", action="store_true",
                        help="Restart the video when it ends")
    parser.add_argument("--font", default=None,
                        help="Color emoji font file")
    parser.add_argument("--scale", type=float, default=1.0,
                        help="Window display scale (default: 1.0)")
    parser.add_argument("--export", metavar="PATH", default=None,
                        help="Render offline to a video, .gif or directory "
                             "instead of opening a window")
    parser.add_argument("--max-frames", type=int, default=None,
                        help="Stop an export after this many frames")
    parser.add_argument("--log-level", default="INFO",
                        help="Logging level (default: INFO)")
    return parser


def settings_from_args(args):
    return MosaicSettings(
        resolution=(args.columns, args.rows),
        fps=args.fps,
        loop_video=args.loop,
        font_path=args.font,
        scale=args.scale,
    ).validate()


def run_export(args, settings):
    from .export import MosaicAssembler

    assembler = MosaicAssembler(settings, max_frames=args.max_frames)
    return assembler.export_file(args.video, args.export)


def run_window(args, settings):
    from .gui import MosaicWindow

    app = MosaicWindow(args.video, settings)
    app.start()
    app.mainloop()
    if app.error is not None:
        app.on_close()
        raise app.error


def main(argv=None):
    args = build_parser().parse_args(argv)
    setup_default_logging(args.log_level)

    try:
        settings = settings_from_args(args)
        if args.export:
            output = run_export(args, settings)
            print(f"Saved mosaic to {output}")
        else:
            run_window(args, settings)
    except (FileNotFoundError, DegenerateGridError, ValueError,
            PlaybackError, RenderContextError, RuntimeError) as e:
        logger.debug("Fatal error", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
