import pytest

gui = pytest.importorskip("applemosaic.gui")


class FakeWidget:
    def __init__(self):
        self.scheduled = {}
        self.cancelled = []

    def after(self, ms, callback):
        handle = f"after#{len(self.scheduled)}"
        self.scheduled[handle] = (ms, callback)
        return handle

    def after_cancel(self, handle):
        self.cancelled.append(handle)


@pytest.mark.parametrize("fps, interval", [(60, 17), (30, 33), (1000, 1), (5000, 1)])
def test_interval_from_fps(fps, interval):
    assert gui.TkScheduler(FakeWidget(), fps).interval_ms == interval


def test_request_and_cancel():
    widget = FakeWidget()
    scheduler = gui.TkScheduler(widget, 50)
    callback = lambda: None

    handle = scheduler.request(callback)
    assert widget.scheduled[handle] == (20, callback)

    scheduler.cancel(handle)
    assert widget.cancelled == [handle]


def test_failed_cycle_reaches_error_handler():
    tkinter = pytest.importorskip("tkinter")
    from applemosaic.layout import DegenerateGridError, Resolution
    from applemosaic.loop import AnimationLoop, LoopState
    from applemosaic.raster import Rasterizer

    from .helpers import FakeVideo, solid_frame

    tcl = tkinter.Tcl()
    errors = []

    def on_error(error):
        errors.append(error)
        loop.stop()
        tcl.quit()

    video = FakeVideo(10, 10, frame=solid_frame(10, 10, 0))
    scheduler = gui.TkScheduler(tcl, 1000, on_error=on_error)
    loop = AnimationLoop(video, Rasterizer(), scheduler, Resolution(15, 15))
    loop.start()
    video.load()

    timeout = tcl.after(2000, tcl.quit)
    tcl.mainloop()
    tcl.after_cancel(timeout)

    assert [type(e) for e in errors] == [DegenerateGridError]
    assert loop.state == LoopState.STOPPED


def test_healthy_cycles_keep_running():
    tkinter = pytest.importorskip("tkinter")
    from applemosaic.layout import Resolution
    from applemosaic.loop import AnimationLoop, LoopState
    from applemosaic.raster import Rasterizer

    from .helpers import FakeVideo

    tcl = tkinter.Tcl()
    errors = []

    def stop_after_three(_):
        if loop.frame_count == 3:
            loop.stop()
            tcl.quit()

    video = FakeVideo(30, 30)
    scheduler = gui.TkScheduler(tcl, 1000, on_error=errors.append)
    loop = AnimationLoop(video, Rasterizer(), scheduler, Resolution(3, 3),
                         on_frame=stop_after_three)
    loop.start()
    video.load()

    timeout = tcl.after(2000, tcl.quit)
    tcl.mainloop()
    tcl.after_cancel(timeout)

    assert errors == []
    assert loop.frame_count == 3
    assert loop.state == LoopState.STOPPED
