from __future__ import annotations

import pyray as rl

from .view import View


def run_view(
    view: View,
    *,
    width: int = 960,
    height: int = 540,
    title: str = "Orchard",
    fps: int = 60,
) -> None:
    """Run a Raylib window driving `view` once per rendered frame."""
    rl.init_window(width, height, title)
    rl.set_target_fps(fps)
    open_fn = getattr(view, "open", None)
    if callable(open_fn):
        open_fn()
    should_close = getattr(view, "should_close", None)
    try:
        while not rl.window_should_close():
            if callable(should_close) and should_close():
                break
            dt = rl.get_frame_time()
            view.update(dt)
            rl.begin_drawing()
            view.draw()
            rl.end_drawing()
    finally:
        close_fn = getattr(view, "close", None)
        if callable(close_fn):
            close_fn()
        rl.close_window()
