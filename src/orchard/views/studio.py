from __future__ import annotations

import pyray as rl

from ..assets import SpriteAssets
from ..candidate import Candidate
from ..runtime import StudioPhase, StudioRuntime
from ..sequence.player import SequencePlayer
from .textures import SpriteTextures

STATUS_COLOR = rl.Color(200, 220, 160, 255)
FRAME_BG_COLOR = rl.Color(12, 12, 14, 255)
STATUS_FONT_SIZE = 16
STATUS_MARGIN = 8


def _fit(width: int, height: int) -> tuple[float, float, float]:
    screen_w = float(rl.get_screen_width())
    screen_h = float(rl.get_screen_height() - STATUS_FONT_SIZE - STATUS_MARGIN * 2)
    zoom = min(screen_w / float(width), screen_h / float(height))
    origin_x = (screen_w - width * zoom) * 0.5
    origin_y = float(STATUS_FONT_SIZE + STATUS_MARGIN * 2) + (screen_h - height * zoom) * 0.5
    return origin_x, origin_y, zoom


def _draw_canvas(
    textures: SpriteTextures,
    candidates: tuple[Candidate, ...],
    *,
    width: int,
    height: int,
    background: int,
) -> None:
    origin_x, origin_y, zoom = _fit(width, height)
    bg = rl.Color(background, background, background, 255)
    rl.draw_rectangle(int(origin_x), int(origin_y), int(width * zoom), int(height * zoom), bg)
    rl.begin_scissor_mode(int(origin_x), int(origin_y), int(width * zoom), int(height * zoom))
    textures.draw(candidates, origin_x=origin_x, origin_y=origin_y, zoom=zoom)
    rl.end_scissor_mode()


class StudioView:
    """Live generation progress, then looping playback of the result."""

    def __init__(self, runtime: StudioRuntime, assets: SpriteAssets) -> None:
        self._runtime = runtime
        self._textures = SpriteTextures(assets)

    def open(self) -> None:
        self._textures.load()

    def close(self) -> None:
        self._runtime.cancel("window closed")
        self._textures.unload()

    def should_close(self) -> bool:
        return self._runtime.phase is StudioPhase.CANCELLED

    def update(self, dt: float) -> None:
        if rl.is_key_pressed(rl.KeyboardKey.KEY_ESCAPE):
            self._runtime.cancel("escape")
        self._runtime.update(dt)

    def _status(self) -> str:
        runtime = self._runtime
        if runtime.phase is StudioPhase.PLAYBACK and runtime.player is not None:
            player = runtime.player
            return f"playback {player.frame_index + 1}/{len(player.sequence)} @ {player.fps} fps"
        session = runtime.driver.session
        distance = runtime.driver.distance
        distance_text = "-" if distance is None else f"{distance:.4f}"
        counters = runtime.driver.counters
        evals_text = "-" if counters is None else str(counters.evaluations)
        return (
            f"frame {session.frame_index}  recorded {runtime.driver.recorder.frame_count}  "
            f"apples {len(session.composition)}  attempts {session.attempts}/{session.params.max_apples}  "
            f"evals {evals_text}  distance {distance_text}"
        )

    def draw(self) -> None:
        rl.clear_background(FRAME_BG_COLOR)
        session = self._runtime.driver.session
        _draw_canvas(
            self._textures,
            self._runtime.visible_candidates(),
            width=session.width,
            height=session.height,
            background=session.composition.background,
        )
        rl.draw_text(self._status(), STATUS_MARGIN, STATUS_MARGIN, STATUS_FONT_SIZE, STATUS_COLOR)


class SequenceView:
    def __init__(self, player: SequencePlayer, assets: SpriteAssets) -> None:
        self._player = player
        self._textures = SpriteTextures(assets)

    def open(self) -> None:
        self._textures.load()

    def close(self) -> None:
        self._player.stop()
        self._textures.unload()

    def should_close(self) -> bool:
        return self._player.stopped

    def update(self, dt: float) -> None:
        if rl.is_key_pressed(rl.KeyboardKey.KEY_ESCAPE):
            self._player.stop()
            return
        self._player.update(dt)

    def draw(self) -> None:
        rl.clear_background(FRAME_BG_COLOR)
        header = self._player.sequence.header
        _draw_canvas(
            self._textures,
            self._player.current_frame.candidates,
            width=header.width,
            height=header.height,
            background=header.background,
        )
        status = f"frame {self._player.frame_index + 1}/{len(self._player.sequence)} @ {self._player.fps} fps"
        rl.draw_text(status, STATUS_MARGIN, STATUS_MARGIN, STATUS_FONT_SIZE, STATUS_COLOR)
