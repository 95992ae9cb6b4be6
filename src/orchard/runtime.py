from __future__ import annotations

from enum import Enum

from pith.clock import CancelToken

from .candidate import Candidate
from .driver import FrameConvergenceDriver, TickReport
from .sequence.player import SequencePlayer
from .sequence.types import Sequence


class StudioPhase(Enum):
    GENERATING = "generating"
    PLAYBACK = "playback"
    CANCELLED = "cancelled"


class StudioRuntime:
    """Generation then playback, driven from one host loop.

    The driver owns the working composition until its source is exhausted;
    playback then only reads recorded frames.
    """

    def __init__(
        self,
        driver: FrameConvergenceDriver,
        *,
        playback_fps: int | None = None,
        cancel: CancelToken | None = None,
    ) -> None:
        self._driver = driver
        self._playback_fps = playback_fps
        self._cancel = cancel if cancel is not None else CancelToken()
        self._phase = StudioPhase.GENERATING
        self._sequence: Sequence | None = None
        self._player: SequencePlayer | None = None
        self._last_report: TickReport | None = None

    @property
    def phase(self) -> StudioPhase:
        return self._phase

    @property
    def driver(self) -> FrameConvergenceDriver:
        return self._driver

    @property
    def sequence(self) -> Sequence | None:
        return self._sequence

    @property
    def player(self) -> SequencePlayer | None:
        return self._player

    @property
    def last_report(self) -> TickReport | None:
        return self._last_report

    def cancel(self, reason: str = "") -> None:
        self._cancel.cancel(reason)

    def visible_candidates(self) -> tuple[Candidate, ...]:
        if self._phase is StudioPhase.PLAYBACK and self._player is not None:
            return self._player.current_frame.candidates
        if self._phase is StudioPhase.GENERATING:
            return self._driver.session.composition.candidates
        return ()

    def _enter_playback(self) -> None:
        sequence = self._driver.recorder.finish()
        self._sequence = sequence
        if not sequence.frames:
            self._phase = StudioPhase.CANCELLED
            return
        self._player = SequencePlayer(sequence, fps=self._playback_fps, cancel=self._cancel)
        self._phase = StudioPhase.PLAYBACK

    def update(self, dt: float) -> None:
        if self._phase is StudioPhase.CANCELLED:
            return
        if self._cancel.cancelled:
            if self._phase is StudioPhase.GENERATING:
                self._driver.cancel(self._cancel.reason)
                self._last_report = self._driver.tick()
            self._phase = StudioPhase.CANCELLED
            return
        if self._phase is StudioPhase.GENERATING:
            self._last_report = self._driver.tick()
            if self._driver.finished:
                self._enter_playback()
            return
        if self._player is not None:
            self._player.update(dt)
