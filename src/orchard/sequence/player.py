from __future__ import annotations

from pith.clock import CancelToken, FixedStepClock

from .types import RecordedFrame, Sequence


class SequencePlayer:
    """Fixed-rate looping cursor over the recorded frames of a sequence."""

    def __init__(self, sequence: Sequence, *, fps: int | None = None, cancel: CancelToken | None = None) -> None:
        if not sequence.frames:
            raise ValueError("cannot play an empty sequence")
        self._sequence = sequence
        self._clock = FixedStepClock(tick_rate=int(fps if fps is not None else sequence.header.fps))
        self._cancel = cancel if cancel is not None else CancelToken()
        self._frame_index = 0
        self._loops = 0

    @property
    def sequence(self) -> Sequence:
        return self._sequence

    @property
    def fps(self) -> int:
        return int(self._clock.tick_rate)

    @property
    def frame_index(self) -> int:
        return self._frame_index

    @property
    def loops(self) -> int:
        return self._loops

    @property
    def current_frame(self) -> RecordedFrame:
        return self._sequence.frames[self._frame_index]

    @property
    def stopped(self) -> bool:
        return self._cancel.cancelled

    def stop(self) -> None:
        self._cancel.cancel("playback stopped")

    def frame_index_at(self, seconds: float) -> int:
        ticks = int(max(0.0, float(seconds)) * self.fps + 1e-9)
        return ticks % len(self._sequence.frames)

    def seek(self, frame_index: int) -> None:
        self._frame_index = int(frame_index) % len(self._sequence.frames)
        self._clock.reset()

    def update(self, dt: float) -> int:
        """Advance by wall time `dt`; returns how many frames were stepped."""
        if self._cancel.cancelled:
            return 0
        # Playback never drops ticks: a long host frame still steps every frame.
        steps = self._clock.advance(dt, max_dt=None)
        if steps <= 0:
            return 0
        count = len(self._sequence.frames)
        total = self._frame_index + steps
        self._loops += total // count
        self._frame_index = total % count
        return steps
