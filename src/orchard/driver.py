from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from pith.clock import CancelToken

from .frames import FrameSource, FrameSourceError
from .sequence.recorder import SequenceRecorder
from .sequence.types import RecordedFrame, Sequence
from .session import GenerationSession
from .spawn import spawn
from .trace_log import FrameCounters, trace_frame, trace_log

THRESHOLD_EXPONENT = 0.25


class DriverPhase(Enum):
    PENDING = "pending"
    RUNNING = "running"
    EXHAUSTED = "exhausted"
    CANCELLED = "cancelled"
    ABORTED = "aborted"


_FINISHED_PHASES = frozenset({DriverPhase.EXHAUSTED, DriverPhase.CANCELLED, DriverPhase.ABORTED})


@dataclass(frozen=True, slots=True)
class TickReport:
    phase: DriverPhase
    spawns: int = 0
    committed: int = 0
    distance: float | None = None
    finalized: RecordedFrame | None = None


def acceptance_threshold(diff_target: float, spawned: int, max_apples: int) -> float:
    """Distance that finalizes a frame after `spawned` spawn calls."""
    ratio = min(1.0, max(0.0, float(spawned) / float(max_apples)))
    return float(diff_target) * ratio**THRESHOLD_EXPONENT


class FrameConvergenceDriver:
    """Spawns sprites frame by frame, a few spawn calls per host tick.

    A frame is finalized when its distance meets the progress-scaled
    threshold or when it has used `max_apples` spawn calls.
    """

    def __init__(
        self,
        session: GenerationSession,
        source: FrameSource,
        recorder: SequenceRecorder,
        *,
        spawns_per_tick: int | None = None,
        cancel: CancelToken | None = None,
    ) -> None:
        budget = int(spawns_per_tick if spawns_per_tick is not None else session.params.spawns_per_tick)
        if budget < 1:
            raise ValueError(f"spawns_per_tick must be >= 1, got {budget}")
        self._session = session
        self._source = source
        self._recorder = recorder
        self._budget = budget
        self._cancel = cancel if cancel is not None else CancelToken()
        self._phase = DriverPhase.PENDING
        self._distance: float | None = None
        self._counters: FrameCounters | None = None

    @property
    def session(self) -> GenerationSession:
        return self._session

    @property
    def recorder(self) -> SequenceRecorder:
        return self._recorder

    @property
    def phase(self) -> DriverPhase:
        return self._phase

    @property
    def finished(self) -> bool:
        return self._phase in _FINISHED_PHASES

    @property
    def distance(self) -> float | None:
        return self._distance

    @property
    def counters(self) -> FrameCounters | None:
        """Spawn counters of the frame in progress; None before the first frame is loaded."""
        return self._counters

    @property
    def spawns_per_tick(self) -> int:
        return self._budget

    def threshold(self) -> float:
        params = self._session.params
        return acceptance_threshold(params.diff_target, self._session.attempts, params.max_apples)

    def cancel(self, reason: str = "") -> None:
        self._cancel.cancel(reason)

    def _load_target(self) -> None:
        session = self._session
        try:
            frame = self._source.current()
            session.set_target(frame)
        except (FrameSourceError, ValueError) as exc:
            self._abort(exc)
            if isinstance(exc, FrameSourceError):
                raise
            raise FrameSourceError(str(exc)) from exc
        session.frame_index = int(self._source.index)
        self._distance = session.measure()
        self._counters = FrameCounters(frame=session.frame_index, start_distance=self._distance)
        trace_frame("frame_start", self._counters)

    def _abort(self, exc: Exception) -> None:
        self._session.reset_frame()
        self._session.target = None
        self._distance = None
        self._counters = None
        self._phase = DriverPhase.ABORTED
        trace_log("aborted", frame=self._session.frame_index, error=exc)

    def _start(self) -> None:
        try:
            self._session.validate(self._source.size)
        except ValueError as exc:
            self._abort(exc)
            raise
        self._load_target()
        self._phase = DriverPhase.RUNNING

    def _converged(self) -> bool:
        session = self._session
        if session.attempts >= session.params.max_apples:
            return True
        return self._distance is not None and self._distance <= self.threshold()

    def _finalize(self) -> RecordedFrame:
        session = self._session
        distance = float(self._distance if self._distance is not None else 0.0)
        index = self._recorder.record_frame(
            session.composition.candidates,
            source_index=session.frame_index,
            distance=distance,
        )
        frame = self._recorder.frames[index]
        if self._counters is not None:
            trace_frame("frame_finalized", self._counters, recorded=index, sprites=frame.sprite_count)
        session.reset_frame()
        if not self._source.advance():
            session.target = None
            self._distance = None
            self._counters = None
            self._phase = DriverPhase.EXHAUSTED
            trace_log("source_exhausted", frames=self._recorder.frame_count)
            return frame
        self._load_target()
        return frame

    def _check_cancel(self) -> bool:
        if not self._cancel.cancelled:
            return False
        if self._phase is not DriverPhase.CANCELLED:
            self._session.reset_frame()
            self._phase = DriverPhase.CANCELLED
            trace_log("cancelled", frame=self._session.frame_index, reason=self._cancel.reason or "none")
        return True

    def tick(self) -> TickReport:
        if self.finished:
            return TickReport(phase=self._phase, distance=self._distance)
        if self._check_cancel():
            return TickReport(phase=self._phase)
        if self._phase is DriverPhase.PENDING:
            self._start()

        session = self._session
        spawns = 0
        committed = 0
        finalized: RecordedFrame | None = None
        for _ in range(self._budget):
            if self._check_cancel():
                break
            result = spawn(session, baseline=self._distance)
            session.attempts += 1
            spawns += 1
            self._distance = result.distance
            if self._counters is not None:
                self._counters.add_spawn(
                    evaluations=result.evaluations,
                    improved=result.improved,
                    distance=result.distance,
                )
            if result.improved:
                committed += 1
            if self._converged():
                finalized = self._finalize()
                break
        return TickReport(
            phase=self._phase,
            spawns=spawns,
            committed=committed,
            distance=self._distance,
            finalized=finalized,
        )

    def run(self, *, max_ticks: int | None = None) -> Sequence:
        ticks = 0
        while not self.finished:
            if max_ticks is not None and ticks >= int(max_ticks):
                break
            self.tick()
            ticks += 1
        return self._recorder.finish()
