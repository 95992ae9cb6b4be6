from __future__ import annotations

from typing import Iterable

from ..candidate import Candidate
from .types import SEQUENCE_FORMAT_VERSION, RecordedFrame, Sequence, SequenceHeader


class SequenceRecorder:
    def __init__(self, header: SequenceHeader, *, version: int = SEQUENCE_FORMAT_VERSION) -> None:
        if int(version) != SEQUENCE_FORMAT_VERSION:
            raise ValueError(f"unsupported sequence version: {version}")
        self._version = int(version)
        self._header = header
        self._frames: list[RecordedFrame] = []

    @property
    def header(self) -> SequenceHeader:
        return self._header

    @property
    def frame_count(self) -> int:
        return len(self._frames)

    @property
    def frames(self) -> tuple[RecordedFrame, ...]:
        return tuple(self._frames)

    def record_frame(self, candidates: Iterable[Candidate], *, source_index: int, distance: float) -> int:
        """Append one finalized frame.

        Returns the index of the recorded frame in the output sequence.
        """

        frame_index = len(self._frames)
        self._frames.append(
            RecordedFrame(
                source_index=int(source_index),
                candidates=tuple(candidates),
                distance=float(distance),
            )
        )
        return frame_index

    def finish(self) -> Sequence:
        return Sequence(
            version=int(self._version),
            header=self._header,
            frames=list(self._frames),
        )
