from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal, TypeAlias

from ..candidate import Candidate

SequenceFormatVersion: TypeAlias = Literal[1]

SEQUENCE_FORMAT_VERSION: SequenceFormatVersion = 1
DEFAULT_PLAYBACK_FPS = 12


def _default_app_version() -> str:
    from .. import __version__

    return str(__version__)


@dataclass(frozen=True, slots=True)
class SequenceHeader:
    width: int
    height: int
    fps: int = DEFAULT_PLAYBACK_FPS
    background: int = 255
    frame_step: int = 1
    asset_set: str = "circles"
    app_version: str = field(default_factory=_default_app_version)

    def __post_init__(self) -> None:
        if int(self.width) <= 0 or int(self.height) <= 0:
            raise ValueError(f"sequence size must be positive, got {self.width}x{self.height}")
        if int(self.fps) <= 0:
            raise ValueError(f"sequence fps must be positive, got {self.fps}")


@dataclass(frozen=True, slots=True)
class RecordedFrame:
    source_index: int
    candidates: tuple[Candidate, ...]
    distance: float = 0.0

    @property
    def sprite_count(self) -> int:
        return len(self.candidates)


@dataclass(slots=True)
class Sequence:
    version: int
    header: SequenceHeader
    frames: list[RecordedFrame] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.frames)

    @property
    def duration(self) -> float:
        """Seconds for one pass over every frame."""
        return len(self.frames) / float(self.header.fps)
