from __future__ import annotations

from .codec import (
    SequenceCodecError,
    dump_sequence,
    dump_sequence_file,
    load_sequence,
    load_sequence_file,
    sequence_from_record,
    sequence_to_record,
)
from .player import SequencePlayer
from .recorder import SequenceRecorder
from .render import export_gif, render_recorded_frame, render_sequence_frames
from .types import SEQUENCE_FORMAT_VERSION, RecordedFrame, Sequence, SequenceHeader

__all__ = [
    "SEQUENCE_FORMAT_VERSION",
    "RecordedFrame",
    "Sequence",
    "SequenceCodecError",
    "SequenceHeader",
    "SequencePlayer",
    "SequenceRecorder",
    "dump_sequence",
    "dump_sequence_file",
    "export_gif",
    "load_sequence",
    "load_sequence_file",
    "render_recorded_frame",
    "render_sequence_frames",
    "sequence_from_record",
    "sequence_to_record",
]
