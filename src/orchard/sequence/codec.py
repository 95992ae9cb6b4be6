from __future__ import annotations

import gzip
from pathlib import Path

import msgspec

from ..candidate import Candidate, Detail, Variant
from .types import SEQUENCE_FORMAT_VERSION, RecordedFrame, Sequence, SequenceHeader

_GZIP_MAGIC = b"\x1f\x8b"


class SequenceCodecError(ValueError):
    pass


class CandidateRow(msgspec.Struct, array_like=True, forbid_unknown_fields=True):
    x: float
    y: float
    direction: float
    scale: float
    variant: int
    detail: int


class FrameRecord(msgspec.Struct, forbid_unknown_fields=True):
    source_index: int
    distance: float
    apples: list[CandidateRow]


class HeaderRecord(msgspec.Struct, forbid_unknown_fields=True):
    width: int
    height: int
    fps: int = 12
    background: int = 255
    frame_step: int = 1
    asset_set: str = "circles"
    app_version: str = ""


class SequenceFile(msgspec.Struct, forbid_unknown_fields=True):
    v: int
    header: HeaderRecord
    frames: list[FrameRecord] = []


def _is_gzip(data: bytes) -> bool:
    return data.startswith(_GZIP_MAGIC)


def _candidate_to_row(candidate: Candidate) -> CandidateRow:
    return CandidateRow(
        x=float(candidate.x),
        y=float(candidate.y),
        direction=float(candidate.direction),
        scale=float(candidate.scale),
        variant=int(candidate.variant),
        detail=int(candidate.detail),
    )


def _candidate_from_row(row: CandidateRow, *, frame_idx: int, apple_idx: int) -> Candidate:
    try:
        return Candidate(
            x=row.x,
            y=row.y,
            direction=row.direction,
            scale=row.scale,
            variant=Variant(row.variant),
            detail=Detail(row.detail),
        )
    except ValueError as exc:
        raise SequenceCodecError(f"sequence frame {frame_idx} apple {apple_idx} is invalid: {exc}") from exc


def sequence_to_record(sequence: Sequence) -> SequenceFile:
    header = sequence.header
    return SequenceFile(
        v=int(sequence.version),
        header=HeaderRecord(
            width=int(header.width),
            height=int(header.height),
            fps=int(header.fps),
            background=int(header.background),
            frame_step=int(header.frame_step),
            asset_set=str(header.asset_set),
            app_version=str(header.app_version),
        ),
        frames=[
            FrameRecord(
                source_index=int(frame.source_index),
                distance=float(frame.distance),
                apples=[_candidate_to_row(candidate) for candidate in frame.candidates],
            )
            for frame in sequence.frames
        ],
    )


def sequence_from_record(record: SequenceFile) -> Sequence:
    if int(record.v) != SEQUENCE_FORMAT_VERSION:
        raise SequenceCodecError(f"unsupported sequence version: {record.v}")
    head = record.header
    try:
        header = SequenceHeader(
            width=head.width,
            height=head.height,
            fps=head.fps,
            background=head.background,
            frame_step=head.frame_step,
            asset_set=head.asset_set,
            app_version=head.app_version,
        )
    except ValueError as exc:
        raise SequenceCodecError(f"sequence header is invalid: {exc}") from exc
    frames: list[RecordedFrame] = []
    for frame_idx, frame in enumerate(record.frames):
        candidates = tuple(
            _candidate_from_row(row, frame_idx=frame_idx, apple_idx=apple_idx)
            for apple_idx, row in enumerate(frame.apples)
        )
        frames.append(RecordedFrame(source_index=frame.source_index, candidates=candidates, distance=frame.distance))
    return Sequence(version=int(record.v), header=header, frames=frames)


def dump_sequence(sequence: Sequence) -> bytes:
    """Serialize a sequence as a gzipped JSON blob.

    The gzip header is written with mtime=0 for stable content hashing.
    """

    raw = msgspec.json.encode(sequence_to_record(sequence))
    return gzip.compress(raw, compresslevel=9, mtime=0)


def load_sequence(data: bytes) -> Sequence:
    if _is_gzip(data):
        try:
            data = gzip.decompress(data)
        except (OSError, EOFError) as exc:
            raise SequenceCodecError(f"corrupt gzip stream: {exc}") from exc
    try:
        record = msgspec.json.decode(data, type=SequenceFile)
    except msgspec.DecodeError as exc:
        raise SequenceCodecError(str(exc)) from exc
    return sequence_from_record(record)


def dump_sequence_file(path: Path, sequence: Sequence) -> None:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(dump_sequence(sequence))


def load_sequence_file(path: Path) -> Sequence:
    path = Path(path)
    return load_sequence(path.read_bytes())
