from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

from PIL import Image

from pith.surface import Surface

from ..assets import SpriteAssets
from ..candidate import Candidate
from .types import RecordedFrame, Sequence


def render_recorded_frame(
    frame: RecordedFrame,
    surface: Surface,
    assets: SpriteAssets,
    *,
    background: int = 255,
) -> Surface:
    """Clear `surface` to `background`, then draw every sprite of `frame` in order."""
    surface.fill(background)
    for candidate in frame.candidates:
        candidate.composite_onto(surface, assets)
    return surface


def _scaled(candidate: Candidate, factor: float) -> Candidate:
    if factor == 1.0:
        return candidate
    return Candidate(
        x=candidate.x * factor,
        y=candidate.y * factor,
        direction=candidate.direction,
        scale=candidate.scale * factor,
        variant=candidate.variant,
        detail=candidate.detail,
    )


def render_sequence_frames(
    sequence: Sequence,
    assets: SpriteAssets,
    *,
    scale: float = 1.0,
) -> Iterator[Image.Image]:
    header = sequence.header
    scale = float(scale)
    if scale <= 0.0:
        raise ValueError(f"render scale must be positive, got {scale}")
    width = max(1, int(round(header.width * scale)))
    height = max(1, int(round(header.height * scale)))
    surface = Surface(width, height, fill=header.background)
    for frame in sequence.frames:
        scaled = RecordedFrame(
            source_index=frame.source_index,
            candidates=tuple(_scaled(candidate, scale) for candidate in frame.candidates),
            distance=frame.distance,
        )
        render_recorded_frame(scaled, surface, assets, background=header.background)
        yield surface.read_region()


def export_gif(sequence: Sequence, assets: SpriteAssets, path: Path, *, scale: float = 1.0) -> int:
    """Write the sequence as a looping GIF; returns the number of frames written."""
    images = list(render_sequence_frames(sequence, assets, scale=scale))
    if not images:
        raise ValueError("cannot export an empty sequence")
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    duration_ms = int(round(1000.0 / float(sequence.header.fps)))
    first, *rest = images
    first.save(path, format="GIF", save_all=True, append_images=rest, duration=duration_ms, loop=0)
    return len(images)
