from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from PIL import Image

from .candidate import Candidate

if TYPE_CHECKING:
    from .composition import WorkingComposition


class SnapshotError(ValueError):
    pass


@dataclass(frozen=True, slots=True)
class Snapshot:
    pixels: Image.Image
    candidates: tuple[Candidate, ...]

    @property
    def size(self) -> tuple[int, int]:
        return self.pixels.size


def save_snapshot(composition: WorkingComposition) -> Snapshot:
    return Snapshot(
        pixels=composition.surface.read_region(),
        candidates=tuple(composition.candidates),
    )


def restore_snapshot(composition: WorkingComposition, snapshot: Snapshot) -> None:
    """Replace pixels and candidates together; nothing changes when validation fails."""
    surface = composition.surface
    if snapshot.size != surface.size:
        raise SnapshotError(f"snapshot size {snapshot.size} does not match surface size {surface.size}")
    if snapshot.pixels.mode != surface.image.mode:
        raise SnapshotError(f"snapshot mode {snapshot.pixels.mode!r} does not match surface mode {surface.image.mode!r}")
    surface.write_region(snapshot.pixels)
    composition._replace_candidates(snapshot.candidates)
