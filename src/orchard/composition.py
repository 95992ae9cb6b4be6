from __future__ import annotations

from pith.surface import Surface

from .assets import SpriteAssets
from .candidate import Candidate
from .snapshot import Snapshot, restore_snapshot, save_snapshot


class WorkingComposition:
    """The canonical working surface plus the ordered candidates drawn onto it.

    `add` is the only way to draw here, so the pixels always equal the
    in-order composite of `candidates` over the background.
    """

    __slots__ = ("_surface", "_assets", "_background", "_candidates")

    def __init__(self, width: int, height: int, assets: SpriteAssets, *, background: int = 255) -> None:
        self._background = int(background) & 0xFF
        self._surface = Surface(width, height, fill=self._background)
        self._assets = assets
        self._candidates: list[Candidate] = []

    @property
    def surface(self) -> Surface:
        return self._surface

    @property
    def assets(self) -> SpriteAssets:
        return self._assets

    @property
    def background(self) -> int:
        return self._background

    @property
    def candidates(self) -> tuple[Candidate, ...]:
        return tuple(self._candidates)

    def __len__(self) -> int:
        return len(self._candidates)

    def add(self, candidate: Candidate) -> None:
        candidate.composite_onto(self._surface, self._assets)
        self._candidates.append(candidate)

    def clear(self) -> None:
        self._surface.fill(self._background)
        self._candidates = []

    def save(self) -> Snapshot:
        return save_snapshot(self)

    def restore(self, snapshot: Snapshot) -> None:
        restore_snapshot(self, snapshot)

    def _replace_candidates(self, candidates: tuple[Candidate, ...]) -> None:
        self._candidates = list(candidates)
