from __future__ import annotations

from dataclasses import dataclass
import random

from PIL import Image

from .assets import SpriteAssets
from .candidate import Candidate, scale_exponent_range
from .composition import WorkingComposition
from .config import SearchParams
from .fitness import distance, sample_count
from .snapshot import SnapshotError


@dataclass(slots=True)
class GenerationSession:
    """Everything the generation phase mutates, owned in one place.

    `attempts` counts spawn calls for the current frame, committed or not.
    """

    params: SearchParams
    composition: WorkingComposition
    rng: random.Random
    target: Image.Image | None = None
    frame_index: int = 0
    attempts: int = 0
    evaluations: int = 0

    @classmethod
    def create(
        cls,
        width: int,
        height: int,
        assets: SpriteAssets,
        *,
        params: SearchParams | None = None,
        seed: int | None = None,
    ) -> GenerationSession:
        params = params if params is not None else SearchParams()
        composition = WorkingComposition(width, height, assets, background=params.background)
        return cls(params=params, composition=composition, rng=random.Random(seed))

    @property
    def width(self) -> int:
        return self.composition.surface.width

    @property
    def height(self) -> int:
        return self.composition.surface.height

    @property
    def size(self) -> tuple[int, int]:
        return self.composition.surface.size

    @property
    def progress(self) -> float:
        return min(1.0, float(self.attempts) / float(self.params.max_apples))

    def validate(self, source_size: tuple[int, int]) -> None:
        """Startup check against the frame source, run before any frame is loaded.

        Raises `SnapshotError` when source frames cannot be snapshotted onto the
        working surface and `ValueError` when the fitness grid samples nothing.
        """
        source_size = (int(source_size[0]), int(source_size[1]))
        if source_size != self.size:
            raise SnapshotError(f"source frame size {source_size} does not match surface size {self.size}")
        width, height = self.size
        spacing = int(self.params.sample_spacing)
        if sample_count(width, height, spacing) == 0:
            raise ValueError(f"sample spacing {spacing} samples nothing on a {width}x{height} frame")
        snapshot = self.composition.save()
        self.composition.restore(snapshot)
        if self.composition.surface.read_region().tobytes() != snapshot.pixels.tobytes():
            raise SnapshotError("snapshot round trip changed the working surface")

    def set_target(self, image: Image.Image) -> None:
        if image.size != self.size:
            raise ValueError(f"target size {image.size} does not match surface size {self.size}")
        if image.mode != "L":
            raise ValueError(f"target must be single channel 'L', got {image.mode!r}")
        self.target = image

    def measure(self) -> float:
        if self.target is None:
            raise RuntimeError("no target frame loaded")
        self.evaluations += 1
        return distance(self.composition.surface.image, self.target, spacing=self.params.sample_spacing)

    def scale_exponents(self) -> tuple[float, float]:
        return scale_exponent_range(
            self.params.scale_exponent_min,
            self.params.scale_exponent_max,
            self.progress,
            self.params.scale_narrowing,
        )

    def random_candidate(self) -> Candidate:
        return Candidate.random(
            self.rng,
            width=self.width,
            height=self.height,
            scale_exponents=self.scale_exponents(),
            marked_probability=self.params.marked_probability,
        )

    def child_of(self, parent: Candidate) -> Candidate:
        return parent.create_child(self.rng, width=self.width, height=self.height)

    def reset_frame(self) -> None:
        self.composition.clear()
        self.attempts = 0
