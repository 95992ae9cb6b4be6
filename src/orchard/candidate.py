from __future__ import annotations

from dataclasses import dataclass, replace
from enum import IntEnum
import math
import random
from typing import TYPE_CHECKING, Final

from pith.geom import Vec2
from pith.math import wrap_degrees
from pith.surface import SpriteTransform

if TYPE_CHECKING:
    from pith.surface import Surface

    from .assets import SpriteAssets

CHILD_MAX_STEP = 10.0
CHILD_TURN_MIN = -12.5
CHILD_TURN_SPAN = 45.0
CHILD_SCALE_MIN = 0.75
CHILD_SCALE_SPAN = 0.5


class Variant(IntEnum):
    DARK = 0
    LIGHT = 1


class Detail(IntEnum):
    PLAIN = 0
    MARKED = 1


class _Unset:
    __slots__ = ()

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


UNSET: Final = _Unset()


@dataclass(frozen=True, slots=True)
class Candidate:
    x: float
    y: float
    direction: float
    scale: float
    variant: Variant = Variant.LIGHT
    detail: Detail = Detail.PLAIN

    def __post_init__(self) -> None:
        if not (self.scale > 0.0):
            raise ValueError(f"candidate scale must be positive, got {self.scale}")

    @property
    def position(self) -> Vec2:
        return Vec2(self.x, self.y)

    def clone(self) -> Candidate:
        return replace(self)

    def transform(self) -> SpriteTransform:
        return SpriteTransform(scale=self.scale, rotation=self.direction, translation=self.position)

    def composite_onto(self, surface: Surface, assets: SpriteAssets) -> None:
        """Draw onto `surface` only; tracked compositions go through `WorkingComposition.add`."""
        surface.composite(assets.sprite(self.variant, self.detail), self.transform())

    def create_child(self, rng: random.Random, *, width: float, height: float) -> Candidate:
        step = Vec2.from_screen_degrees(rng.random() * 360.0, rng.random() * CHILD_MAX_STEP)
        pos = (self.position + step).clamped(width, height)
        direction = wrap_degrees(self.direction + CHILD_TURN_MIN + rng.random() * CHILD_TURN_SPAN)
        scale = self.scale * (CHILD_SCALE_MIN + CHILD_SCALE_SPAN * rng.random())
        # Children keep the parent's look; only placement mutates.
        return Candidate(
            x=pos.x,
            y=pos.y,
            direction=direction,
            scale=scale,
            variant=self.variant,
            detail=self.detail,
        )

    @classmethod
    def random(
        cls,
        rng: random.Random,
        *,
        width: float,
        height: float,
        scale_exponents: tuple[float, float],
        marked_probability: float = 0.0,
    ) -> Candidate:
        return materialize(
            CandidateSpec(),
            rng,
            width=width,
            height=height,
            scale_exponents=scale_exponents,
            marked_probability=marked_probability,
        )


@dataclass(frozen=True, slots=True)
class CandidateSpec:
    x: float | _Unset = UNSET
    y: float | _Unset = UNSET
    direction: float | _Unset = UNSET
    scale: float | _Unset = UNSET
    variant: Variant | _Unset = UNSET
    detail: Detail | _Unset = UNSET


def materialize(
    spec: CandidateSpec,
    rng: random.Random,
    *,
    width: float,
    height: float,
    scale_exponents: tuple[float, float],
    marked_probability: float = 0.0,
) -> Candidate:
    """Fill every unset field of `spec` with an independent draw from `rng`.

    Draw order is fixed (x, y, direction, scale, variant, detail) and a draw
    is consumed only for unset fields, so equal seeds give equal candidates.
    """

    x = rng.random() * float(width) if spec.x is UNSET else float(spec.x)
    y = rng.random() * float(height) if spec.y is UNSET else float(spec.y)
    direction = rng.random() * 360.0 if spec.direction is UNSET else wrap_degrees(float(spec.direction))
    if spec.scale is UNSET:
        low, high = scale_exponents
        scale = math.exp(float(low) + rng.random() * (float(high) - float(low)))
    else:
        scale = float(spec.scale)
    if spec.variant is UNSET:
        variant = Variant.LIGHT if rng.random() < 0.5 else Variant.DARK
    else:
        variant = Variant(spec.variant)
    if spec.detail is UNSET:
        detail = Detail.MARKED if rng.random() < float(marked_probability) else Detail.PLAIN
    else:
        detail = Detail(spec.detail)
    return Candidate(x=x, y=y, direction=direction, scale=scale, variant=variant, detail=detail)


def scale_exponent_range(low: float, high: float, progress: float, narrowing: float) -> tuple[float, float]:
    """Shrink the upper scale exponent toward `low` as `progress` goes 0 -> 1."""
    progress = min(1.0, max(0.0, float(progress)))
    upper = float(high) - (float(high) - float(low)) * float(narrowing) * progress
    return float(low), upper
