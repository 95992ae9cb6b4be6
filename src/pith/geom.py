from __future__ import annotations

from dataclasses import dataclass
import math
from typing import TYPE_CHECKING

from .math import clamp

if TYPE_CHECKING:
    import pyray as rl


@dataclass(slots=True, frozen=True)
class Vec2:
    x: float = 0.0
    y: float = 0.0

    def length_sq(self) -> float:
        return self.x * self.x + self.y * self.y

    def length(self) -> float:
        return math.sqrt(self.length_sq())

    def __add__(self, other: Vec2) -> Vec2:
        return Vec2(self.x + other.x, self.y + other.y)

    @classmethod
    def from_screen_degrees(cls, degrees: float, radius: float = 1.0) -> Vec2:
        """Vector of length `radius` at a compass angle measured counter-clockwise on a y-down screen."""
        radians = math.radians(float(degrees))
        return cls(x=math.cos(radians) * radius, y=-math.sin(radians) * radius)

    def clamped(self, width: float, height: float) -> Vec2:
        return Vec2(clamp(self.x, 0.0, float(width)), clamp(self.y, 0.0, float(height)))

    def to_rl(self) -> rl.Vector2:
        import pyray as rl

        return rl.Vector2(self.x, self.y)
