from __future__ import annotations

from dataclasses import dataclass
import math
from typing import Protocol

from PIL import Image

from .geom import Vec2

SURFACE_MODE = "L"

Box = tuple[int, int, int, int]


class SupportsRender(Protocol):
    def render(self, scale: float, rotation: float) -> Image.Image: ...


@dataclass(frozen=True, slots=True)
class SpriteTransform:
    scale: float
    rotation: float
    translation: Vec2


def _as_intensity(image: Image.Image) -> Image.Image:
    if image.mode == SURFACE_MODE:
        return image.copy()
    if image.mode in ("RGB", "RGBA"):
        return image.getchannel("R")
    return image.convert(SURFACE_MODE)


class Surface:
    """Opaque single channel raster backed by a PIL image."""

    __slots__ = ("_image",)

    def __init__(self, width: int, height: int, *, fill: int = 255) -> None:
        width = int(width)
        height = int(height)
        if width <= 0 or height <= 0:
            raise ValueError(f"surface size must be positive, got {width}x{height}")
        self._image = Image.new(SURFACE_MODE, (width, height), int(fill) & 0xFF)

    @classmethod
    def from_image(cls, image: Image.Image) -> Surface:
        surface = cls.__new__(cls)
        surface._image = _as_intensity(image)
        return surface

    @property
    def image(self) -> Image.Image:
        return self._image

    @property
    def size(self) -> tuple[int, int]:
        return self._image.size

    @property
    def width(self) -> int:
        return self._image.width

    @property
    def height(self) -> int:
        return self._image.height

    def fill(self, intensity: int) -> None:
        self._image.paste(int(intensity) & 0xFF, (0, 0, self.width, self.height))

    def composite(self, sprite: SupportsRender, transform: SpriteTransform) -> None:
        rendered = sprite.render(transform.scale, transform.rotation)
        left = int(math.floor(transform.translation.x - rendered.width * 0.5 + 0.5))
        top = int(math.floor(transform.translation.y - rendered.height * 0.5 + 0.5))
        if left >= self.width or top >= self.height:
            return
        if left + rendered.width <= 0 or top + rendered.height <= 0:
            return
        if rendered.mode == "LA":
            intensity, alpha = rendered.split()
            self._image.paste(intensity, (left, top), alpha)
        else:
            self._image.paste(_as_intensity(rendered), (left, top))

    def read_region(self, box: Box | None = None) -> Image.Image:
        if box is None:
            return self._image.copy()
        return self._image.crop(box)

    def write_region(self, region: Image.Image, origin: tuple[int, int] = (0, 0)) -> None:
        if region.mode != SURFACE_MODE:
            raise ValueError(f"region mode must be {SURFACE_MODE!r}, got {region.mode!r}")
        self._image.paste(region, (int(origin[0]), int(origin[1])))
