from __future__ import annotations

"""
Sprite images for single channel compositing.

Sources are converted to `"LA"` (intensity + alpha). A halving mip chain is
built once so that heavy downscales resample from the closest larger level
instead of the full-size source on every draw.
"""

from PIL import Image

MIN_MIP_SIZE = 8


def _build_mips(base: Image.Image) -> tuple[Image.Image, ...]:
    levels = [base]
    current = base
    while current.width // 2 >= MIN_MIP_SIZE and current.height // 2 >= MIN_MIP_SIZE:
        current = current.reduce(2)
        levels.append(current)
    return tuple(levels)


def to_intensity_alpha(image: Image.Image) -> Image.Image:
    if image.mode == "LA":
        return image.copy()
    if image.mode == "RGBA":
        # Monochrome assets: the red channel carries the intensity.
        red, _green, _blue, alpha = image.split()
        return Image.merge("LA", (red, alpha))
    if image.mode == "RGB":
        return Image.merge("LA", (image.getchannel("R"), Image.new("L", image.size, 255)))
    return image.convert("LA")


class SpriteImage:
    __slots__ = ("_name", "_levels")

    def __init__(self, name: str, image: Image.Image) -> None:
        if image.width <= 0 or image.height <= 0:
            raise ValueError(f"sprite {name!r} has empty size {image.size}")
        self._name = str(name)
        self._levels = _build_mips(to_intensity_alpha(image))

    @property
    def name(self) -> str:
        return self._name

    @property
    def image(self) -> Image.Image:
        return self._levels[0]

    @property
    def size(self) -> tuple[int, int]:
        return self._levels[0].size

    @property
    def mip_count(self) -> int:
        return len(self._levels)

    def scaled_size(self, scale: float) -> tuple[int, int]:
        width, height = self.size
        return max(1, int(round(width * float(scale)))), max(1, int(round(height * float(scale))))

    def _level_for(self, width: int, height: int) -> Image.Image:
        chosen = self._levels[0]
        for level in self._levels[1:]:
            if level.width < width or level.height < height:
                break
            chosen = level
        return chosen

    def render(self, scale: float, rotation: float) -> Image.Image:
        """Return the `"LA"` sprite scaled, then rotated clockwise by `rotation` degrees."""
        width, height = self.scaled_size(scale)
        level = self._level_for(width, height)
        if level.size != (width, height):
            out = level.resize((width, height), Image.Resampling.BILINEAR)
        else:
            out = level
        rotation = float(rotation) % 360.0
        if rotation != 0.0:
            # PIL rotates counter-clockwise; screen rotation is clockwise with y down.
            out = out.rotate(-rotation, resample=Image.Resampling.BILINEAR, expand=True)
        return out
