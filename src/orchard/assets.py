from __future__ import annotations

from dataclasses import dataclass
import io
from pathlib import Path

from PIL import Image, ImageDraw, UnidentifiedImageError

from pith.sprite import SpriteImage

from .candidate import Detail, Variant

SpriteKey = tuple[Variant, Detail]

SPRITE_FILES: dict[SpriteKey, str] = {
    (Variant.LIGHT, Detail.PLAIN): "white_apple.png",
    (Variant.LIGHT, Detail.MARKED): "white_apple_core.png",
    (Variant.DARK, Detail.PLAIN): "black_apple.png",
    (Variant.DARK, Detail.MARKED): "black_apple_core.png",
}

VARIANT_INTENSITY: dict[Variant, int] = {
    Variant.LIGHT: 255,
    Variant.DARK: 0,
}

DEFAULT_CIRCLE_DIAMETER = 512
CIRCLE_CORE_RATIO = 0.3


class SpriteAssetError(ValueError):
    pass


@dataclass(frozen=True, slots=True)
class SpriteAssets:
    name: str
    sprites: dict[SpriteKey, SpriteImage]

    def __post_init__(self) -> None:
        missing = [key for key in SPRITE_FILES if key not in self.sprites]
        if missing or len(self.sprites) != len(SPRITE_FILES):
            labels = ", ".join(f"{variant.name.lower()}/{detail.name.lower()}" for variant, detail in missing)
            raise SpriteAssetError(f"sprite set {self.name!r} must have exactly 4 sprites (missing: {labels or 'none'})")

    def sprite(self, variant: Variant, detail: Detail) -> SpriteImage:
        return self.sprites[(Variant(variant), Detail(detail))]

    def png_bytes(self, variant: Variant, detail: Detail) -> bytes:
        sprite = self.sprite(variant, detail)
        # Expand LA back to RGBA so any texture loader accepts it.
        intensity, alpha = sprite.image.split()
        rgba = Image.merge("RGBA", (intensity, intensity, intensity, alpha))
        buf = io.BytesIO()
        rgba.save(buf, format="PNG")
        return buf.getvalue()


def load_sprite_assets(assets_dir: Path) -> SpriteAssets:
    assets_dir = Path(assets_dir)
    sprites: dict[SpriteKey, SpriteImage] = {}
    for key, file_name in SPRITE_FILES.items():
        path = assets_dir / file_name
        if not path.is_file():
            raise SpriteAssetError(f"missing sprite asset: {path}")
        try:
            with Image.open(path) as img:
                img.load()
                sprites[key] = SpriteImage(file_name, img)
        except (UnidentifiedImageError, OSError) as exc:
            raise SpriteAssetError(f"failed to load sprite asset {path}: {exc}") from exc
    return SpriteAssets(name=assets_dir.name or str(assets_dir), sprites=sprites)


def _circle_image(diameter: int, intensity: int, core_intensity: int | None) -> Image.Image:
    img = Image.new("RGBA", (diameter, diameter), (0, 0, 0, 0))
    draw = ImageDraw.Draw(img)
    draw.ellipse((0, 0, diameter - 1, diameter - 1), fill=(intensity, intensity, intensity, 255))
    if core_intensity is not None:
        inset = diameter * (1.0 - CIRCLE_CORE_RATIO) * 0.5
        core_box = (inset, inset, diameter - 1 - inset, diameter - 1 - inset)
        draw.ellipse(core_box, fill=(core_intensity, core_intensity, core_intensity, 255))
    return img


def circle_sprite_assets(diameter: int = DEFAULT_CIRCLE_DIAMETER) -> SpriteAssets:
    """Debug sprite set: flat discs, with an inverted core for the marked detail."""
    diameter = int(diameter)
    if diameter < 2:
        raise SpriteAssetError(f"circle diameter must be >= 2, got {diameter}")
    sprites: dict[SpriteKey, SpriteImage] = {}
    for (variant, detail), file_name in SPRITE_FILES.items():
        intensity = VARIANT_INTENSITY[variant]
        core = 255 - intensity if detail is Detail.MARKED else None
        sprites[(variant, detail)] = SpriteImage(file_name, _circle_image(diameter, intensity, core))
    return SpriteAssets(name="circles", sprites=sprites)
