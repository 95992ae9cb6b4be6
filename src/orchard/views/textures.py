from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

import pyray as rl

from pith.geom import Vec2

from ..assets import SPRITE_FILES, SpriteAssets, SpriteKey
from ..candidate import Candidate


def _load_texture_from_bytes(data: bytes, fmt: str) -> rl.Texture2D:
    image = rl.load_image_from_memory(fmt, data, len(data))
    texture = rl.load_texture_from_image(image)
    rl.unload_image(image)
    rl.set_texture_filter(texture, rl.TEXTURE_FILTER_BILINEAR)
    return texture


@dataclass(slots=True)
class SpriteTextures:
    assets: SpriteAssets
    textures: dict[SpriteKey, rl.Texture2D] = field(default_factory=dict)

    def load(self) -> None:
        self.unload()
        for variant, detail in SPRITE_FILES:
            data = self.assets.png_bytes(variant, detail)
            self.textures[(variant, detail)] = _load_texture_from_bytes(data, ".png")

    def unload(self) -> None:
        for texture in self.textures.values():
            rl.unload_texture(texture)
        self.textures.clear()

    def draw(self, candidates: Iterable[Candidate], *, origin_x: float, origin_y: float, zoom: float) -> None:
        for candidate in candidates:
            texture = self.textures.get((candidate.variant, candidate.detail))
            if texture is None:
                continue
            width = float(texture.width) * candidate.scale * zoom
            height = float(texture.height) * candidate.scale * zoom
            src = rl.Rectangle(0.0, 0.0, float(texture.width), float(texture.height))
            # DrawTexturePro places the quad by its origin point, here the sprite center.
            dst = rl.Rectangle(origin_x + candidate.x * zoom, origin_y + candidate.y * zoom, width, height)
            origin = Vec2(width * 0.5, height * 0.5).to_rl()
            rl.draw_texture_pro(texture, src, dst, origin, float(candidate.direction), rl.WHITE)
