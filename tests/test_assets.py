from __future__ import annotations

import io
from pathlib import Path

from PIL import Image
import pytest

from orchard.assets import (
    SPRITE_FILES,
    SpriteAssetError,
    SpriteAssets,
    circle_sprite_assets,
    load_sprite_assets,
)
from orchard.candidate import Detail, Variant


def test_circle_assets_cover_every_variant_and_detail() -> None:
    assets = circle_sprite_assets(diameter=20)

    assert assets.name == "circles"
    for variant in Variant:
        for detail in Detail:
            assert assets.sprite(variant, detail).size == (20, 20)


def test_circle_assets_use_variant_intensity_and_inverted_core() -> None:
    assets = circle_sprite_assets(diameter=40)

    light = assets.sprite(Variant.LIGHT, Detail.PLAIN).image
    dark_marked = assets.sprite(Variant.DARK, Detail.MARKED).image

    assert light.mode == "LA"
    assert light.getpixel((20, 20)) == (255, 255)
    assert light.getpixel((0, 0))[1] == 0
    assert dark_marked.getpixel((20, 20)) == (255, 255)
    assert dark_marked.getpixel((20, 3)) == (0, 255)


def test_sprite_assets_require_exactly_four_sprites() -> None:
    assets = circle_sprite_assets(diameter=8)
    partial = {key: sprite for key, sprite in assets.sprites.items() if key[1] is Detail.PLAIN}

    with pytest.raises(SpriteAssetError):
        SpriteAssets(name="partial", sprites=partial)


def test_load_sprite_assets_reads_named_files(tmp_path: Path) -> None:
    for (variant, _detail), file_name in SPRITE_FILES.items():
        value = 255 if variant is Variant.LIGHT else 0
        Image.new("RGBA", (12, 10), (value, value, value, 255)).save(tmp_path / file_name)

    assets = load_sprite_assets(tmp_path)

    assert assets.name == tmp_path.name
    assert assets.sprite(Variant.DARK, Detail.PLAIN).size == (12, 10)
    assert assets.sprite(Variant.LIGHT, Detail.MARKED).image.getpixel((0, 0)) == (255, 255)


def test_load_sprite_assets_reports_missing_file(tmp_path: Path) -> None:
    Image.new("RGBA", (4, 4)).save(tmp_path / "white_apple.png")

    with pytest.raises(SpriteAssetError, match="missing sprite asset"):
        load_sprite_assets(tmp_path)


def test_load_sprite_assets_reports_corrupt_file(tmp_path: Path) -> None:
    for file_name in SPRITE_FILES.values():
        (tmp_path / file_name).write_bytes(b"not a png")

    with pytest.raises(SpriteAssetError, match="failed to load"):
        load_sprite_assets(tmp_path)


def test_png_bytes_decode_to_rgba() -> None:
    assets = circle_sprite_assets(diameter=10)

    data = assets.png_bytes(Variant.DARK, Detail.PLAIN)

    with Image.open(io.BytesIO(data)) as img:
        assert img.mode == "RGBA"
        assert img.size == (10, 10)
        assert img.getpixel((5, 5)) == (0, 0, 0, 255)
