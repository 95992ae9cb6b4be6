from __future__ import annotations

from PIL import Image, ImageChops

MAX_INTENSITY = 255


def sample_count(width: int, height: int, spacing: int) -> int:
    spacing = int(spacing)
    if spacing < 1:
        raise ValueError(f"sample spacing must be >= 1, got {spacing}")
    offset = spacing // 2
    cols = len(range(offset, int(width), spacing))
    rows = len(range(offset, int(height), spacing))
    return cols * rows


def distance(working: Image.Image, target: Image.Image, *, spacing: int = 1) -> float:
    """Normalized mean absolute intensity difference over a strided sample grid.

    Samples start at `spacing // 2` on both axes. Returns 0.0 for identical
    rasters and 1.0 for a full black/white mismatch at every sample.
    """

    if working.size != target.size:
        raise ValueError(f"raster size mismatch: {working.size} != {target.size}")
    if working.mode != "L" or target.mode != "L":
        raise ValueError(f"rasters must be single channel 'L', got {working.mode!r} and {target.mode!r}")
    width, height = working.size
    count = sample_count(width, height, spacing)
    if count == 0:
        raise ValueError(f"spacing {spacing} samples nothing on a {width}x{height} raster")

    diff = ImageChops.difference(working, target).tobytes()
    if spacing == 1:
        total = sum(diff)
    else:
        offset = spacing // 2
        total = 0
        for row in range(offset, height, spacing):
            start = row * width
            total += sum(diff[start + offset : start + width : spacing])
    return total / float(MAX_INTENSITY * count)
