from __future__ import annotations

__all__ = [
    "app",
    "clock",
    "geom",
    "math",
    "sprite",
    "surface",
    "view",
]
