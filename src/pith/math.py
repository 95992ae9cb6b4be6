from __future__ import annotations

import math


def clamp(value: float, low: float, high: float) -> float:
    if value < low:
        return low
    if value > high:
        return high
    return value


def wrap_degrees(angle: float) -> float:
    """Wrap an angle into `[0, 360)`."""
    wrapped = math.fmod(float(angle), 360.0)
    if wrapped < 0.0:
        wrapped += 360.0
    if wrapped >= 360.0:
        wrapped = 0.0
    return wrapped
