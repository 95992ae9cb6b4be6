from __future__ import annotations

from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any

from construct import Byte, Bytes, Const, Float32l, Int32ul, Struct

ORCHARD_CFG_NAME = "orchard.cfg"
ORCHARD_CFG_MAGIC = b"ORCH"
ORCHARD_CFG_VERSION = 1
ORCHARD_CFG_SIZE = 0x54

DEFAULT_PLAYBACK_FPS = 12
# Source videos are sampled every 10 frames at 24 fps.
DEFAULT_FRAME_STEP = 10

ORCHARD_CFG_STRUCT = Struct(
    "magic" / Const(ORCHARD_CFG_MAGIC),
    "version" / Int32ul,
    "initial_pool" / Int32ul,
    "parent_pool" / Int32ul,
    "children" / Int32ul,
    "generations" / Int32ul,
    "max_apples" / Int32ul,
    "spawns_per_tick" / Int32ul,
    "sample_spacing" / Int32ul,
    "diff_target" / Float32l,
    "scale_exponent_min" / Float32l,
    "scale_exponent_max" / Float32l,
    "scale_narrowing" / Float32l,
    "marked_probability" / Float32l,
    "background" / Byte,
    "seed_enabled" / Byte,
    "reserved_3a" / Bytes(2),
    "seed" / Int32ul,
    "playback_fps" / Int32ul,
    "frame_step" / Int32ul,
    "start_frame" / Int32ul,
    # 0 keeps the source resolution.
    "frame_width" / Int32ul,
    "frame_height" / Int32ul,
)


@dataclass(frozen=True, slots=True)
class SearchParams:
    initial_pool: int = 80
    parent_pool: int = 5
    children: int = 3
    generations: int = 5
    max_apples: int = 500
    spawns_per_tick: int = 3
    sample_spacing: int = 1
    diff_target: float = 0.02
    scale_exponent_min: float = -6.5
    scale_exponent_max: float = -3.5
    scale_narrowing: float = 0.5
    marked_probability: float = 0.0
    background: int = 255

    def __post_init__(self) -> None:
        for name in ("initial_pool", "parent_pool", "max_apples", "spawns_per_tick", "sample_spacing"):
            value = int(getattr(self, name))
            if value < 1:
                raise ValueError(f"{name} must be >= 1, got {value}")
        for name in ("children", "generations"):
            value = int(getattr(self, name))
            if value < 0:
                raise ValueError(f"{name} must be >= 0, got {value}")
        if not (0.0 <= float(self.diff_target) <= 1.0):
            raise ValueError(f"diff_target must be in [0, 1], got {self.diff_target}")
        if float(self.scale_exponent_min) > float(self.scale_exponent_max):
            raise ValueError(
                f"scale exponent range is inverted: {self.scale_exponent_min} > {self.scale_exponent_max}"
            )
        if not (0.0 <= float(self.scale_narrowing) <= 1.0):
            raise ValueError(f"scale_narrowing must be in [0, 1], got {self.scale_narrowing}")
        if not (0.0 <= float(self.marked_probability) <= 1.0):
            raise ValueError(f"marked_probability must be in [0, 1], got {self.marked_probability}")
        if not (0 <= int(self.background) <= 255):
            raise ValueError(f"background must be in [0, 255], got {self.background}")

    @property
    def max_evaluations(self) -> int:
        """Upper bound on fitness evaluations performed by one spawn."""
        return int(self.initial_pool) + int(self.parent_pool) * int(self.children) * int(self.generations)

    def with_overrides(self, **overrides: Any) -> SearchParams:
        known = {f.name for f in fields(self)}
        updates = {key: value for key, value in overrides.items() if value is not None}
        unknown = sorted(set(updates) - known)
        if unknown:
            raise ValueError(f"unknown search parameters: {', '.join(unknown)}")
        return replace(self, **updates)


_SEARCH_INT_FIELDS = (
    "initial_pool",
    "parent_pool",
    "children",
    "generations",
    "max_apples",
    "spawns_per_tick",
    "sample_spacing",
    "background",
)
_SEARCH_FLOAT_FIELDS = (
    "diff_target",
    "scale_exponent_min",
    "scale_exponent_max",
    "scale_narrowing",
    "marked_probability",
)


@dataclass(slots=True)
class OrchardConfig:
    path: Path
    data: dict

    @property
    def playback_fps(self) -> int:
        return int(self.data["playback_fps"])

    @playback_fps.setter
    def playback_fps(self, value: int) -> None:
        self.data["playback_fps"] = max(1, int(value))

    @property
    def frame_step(self) -> int:
        return int(self.data["frame_step"])

    @frame_step.setter
    def frame_step(self, value: int) -> None:
        self.data["frame_step"] = max(1, int(value))

    @property
    def start_frame(self) -> int:
        return int(self.data["start_frame"])

    @start_frame.setter
    def start_frame(self, value: int) -> None:
        self.data["start_frame"] = max(0, int(value))

    @property
    def frame_size(self) -> tuple[int, int] | None:
        width = int(self.data["frame_width"])
        height = int(self.data["frame_height"])
        if width <= 0 or height <= 0:
            return None
        return width, height

    @frame_size.setter
    def frame_size(self, value: tuple[int, int] | None) -> None:
        if value is None:
            self.data["frame_width"] = 0
            self.data["frame_height"] = 0
            return
        self.data["frame_width"] = max(0, int(value[0]))
        self.data["frame_height"] = max(0, int(value[1]))

    @property
    def seed(self) -> int | None:
        if not int(self.data["seed_enabled"]):
            return None
        return int(self.data["seed"])

    @seed.setter
    def seed(self, value: int | None) -> None:
        if value is None:
            self.data["seed_enabled"] = 0
            self.data["seed"] = 0
            return
        self.data["seed_enabled"] = 1
        self.data["seed"] = int(value) & 0xFFFFFFFF

    def search_params(self) -> SearchParams:
        values: dict[str, Any] = {}
        for name in _SEARCH_INT_FIELDS:
            values[name] = int(self.data[name])
        for name in _SEARCH_FLOAT_FIELDS:
            values[name] = float(self.data[name])
        return SearchParams(**values)

    def set_search_params(self, params: SearchParams) -> None:
        for name in _SEARCH_INT_FIELDS:
            self.data[name] = int(getattr(params, name))
        for name in _SEARCH_FLOAT_FIELDS:
            self.data[name] = float(getattr(params, name))

    def save(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_bytes(ORCHARD_CFG_STRUCT.build(self.data))


def default_orchard_cfg_data() -> dict:
    config = OrchardConfig(path=Path("<memory>"), data={"version": ORCHARD_CFG_VERSION, "reserved_3a": b"\x00\x00"})
    config.set_search_params(SearchParams())
    config.seed = None
    config.playback_fps = DEFAULT_PLAYBACK_FPS
    config.frame_step = DEFAULT_FRAME_STEP
    config.start_frame = 0
    config.frame_size = None
    # Round-trip so float fields carry their stored float32 values.
    return ORCHARD_CFG_STRUCT.parse(ORCHARD_CFG_STRUCT.build(config.data))


def _parse_cfg_bytes(path: Path, data: bytes) -> dict:
    if len(data) != ORCHARD_CFG_SIZE:
        raise ValueError(f"{path} has unexpected size {len(data)} (expected {ORCHARD_CFG_SIZE})")
    if not data.startswith(ORCHARD_CFG_MAGIC):
        raise ValueError(f"{path} is not an orchard config (bad magic {data[:4]!r})")
    parsed = ORCHARD_CFG_STRUCT.parse(data)
    version = int(parsed["version"])
    if version != ORCHARD_CFG_VERSION:
        raise ValueError(f"{path} has unsupported config version {version}")
    return parsed


def ensure_orchard_cfg(base_dir: Path) -> OrchardConfig:
    path = base_dir / ORCHARD_CFG_NAME
    if path.exists():
        config = OrchardConfig(path=path, data=_parse_cfg_bytes(path, path.read_bytes()))
        # Older files left these at 0.
        patched = False
        if int(config.data["playback_fps"]) <= 0:
            config.playback_fps = DEFAULT_PLAYBACK_FPS
            patched = True
        if int(config.data["frame_step"]) <= 0:
            config.frame_step = DEFAULT_FRAME_STEP
            patched = True
        if patched:
            config.save()
        return config
    config = OrchardConfig(path=path, data=default_orchard_cfg_data())
    config.save()
    return config


def load_orchard_cfg(path: Path) -> OrchardConfig:
    return OrchardConfig(path=path, data=_parse_cfg_bytes(path, path.read_bytes()))
