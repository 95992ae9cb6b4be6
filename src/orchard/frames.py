from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import Protocol

from PIL import Image, UnidentifiedImageError

FRAME_SUFFIXES = (".png", ".jpg", ".jpeg", ".bmp", ".gif", ".tga", ".webp")


class FrameSourceError(RuntimeError):
    pass


class FrameSource(Protocol):
    @property
    def size(self) -> tuple[int, int]: ...

    @property
    def index(self) -> int: ...

    def current(self) -> Image.Image: ...

    def advance(self) -> bool: ...


def to_target_frame(image: Image.Image, size: tuple[int, int] | None = None) -> Image.Image:
    """Single channel copy of `image`, resized to `size` when given.

    Frames are monochrome, so the red channel stands in for intensity.
    """

    if image.mode in ("RGB", "RGBA", "P", "CMYK", "YCbCr"):
        frame = image.convert("RGB").getchannel("R")
    elif image.mode == "L":
        frame = image.copy()
    else:
        frame = image.convert("L")
    if size is not None and frame.size != tuple(size):
        frame = frame.resize((int(size[0]), int(size[1])), Image.Resampling.BILINEAR)
    return frame


def list_frame_paths(frames_dir: Path) -> list[Path]:
    frames_dir = Path(frames_dir)
    if not frames_dir.is_dir():
        raise FrameSourceError(f"frames dir not found: {frames_dir}")
    paths = sorted(path for path in frames_dir.iterdir() if path.suffix.lower() in FRAME_SUFFIXES)
    if not paths:
        raise FrameSourceError(f"no image frames under {frames_dir}")
    return paths


def limit_frame_paths(paths: Sequence[Path], *, step: int, start: int, max_frames: int | None) -> list[Path]:
    """Trim `paths` so that sampling from `start` every `step` yields at most `max_frames` frames."""
    paths = list(paths)
    if max_frames is None:
        return paths
    if int(max_frames) < 1:
        raise ValueError(f"max_frames must be >= 1, got {max_frames}")
    return paths[: int(start) + int(step) * (int(max_frames) - 1) + 1]


class ImageSequenceSource:
    """Frames from an ordered list of image files, sampled every `step` files."""

    def __init__(
        self,
        paths: Sequence[Path],
        *,
        size: tuple[int, int] | None = None,
        step: int = 1,
        start: int = 0,
    ) -> None:
        step = int(step)
        start = int(start)
        if step < 1:
            raise ValueError(f"step must be >= 1, got {step}")
        if start < 0:
            raise ValueError(f"start must be >= 0, got {start}")
        self._paths = tuple(Path(path) for path in paths)
        if not self._paths:
            raise FrameSourceError("frame sequence is empty")
        if start >= len(self._paths):
            raise FrameSourceError(f"start frame {start} is past the end ({len(self._paths)} frames)")
        self._step = step
        self._index = start
        self._cache: tuple[int, Image.Image] | None = None
        if size is None:
            size = self._read(self._index).size
        self._size = (int(size[0]), int(size[1]))
        if self._size[0] <= 0 or self._size[1] <= 0:
            raise ValueError(f"frame size must be positive, got {self._size}")

    @classmethod
    def from_directory(
        cls,
        frames_dir: Path,
        *,
        size: tuple[int, int] | None = None,
        step: int = 1,
        start: int = 0,
    ) -> ImageSequenceSource:
        return cls(list_frame_paths(frames_dir), size=size, step=step, start=start)

    @property
    def size(self) -> tuple[int, int]:
        return self._size

    @property
    def index(self) -> int:
        return self._index

    @property
    def frame_count(self) -> int:
        return len(self._paths)

    def _read(self, index: int) -> Image.Image:
        path = self._paths[index]
        try:
            with Image.open(path) as img:
                img.load()
                return to_target_frame(img)
        except (UnidentifiedImageError, OSError) as exc:
            raise FrameSourceError(f"failed to read frame {path}: {exc}") from exc

    def current(self) -> Image.Image:
        if self._cache is not None and self._cache[0] == self._index:
            return self._cache[1]
        frame = to_target_frame(self._read(self._index), self._size)
        self._cache = (self._index, frame)
        return frame

    def advance(self) -> bool:
        next_index = self._index + self._step
        if next_index >= len(self._paths):
            return False
        self._index = next_index
        return True


class MemoryFrameSource:
    """Frames already in memory; every frame must share one size."""

    def __init__(self, frames: Sequence[Image.Image], *, step: int = 1) -> None:
        if int(step) < 1:
            raise ValueError(f"step must be >= 1, got {step}")
        self._frames = tuple(to_target_frame(frame) for frame in frames)
        if not self._frames:
            raise FrameSourceError("frame sequence is empty")
        self._step = int(step)
        self._index = 0

    @property
    def size(self) -> tuple[int, int]:
        return self._frames[0].size

    @property
    def index(self) -> int:
        return self._index

    def current(self) -> Image.Image:
        frame = self._frames[self._index]
        if frame.size != self.size:
            raise FrameSourceError(f"frame {self._index} has size {frame.size}, expected {self.size}")
        return frame

    def advance(self) -> bool:
        next_index = self._index + self._step
        if next_index >= len(self._frames):
            return False
        self._index = next_index
        return True
