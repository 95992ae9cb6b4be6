from __future__ import annotations

from pathlib import Path

from PIL import Image
import pytest

from orchard.frames import (
    FrameSourceError,
    ImageSequenceSource,
    MemoryFrameSource,
    limit_frame_paths,
    list_frame_paths,
    to_target_frame,
)


def _write_frames(frames_dir: Path, count: int, size: tuple[int, int] = (12, 8)) -> list[Path]:
    frames_dir.mkdir(parents=True, exist_ok=True)
    paths = []
    for idx in range(count):
        path = frames_dir / f"frame_{idx:03d}.png"
        Image.new("RGB", size, (idx * 20, 255, 255)).save(path)
        paths.append(path)
    return paths


def test_to_target_frame_uses_red_channel_and_resizes() -> None:
    rgb = Image.new("RGB", (6, 4), (200, 10, 30))

    frame = to_target_frame(rgb)
    resized = to_target_frame(rgb, (3, 2))

    assert frame.mode == "L"
    assert frame.getpixel((0, 0)) == 200
    assert resized.size == (3, 2)
    assert resized.getpixel((1, 1)) == 200


def test_list_frame_paths_sorts_and_filters(tmp_path: Path) -> None:
    _write_frames(tmp_path, 3)
    (tmp_path / "notes.txt").write_text("skip", encoding="utf-8")

    paths = list_frame_paths(tmp_path)

    assert [path.name for path in paths] == ["frame_000.png", "frame_001.png", "frame_002.png"]


def test_list_frame_paths_reports_missing_and_empty_dirs(tmp_path: Path) -> None:
    with pytest.raises(FrameSourceError, match="not found"):
        list_frame_paths(tmp_path / "missing")
    with pytest.raises(FrameSourceError, match="no image frames"):
        list_frame_paths(tmp_path)


def test_limit_frame_paths_keeps_only_sampled_range() -> None:
    paths = [Path(f"{idx}.png") for idx in range(10)]

    assert len(limit_frame_paths(paths, step=3, start=1, max_frames=2)) == 5
    assert limit_frame_paths(paths, step=3, start=1, max_frames=None) == paths
    with pytest.raises(ValueError):
        limit_frame_paths(paths, step=1, start=0, max_frames=0)


def test_image_sequence_source_samples_every_step(tmp_path: Path) -> None:
    _write_frames(tmp_path, 5)
    source = ImageSequenceSource.from_directory(tmp_path, step=2)

    seen = [(source.index, source.current().getpixel((0, 0)))]
    while source.advance():
        seen.append((source.index, source.current().getpixel((0, 0))))

    assert source.size == (12, 8)
    assert source.frame_count == 5
    assert seen == [(0, 0), (2, 40), (4, 80)]


def test_image_sequence_source_resizes_to_requested_size(tmp_path: Path) -> None:
    _write_frames(tmp_path, 2)
    source = ImageSequenceSource.from_directory(tmp_path, size=(6, 4), start=1)

    frame = source.current()

    assert source.index == 1
    assert frame.size == (6, 4)
    assert frame.mode == "L"


def test_image_sequence_source_reports_unreadable_frame(tmp_path: Path) -> None:
    paths = _write_frames(tmp_path, 1)
    broken = tmp_path / "frame_001.png"
    broken.write_bytes(b"broken")
    source = ImageSequenceSource([paths[0], broken])

    assert source.advance()
    with pytest.raises(FrameSourceError, match="failed to read frame"):
        source.current()


def test_image_sequence_source_rejects_bad_start(tmp_path: Path) -> None:
    paths = _write_frames(tmp_path, 2)

    with pytest.raises(FrameSourceError, match="past the end"):
        ImageSequenceSource(paths, start=2)
    with pytest.raises(FrameSourceError):
        ImageSequenceSource([])


def test_memory_source_flags_size_mismatch() -> None:
    source = MemoryFrameSource([Image.new("L", (4, 4)), Image.new("L", (5, 4))])

    assert source.current().size == (4, 4)
    assert source.advance()
    with pytest.raises(FrameSourceError, match="expected"):
        source.current()
    assert not source.advance()
