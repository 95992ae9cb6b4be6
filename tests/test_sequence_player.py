from __future__ import annotations

import pytest

from orchard.candidate import Candidate
from orchard.sequence import SequenceHeader, SequencePlayer, SequenceRecorder


def _sequence(frames: int = 3, fps: int = 12):
    recorder = SequenceRecorder(SequenceHeader(width=8, height=8, fps=fps))
    for idx in range(frames):
        recorder.record_frame(
            [Candidate(x=float(idx), y=1.0, direction=0.0, scale=0.5)],
            source_index=idx,
            distance=0.1,
        )
    return recorder.finish()


def test_player_steps_one_frame_per_tick() -> None:
    player = SequencePlayer(_sequence())

    assert player.frame_index == 0
    assert player.update(1.0 / 24.0) == 0
    assert player.update(1.0 / 24.0) == 1
    assert player.frame_index == 1
    assert player.current_frame.source_index == 1


def test_player_loops_back_to_first_frame() -> None:
    player = SequencePlayer(_sequence())

    player.update(0.25)

    assert player.frame_index == 0
    assert player.loops == 1


def test_long_host_frame_does_not_drop_ticks() -> None:
    player = SequencePlayer(_sequence())

    assert player.update(1.0) == 12
    assert player.loops == 4


def test_frame_index_at_wraps_by_sequence_length() -> None:
    player = SequencePlayer(_sequence(frames=5, fps=10))

    assert player.frame_index_at(0.0) == 0
    assert player.frame_index_at(0.3) == 3
    assert player.frame_index_at(0.7) == 2
    assert player.frame_index_at(-1.0) == 0


def test_fps_override_and_seek() -> None:
    player = SequencePlayer(_sequence(), fps=4)

    assert player.fps == 4
    player.seek(5)
    assert player.frame_index == 2


def test_stopped_player_ignores_updates() -> None:
    player = SequencePlayer(_sequence())
    player.stop()

    assert player.stopped
    assert player.update(1.0) == 0
    assert player.frame_index == 0


def test_empty_sequence_cannot_play() -> None:
    with pytest.raises(ValueError):
        SequencePlayer(_sequence(frames=0))
