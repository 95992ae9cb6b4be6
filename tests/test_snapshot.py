from __future__ import annotations

from PIL import Image
import pytest

from orchard.assets import circle_sprite_assets
from orchard.candidate import Candidate, Variant
from orchard.composition import WorkingComposition
from orchard.snapshot import Snapshot, SnapshotError, restore_snapshot, save_snapshot
from pith.surface import Surface


def _composition() -> WorkingComposition:
    return WorkingComposition(24, 24, circle_sprite_assets(diameter=12))


def _apple(x: float, y: float, variant: Variant = Variant.DARK) -> Candidate:
    return Candidate(x=x, y=y, direction=30.0, scale=1.0, variant=variant)


def test_add_draws_and_tracks_candidate() -> None:
    composition = _composition()
    blank = composition.surface.read_region().tobytes()

    composition.add(_apple(12.0, 12.0))

    assert composition.candidates == (_apple(12.0, 12.0),)
    assert len(composition) == 1
    assert composition.surface.read_region().tobytes() != blank


def test_surface_is_exact_composite_of_tracked_candidates() -> None:
    composition = _composition()
    apples = [_apple(6.0, 6.0), _apple(10.0, 9.0, Variant.LIGHT), _apple(18.0, 20.0)]
    for apple in apples:
        composition.add(apple)

    replay = Surface(24, 24, fill=composition.background)
    for apple in composition.candidates:
        apple.composite_onto(replay, composition.assets)

    assert replay.image.tobytes() == composition.surface.image.tobytes()


def test_restore_of_save_reproduces_state_exactly() -> None:
    composition = _composition()
    composition.add(_apple(8.0, 8.0))
    snapshot = composition.save()
    pixels = composition.surface.read_region().tobytes()
    candidates = composition.candidates

    composition.add(_apple(16.0, 16.0))
    composition.add(_apple(4.0, 20.0, Variant.LIGHT))
    composition.restore(snapshot)

    assert composition.surface.read_region().tobytes() == pixels
    assert composition.candidates == candidates


def test_snapshot_is_independent_of_later_drawing() -> None:
    composition = _composition()
    snapshot = save_snapshot(composition)
    before = snapshot.pixels.tobytes()

    composition.add(_apple(12.0, 12.0))

    assert snapshot.pixels.tobytes() == before
    assert snapshot.candidates == ()


def test_restore_rejects_mismatched_snapshot_and_changes_nothing() -> None:
    composition = _composition()
    composition.add(_apple(12.0, 12.0))
    pixels = composition.surface.read_region().tobytes()
    bad = Snapshot(pixels=Image.new("L", (8, 8), 255), candidates=())

    with pytest.raises(SnapshotError):
        restore_snapshot(composition, bad)

    assert composition.surface.read_region().tobytes() == pixels
    assert len(composition) == 1


def test_clear_resets_to_background() -> None:
    composition = _composition()
    composition.add(_apple(12.0, 12.0))

    composition.clear()

    assert composition.candidates == ()
    assert set(composition.surface.image.tobytes()) == {255}
