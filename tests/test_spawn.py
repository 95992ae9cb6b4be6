from __future__ import annotations

from PIL import Image

from orchard.assets import circle_sprite_assets
from orchard.candidate import Candidate
from orchard.config import SearchParams
from orchard.session import GenerationSession
from orchard.spawn import Trial, cull, spawn


def _session(target_intensity: int, *, size: int = 24, seed: int = 7, **overrides) -> GenerationSession:
    params = SearchParams(scale_exponent_min=-1.0, scale_exponent_max=0.0, **overrides)
    session = GenerationSession.create(size, size, circle_sprite_assets(diameter=16), params=params, seed=seed)
    session.set_target(Image.new("L", (size, size), target_intensity))
    return session


def _apple(x: float) -> Candidate:
    return Candidate(x=x, y=0.0, direction=0.0, scale=1.0)


def test_cull_orders_by_distance_then_discovery() -> None:
    trials = [
        Trial(_apple(0.0), 0.4, 0),
        Trial(_apple(1.0), 0.2, 1),
        Trial(_apple(2.0), 0.2, 2),
        Trial(_apple(3.0), 0.1, 3),
    ]

    kept = cull(list(reversed(trials)), 3)

    assert [trial.order for trial in kept] == [3, 1, 2]
    assert cull(trials, 0) == []


def test_spawn_without_improvement_leaves_composition_untouched() -> None:
    session = _session(255)
    before = session.composition.surface.read_region().tobytes()

    result = spawn(session)

    assert result.committed is None
    assert not result.improved
    assert result.baseline == 0.0
    assert result.distance == result.baseline
    assert result.evaluations == session.params.initial_pool
    assert session.composition.candidates == ()
    assert session.composition.surface.read_region().tobytes() == before


def test_spawn_commits_best_improving_candidate() -> None:
    session = _session(0)

    result = spawn(session)

    assert result.improved
    assert result.distance < result.baseline
    assert session.composition.candidates == (result.committed,)
    assert result.evaluations <= session.params.max_evaluations
    assert session.measure() == result.distance


def test_spawn_evaluation_count_matches_measurements() -> None:
    session = _session(0)

    result = spawn(session)

    # One extra measurement for the baseline.
    assert session.evaluations == result.evaluations + 1


def test_repeated_spawns_never_increase_distance() -> None:
    session = _session(0, initial_pool=20, generations=2)
    previous = session.measure()

    for _ in range(5):
        result = spawn(session)
        assert result.baseline == previous
        assert result.distance <= result.baseline
        previous = result.distance

    assert len(session.composition) >= 1


def test_spawn_is_deterministic_for_a_seed() -> None:
    first = spawn(_session(0, seed=3))
    second = spawn(_session(0, seed=3))

    assert first == second


def test_spawn_skips_generations_when_nothing_survives() -> None:
    session = _session(255, initial_pool=6, parent_pool=4, children=5, generations=9)

    result = spawn(session)

    assert result.evaluations == 6


def test_spawn_with_known_baseline_skips_measuring_it() -> None:
    session = _session(0)
    baseline = session.measure()
    measured_before = session.evaluations

    result = spawn(session, baseline=baseline)

    assert result.baseline == baseline
    assert session.evaluations - measured_before == result.evaluations
    assert result.evaluations <= session.params.max_evaluations
