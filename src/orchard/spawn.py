from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from .candidate import Candidate
from .session import GenerationSession
from .trace_log import trace_log


@dataclass(frozen=True, slots=True)
class Trial:
    candidate: Candidate
    distance: float
    order: int


@dataclass(frozen=True, slots=True)
class SpawnResult:
    baseline: float
    distance: float
    committed: Candidate | None
    evaluations: int

    @property
    def improved(self) -> bool:
        return self.committed is not None


def cull(trials: Sequence[Trial], keep: int) -> list[Trial]:
    """Best `keep` trials by distance; earlier trials win ties."""
    return sorted(trials, key=lambda trial: (trial.distance, trial.order))[: max(0, int(keep))]


def spawn(session: GenerationSession, *, baseline: float | None = None) -> SpawnResult:
    """Add at most one sprite: the best improving candidate of a small generational search.

    Every trial is composited, measured and rolled back to the same snapshot;
    the winner is the only change left on the working composition. Callers
    that already know the current distance pass it as `baseline` to skip
    measuring it again.
    """

    params = session.params
    composition = session.composition
    snapshot = composition.save()
    baseline = session.measure() if baseline is None else float(baseline)
    evaluations = 0
    found = 0

    def evaluate(candidate: Candidate) -> Trial | None:
        nonlocal evaluations, found
        composition.add(candidate)
        measured = session.measure()
        composition.restore(snapshot)
        evaluations += 1
        if measured >= baseline:
            return None
        trial = Trial(candidate=candidate, distance=measured, order=found)
        found += 1
        return trial

    survivors: list[Trial] = []
    for _ in range(params.initial_pool):
        trial = evaluate(session.random_candidate())
        if trial is not None:
            survivors.append(trial)

    parents = cull(survivors, params.parent_pool)
    for _ in range(params.generations):
        if not parents:
            break
        offspring: list[Trial] = []
        for parent in parents:
            for _ in range(params.children):
                trial = evaluate(session.child_of(parent.candidate))
                if trial is not None:
                    offspring.append(trial)
        parents = cull([*parents, *offspring], params.parent_pool)

    if not parents:
        trace_log(
            "spawn",
            frame=session.frame_index,
            attempt=session.attempts,
            evaluations=evaluations,
            improved=False,
            baseline=baseline,
        )
        return SpawnResult(baseline=baseline, distance=baseline, committed=None, evaluations=evaluations)

    best = parents[0]
    composition.add(best.candidate)
    trace_log(
        "spawn",
        frame=session.frame_index,
        attempt=session.attempts,
        evaluations=evaluations,
        improved=True,
        baseline=baseline,
        distance=best.distance,
    )
    return SpawnResult(baseline=baseline, distance=best.distance, committed=best.candidate, evaluations=evaluations)
