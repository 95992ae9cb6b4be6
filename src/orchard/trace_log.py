from __future__ import annotations

"""Opt-in generation trace.

One line per event: `<utc timestamp> event=<name> key=value ...`, keys sorted.
Floats are written with fixed precision so traces from two runs diff cleanly.
Every call is a no-op until `init_trace_log` picks a file.
"""

from dataclasses import dataclass
import datetime as dt
from enum import Enum
import os
from pathlib import Path
from threading import Lock

FLOAT_PRECISION = 6

_TRACE_LOCK = Lock()
_TRACE_PATH: Path | None = None


@dataclass(slots=True)
class FrameCounters:
    """Spawn bookkeeping for the frame currently being approximated."""

    frame: int
    start_distance: float
    spawns: int = 0
    committed: int = 0
    evaluations: int = 0
    distance: float | None = None

    def add_spawn(self, *, evaluations: int, improved: bool, distance: float) -> None:
        self.spawns += 1
        self.evaluations += int(evaluations)
        if improved:
            self.committed += 1
        self.distance = float(distance)

    @property
    def stagnant(self) -> int:
        return self.spawns - self.committed

    def fields(self) -> dict[str, object]:
        return {
            "frame": self.frame,
            "spawns": self.spawns,
            "committed": self.committed,
            "stagnant": self.stagnant,
            "evaluations": self.evaluations,
            "start_distance": self.start_distance,
            "distance": self.start_distance if self.distance is None else self.distance,
        }


def _format_value(value: object) -> str:
    if value is None:
        return "none"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        return f"{value:.{FLOAT_PRECISION}f}"
    if isinstance(value, Enum):
        return str(value.value)
    return str(value).replace("\n", "\\n")


def format_trace_line(timestamp: str, event: str, fields: dict[str, object]) -> str:
    line = f"{timestamp} event={str(event).strip()}"
    for key in sorted(fields):
        line += f" {key}={_format_value(fields[key])}"
    return line


def trace_log_path() -> Path | None:
    with _TRACE_LOCK:
        return _TRACE_PATH


def trace_log_enabled() -> bool:
    return trace_log_path() is not None


def init_trace_log(
    *,
    base_dir: Path,
    command: str,
    source: str,
    assets: str,
    seed: int | None,
    max_apples: int,
    diff_target: float,
) -> Path:
    command_name = str(command).strip().lower() or "run"
    stamp = dt.datetime.now(dt.timezone.utc).strftime("%Y%m%dT%H%M%S.%fZ")
    path = base_dir / "logs" / f"{command_name}-pid{os.getpid()}-{stamp}.log"
    path.parent.mkdir(parents=True, exist_ok=True)

    global _TRACE_PATH
    with _TRACE_LOCK:
        _TRACE_PATH = path

    trace_log(
        "init",
        command=command_name,
        source=str(source),
        assets=str(assets),
        seed=None if seed is None else int(seed),
        max_apples=int(max_apples),
        diff_target=float(diff_target),
        pid=int(os.getpid()),
    )
    return path


def close_trace_log() -> None:
    global _TRACE_PATH
    with _TRACE_LOCK:
        _TRACE_PATH = None


def trace_log(event: str, **fields: object) -> None:
    if not trace_log_enabled():
        return
    timestamp = dt.datetime.now(dt.timezone.utc).isoformat(timespec="milliseconds")
    line = format_trace_line(timestamp, event, fields) + "\n"
    with _TRACE_LOCK:
        if _TRACE_PATH is None:
            return
        with _TRACE_PATH.open("a", encoding="utf-8") as handle:
            handle.write(line)


def trace_frame(event: str, counters: FrameCounters, **extra: object) -> None:
    """Trace a frame event carrying the frame's spawn counters."""
    trace_log(event, **counters.fields(), **extra)
