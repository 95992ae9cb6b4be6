from __future__ import annotations

from typing import Protocol


class View(Protocol):
    def update(self, dt: float) -> None: ...

    def draw(self) -> None: ...
