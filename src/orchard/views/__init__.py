from __future__ import annotations

from .studio import SequenceView, StudioView

__all__ = ["SequenceView", "StudioView"]
