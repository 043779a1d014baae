"""Lens-facing selection."""

from __future__ import annotations

import enum
from dataclasses import dataclass


class LensFacing(str, enum.Enum):
    """Physical direction a camera faces."""

    FRONT = "front"
    BACK = "back"


@dataclass(frozen=True)
class CameraSelector:
    """Chooses which physical camera a set of use-cases is bound to."""

    lens_facing: LensFacing

    @classmethod
    def require_lens_facing(cls, lens_facing: LensFacing) -> "CameraSelector":
        return cls(lens_facing=lens_facing)


DEFAULT_BACK_CAMERA = CameraSelector(LensFacing.BACK)
DEFAULT_FRONT_CAMERA = CameraSelector(LensFacing.FRONT)
