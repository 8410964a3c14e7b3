"""Runtime configuration primitives."""

from __future__ import annotations

from rtmap_core.runtime.settings import (
    DEFAULT_MIN_LENGTH,
    NormalizerSettings,
    TrackerSettings,
)

__all__ = [
    "DEFAULT_MIN_LENGTH",
    "NormalizerSettings",
    "TrackerSettings",
]
