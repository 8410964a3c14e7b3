"""Core streaming algorithms for real-time read mapping.

Two independent per-read data structures live here: the online signal
:class:`~rtmap_core.signal.Normalizer` and the incremental seed
:class:`~rtmap_core.chaining.SeedTracker`.
"""

from __future__ import annotations

from rtmap_core import chaining, runtime, signal
from rtmap_core.chaining import (
    ChainState,
    CoordinateIndex,
    MergePolicy,
    ReadAlignment,
    SeedHit,
    SeedTracker,
)
from rtmap_core.runtime import NormalizerSettings, TrackerSettings
from rtmap_core.signal import (
    EmptyBufferError,
    Moments,
    Normalizer,
    batch_moments,
    normalize_batch,
)

__all__ = [
    "ChainState",
    "CoordinateIndex",
    "EmptyBufferError",
    "MergePolicy",
    "Moments",
    "Normalizer",
    "NormalizerSettings",
    "ReadAlignment",
    "SeedHit",
    "SeedTracker",
    "TrackerSettings",
    "batch_moments",
    "chaining",
    "normalize_batch",
    "runtime",
    "signal",
]
