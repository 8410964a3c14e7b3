"""Streaming signal normalisation primitives."""

from __future__ import annotations

from rtmap_core.signal.normalizer import (
    DEFAULT_BUFFER_SIZE,
    DEFAULT_TARGET_MEAN,
    DEFAULT_TARGET_STDEV,
    Normalizer,
    normalize_batch,
)
from rtmap_core.signal.stats import (
    EmptyBufferError,
    Moments,
    batch_moments,
    linear_map,
    normalize_array,
)

__all__ = [
    "DEFAULT_BUFFER_SIZE",
    "DEFAULT_TARGET_MEAN",
    "DEFAULT_TARGET_STDEV",
    "EmptyBufferError",
    "Moments",
    "Normalizer",
    "batch_moments",
    "linear_map",
    "normalize_array",
    "normalize_batch",
]
