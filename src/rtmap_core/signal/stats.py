"""Vectorised moment helpers shared by the signal normaliser."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Sequence, Tuple

import numpy as np


__all__ = [
    "EmptyBufferError",
    "Moments",
    "batch_moments",
    "linear_map",
    "normalize_array",
]


class EmptyBufferError(RuntimeError):
    """Raised when a normalisation is requested without any resident sample."""


@dataclass(frozen=True, slots=True)
class Moments:
    """First and second moments of a sample window."""

    count: int
    mean: float
    varsum: float

    @property
    def variance(self) -> float:
        if self.count == 0:
            return 0.0
        return self.varsum / self.count

    @property
    def stdev(self) -> float:
        return math.sqrt(max(self.variance, 0.0))


def batch_moments(samples: Sequence[float] | np.ndarray) -> Moments:
    """Return the exact mean and sum of squared deviations of ``samples``."""

    values = np.asarray(samples, dtype=float)
    if values.size == 0:
        return Moments(0, 0.0, 0.0)
    mean = float(np.mean(values))
    varsum = float(np.sum(np.square(values - mean)))
    return Moments(int(values.size), mean, varsum)


def linear_map(
    varsum: float,
    count: int,
    mean: float,
    target_mean: float,
    target_stdev: float,
) -> Tuple[float, float]:
    """Return ``(scale, shift)`` mapping the window onto the target distribution.

    A window without spread collapses onto ``target_mean`` rather than
    producing an infinite scale.
    """

    if count <= 0:
        raise EmptyBufferError("Cannot normalise a window without samples")
    variance = varsum / count
    if variance <= 0.0:
        scale = 0.0
    else:
        scale = target_stdev / math.sqrt(variance)
    shift = target_mean - scale * mean
    return scale, shift


def normalize_array(
    samples: Sequence[float] | np.ndarray,
    moments: Moments,
    target_mean: float,
    target_stdev: float,
) -> Any:
    """Apply the linear map derived from ``moments`` to every sample."""

    scale, shift = linear_map(
        moments.varsum, moments.count, moments.mean, target_mean, target_stdev
    )
    return np.asarray(samples, dtype=float) * scale + shift
