"""Online normalisation of raw instrument samples.

The :class:`Normalizer` keeps a circular buffer of raw samples together with
the running mean and sum of squared deviations of the samples it holds.  The
moments are updated in constant time on every push: Welford's online update
while the buffer is still filling, and a rolling-window update once every
new sample also evicts the sample previously stored in the same slot.
Reading a sample maps it onto the configured target mean and standard
deviation using the moments current at read time.
"""

from __future__ import annotations

import logging
import math
from typing import Optional, Sequence

import numpy as np

from .stats import EmptyBufferError, batch_moments, linear_map, normalize_array


__all__ = [
    "DEFAULT_BUFFER_SIZE",
    "DEFAULT_TARGET_MEAN",
    "DEFAULT_TARGET_STDEV",
    "Normalizer",
    "normalize_batch",
]


logger = logging.getLogger(__name__)


DEFAULT_BUFFER_SIZE = 6000
DEFAULT_TARGET_MEAN = 0.0
DEFAULT_TARGET_STDEV = 1.0


def _validate_stdev(stdev: float) -> float:
    value = float(stdev)
    if not math.isfinite(value) or value <= 0.0:
        raise ValueError(f"Target standard deviation must be positive, got {stdev!r}")
    return value


class Normalizer:
    """Circular sample buffer with constant-time running moments."""

    __slots__ = (
        "_signal",
        "_mean",
        "_varsum",
        "_n",
        "_rd",
        "_wr",
        "_is_full",
        "_is_empty",
        "_target_mean",
        "_target_stdev",
    )

    def __init__(
        self,
        capacity: int = DEFAULT_BUFFER_SIZE,
        *,
        target_mean: float = DEFAULT_TARGET_MEAN,
        target_stdev: float = DEFAULT_TARGET_STDEV,
    ) -> None:
        if capacity <= 0:
            raise ValueError("Normalizer requires a positive buffer capacity")
        self._signal = np.zeros(int(capacity), dtype=float)
        self._target_mean = float(target_mean)
        self._target_stdev = _validate_stdev(target_stdev)
        self._mean = 0.0
        self._varsum = 0.0
        self._n = 0
        self._rd = 0
        self._wr = 0
        self._is_full = False
        self._is_empty = True

    def __len__(self) -> int:
        return self._n

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(capacity={self.capacity}, count={self._n}, "
            f"unread={self.unread_count()}, mean={self._mean:.4f}, "
            f"stdev={self.stdev:.4f})"
        )

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------
    @property
    def capacity(self) -> int:
        return int(self._signal.size)

    @property
    def target_mean(self) -> float:
        return self._target_mean

    @property
    def target_stdev(self) -> float:
        return self._target_stdev

    def configure_target(self, mean: float, stdev: float) -> None:
        """Set the distribution that :meth:`pop` maps samples onto."""

        self._target_stdev = _validate_stdev(stdev)
        self._target_mean = float(mean)

    set_target = configure_target

    # ------------------------------------------------------------------
    # Statistics
    # ------------------------------------------------------------------
    @property
    def count(self) -> int:
        """Number of samples contributing to the running moments."""

        return self._n

    @property
    def mean(self) -> float:
        return self._mean

    @property
    def varsum(self) -> float:
        return self._varsum

    @property
    def variance(self) -> float:
        if self._n == 0:
            return 0.0
        return max(self._varsum / self._n, 0.0)

    @property
    def stdev(self) -> float:
        return math.sqrt(self.variance)

    @property
    def scale(self) -> float:
        scale, _ = linear_map(
            self._varsum, self._n, self._mean, self._target_mean, self._target_stdev
        )
        return scale

    @property
    def shift(self) -> float:
        _, shift = linear_map(
            self._varsum, self._n, self._mean, self._target_mean, self._target_stdev
        )
        return shift

    @property
    def empty(self) -> bool:
        return self._is_empty

    @property
    def full(self) -> bool:
        return self._is_full

    def window(self) -> np.ndarray:
        """Return the resident samples in arrival order."""

        if self._n < self.capacity:
            start = (self._wr - self._n) % self.capacity
            indices = (start + np.arange(self._n)) % self.capacity
            return self._signal[indices].copy()
        return np.roll(self._signal, -self._wr).copy()

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------
    def load_batch(self, samples: Sequence[float] | np.ndarray) -> None:
        """Replace the buffer with ``samples`` and compute exact moments.

        The buffer capacity becomes ``len(samples)`` and every sample is
        marked unread.
        """

        values = np.array(samples, dtype=float)
        if values.ndim != 1 or values.size == 0:
            raise ValueError("load_batch expects a non-empty one dimensional sequence")
        moments = batch_moments(values)
        self._signal = values
        self._n = moments.count
        self._mean = moments.mean
        self._varsum = moments.varsum
        self._rd = self._wr = 0
        self._is_full = True
        self._is_empty = False

    def push(self, sample: float) -> bool:
        """Store ``sample`` and update the running moments.

        Returns ``False`` without touching the buffer when it is full and no
        sample has been read since it filled up.
        """

        if self._is_full:
            logger.debug(
                "Normalizer buffer full; sample rejected.",
                extra={
                    "event": "normalizer.backpressure",
                    "capacity": self.capacity,
                    "unread": self.unread_count(),
                },
            )
            return False

        value = float(sample)
        capacity = self.capacity
        old_value = float(self._signal[self._wr])
        self._signal[self._wr] = value

        if self._n == capacity:
            old_mean = self._mean
            self._mean += (value - old_value) / capacity
            self._varsum += (value + old_value - old_mean - self._mean) * (value - old_value)
        else:
            self._n += 1
            delta1 = value - self._mean
            self._mean += delta1 / self._n
            delta2 = value - self._mean
            self._varsum += delta1 * delta2

        self._wr = (self._wr + 1) % capacity
        self._is_empty = False
        self._is_full = self._wr == self._rd
        return True

    def push_many(self, samples: Sequence[float]) -> int:
        """Push ``samples`` in order until one is rejected; return the accepted count."""

        accepted = 0
        for sample in samples:
            if not self.push(sample):
                break
            accepted += 1
        return accepted

    # ------------------------------------------------------------------
    # Reading
    # ------------------------------------------------------------------
    def at(self, index: int) -> float:
        """Return the normalised value stored at buffer slot ``index``."""

        if not 0 <= index < self.capacity:
            raise IndexError(f"Buffer slot {index} outside [0, {self.capacity})")
        scale, shift = linear_map(
            self._varsum, self._n, self._mean, self._target_mean, self._target_stdev
        )
        return scale * float(self._signal[index]) + shift

    def pop(self) -> Optional[float]:
        """Return the next unread sample normalised, or ``None`` when none is unread."""

        if self._is_empty or self._n == 0:
            return None
        value = self.at(self._rd)
        self._rd = (self._rd + 1) % self.capacity
        self._is_empty = self._rd == self._wr
        self._is_full = False
        return value

    def pop_many(self, limit: Optional[int] = None) -> np.ndarray:
        """Read up to ``limit`` unread samples (all of them by default)."""

        available = self.unread_count()
        total = available if limit is None else max(0, min(int(limit), available))
        if total == 0:
            return np.empty(0, dtype=float)
        scale, shift = linear_map(
            self._varsum, self._n, self._mean, self._target_mean, self._target_stdev
        )
        indices = (self._rd + np.arange(total)) % self.capacity
        values = self._signal[indices] * scale + shift
        self._rd = (self._rd + total) % self.capacity
        self._is_empty = self._rd == self._wr
        self._is_full = False
        return values

    def unread_count(self) -> int:
        """Number of pushed samples not yet read or discarded."""

        if self._is_empty:
            return 0
        if self._is_full:
            return self.capacity
        return (self._wr - self._rd) % self.capacity

    def discard_unread(self, keep: int = 0) -> Optional[int]:
        """Drop unread samples so only the ``keep`` most recent remain unread.

        Returns the number of samples skipped, or ``None`` when ``keep`` is not
        smaller than the unread count and there is nothing to discard.
        """

        if keep < 0:
            raise ValueError("keep must be non-negative")
        unread = self.unread_count()
        if keep >= unread:
            return None

        skipped = unread - keep
        self._rd = (self._wr - keep) % self.capacity
        self._is_full = False
        self._is_empty = keep == 0
        logger.debug(
            "Normalizer discarded unread samples.",
            extra={
                "event": "normalizer.discard",
                "skipped": skipped,
                "kept": keep,
            },
        )
        return skipped

    skip_unread = discard_unread

    def reset(self, capacity: int = 0) -> None:
        """Return to the empty state, resizing when ``capacity`` differs."""

        if capacity < 0:
            raise ValueError("capacity must be non-negative")
        self._n = 0
        self._rd = 0
        self._wr = 0
        self._mean = 0.0
        self._varsum = 0.0
        self._is_full = False
        self._is_empty = True

        if capacity and capacity != self.capacity:
            logger.debug(
                "Normalizer buffer resized.",
                extra={
                    "event": "normalizer.resize",
                    "previous_capacity": self.capacity,
                    "capacity": capacity,
                },
            )
            self._signal = np.zeros(int(capacity), dtype=float)
        else:
            self._signal[0] = 0.0


def normalize_batch(
    samples: Sequence[float] | np.ndarray,
    *,
    target_mean: float = DEFAULT_TARGET_MEAN,
    target_stdev: float = DEFAULT_TARGET_STDEV,
) -> np.ndarray:
    """Normalise a whole read at once.

    Raises :class:`EmptyBufferError` for an empty input.
    """

    values = np.asarray(samples, dtype=float)
    if values.size == 0:
        raise EmptyBufferError("Cannot normalise an empty read")
    moments = batch_moments(values)
    return normalize_array(values, moments, target_mean, _validate_stdev(target_stdev))
