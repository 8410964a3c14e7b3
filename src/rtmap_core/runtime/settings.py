"""Typed settings for the normaliser and the seed tracker."""

from __future__ import annotations

from collections.abc import Mapping as ABCMapping
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from rtmap_core.chaining.tracker import (
    DEFAULT_MAX_GAP,
    DEFAULT_MAX_OVERLAP,
    MergePolicy,
    SeedTracker,
)
from rtmap_core.signal.normalizer import (
    DEFAULT_BUFFER_SIZE,
    DEFAULT_TARGET_MEAN,
    DEFAULT_TARGET_STDEV,
    Normalizer,
)


__all__ = [
    "DEFAULT_MIN_LENGTH",
    "NormalizerSettings",
    "TrackerSettings",
]


DEFAULT_MIN_LENGTH = 0


def _as_mapping(value: Any) -> Mapping[str, Any]:
    if isinstance(value, ABCMapping):
        return value
    return {}


def _coerce_int(value: Any, fallback: int) -> int:
    try:
        numeric = int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return fallback
    if numeric < 0:
        return 0
    return numeric


def _coerce_optional_int(value: Any, fallback: Optional[int]) -> Optional[int]:
    if value is None:
        return fallback
    if isinstance(value, str) and value.strip().lower() in {"", "none", "off"}:
        return None
    try:
        numeric = int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return fallback
    return max(0, numeric)


def _coerce_float(value: Any, fallback: float) -> float:
    try:
        return float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return fallback


@dataclass(frozen=True, slots=True)
class NormalizerSettings:
    """Buffer size and output distribution of a :class:`Normalizer`."""

    capacity: int = DEFAULT_BUFFER_SIZE
    target_mean: float = DEFAULT_TARGET_MEAN
    target_stdev: float = DEFAULT_TARGET_STDEV

    @classmethod
    def from_config(cls, config: Mapping[str, Any] | None = None) -> "NormalizerSettings":
        """Read the ``[normalizer]`` table of a configuration mapping."""

        section = _as_mapping(config.get("normalizer")) if config else {}
        capacity = _coerce_int(section.get("capacity"), DEFAULT_BUFFER_SIZE)
        if capacity == 0:
            capacity = DEFAULT_BUFFER_SIZE
        target_stdev = _coerce_float(section.get("target_stdev"), DEFAULT_TARGET_STDEV)
        if target_stdev <= 0.0:
            target_stdev = DEFAULT_TARGET_STDEV
        return cls(
            capacity=capacity,
            target_mean=_coerce_float(section.get("target_mean"), DEFAULT_TARGET_MEAN),
            target_stdev=target_stdev,
        )

    def build(self) -> Normalizer:
        return Normalizer(
            self.capacity,
            target_mean=self.target_mean,
            target_stdev=self.target_stdev,
        )


@dataclass(frozen=True, slots=True)
class TrackerSettings:
    """Merge tolerances and reporting threshold of a :class:`SeedTracker`."""

    max_gap: int = DEFAULT_MAX_GAP
    max_overlap: int = DEFAULT_MAX_OVERLAP
    max_drift: Optional[int] = None
    min_length: int = DEFAULT_MIN_LENGTH

    @classmethod
    def from_config(cls, config: Mapping[str, Any] | None = None) -> "TrackerSettings":
        """Read the ``[tracker]`` table of a configuration mapping."""

        section = _as_mapping(config.get("tracker")) if config else {}
        return cls(
            max_gap=_coerce_int(section.get("max_gap"), DEFAULT_MAX_GAP),
            max_overlap=_coerce_int(section.get("max_overlap"), DEFAULT_MAX_OVERLAP),
            max_drift=_coerce_optional_int(section.get("max_drift"), None),
            min_length=_coerce_int(section.get("min_length"), DEFAULT_MIN_LENGTH),
        )

    def policy(self) -> MergePolicy:
        return MergePolicy(
            max_gap=self.max_gap,
            max_overlap=self.max_overlap,
            max_drift=self.max_drift,
        )

    def build(self) -> SeedTracker:
        return SeedTracker(self.policy())
