"""Per-read processing state.

A :class:`ReadSession` owns exactly one :class:`~rtmap_core.Normalizer` and
one :class:`~rtmap_core.SeedTracker`.  Sessions are never shared between
reads; concurrent reads each get their own session.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from typing import Any, Dict, Iterable, List, Optional, Sequence

import numpy as np

from rtmap_core import (
    Normalizer,
    NormalizerSettings,
    ReadAlignment,
    SeedHit,
    SeedTracker,
    TrackerSettings,
)

__all__ = ["ReadSession", "SessionCounters"]


logger = logging.getLogger(__name__)


@dataclass(slots=True)
class SessionCounters:
    pushed: int = 0
    popped: int = 0
    discarded: int = 0
    backpressure_events: int = 0
    seeds: int = 0


class ReadSession:
    """Normaliser and seed tracker bound to a single read."""

    def __init__(
        self,
        read_id: str = "",
        *,
        normalizer: Optional[NormalizerSettings] = None,
        tracker: Optional[TrackerSettings] = None,
    ) -> None:
        self.read_id = read_id
        self._normalizer_settings = normalizer or NormalizerSettings()
        self._tracker_settings = tracker or TrackerSettings()
        self.normalizer: Normalizer = self._normalizer_settings.build()
        self.tracker: SeedTracker = self._tracker_settings.build()
        self.counters = SessionCounters()

    @classmethod
    def from_config(cls, config: Dict[str, Any], read_id: str = "") -> "ReadSession":
        return cls(
            read_id,
            normalizer=NormalizerSettings.from_config(config),
            tracker=TrackerSettings.from_config(config),
        )

    @property
    def min_length(self) -> int:
        return self._tracker_settings.min_length

    # ------------------------------------------------------------------
    # Signal
    # ------------------------------------------------------------------
    def feed_samples(self, samples: Sequence[float] | np.ndarray) -> np.ndarray:
        """Push ``samples`` and return every value read back out meanwhile.

        Whenever the buffer refuses a sample the unread backlog is drained
        before retrying, so no sample is lost.
        """

        values = np.asarray(samples, dtype=float)
        drained: List[np.ndarray] = []
        offset = 0
        while offset < values.size:
            accepted = self.normalizer.push_many(values[offset:])
            offset += accepted
            self.counters.pushed += accepted
            if offset < values.size:
                self.counters.backpressure_events += 1
                logger.debug(
                    "Read session draining a full normaliser buffer.",
                    extra={
                        "event": "session.backpressure",
                        "read_id": self.read_id,
                        "pending": int(values.size - offset),
                    },
                )
                drained.append(self.drain())
        if not drained:
            return np.empty(0, dtype=float)
        return np.concatenate(drained)

    def drain(self, limit: Optional[int] = None) -> np.ndarray:
        values = self.normalizer.pop_many(limit)
        self.counters.popped += int(values.size)
        return values

    def discard_unread(self, keep: int = 0) -> Optional[int]:
        skipped = self.normalizer.discard_unread(keep)
        if skipped is not None:
            self.counters.discarded += skipped
        return skipped

    # ------------------------------------------------------------------
    # Seeds
    # ------------------------------------------------------------------
    def add_seeds(self, hits: Iterable[SeedHit]) -> int:
        before = self.tracker.seed_count
        chains = self.tracker.add_seeds(hits)
        self.counters.seeds += self.tracker.seed_count - before
        return chains

    def alignments(self, min_length: Optional[int] = None) -> List[ReadAlignment]:
        threshold = self.min_length if min_length is None else min_length
        return self.tracker.get_alignments(threshold)

    def best_alignment(self) -> Optional[ReadAlignment]:
        return self.tracker.best_alignment()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def reset(self, read_id: str = "") -> None:
        """Prepare the session for the next read, keeping its settings."""

        logger.info(
            "Read session reset.",
            extra={
                "event": "session.reset",
                "read_id": self.read_id,
                "next_read_id": read_id,
                **asdict(self.counters),
            },
        )
        self.read_id = read_id
        self.normalizer.reset(self._normalizer_settings.capacity)
        self.tracker.reset()
        self.counters = SessionCounters()

    def summary(self) -> Dict[str, Any]:
        best = self.best_alignment()
        return {
            "read_id": self.read_id,
            **asdict(self.counters),
            "unread": self.normalizer.unread_count(),
            "chains": len(self.tracker),
            "signal_mean": self.normalizer.mean,
            "signal_stdev": self.normalizer.stdev,
            "best_alignment": best.as_dict() if best is not None else None,
        }
