"""Seed hits and the alignment chain records assembled from them."""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Dict, Mapping, Sequence, Tuple


__all__ = [
    "SEED_FIELDS",
    "ChainState",
    "SeedHit",
    "ReadAlignment",
    "ref_end_key",
    "ref_start_key",
    "alignment_rank_key",
]


SEED_FIELDS: Tuple[str, ...] = ("ref_start", "ref_end", "evt_start", "evt_end", "length")


@dataclass(frozen=True, slots=True)
class SeedHit:
    """Match between a reference interval and a signal-event interval.

    ``length`` is the number of matched positions the hit contributes to a
    chain's score.
    """

    ref_start: int
    ref_end: int
    evt_start: int
    evt_end: int
    length: int

    @classmethod
    def from_tuple(cls, values: Sequence[Any]) -> "SeedHit":
        if len(values) != len(SEED_FIELDS):
            raise ValueError(
                f"Seed hits require {len(SEED_FIELDS)} fields, got {len(values)}"
            )
        return cls(*(int(value) for value in values))

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any]) -> "SeedHit":
        missing = [name for name in SEED_FIELDS if name not in payload]
        if missing:
            raise ValueError(f"Seed hit payload is missing {', '.join(missing)}")
        return cls(*(int(payload[name]) for name in SEED_FIELDS))

    def as_tuple(self) -> Tuple[int, int, int, int, int]:
        return (self.ref_start, self.ref_end, self.evt_start, self.evt_end, self.length)


class ChainState(str, Enum):
    """Lifecycle of a chain; reporting a chain does not change its state."""

    OPEN = "open"
    EXTENDED = "extended"


@dataclass(slots=True)
class ReadAlignment:
    """Colinear run of seed hits merged into one candidate alignment."""

    ref_start: int
    ref_end: int
    evt_start: int
    evt_end: int
    total_len: int
    seed_count: int = 1
    state: ChainState = ChainState.OPEN

    @classmethod
    def from_seed(cls, hit: SeedHit) -> "ReadAlignment":
        return cls(
            ref_start=hit.ref_start,
            ref_end=hit.ref_end,
            evt_start=hit.evt_start,
            evt_end=hit.evt_end,
            total_len=hit.length,
        )

    @property
    def ref_span(self) -> int:
        return self.ref_end - self.ref_start

    @property
    def evt_span(self) -> int:
        return self.evt_end - self.evt_start

    def absorb(self, other: "ReadAlignment | SeedHit") -> None:
        """Extend the intervals to cover ``other`` and add its length."""

        self.ref_start = min(self.ref_start, other.ref_start)
        self.ref_end = max(self.ref_end, other.ref_end)
        self.evt_start = min(self.evt_start, other.evt_start)
        self.evt_end = max(self.evt_end, other.evt_end)
        if isinstance(other, SeedHit):
            self.total_len += other.length
            self.seed_count += 1
        else:
            self.total_len += other.total_len
            self.seed_count += other.seed_count
        self.state = ChainState.EXTENDED

    def snapshot(self) -> "ReadAlignment":
        """Return a detached copy safe to hand to consumers."""

        return replace(self)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "ref_start": self.ref_start,
            "ref_end": self.ref_end,
            "evt_start": self.evt_start,
            "evt_end": self.evt_end,
            "total_len": self.total_len,
            "seed_count": self.seed_count,
            "state": self.state.value,
        }

    def describe(self) -> str:
        return (
            f"ref {self.ref_start}-{self.ref_end} evt {self.evt_start}-{self.evt_end} "
            f"len {self.total_len} ({self.seed_count} seeds, {self.state.value})"
        )


def ref_end_key(chain: ReadAlignment | SeedHit) -> Tuple[int, int, int, int]:
    """Order chains by where they end on the reference."""

    return (chain.ref_end, chain.evt_end, chain.ref_start, chain.evt_start)


def ref_start_key(chain: ReadAlignment | SeedHit) -> Tuple[int, int, int, int]:
    """Order chains by where they start on the reference."""

    return (chain.ref_start, chain.evt_start, chain.ref_end, chain.evt_end)


def alignment_rank_key(chain: ReadAlignment) -> Tuple[int, int, int]:
    """Best candidates first: longest total length, then leftmost position."""

    return (-chain.total_len, chain.ref_start, chain.evt_start)
