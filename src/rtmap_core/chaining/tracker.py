"""Incremental chaining of seed hits into maximal colinear alignments.

The tracker files every chain in two coordinate indices: one ordered by
reference end (chains a new hit may extend forwards) and one ordered by
reference start (chains a new hit may extend backwards, which lets seeds
arriving out of reference order still join).  Candidate lookup is a
bisection plus a scan bounded by the merge tolerances, so finding
candidates is logarithmic in the number of chains.  Filing a new or grown
chain inserts into a sorted Python list, which shifts the entries after
it, so that step is linear in the number of chains.

After every merge the grown chain is probed again; any chain it has become
colinear with is absorbed so that no two chains in the tracker are ever
mergeable with each other.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from itertools import count
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from .alignment import (
    ReadAlignment,
    SeedHit,
    alignment_rank_key,
    ref_end_key,
    ref_start_key,
)
from .index import CoordinateIndex


__all__ = [
    "DEFAULT_MAX_GAP",
    "DEFAULT_MAX_OVERLAP",
    "MergePolicy",
    "SeedTracker",
]


logger = logging.getLogger(__name__)


DEFAULT_MAX_GAP = 2
DEFAULT_MAX_OVERLAP = 0

Interval = ReadAlignment | SeedHit


@dataclass(frozen=True, slots=True)
class MergePolicy:
    """Tolerances deciding when two intervals belong to the same chain.

    ``right`` follows ``left`` when both the reference gap and the event gap
    between them lie in ``[-max_overlap, max_gap]``, ``right`` does not end
    before ``left`` on either axis and, when ``max_drift`` is set, the two
    gaps differ by at most ``max_drift`` so the pair stays near a common
    diagonal.
    """

    max_gap: int = DEFAULT_MAX_GAP
    max_overlap: int = DEFAULT_MAX_OVERLAP
    max_drift: Optional[int] = None

    def __post_init__(self) -> None:
        if self.max_gap < 0:
            raise ValueError("max_gap must be non-negative")
        if self.max_overlap < 0:
            raise ValueError("max_overlap must be non-negative")
        if self.max_drift is not None and self.max_drift < 0:
            raise ValueError("max_drift must be non-negative")

    def gap(self, left: Interval, right: Interval) -> Optional[int]:
        """Return the combined gap when ``right`` extends ``left``, else ``None``."""

        ref_gap = right.ref_start - left.ref_end
        evt_gap = right.evt_start - left.evt_end
        low = -self.max_overlap
        if not (low <= ref_gap <= self.max_gap and low <= evt_gap <= self.max_gap):
            return None
        if right.ref_end < left.ref_end or right.evt_end < left.evt_end:
            return None
        if self.max_drift is not None and abs(ref_gap - evt_gap) > self.max_drift:
            return None
        return abs(ref_gap) + abs(evt_gap)

    def mergeable(self, first: Interval, second: Interval) -> bool:
        return self.gap(first, second) is not None or self.gap(second, first) is not None


class SeedTracker:
    """Maintains the set of maximal colinear chains seen so far for one read."""

    def __init__(self, policy: Optional[MergePolicy] = None) -> None:
        self._policy = policy or MergePolicy()
        self._chains: Dict[int, ReadAlignment] = {}
        self._by_end: CoordinateIndex[ReadAlignment] = CoordinateIndex(ref_end_key)
        self._by_start: CoordinateIndex[ReadAlignment] = CoordinateIndex(ref_start_key)
        self._slots = count()
        self._seed_count = 0

    def __len__(self) -> int:
        return len(self._chains)

    def __iter__(self) -> Iterator[ReadAlignment]:
        for chain in self._by_end:
            yield chain.snapshot()

    @property
    def policy(self) -> MergePolicy:
        return self._policy

    @property
    def seed_count(self) -> int:
        """Total number of seeds absorbed since creation or the last reset."""

        return self._seed_count

    def reset(self) -> None:
        self._chains.clear()
        self._by_end.clear()
        self._by_start.clear()
        self._seed_count = 0

    # ------------------------------------------------------------------
    # Index bookkeeping
    # ------------------------------------------------------------------
    def _file(self, slot: int, chain: ReadAlignment) -> None:
        self._chains[slot] = chain
        self._by_end.insert(slot, chain)
        self._by_start.insert(slot, chain)

    def _unfile(self, slot: int) -> ReadAlignment:
        self._by_end.remove(slot)
        self._by_start.remove(slot)
        return self._chains.pop(slot)

    def _refile(self, slot: int) -> None:
        # Keys changed in place; both indices still hold the old keys.
        self._by_end.reposition(slot)
        self._by_start.reposition(slot)

    def _best_partner(
        self, probe: Interval, exclude: Optional[int] = None
    ) -> Optional[int]:
        """Return the slot of the chain ``probe`` should merge with, if any.

        Preference goes to the smallest combined gap, then the larger total
        length, then the older chain.
        """

        policy = self._policy
        best: Optional[Tuple[int, int, int]] = None

        forward = self._by_end.irange(
            probe.ref_start - policy.max_gap, probe.ref_start + policy.max_overlap
        )
        backward = self._by_start.irange(
            probe.ref_end - policy.max_overlap, probe.ref_end + policy.max_gap
        )
        for slot in (*forward, *backward):
            if slot == exclude:
                continue
            chain = self._chains[slot]
            gaps = [
                gap
                for gap in (policy.gap(chain, probe), policy.gap(probe, chain))
                if gap is not None
            ]
            if not gaps:
                continue
            rank = (min(gaps), -chain.total_len, slot)
            if best is None or rank < best:
                best = rank
        return None if best is None else best[2]

    def _coalesce(self, slot: int) -> None:
        chain = self._chains[slot]
        while True:
            partner = self._best_partner(chain, exclude=slot)
            if partner is None:
                return
            absorbed = self._unfile(partner)
            chain.absorb(absorbed)
            self._refile(slot)
            logger.debug(
                "Seed chains coalesced.",
                extra={
                    "event": "seed_tracker.coalesce",
                    "chain": chain.as_dict(),
                    "absorbed": absorbed.as_dict(),
                },
            )

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def add_seed(self, hit: SeedHit) -> ReadAlignment:
        """Absorb ``hit`` into the best colinear chain or start a new one.

        Returns a snapshot of the chain that now contains the hit.
        """

        self._seed_count += 1
        slot = self._best_partner(hit)
        if slot is None:
            slot = next(self._slots)
            chain = ReadAlignment.from_seed(hit)
            self._file(slot, chain)
            logger.debug(
                "Seed chain created.",
                extra={"event": "seed_tracker.create", "chain": chain.as_dict()},
            )
            return chain.snapshot()

        chain = self._chains[slot]
        chain.absorb(hit)
        self._refile(slot)
        logger.debug(
            "Seed merged into chain.",
            extra={
                "event": "seed_tracker.merge",
                "seed": hit.as_tuple(),
                "chain": chain.as_dict(),
            },
        )
        self._coalesce(slot)
        return chain.snapshot()

    def add_seeds(self, hits: Iterable[SeedHit]) -> int:
        """Add ``hits`` in arrival order and return the resulting chain count."""

        for hit in hits:
            self.add_seed(hit)
        return len(self._chains)

    def get_alignments(self, min_length: int = 0) -> List[ReadAlignment]:
        """Return chains scoring at least ``min_length``, best first.

        The result is a snapshot; later seeds do not modify it.
        """

        selected = [
            chain for chain in self._chains.values() if chain.total_len >= min_length
        ]
        selected.sort(key=alignment_rank_key)
        return [chain.snapshot() for chain in selected]

    def best_alignment(self) -> Optional[ReadAlignment]:
        if not self._chains:
            return None
        best = min(self._chains.values(), key=alignment_rank_key)
        return best.snapshot()

    def describe(self) -> str:
        lines = [f"{len(self._chains)} chains from {self._seed_count} seeds"]
        lines.extend(chain.describe() for chain in self._by_end)
        return "\n".join(lines)
