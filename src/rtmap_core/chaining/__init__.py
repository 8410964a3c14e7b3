"""Seed chaining: seed hits, chain records and the incremental tracker."""

from __future__ import annotations

from rtmap_core.chaining.alignment import (
    SEED_FIELDS,
    ChainState,
    ReadAlignment,
    SeedHit,
    alignment_rank_key,
    ref_end_key,
    ref_start_key,
)
from rtmap_core.chaining.index import CoordinateIndex
from rtmap_core.chaining.tracker import (
    DEFAULT_MAX_GAP,
    DEFAULT_MAX_OVERLAP,
    MergePolicy,
    SeedTracker,
)

__all__ = [
    "SEED_FIELDS",
    "ChainState",
    "CoordinateIndex",
    "DEFAULT_MAX_GAP",
    "DEFAULT_MAX_OVERLAP",
    "MergePolicy",
    "ReadAlignment",
    "SeedHit",
    "SeedTracker",
    "alignment_rank_key",
    "ref_end_key",
    "ref_start_key",
]
