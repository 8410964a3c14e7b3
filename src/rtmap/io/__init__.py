"""File helpers for raw samples and seed hit tables."""

from __future__ import annotations

from rtmap.io.samples import SampleFormatError, read_samples, write_samples
from rtmap.io.seeds import (
    SeedFormatError,
    iter_seed_hits,
    read_seed_hits,
    write_seed_hits,
)

__all__ = [
    "SampleFormatError",
    "SeedFormatError",
    "iter_seed_hits",
    "read_samples",
    "read_seed_hits",
    "write_samples",
    "write_seed_hits",
]
