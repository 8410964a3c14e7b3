"""Raw signal sample files.

Samples are stored either as whitespace separated text (one or more values
per line, ``#`` comments allowed, optionally gzip compressed) or as a
one-dimensional numpy ``.npy`` array.
"""

from __future__ import annotations

import gzip
from pathlib import Path
from typing import Sequence

import numpy as np

__all__ = ["SampleFormatError", "read_samples", "write_samples"]


class SampleFormatError(ValueError):
    """Raised when a sample file holds something other than numbers."""


def read_samples(path: str | Path) -> np.ndarray:
    source = Path(path)
    if source.suffix == ".npy":
        try:
            values = np.load(source, allow_pickle=False)
        except (ValueError, EOFError) as exc:
            raise SampleFormatError(f"{source}: not a numpy array file ({exc})") from exc
        if values.ndim != 1:
            raise SampleFormatError(f"{source}: expected a one dimensional array")
        try:
            return values.astype(float)
        except (TypeError, ValueError) as exc:
            raise SampleFormatError(f"{source}: array is not numeric ({values.dtype})") from exc

    opener = gzip.open if source.suffix in {".gz", ".gzip"} else open
    collected: list[float] = []
    with opener(source, "rb") as handle:
        for line_number, raw_bytes in enumerate(handle, start=1):
            try:
                raw_line = raw_bytes.decode("utf8")
            except UnicodeDecodeError as exc:
                raise SampleFormatError(
                    f"{source}:{line_number}: not UTF-8 text ({exc.reason})"
                ) from exc
            _parse_line(source, line_number, raw_line, collected)
    return np.asarray(collected, dtype=float)


def _parse_line(source: Path, line_number: int, raw_line: str, collected: list[float]) -> None:
    line = raw_line.split("#", 1)[0].strip()
    for token in line.replace(",", " ").split():
        try:
            collected.append(float(token))
        except ValueError as exc:
            raise SampleFormatError(
                f"{source}:{line_number}: invalid sample {token!r}"
            ) from exc


def write_samples(values: Sequence[float] | np.ndarray, path: str | Path) -> None:
    destination = Path(path)
    destination.parent.mkdir(parents=True, exist_ok=True)
    array = np.asarray(values, dtype=float)
    if destination.suffix == ".npy":
        np.save(destination, array, allow_pickle=False)
        return
    opener = gzip.open if destination.suffix in {".gz", ".gzip"} else open
    with opener(destination, "wt", encoding="utf8") as handle:
        for value in array:
            handle.write(f"{value:.6f}\n")
