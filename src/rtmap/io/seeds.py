"""Reading and writing seed hit tables.

Two layouts are understood:

* delimited text (``.tsv``, ``.csv`` or ``.txt``) with the columns
  ``ref_start ref_end evt_start evt_end length``; a header row and ``#``
  comment lines are skipped.
* newline-delimited JSON (``.jsonl``) objects carrying the same keys.

Either layout may be gzip compressed (``.gz`` suffix).
"""

from __future__ import annotations

import csv
import gzip
import json
from pathlib import Path
from typing import IO, Iterable, Iterator, List, Tuple

from rtmap_core.chaining import SEED_FIELDS, SeedHit

__all__ = [
    "SeedFormatError",
    "iter_seed_hits",
    "read_seed_hits",
    "write_seed_hits",
]


class SeedFormatError(ValueError):
    """Raised when a seed table row cannot be parsed."""

    def __init__(self, path: Path, line: int, reason: str) -> None:
        super().__init__(f"{path}:{line}: {reason}")
        self.path = path
        self.line = line
        self.reason = reason


def _open_text(path: Path, mode: str) -> IO[str]:
    if path.suffix in {".gz", ".gzip"}:
        return gzip.open(path, mode + "t", encoding="utf8")  # type: ignore[return-value]
    return path.open(mode, encoding="utf8", newline="")


def _base_suffix(path: Path) -> str:
    if path.suffix in {".gz", ".gzip"}:
        return Path(path.stem).suffix.lower()
    return path.suffix.lower()


def _delimiter_for(path: Path) -> str | None:
    suffix = _base_suffix(path)
    if suffix == ".csv":
        return ","
    if suffix == ".tsv":
        return "\t"
    return None


def _decoded_lines(path: Path, handle: IO[bytes]) -> Iterator[Tuple[int, str]]:
    for line_number, raw_bytes in enumerate(handle, start=1):
        try:
            yield line_number, raw_bytes.decode("utf8")
        except UnicodeDecodeError as exc:
            raise SeedFormatError(path, line_number, f"not UTF-8 text ({exc.reason})") from exc


def _iter_delimited(path: Path, lines: Iterable[Tuple[int, str]]) -> Iterator[SeedHit]:
    delimiter = _delimiter_for(path)
    for line_number, raw_line in lines:
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if delimiter is None:
            fields = line.split()
        else:
            fields = next(csv.reader([line], delimiter=delimiter))
        fields = [field.strip() for field in fields]
        if fields[0] == SEED_FIELDS[0]:
            continue
        try:
            yield SeedHit.from_tuple(fields)
        except ValueError as exc:
            raise SeedFormatError(path, line_number, str(exc)) from exc


def _iter_jsonl(path: Path, lines: Iterable[Tuple[int, str]]) -> Iterator[SeedHit]:
    for line_number, raw_line in lines:
        line = raw_line.strip()
        if not line:
            continue
        try:
            payload = json.loads(line)
        except json.JSONDecodeError as exc:
            raise SeedFormatError(path, line_number, f"invalid JSON ({exc.msg})") from exc
        if not isinstance(payload, dict):
            raise SeedFormatError(path, line_number, "expected a JSON object")
        try:
            yield SeedHit.from_mapping(payload)
        except (TypeError, ValueError) as exc:
            raise SeedFormatError(path, line_number, str(exc)) from exc


def iter_seed_hits(path: str | Path) -> Iterator[SeedHit]:
    """Yield the seed hits stored in ``path`` in file order."""

    source = Path(path)
    opener = gzip.open if source.suffix in {".gz", ".gzip"} else open
    with opener(source, "rb") as handle:
        lines = _decoded_lines(source, handle)
        if _base_suffix(source) == ".jsonl":
            yield from _iter_jsonl(source, lines)
        else:
            yield from _iter_delimited(source, lines)


def read_seed_hits(path: str | Path) -> List[SeedHit]:
    return list(iter_seed_hits(path))


def write_seed_hits(hits: Iterable[SeedHit], path: str | Path) -> None:
    """Persist ``hits`` using the layout implied by the suffix of ``path``."""

    destination = Path(path)
    destination.parent.mkdir(parents=True, exist_ok=True)
    with _open_text(destination, "w") as handle:
        if _base_suffix(destination) == ".jsonl":
            for hit in hits:
                json.dump(dict(zip(SEED_FIELDS, hit.as_tuple())), handle, sort_keys=True)
                handle.write("\n")
            return
        writer = csv.writer(handle, delimiter=_delimiter_for(destination) or "\t")
        writer.writerow(SEED_FIELDS)
        for hit in hits:
            writer.writerow(hit.as_tuple())
