"""Render command payloads for terminal or file output."""

from __future__ import annotations

import json
from dataclasses import asdict, is_dataclass
from enum import Enum
from io import StringIO
from typing import Any, Dict, Mapping, Protocol

import numpy as np

from rtmap_core import ReadAlignment

__all__ = [
    "Exporter",
    "csv_exporter",
    "exporters_registry",
    "json_exporter",
    "text_exporter",
]


ALIGNMENT_COLUMNS = (
    "ref_start",
    "ref_end",
    "evt_start",
    "evt_end",
    "total_len",
    "seed_count",
    "state",
)


class Exporter(Protocol):
    """Exporter callable protocol."""

    def __call__(self, results: Mapping[str, Any]) -> str:  # pragma: no cover - interface only
        ...


def _normalise(value: Any) -> Any:
    if isinstance(value, ReadAlignment):
        return value.as_dict()
    if is_dataclass(value) and not isinstance(value, type):
        return _normalise(asdict(value))
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, np.ndarray):
        return value.tolist()
    if isinstance(value, np.generic):
        return value.item()
    if isinstance(value, (list, tuple)):
        return [_normalise(item) for item in value]
    if isinstance(value, Mapping):
        return {key: _normalise(item) for key, item in value.items()}
    return value


def json_exporter(results: Mapping[str, Any]) -> str:
    payload = _normalise(dict(results))
    return json.dumps(payload, indent=2, sort_keys=True)


def csv_exporter(results: Mapping[str, Any]) -> str:
    """Tabulate ``alignments`` or, failing that, ``samples`` as CSV."""

    buffer = StringIO()
    alignments = results.get("alignments")
    if alignments is not None:
        buffer.write(",".join(ALIGNMENT_COLUMNS) + "\n")
        for alignment in alignments:
            if not isinstance(alignment, ReadAlignment):
                raise TypeError("CSV exporter expects ReadAlignment instances")
            row = alignment.as_dict()
            buffer.write(",".join(str(row[column]) for column in ALIGNMENT_COLUMNS) + "\n")
        return buffer.getvalue()

    buffer.write("index,value\n")
    for index, value in enumerate(results.get("samples", [])):
        buffer.write(f"{index},{float(value):.6f}\n")
    return buffer.getvalue()


def text_exporter(results: Mapping[str, Any]) -> str:
    lines = []
    summary = results.get("summary")
    if isinstance(summary, Mapping):
        for key, value in summary.items():
            if key == "best_alignment":
                continue
            lines.append(f"{key}: {value}")
    alignments = results.get("alignments")
    if alignments is not None:
        if not alignments:
            lines.append("no alignments")
        for rank, alignment in enumerate(alignments, start=1):
            lines.append(f"#{rank} {alignment.describe()}")
    samples = results.get("samples")
    if samples is not None:
        lines.extend(f"{float(value):.6f}" for value in samples)
    return "\n".join(lines)


exporters_registry: Dict[str, Exporter] = {
    "json": json_exporter,
    "csv": csv_exporter,
    "text": text_exporter,
}
