"""Argument parsing helpers for the rtmap CLI."""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import Any, Mapping, Optional

from rtmap.exporters import exporters_registry

from .workflows import _handle_chain, _handle_normalize, _handle_replay


def _add_export_argument(parser: argparse.ArgumentParser, default: str) -> None:
    parser.add_argument(
        "--export",
        dest="export",
        choices=sorted(exporters_registry),
        default=default,
        help=f"Output format (default: {default}).",
    )


def _add_normalizer_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--capacity",
        type=int,
        default=None,
        help="Circular buffer size in samples (default: configured normalizer.capacity).",
    )
    parser.add_argument(
        "--target-mean",
        dest="target_mean",
        type=float,
        default=None,
        help="Mean of the normalised output.",
    )
    parser.add_argument(
        "--target-stdev",
        dest="target_stdev",
        type=float,
        default=None,
        help="Standard deviation of the normalised output.",
    )


def _add_tracker_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--max-gap",
        dest="max_gap",
        type=int,
        default=None,
        help="Largest reference/event gap bridged when merging seeds.",
    )
    parser.add_argument(
        "--max-overlap",
        dest="max_overlap",
        type=int,
        default=None,
        help="Largest reference/event overlap tolerated when merging seeds.",
    )
    parser.add_argument(
        "--max-drift",
        dest="max_drift",
        type=int,
        default=None,
        help="Largest difference between reference and event gaps (default: unchecked).",
    )
    parser.add_argument(
        "--min-length",
        dest="min_length",
        type=int,
        default=None,
        help="Only report chains whose total length reaches this value.",
    )


def build_parser(config: Optional[Mapping[str, Any]] = None) -> argparse.ArgumentParser:
    config = dict(config or {})
    logging_cfg = dict(config.get("logging", {}))

    parser = argparse.ArgumentParser(
        description="rtmap – streaming signal normalisation and seed chaining"
    )
    parser.add_argument(
        "--config",
        dest="config_path",
        type=Path,
        default=None,
        help="Path to the pyproject.toml holding a [tool.rtmap] table.",
    )
    parser.add_argument(
        "--log-level",
        dest="log_level",
        default=logging_cfg.get("level", "info"),
        help="Logging level (e.g. debug, info, warning).",
    )
    parser.add_argument(
        "--log-output",
        dest="log_output",
        default=logging_cfg.get("output", "stderr"),
        help="Logging destination (stdout, stderr or a file path).",
    )
    parser.add_argument(
        "--log-format",
        dest="log_format",
        choices=("json", "text"),
        default=logging_cfg.get("format", "json"),
        help="Logging formatter (json or text).",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    normalize_parser = subparsers.add_parser(
        "normalize",
        help="Rescale raw signal samples to the target distribution.",
    )
    normalize_parser.add_argument("samples", type=Path, help="Sample file (.txt, .gz or .npy).")
    normalize_parser.add_argument(
        "--mode",
        choices=("batch", "stream"),
        default="batch",
        help="Normalise the whole read at once or sample by sample (default: batch).",
    )
    normalize_parser.add_argument(
        "--keep-unread",
        dest="keep_unread",
        type=int,
        default=None,
        help="Stream mode only: discard all but this many unread samples before draining.",
    )
    _add_normalizer_arguments(normalize_parser)
    _add_export_argument(normalize_parser, "text")
    normalize_parser.set_defaults(handler=_handle_normalize)

    chain_parser = subparsers.add_parser(
        "chain",
        help="Merge seed hits into ranked colinear alignments.",
    )
    chain_parser.add_argument("seeds", type=Path, help="Seed table (.tsv, .csv, .txt or .jsonl).")
    _add_tracker_arguments(chain_parser)
    _add_export_argument(chain_parser, "text")
    chain_parser.set_defaults(handler=_handle_chain)

    replay_parser = subparsers.add_parser(
        "replay",
        help="Stream one read's samples and seeds through a read session.",
    )
    replay_parser.add_argument("--samples", type=Path, required=True, help="Sample file.")
    replay_parser.add_argument("--seeds", type=Path, required=True, help="Seed table.")
    replay_parser.add_argument(
        "--read-id",
        dest="read_id",
        default=None,
        help="Identifier reported in the summary (default: sample file stem).",
    )
    replay_parser.add_argument(
        "--chunk-size",
        dest="chunk_size",
        type=int,
        default=512,
        help="Samples and seeds delivered per polling step (default: 512).",
    )
    _add_normalizer_arguments(replay_parser)
    _add_tracker_arguments(replay_parser)
    _add_export_argument(replay_parser, "json")
    replay_parser.set_defaults(handler=_handle_replay)

    return parser
