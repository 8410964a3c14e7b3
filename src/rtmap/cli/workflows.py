"""Command handlers for the rtmap CLI."""

from __future__ import annotations

import argparse
import logging
import math
from dataclasses import replace
from typing import Any, Dict, Mapping

import numpy as np

from rtmap.exporters import exporters_registry
from rtmap.session import ReadSession
from rtmap_core import Normalizer, NormalizerSettings, TrackerSettings

from .errors import CliError
from .io import load_samples, load_seed_hits

logger = logging.getLogger(__name__)


def _render(payload: Mapping[str, Any], export: str) -> str:
    try:
        exporter = exporters_registry[export]
    except KeyError as exc:
        raise CliError(
            f"Unknown export format '{export}'.",
            category="usage",
            context={"export": export},
        ) from exc
    return exporter(payload)


def _normalizer_settings(
    namespace: argparse.Namespace, config: Mapping[str, Any]
) -> NormalizerSettings:
    settings = NormalizerSettings.from_config(config)
    overrides: Dict[str, Any] = {}
    for name in ("capacity", "target_mean", "target_stdev"):
        value = getattr(namespace, name, None)
        if value is not None:
            overrides[name] = value
    settings = replace(settings, **overrides)
    if settings.capacity <= 0:
        raise CliError(
            "The normaliser capacity must be positive.",
            category="usage",
            context={"capacity": settings.capacity},
        )
    if not math.isfinite(settings.target_stdev) or settings.target_stdev <= 0:
        raise CliError(
            "The target standard deviation must be a positive finite number.",
            category="usage",
            context={"target_stdev": settings.target_stdev},
        )
    if not math.isfinite(settings.target_mean):
        raise CliError(
            "The target mean must be a finite number.",
            category="usage",
            context={"target_mean": settings.target_mean},
        )
    return settings


def _tracker_settings(
    namespace: argparse.Namespace, config: Mapping[str, Any]
) -> TrackerSettings:
    settings = TrackerSettings.from_config(config)
    overrides: Dict[str, Any] = {}
    for name in ("max_gap", "max_overlap", "max_drift", "min_length"):
        value = getattr(namespace, name, None)
        if value is not None:
            if value < 0:
                raise CliError(
                    f"--{name.replace('_', '-')} must be non-negative.",
                    category="usage",
                    context={name: value},
                )
            overrides[name] = value
    return replace(settings, **overrides)


def _handle_normalize(namespace: argparse.Namespace, *, config: Mapping[str, Any]) -> str:
    samples = load_samples(namespace.samples)
    settings = _normalizer_settings(namespace, config)
    keep_unread = namespace.keep_unread
    if keep_unread is not None and keep_unread < 0:
        raise CliError(
            "--keep-unread must be non-negative.",
            category="usage",
            context={"keep_unread": keep_unread},
        )

    if namespace.mode == "batch":
        normalizer = Normalizer(
            samples.size,
            target_mean=settings.target_mean,
            target_stdev=settings.target_stdev,
        )
        normalizer.load_batch(samples)
        output = normalizer.pop_many()
        summary = {
            "mode": "batch",
            "samples": int(samples.size),
            "signal_mean": normalizer.mean,
            "signal_stdev": normalizer.stdev,
        }
    else:
        session = ReadSession(str(namespace.samples), normalizer=settings)
        chunks = [session.feed_samples(samples)]
        if keep_unread is not None:
            session.discard_unread(keep_unread)
        chunks.append(session.drain())
        output = np.concatenate(chunks)
        summary = {"mode": "stream", **session.summary()}
        summary.pop("best_alignment", None)
        summary.pop("chains", None)
        summary.pop("seeds", None)

    logger.info(
        "Normalised signal samples.",
        extra={"event": "cli.normalize", "mode": namespace.mode, "count": int(output.size)},
    )
    return _render({"summary": summary, "samples": output}, namespace.export)


def _handle_chain(namespace: argparse.Namespace, *, config: Mapping[str, Any]) -> str:
    hits = load_seed_hits(namespace.seeds)
    settings = _tracker_settings(namespace, config)
    tracker = settings.build()
    chains = tracker.add_seeds(hits)
    alignments = tracker.get_alignments(settings.min_length)
    logger.info(
        "Chained seed hits.",
        extra={
            "event": "cli.chain",
            "seeds": len(hits),
            "chains": chains,
            "reported": len(alignments),
        },
    )
    summary = {"seeds": len(hits), "chains": chains, "reported": len(alignments)}
    return _render({"summary": summary, "alignments": alignments}, namespace.export)


def _handle_replay(namespace: argparse.Namespace, *, config: Mapping[str, Any]) -> str:
    samples = load_samples(namespace.samples)
    hits = load_seed_hits(namespace.seeds)
    chunk_size = namespace.chunk_size
    if chunk_size <= 0:
        raise CliError(
            "--chunk-size must be positive.",
            category="usage",
            context={"chunk_size": chunk_size},
        )

    tracker_settings = _tracker_settings(namespace, config)
    session = ReadSession(
        namespace.read_id or namespace.samples.stem,
        normalizer=_normalizer_settings(namespace, config),
        tracker=tracker_settings,
    )
    for start in range(0, samples.size, chunk_size):
        session.feed_samples(samples[start : start + chunk_size])
        session.drain()
    for start in range(0, len(hits), chunk_size):
        session.add_seeds(hits[start : start + chunk_size])
        best = session.best_alignment()
        logger.debug(
            "Replay polled alignments.",
            extra={
                "event": "cli.replay.poll",
                "seeds": session.counters.seeds,
                "best": best.as_dict() if best is not None else None,
            },
        )

    summary = session.summary()
    return _render(
        {"summary": summary, "alignments": session.alignments(tracker_settings.min_length)},
        namespace.export,
    )
