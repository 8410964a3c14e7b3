from __future__ import annotations

import logging

import numpy as np
import pytest

from rtmap import ReadSession, SessionCounters
from rtmap_core import NormalizerSettings, SeedHit, TrackerSettings


def _session(capacity: int = 4, **tracker: int) -> ReadSession:
    return ReadSession(
        "read-1",
        normalizer=NormalizerSettings(capacity=capacity),
        tracker=TrackerSettings(**tracker),
    )


def test_feed_samples_drains_on_backpressure() -> None:
    session = _session(capacity=4)
    samples = np.arange(10.0)

    drained = session.feed_samples(samples)

    assert drained.size == 8
    assert session.normalizer.unread_count() == 2
    assert session.counters == SessionCounters(
        pushed=10, popped=8, discarded=0, backpressure_events=2, seeds=0
    )
    np.testing.assert_allclose(session.normalizer.window()[-2:], [8.0, 9.0])


def test_feed_samples_without_backpressure_returns_nothing() -> None:
    session = _session(capacity=16)

    drained = session.feed_samples([1.0, 2.0, 3.0])

    assert drained.size == 0
    assert session.drain().size == 3
    assert session.counters.popped == 3
    assert session.drain().size == 0


def test_every_fed_sample_is_read_back_exactly_once() -> None:
    session = _session(capacity=8)
    rng = np.random.default_rng(21)
    samples = rng.normal(95.0, 8.0, size=100)

    collected = [session.feed_samples(samples[start : start + 13]) for start in range(0, 100, 13)]
    collected.append(session.drain())

    assert sum(chunk.size for chunk in collected) == 100
    assert session.counters.pushed == session.counters.popped == 100


def test_discard_unread_updates_counters() -> None:
    session = _session(capacity=16)
    session.feed_samples(np.arange(12.0))

    assert session.discard_unread(2) == 10
    assert session.discard_unread(5) is None
    assert session.counters.discarded == 10
    assert session.drain().size == 2


def test_add_seeds_and_alignments_use_min_length(example_hits: list[SeedHit]) -> None:
    session = _session(min_length=15)

    assert session.add_seeds(example_hits) == 2

    assert session.counters.seeds == 3
    assert [chain.total_len for chain in session.alignments()] == [20]
    assert [chain.total_len for chain in session.alignments(0)] == [20, 10]
    assert session.best_alignment().ref_span == 21


def test_summary_reports_signal_and_chains(example_hits: list[SeedHit]) -> None:
    session = _session(capacity=8)
    session.feed_samples([2.0, 4.0, 6.0])
    session.add_seeds(example_hits)

    summary = session.summary()

    assert summary["read_id"] == "read-1"
    assert summary["pushed"] == 3
    assert summary["unread"] == 3
    assert summary["chains"] == 2
    assert summary["signal_mean"] == pytest.approx(4.0)
    assert summary["signal_stdev"] == pytest.approx(np.std([2.0, 4.0, 6.0]))
    assert summary["best_alignment"]["total_len"] == 20
    assert summary["best_alignment"]["state"] == "extended"


def test_reset_starts_a_fresh_read(
    caplog: pytest.LogCaptureFixture, example_hits: list[SeedHit]
) -> None:
    session = _session(capacity=8, max_gap=5)
    session.feed_samples(np.arange(6.0))
    session.add_seeds(example_hits)

    with caplog.at_level(logging.INFO, logger="rtmap.session"):
        session.reset("read-2")

    assert session.read_id == "read-2"
    assert session.counters == SessionCounters()
    assert session.normalizer.count == 0
    assert session.normalizer.capacity == 8
    assert len(session.tracker) == 0
    assert session.tracker.policy.max_gap == 5
    assert session.summary()["best_alignment"] is None
    record = next(record for record in caplog.records if getattr(record, "event", "") == "session.reset")
    assert record.read_id == "read-1"
    assert record.pushed == 6


def test_from_config_builds_components() -> None:
    session = ReadSession.from_config(
        {"normalizer": {"capacity": 32, "target_mean": 5.0}, "tracker": {"max_gap": 4}},
        "from-config",
    )

    assert session.read_id == "from-config"
    assert session.normalizer.capacity == 32
    assert session.normalizer.target_mean == 5.0
    assert session.tracker.policy.max_gap == 4
    assert session.min_length == 0
