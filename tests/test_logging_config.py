from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from rtmap.logging import JsonFormatter, setup_logging


def _flush(name: str) -> None:
    for handler in logging.getLogger(name).handlers:
        handler.flush()


def test_json_formatter_includes_structured_extra() -> None:
    record = logging.LogRecord(
        "rtmap.session", logging.INFO, __file__, 10, "Read session reset.", None, None
    )
    record.event = "session.reset"
    record.read_id = "read-7"
    record.pending = 3

    payload = json.loads(JsonFormatter().format(record))

    assert payload["message"] == "Read session reset."
    assert payload["level"] == "info"
    assert payload["logger"] == "rtmap.session"
    assert payload["event"] == "session.reset"
    assert payload["read_id"] == "read-7"
    assert payload["pending"] == 3
    assert "timestamp" in payload
    assert "msg" not in payload and "args" not in payload


def test_json_formatter_serialises_paths_and_tuples() -> None:
    record = logging.LogRecord("rtmap", logging.WARNING, __file__, 1, "odd values", None, None)
    record.path = Path("/tmp/reads.tsv")
    record.seed = (1, 2, 3, 4, 5)

    payload = json.loads(JsonFormatter().format(record))

    assert payload["path"] == "/tmp/reads.tsv"
    assert payload["seed"] == [1, 2, 3, 4, 5]


def test_setup_logging_writes_json_lines_to_file(tmp_path: Path) -> None:
    destination = tmp_path / "logs" / "rtmap.jsonl"
    setup_logging({"logging": {"level": "debug", "output": str(destination), "format": "json"}})

    logging.getLogger("rtmap.cli").info("hello", extra={"event": "cli.test"})
    logging.getLogger("rtmap_core.chaining.tracker").debug(
        "core event", extra={"event": "seed_tracker.create"}
    )
    _flush("rtmap")

    lines = [json.loads(line) for line in destination.read_text(encoding="utf8").splitlines()]
    assert [line["event"] for line in lines] == ["cli.test", "seed_tracker.create"]
    assert lines[1]["level"] == "debug"


def test_setup_logging_replaces_previous_handler(tmp_path: Path) -> None:
    first = tmp_path / "first.log"
    second = tmp_path / "second.log"
    setup_logging({"logging": {"output": str(first), "format": "text"}})
    setup_logging({"logging": {"output": str(second), "format": "text", "level": "warning"}})

    logger = logging.getLogger("rtmap.session")
    logger.info("filtered out")
    logger.warning("kept")
    _flush("rtmap")

    assert first.read_text(encoding="utf8") == ""
    text = second.read_text(encoding="utf8")
    assert "WARNING rtmap.session: kept" in text
    assert "filtered out" not in text
    marked = [
        handler
        for handler in logging.getLogger("rtmap").handlers
        if getattr(handler, "_rtmap_handler", False)
    ]
    assert len(marked) == 1


@pytest.mark.parametrize(
    "section",
    [{"level": "chatty"}, {"format": "xml"}],
)
def test_setup_logging_rejects_invalid_settings(section: dict[str, str]) -> None:
    with pytest.raises(ValueError):
        setup_logging({"logging": section})
