from __future__ import annotations

import logging
import sys
from pathlib import Path
from textwrap import dedent

import pytest


ROOT = Path(__file__).resolve().parents[1]
SRC_ROOT = ROOT / "src"
if str(SRC_ROOT) not in sys.path:
    sys.path.insert(0, str(SRC_ROOT))


from rtmap.logging.config import LOGGER_NAMES  # noqa: E402
from rtmap_core import SeedHit  # noqa: E402


def write_pyproject(directory: Path, contents: str) -> Path:
    """Persist a ``pyproject.toml`` under ``directory`` and return its path."""

    payload = dedent(contents).lstrip()
    target = directory / "pyproject.toml"
    target.write_text(payload, encoding="utf8")
    return target


@pytest.fixture()
def example_hits() -> list[SeedHit]:
    return [
        SeedHit(100, 110, 5, 6, 10),
        SeedHit(111, 121, 6, 7, 10),
        SeedHit(500, 510, 50, 51, 10),
    ]


@pytest.fixture(autouse=True)
def _isolate_rtmap_loggers(monkeypatch: pytest.MonkeyPatch):
    """Undo handlers installed by ``setup_logging`` during a test."""

    monkeypatch.delenv("RTMAP_CONFIG", raising=False)
    snapshots = {
        name: (list(logging.getLogger(name).handlers), logging.getLogger(name).level)
        for name in LOGGER_NAMES
    }
    yield
    for name, (handlers, level) in snapshots.items():
        logger = logging.getLogger(name)
        for handler in list(logger.handlers):
            if handler not in handlers:
                logger.removeHandler(handler)
                handler.close()
        logger.setLevel(level)
