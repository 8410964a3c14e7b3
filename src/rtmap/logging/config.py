"""Logging configuration for rtmap entry points."""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Mapping, Optional, TextIO

__all__ = [
    "DEFAULT_FORMAT",
    "DEFAULT_LEVEL",
    "DEFAULT_OUTPUT",
    "JsonFormatter",
    "LOGGER_NAMES",
    "ROOT_LOGGER_NAME",
    "setup_logging",
]


ROOT_LOGGER_NAME = "rtmap"
LOGGER_NAMES = (ROOT_LOGGER_NAME, "rtmap_core")
DEFAULT_LEVEL = "info"
DEFAULT_OUTPUT = "stderr"
DEFAULT_FORMAT = "json"

_TEXT_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
_HANDLER_MARKER = "_rtmap_handler"

# Attributes present on every LogRecord; anything else came in via ``extra``.
_RESERVED_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", None, None)).keys()
) | {"message", "asctime"}


def _json_default(value: Any) -> Any:
    if isinstance(value, Path):
        return str(value)
    if hasattr(value, "as_dict"):
        return value.as_dict()
    if isinstance(value, (set, frozenset, tuple)):
        return list(value)
    return repr(value)


class JsonFormatter(logging.Formatter):
    """Render log records as single-line JSON objects.

    Structured fields passed through ``extra`` (``event``, counters,
    coordinates) are emitted next to the standard timestamp, level, logger
    and message keys.
    """

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname.lower(),
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key, value in vars(record).items():
            if key in _RESERVED_ATTRS or key.startswith("_"):
                continue
            payload[key] = value
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=_json_default, sort_keys=True)


def _resolve_level(raw: Any) -> int:
    if isinstance(raw, int):
        return raw
    name = str(raw or DEFAULT_LEVEL).strip().upper()
    level = logging.getLevelName(name)
    if not isinstance(level, int):
        raise ValueError(f"Unknown logging level '{raw}'")
    return level


def _build_handler(output: str) -> logging.Handler:
    stream: Optional[TextIO]
    lowered = output.strip().lower()
    if lowered == "stdout":
        stream = sys.stdout
    elif lowered == "stderr":
        stream = sys.stderr
    else:
        destination = Path(output).expanduser()
        destination.parent.mkdir(parents=True, exist_ok=True)
        return logging.FileHandler(destination, encoding="utf8")
    return logging.StreamHandler(stream)


def setup_logging(config: Mapping[str, Any] | None = None) -> logging.Logger:
    """Configure the rtmap logger hierarchies from ``config["logging"]``.

    Supported keys are ``level``, ``output`` (``stdout``, ``stderr`` or a file
    path) and ``format`` (``json`` or ``text``).  Calling this again replaces
    the handler installed by the previous call.
    """

    section: Mapping[str, Any] = {}
    if config:
        raw_section = config.get("logging", {})
        if isinstance(raw_section, Mapping):
            section = raw_section

    level = _resolve_level(section.get("level", DEFAULT_LEVEL))
    output = str(section.get("output", DEFAULT_OUTPUT))
    fmt = str(section.get("format", DEFAULT_FORMAT)).strip().lower()
    if fmt not in {"json", "text"}:
        raise ValueError(f"Unknown logging format '{fmt}'")

    for name in LOGGER_NAMES:
        target = logging.getLogger(name)
        for previous in list(target.handlers):
            if getattr(previous, _HANDLER_MARKER, False):
                target.removeHandler(previous)
                previous.close()

    handler = _build_handler(output)
    setattr(handler, _HANDLER_MARKER, True)
    if fmt == "json":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter(_TEXT_FORMAT))

    for name in LOGGER_NAMES:
        target = logging.getLogger(name)
        target.addHandler(handler)
        target.setLevel(level)
    return logging.getLogger(ROOT_LOGGER_NAME)
