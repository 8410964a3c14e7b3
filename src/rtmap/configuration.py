"""Project-level configuration stored under ``[tool.rtmap]`` in ``pyproject.toml``.

The table is split into sub-tables consumed by different layers::

    [tool.rtmap.normalizer]   # NormalizerSettings.from_config
    [tool.rtmap.tracker]      # TrackerSettings.from_config
    [tool.rtmap.logging]      # rtmap.logging.setup_logging
"""

from __future__ import annotations

from collections.abc import Mapping as ABCMapping
from pathlib import Path
from typing import Any

try:  # Python 3.11+
    import tomllib  # type: ignore[attr-defined]
except ModuleNotFoundError:  # pragma: no cover - Python < 3.11 fallback
    import tomli as tomllib  # type: ignore


PROJECT_FILENAME = "pyproject.toml"
TOOL_SECTION = "rtmap"
KNOWN_SECTIONS = ("normalizer", "tracker", "logging")


def _plain(value: Any) -> Any:
    """Copy TOML tables and arrays into builtin ``dict``/``list`` objects."""

    if isinstance(value, ABCMapping):
        return {str(key): _plain(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_plain(item) for item in value]
    return value


def resolve_pyproject_path(candidate: Path) -> Path | None:
    """Map a directory or ``pyproject.toml`` path onto the file to read.

    Paths naming any other file return ``None``.
    """

    candidate = candidate.expanduser()
    if candidate.name == PROJECT_FILENAME:
        return candidate
    if candidate.suffix:
        return None
    return candidate / PROJECT_FILENAME


def _read_tool_table(path: Path) -> Any:
    if not path.is_file():
        return None
    with path.open("rb") as handle:
        document = tomllib.load(handle)
    tool = document.get("tool")
    if not isinstance(tool, ABCMapping):
        return None
    return tool.get(TOOL_SECTION)


def load_project_config(path: Path) -> tuple[dict[str, Any], Path] | None:
    """Load the ``[tool.rtmap]`` table from ``path``.

    ``path`` may be a project directory or the ``pyproject.toml`` itself.
    Returns the table together with the resolved file it came from, or
    ``None`` when the file or the table does not exist.  Sub-tables listed
    in :data:`KNOWN_SECTIONS` are always present in the result, empty when
    the file omits them.
    """

    pyproject_path = resolve_pyproject_path(path)
    if pyproject_path is None:
        return None
    pyproject_path = pyproject_path.resolve(strict=False)

    table = _read_tool_table(pyproject_path)
    if not isinstance(table, ABCMapping):
        return None

    config: dict[str, Any] = _plain(table)
    for name in KNOWN_SECTIONS:
        config.setdefault(name, {})
    return config, pyproject_path


__all__ = [
    "KNOWN_SECTIONS",
    "PROJECT_FILENAME",
    "TOOL_SECTION",
    "load_project_config",
    "resolve_pyproject_path",
]
