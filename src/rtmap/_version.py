"""Package version lookup.

Installed distributions report their metadata version; source checkouts
fall back to the newest ``## vX.Y.Z`` heading of ``CHANGELOG.md``.
"""

from __future__ import annotations

import re
from importlib import metadata
from pathlib import Path

from packaging.version import InvalidVersion, Version

DISTRIBUTION = "rtmap"

_HEADING = re.compile(r"^## v(?P<version>\d+\.\d+\.\d+)\b")


def _version_from_sources() -> str:
    here = Path(__file__).resolve()
    for root in here.parents[1:3]:
        changelog = root / "CHANGELOG.md"
        if not changelog.is_file():
            continue
        for line in changelog.read_text(encoding="utf-8").splitlines():
            match = _HEADING.match(line)
            if match:
                return match.group("version")
    raise RuntimeError(f"Cannot determine the {DISTRIBUTION!r} version: no metadata and no changelog")


def _load_version() -> str:
    """Return the distribution version, required to be ``MAJOR.MINOR.PATCH``."""

    try:
        raw_version = metadata.version(DISTRIBUTION)
    except metadata.PackageNotFoundError:
        raw_version = _version_from_sources()

    try:
        release = Version(raw_version).release
    except InvalidVersion as exc:
        raise RuntimeError(f"{DISTRIBUTION!r} has an unparsable version {raw_version!r}") from exc
    if len(release) != 3:
        raise RuntimeError(
            f"{DISTRIBUTION!r} version {raw_version!r} is not MAJOR.MINOR.PATCH"
        )
    return raw_version


__version__ = _load_version()

__all__ = ["__version__"]
