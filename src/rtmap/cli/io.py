"""Configuration discovery and input loading for the rtmap CLI."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, List, Optional, Set

import numpy as np

from rtmap.configuration import load_project_config, resolve_pyproject_path
from rtmap.io import SampleFormatError, SeedFormatError, read_samples, read_seed_hits
from rtmap_core import SeedHit

from .errors import CliError

CONFIG_ENV_VAR = "RTMAP_CONFIG"


def load_cli_config(path: Optional[Path] = None) -> Dict[str, Any]:
    """Load CLI defaults from the first ``pyproject.toml`` carrying ``[tool.rtmap]``.

    Candidates are the explicit ``path``, then ``$RTMAP_CONFIG``, then the
    current working directory.
    """

    bases: List[Path] = []
    if path is not None:
        bases.append(path)
    env_config = os.environ.get(CONFIG_ENV_VAR)
    if env_config:
        bases.append(Path(env_config))
    bases.append(Path.cwd())

    tried: Set[Path] = set()
    for base in bases:
        candidate = resolve_pyproject_path(base)
        if candidate is None:
            continue
        candidate = candidate.resolve(strict=False)
        if candidate in tried:
            continue
        tried.add(candidate)
        loaded = load_project_config(candidate)
        if loaded is not None:
            payload, source = loaded
            payload["_config_path"] = str(source)
            return payload

    return {"_config_path": None}


def load_samples(path: Path) -> np.ndarray:
    if not path.exists():
        raise CliError(
            f"Sample file {path} does not exist",
            category="not_found",
            context={"path": str(path), "kind": "samples"},
        )
    try:
        samples = read_samples(path)
    except SampleFormatError as exc:
        raise CliError(str(exc), category="format", context={"path": str(path)}) from exc
    except OSError as exc:
        raise CliError(
            f"Unable to read sample file {path}: {exc}",
            category="io",
            context={"path": str(path)},
        ) from exc
    if samples.size == 0:
        raise CliError(
            f"Sample file {path} contains no samples",
            category="format",
            context={"path": str(path)},
        )
    return samples


def load_seed_hits(path: Path) -> List[SeedHit]:
    if not path.exists():
        raise CliError(
            f"Seed file {path} does not exist",
            category="not_found",
            context={"path": str(path), "kind": "seeds"},
        )
    try:
        return read_seed_hits(path)
    except SeedFormatError as exc:
        raise CliError(
            str(exc),
            category="format",
            context={"path": str(path), "line": exc.line},
        ) from exc
    except OSError as exc:
        raise CliError(
            f"Unable to read seed file {path}: {exc}",
            category="io",
            context={"path": str(path)},
        ) from exc
