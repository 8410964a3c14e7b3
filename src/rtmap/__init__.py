"""Real-time read mapping helpers.

The algorithms live in :mod:`rtmap_core`; this package adds configuration
loading, logging, sample and seed file IO, per-read sessions and the
``rtmap`` command line interface.
"""

from ._version import __version__
from .configuration import load_project_config
from .io import read_samples, read_seed_hits, write_samples, write_seed_hits
from .session import ReadSession, SessionCounters

__all__ = [
    "ReadSession",
    "SessionCounters",
    "load_project_config",
    "read_samples",
    "read_seed_hits",
    "write_samples",
    "write_seed_hits",
    "__version__",
]
