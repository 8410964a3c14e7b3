"""Logging utilities for rtmap."""

from rtmap.logging.config import JsonFormatter, setup_logging

__all__ = ["JsonFormatter", "setup_logging"]
