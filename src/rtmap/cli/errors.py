"""Error reporting for the rtmap command line."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

__all__ = [
    "CATEGORY_STATUS_CODES",
    "CliError",
    "ErrorPayload",
    "log_cli_error",
]


CATEGORY_STATUS_CODES: Mapping[str, int] = {
    "runtime": 1,
    "usage": 2,
    "io": 3,
    "not_found": 4,
    "format": 5,
}

_DEFAULT_CATEGORY = "runtime"
_LOGGER_NAME = "rtmap.cli"


def _scalar_context(context: Optional[Mapping[str, Any]]) -> dict[str, Any]:
    """Keep JSON friendly values as-is and stringify everything else."""

    safe: dict[str, Any] = {}
    for key, value in (context or {}).items():
        if value is None or isinstance(value, (str, int, float, bool)):
            safe[key] = value
        else:
            safe[key] = str(value)
    return safe


@dataclass(frozen=True, slots=True)
class ErrorPayload:
    """What the CLI reports about a failure."""

    message: str
    category: str = _DEFAULT_CATEGORY
    context: Mapping[str, Any] = field(default_factory=dict)

    @property
    def status_code(self) -> int:
        return CATEGORY_STATUS_CODES.get(
            self.category, CATEGORY_STATUS_CODES[_DEFAULT_CATEGORY]
        )

    def as_dict(self) -> dict[str, Any]:
        return {
            "status_code": self.status_code,
            "category": self.category,
            "message": self.message,
            "context": dict(self.context),
        }


def log_cli_error(
    payload: ErrorPayload,
    *,
    logger: Optional[logging.Logger] = None,
    exc_info: Optional[BaseException] = None,
) -> None:
    target = logger or logging.getLogger(_LOGGER_NAME)
    target.error(
        payload.message,
        extra={
            "event": "cli.error",
            "category": payload.category,
            "status_code": payload.status_code,
            "context": dict(payload.context),
        },
        exc_info=exc_info,
    )


class CliError(RuntimeError):
    """Failure raised by command handlers; carries its exit status."""

    def __init__(
        self,
        message: str,
        *,
        category: str = _DEFAULT_CATEGORY,
        context: Optional[Mapping[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.payload = ErrorPayload(
            message=message,
            category=category or _DEFAULT_CATEGORY,
            context=_scalar_context(context),
        )
        self.logged = False

    @property
    def category(self) -> str:
        return self.payload.category

    @property
    def status_code(self) -> int:
        return self.payload.status_code

    @property
    def context(self) -> Mapping[str, Any]:
        return self.payload.context
