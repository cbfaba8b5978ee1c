"""Error reporting for the observe-loop command line tools.

Every failure surfaced to the user is a :class:`CliError`.  Its category
selects the process exit status and the structured log record emitted by
:func:`log_cli_error`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping, Optional

from ..ingestion.capture import CaptureFormatError

__all__ = [
    "EXIT_STATUS",
    "CliError",
    "ErrorPayload",
    "build_error_payload",
    "log_cli_error",
]


EXIT_STATUS: Mapping[str, int] = {
    "runtime": 1,
    "usage": 2,
    "io": 3,
    "not_found": 4,
}

_FALLBACK_CATEGORY = "runtime"
_LOGGER_NAME = "observe_loop.cli"

_PARQUET_HINT = (
    "Reading Parquet captures requires the 'pandas' package and a compatible engine "
    "(install 'pyarrow' or 'fastparquet')."
)


def _plain(value: Any) -> Any:
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    return str(value)


@dataclass(frozen=True, slots=True)
class ErrorPayload:
    """What the CLI reports about a failed command."""

    category: str
    message: str
    status_code: int
    context: Mapping[str, Any] = field(default_factory=dict)

    def as_dict(self) -> dict[str, Any]:
        return {
            "category": self.category,
            "message": self.message,
            "status_code": self.status_code,
            "context": dict(self.context),
        }


def build_error_payload(
    message: str,
    *,
    category: str = _FALLBACK_CATEGORY,
    status_code: Optional[int] = None,
    context: Optional[Mapping[str, Any]] = None,
) -> ErrorPayload:
    """Resolve the exit status of ``category`` and flatten ``context``.

    Context values that are not JSON scalars are stored as strings so the
    payload can be logged by the JSON formatter.
    """

    category = category if category in EXIT_STATUS else _FALLBACK_CATEGORY
    if status_code is None:
        status_code = EXIT_STATUS[category]
    flat = {str(key): _plain(value) for key, value in (context or {}).items()}
    return ErrorPayload(category, message, status_code, flat)


def log_cli_error(
    payload: ErrorPayload,
    *,
    logger: Optional[logging.Logger] = None,
    exc_info: Optional[BaseException] = None,
) -> None:
    (logger or logging.getLogger(_LOGGER_NAME)).error(
        payload.message,
        extra={
            "event": "observe_loop.cli.error",
            "category": payload.category,
            "status_code": payload.status_code,
            "context": dict(payload.context),
        },
        exc_info=exc_info,
    )


class CliError(RuntimeError):
    """Failure of a CLI command carrying its :class:`ErrorPayload`."""

    def __init__(
        self,
        message: str,
        *,
        category: str = _FALLBACK_CATEGORY,
        status_code: Optional[int] = None,
        context: Optional[Mapping[str, Any]] = None,
        logged: bool = False,
    ) -> None:
        super().__init__(message)
        self.payload = build_error_payload(
            message, category=category, status_code=status_code, context=context
        )
        self.logged = logged

    @property
    def category(self) -> str:
        return self.payload.category

    @property
    def status_code(self) -> int:
        return self.payload.status_code

    @property
    def context(self) -> Mapping[str, Any]:
        return self.payload.context

    @classmethod
    def for_capture(cls, exc: BaseException, path: Path) -> "CliError":
        """Translate a capture loading failure into a user facing error."""

        context = {"path": str(path)}
        if isinstance(exc, FileNotFoundError):
            return cls(f"Capture {path} does not exist", category="not_found", context=context)
        if isinstance(exc, ImportError):
            return cls(_PARQUET_HINT, category="usage", context={**context, "format": "parquet"})
        if isinstance(exc, CaptureFormatError):
            return cls(str(exc), category="usage", context=context)
        if isinstance(exc, OSError):
            return cls(f"Unable to read capture {path}: {exc}", category="io", context=context)
        return cls(str(exc), context=context)
