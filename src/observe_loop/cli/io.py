"""Capture and configuration loading for the observe-loop CLI."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Optional

from observe_loop.cli.errors import CliError
from observe_loop.configuration import load_config
from observe_loop.core.events import FrameBatch
from observe_loop.ingestion import CaptureFormatError, load_capture


def load_cli_config(path: Optional[Path] = None) -> Dict[str, Any]:
    """Return the ``[tool.observe_loop]`` table the CLI should run with.

    An explicit ``path`` must exist; without one the environment and the
    working directory are searched.
    """

    if path is not None and not path.expanduser().exists():
        raise CliError(
            f"Configuration path {path} does not exist",
            category="not_found",
            context={"path": str(path)},
        )
    return load_config(path)


def load_batches(source: Path) -> List[FrameBatch]:
    try:
        return load_capture(source)
    except (ImportError, CaptureFormatError, OSError) as exc:
        raise CliError.for_capture(exc, source) from exc


__all__ = ["load_batches", "load_cli_config"]
