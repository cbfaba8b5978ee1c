"""Argument parsing helpers for the observe-loop CLI."""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import Any, Mapping, Optional

from .workflows import _handle_analyze, _handle_classify


def _non_negative_int(value: str) -> int:
    try:
        numeric = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"expected an integer, got {value!r}") from exc
    if numeric < 0:
        raise argparse.ArgumentTypeError(f"expected a non-negative integer, got {numeric}")
    return numeric


_GLOBAL_LOGGING_OPTIONS = (
    ("--log-level", "level", "info", None, "Logging level (debug, info, warning, ...)."),
    ("--log-output", "output", "stderr", None, "Where log records go: stdout, stderr or a file."),
    ("--log-format", "format", "json", ("json", "text"), "Log record layout."),
)


def build_parser(config: Optional[Mapping[str, Any]] = None) -> argparse.ArgumentParser:
    """Build the ``observe-loop`` parser using ``config`` for global defaults."""

    logging_table = dict((config or {}).get("logging", {}) or {})

    parser = argparse.ArgumentParser(
        prog="observe-loop",
        description="Reconstruct the polling loop of a contactless reader from captured frames.",
    )
    parser.add_argument(
        "--config",
        dest="config_path",
        type=Path,
        default=None,
        help="pyproject.toml (or its directory) holding [tool.observe_loop].",
    )
    for flag, key, fallback, choices, help_text in _GLOBAL_LOGGING_OPTIONS:
        parser.add_argument(
            flag,
            dest="log_" + key,
            choices=choices,
            default=logging_table.get(key, fallback),
            help=help_text,
        )

    subparsers = parser.add_subparsers(dest="command", required=True)

    analyze_parser = subparsers.add_parser(
        "analyze",
        help="Replay a frame capture and print the reconstructed polling loop.",
    )
    analyze_parser.add_argument(
        "capture",
        type=Path,
        help="Capture file (.jsonl, .jsonl.gz, .json or .parquet).",
    )
    analyze_parser.add_argument(
        "--format",
        dest="output_format",
        choices=("text", "json"),
        default="text",
        help="Output format (default: text).",
    )
    analyze_parser.add_argument(
        "--sort-threshold",
        type=_non_negative_int,
        default=None,
        help="Minimum number of trailing events re-sorted per batch.",
    )
    analyze_parser.add_argument(
        "--wrap-threshold",
        type=_non_negative_int,
        default=None,
        help="Timestamp drop in microseconds treated as a timer rollover.",
    )
    analyze_parser.add_argument(
        "--sample-threshold",
        type=_non_negative_int,
        default=None,
        help="Number of trailing events searched for the repeating cycle.",
    )
    analyze_parser.set_defaults(handler=_handle_analyze)

    classify_parser = subparsers.add_parser(
        "classify",
        help="Print the command label of a single polling frame.",
    )
    classify_parser.add_argument(
        "frame_type",
        help="Frame type: A, B, F, ON, OFF or UNKNOWN.",
    )
    classify_parser.add_argument(
        "data",
        nargs="?",
        default="",
        help="Frame payload as hexadecimal.",
    )
    classify_parser.set_defaults(handler=_handle_classify)

    return parser


__all__ = ["build_parser"]
