"""Command line application entry point for observe-loop."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Any, Dict, Mapping, NoReturn, Optional, Sequence

from ..logging.config import setup_logging
from .errors import CliError, log_cli_error
from .io import load_cli_config
from .parser import build_parser

_LOGGING_DEFAULTS: Mapping[str, str] = {"level": "info", "output": "stderr", "format": "json"}

# Global flags resolved before the configuration is loaded.
_LOGGING_FLAGS: Mapping[str, str] = {
    "log_level": "level",
    "log_output": "output",
    "log_format": "format",
}


def _emit(message: str) -> None:
    if not message:
        return
    sys.stdout.write(message if message.endswith("\n") else message + "\n")


def _bootstrap_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(add_help=False)
    parser.add_argument("--config", dest="config_path", type=Path, default=None)
    parser.add_argument("--log-level", dest="log_level", default=None)
    parser.add_argument("--log-output", dest="log_output", default=None)
    parser.add_argument("--log-format", dest="log_format", choices=("json", "text"), default=None)
    return parser


def _logging_table(config: Mapping[str, Any], flags: argparse.Namespace) -> Dict[str, Any]:
    table: Dict[str, Any] = dict(_LOGGING_DEFAULTS)
    table.update(config.get("logging", {}) or {})
    for attribute, key in _LOGGING_FLAGS.items():
        value = getattr(flags, attribute)
        if value is not None:
            table[key] = value
    return table


def _exit_with(exc: CliError) -> NoReturn:
    if not exc.logged:
        log_cli_error(exc.payload, exc_info=exc)
        exc.logged = True
    _emit(exc.payload.message)
    raise SystemExit(exc.status_code) from exc


def run_cli(args: Optional[Sequence[str]] = None) -> str:
    """Run one observe-loop command and return what it printed.

    Configuration and logging are set up before the full parser is built so
    that the ``[tool.observe_loop]`` table can provide parser defaults.
    """

    flags, remaining = _bootstrap_parser().parse_known_args(args)
    try:
        config = load_cli_config(flags.config_path)
    except CliError as exc:
        _emit(exc.payload.message)
        raise SystemExit(exc.status_code) from exc
    config["logging"] = _logging_table(config, flags)
    try:
        setup_logging(config)
    except ValueError as exc:
        _emit(str(exc))
        raise SystemExit(2) from exc

    namespace = build_parser(config).parse_args(list(remaining), namespace=flags)
    namespace.config = config
    try:
        result = namespace.handler(namespace, config=config)
    except CliError as exc:
        _exit_with(exc)
    _emit(result)
    return result


def main() -> None:  # pragma: no cover - thin wrapper
    run_cli()


if __name__ == "__main__":  # pragma: no cover - CLI invocation guard
    main()
