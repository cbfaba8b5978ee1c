"""Command line utilities for observe-loop."""

from observe_loop.cli.app import main, run_cli
from observe_loop.cli.errors import CliError

__all__ = ["CliError", "main", "run_cli"]
