"""Logging utilities for observe-loop."""

from observe_loop.logging.config import JsonFormatter, setup_logging

__all__ = ["JsonFormatter", "setup_logging"]
