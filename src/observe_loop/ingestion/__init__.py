"""Ingestion of polling frame batches from offline captures."""

from __future__ import annotations

from observe_loop.ingestion.capture import (
    CaptureFormatError,
    batch_from_mapping,
    frame_from_mapping,
    iter_capture,
    load_capture,
)

__all__ = [
    "CaptureFormatError",
    "batch_from_mapping",
    "frame_from_mapping",
    "iter_capture",
    "load_capture",
]
