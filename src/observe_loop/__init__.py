"""Top-level package for observe-loop.

The package reconstructs the repeating polling loop of a contactless reader
from passively captured polling frames: it corrects frame order and timer
rollover, detects and aligns the repeating cycle, splits it into field
activations and labels every frame with its command name.
"""

from ._version import __version__
from .core import (
    CONTINUOUS,
    EventHistory,
    FrameBatch,
    FrameType,
    Loop,
    LoopEvent,
    PipelineSettings,
    RawFrame,
    align,
    classify,
    detect_cycle,
    format_delta,
    gain_percentage,
    loop_signature,
    normalize,
    segment,
)
from .ingestion import CaptureFormatError, iter_capture, load_capture
from .tracker import BatchOrderError, PollingLoopTracker

__all__ = [
    "BatchOrderError",
    "CONTINUOUS",
    "CaptureFormatError",
    "EventHistory",
    "FrameBatch",
    "FrameType",
    "Loop",
    "LoopEvent",
    "PipelineSettings",
    "PollingLoopTracker",
    "RawFrame",
    "align",
    "classify",
    "detect_cycle",
    "format_delta",
    "gain_percentage",
    "iter_capture",
    "load_capture",
    "loop_signature",
    "normalize",
    "segment",
    "__version__",
]
