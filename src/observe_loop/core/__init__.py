"""Core polling loop reconstruction pipeline."""

from .alignment import align
from .classifier import classify
from .cycles import detect_cycle
from .events import CONTINUOUS, FrameBatch, Loop, LoopEvent, RawFrame, same_frame
from .formatting import format_delta, frame_type_letter, gain_percentage, loop_signature
from .frame_types import FrameType, parse_frame_type
from .history import EventHistory
from .normalizer import correct_window, normalize
from .segmentation import segment
from .settings import PipelineSettings

__all__ = [
    "CONTINUOUS",
    "EventHistory",
    "FrameBatch",
    "FrameType",
    "Loop",
    "LoopEvent",
    "PipelineSettings",
    "RawFrame",
    "align",
    "classify",
    "correct_window",
    "detect_cycle",
    "format_delta",
    "frame_type_letter",
    "gain_percentage",
    "loop_signature",
    "normalize",
    "parse_frame_type",
    "same_frame",
    "segment",
]
