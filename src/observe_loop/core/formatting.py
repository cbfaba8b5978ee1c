"""Human readable helpers for polling loop diagnostics."""

from __future__ import annotations

import math
from typing import Iterable

from .events import CONTINUOUS, LoopEvent
from .frame_types import FrameType

MAX_VENDOR_GAIN = 12


def format_delta(microseconds: int) -> str:
    """Render a delta using the coarsest unit that fits, rounding up."""

    if microseconds == CONTINUOUS:
        return "Continuous"
    if microseconds >= 60_000_000:
        return f"{math.ceil(microseconds / 60_000_000)} min"
    if microseconds >= 1_000_000:
        return f"{math.ceil(microseconds / 1_000_000)} s"
    if microseconds >= 1_000:
        return f"{math.ceil(microseconds / 1_000)} ms"
    return f"{microseconds} us"


def gain_percentage(vendor_gain: int) -> str:
    """Map the vendor specific gain onto a 0-100% scale.

    The range matches the only controller currently exposing observe mode;
    other controllers may report a different span.
    """

    squashed = min(max(vendor_gain, 0), MAX_VENDOR_GAIN)
    return f"{squashed * 100 // MAX_VENDOR_GAIN}%"


def frame_type_letter(frame_type: FrameType | int) -> str:
    try:
        return FrameType(frame_type).letter
    except ValueError:
        return f"U({int(frame_type)})"


def loop_signature(events: Iterable[LoopEvent]) -> str:
    """Concatenate the type letters of ``events``, e.g. ``"OABFX"``."""

    return "".join(frame_type_letter(event.type) for event in events)


__all__ = ["format_delta", "frame_type_letter", "gain_percentage", "loop_signature"]
