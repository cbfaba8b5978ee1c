"""Split an aligned polling cycle into individual field activations."""

from __future__ import annotations

from typing import Sequence

from .events import CONTINUOUS, Loop, LoopEvent
from .frame_types import FrameType


def segment(events: Sequence[LoopEvent]) -> list[Loop]:
    """Group ``events`` into :class:`Loop` records delimited by ON/OFF.

    An ``OFF`` closes the current loop with its delta as ``end_delta``.  An
    ``ON`` opening a segment provides ``start_delta``.  Trailing events that
    are not followed by an ``OFF`` form a final open loop.
    """

    loops: list[Loop] = []
    start_delta = CONTINUOUS
    pending: list[LoopEvent] = []
    position = 0

    for event in events:
        if event.type == FrameType.OFF:
            loops.append(Loop(start_delta, event.delta, tuple(pending)))
            pending = []
            start_delta = CONTINUOUS
            position = 0
            continue
        if event.type == FrameType.ON:
            # A repeated ON without an OFF in between is not a loop member.
            if position == 0:
                start_delta = event.delta
        else:
            pending.append(event)
        position += 1

    if pending or start_delta != CONTINUOUS:
        loops.append(Loop(start_delta, CONTINUOUS, tuple(pending)))
    return loops


__all__ = ["segment"]
