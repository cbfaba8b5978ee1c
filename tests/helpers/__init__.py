"""Builders shared by the polling loop tests."""

from __future__ import annotations

from typing import Iterable, Sequence

from observe_loop.core.events import CONTINUOUS, FrameBatch, LoopEvent, RawFrame
from observe_loop.core.frame_types import FrameType

__all__ = [
    "build_batch",
    "build_event",
    "build_frame",
    "build_loop_cycle",
    "chain_events",
]


def build_frame(
    frame_type: FrameType = FrameType.A,
    data: bytes | str = b"",
    *,
    timestamp: int = 0,
    vendor_gain: int = 0,
) -> RawFrame:
    payload = bytes.fromhex(data) if isinstance(data, str) else data
    return RawFrame(type=frame_type, data=payload, vendor_gain=vendor_gain, timestamp=timestamp)


def build_event(
    frame_type: FrameType = FrameType.A,
    data: bytes | str = b"",
    *,
    timestamp: int = 0,
    delta: int = CONTINUOUS,
    vendor_gain: int = 0,
) -> LoopEvent:
    payload = bytes.fromhex(data) if isinstance(data, str) else data
    return LoopEvent(
        type=frame_type,
        data=payload,
        vendor_gain=vendor_gain,
        timestamp=timestamp,
        delta=delta,
    )


def build_batch(
    frames: Iterable[RawFrame], *, arrival: int = 0
) -> FrameBatch:
    return FrameBatch(frames=tuple(frames), arrival_monotonic_nanos=arrival)


def build_loop_cycle() -> list[tuple[FrameType, str]]:
    """One reader loop: field on, A, B and F probes, field off."""

    return [
        (FrameType.ON, ""),
        (FrameType.A, "52"),
        (FrameType.B, "050008"),
        (FrameType.F, "00ffff0100"),
        (FrameType.OFF, ""),
    ]


def chain_events(
    layout: Sequence[tuple[FrameType, str]], *, start: int = 1_000, step: int = 100
) -> list[LoopEvent]:
    """Events spaced ``step`` microseconds apart with matching deltas."""

    events: list[LoopEvent] = []
    for index, (frame_type, data) in enumerate(layout):
        events.append(
            build_event(
                frame_type,
                data,
                timestamp=start + index * step,
                delta=CONTINUOUS if index == 0 else step,
            )
        )
    return events
