"""Data model shared by the polling loop pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Sequence

from .classifier import classify
from .frame_types import FrameType

#: Delta sentinel for "unknown/continuous" timing.
CONTINUOUS = -1


@dataclass(frozen=True, slots=True)
class RawFrame:
    """Polling frame exactly as delivered by the capture layer."""

    type: FrameType
    data: bytes = b""
    vendor_gain: int = 0
    timestamp: int = 0

    def __post_init__(self) -> None:
        object.__setattr__(self, "data", bytes(self.data))
        if self.vendor_gain < 0:
            raise ValueError("vendor_gain must be non-negative")
        if self.timestamp < 0:
            raise ValueError("timestamp must be non-negative")


@dataclass(frozen=True, slots=True)
class FrameBatch:
    """Group of frames handed over by the capture layer in a single call."""

    frames: tuple[RawFrame, ...]
    arrival_monotonic_nanos: int = 0

    def __post_init__(self) -> None:
        object.__setattr__(self, "frames", tuple(self.frames))

    def __len__(self) -> int:
        return len(self.frames)


@dataclass(frozen=True, slots=True)
class LoopEvent:
    """Polling frame annotated with its delta in corrected order.

    ``delta`` holds the microseconds elapsed since the previous event, or
    :data:`CONTINUOUS` when unknown.  ``arrival`` records the monotonic stamp
    of the batch that delivered the frame.
    """

    type: FrameType
    data: bytes = b""
    vendor_gain: int = 0
    timestamp: int = 0
    delta: int = CONTINUOUS
    arrival: int = field(default=0, compare=False)

    @classmethod
    def from_frame(cls, frame: RawFrame, *, arrival: int = 0) -> "LoopEvent":
        return cls(
            type=frame.type,
            data=frame.data,
            vendor_gain=frame.vendor_gain,
            timestamp=frame.timestamp,
            delta=CONTINUOUS,
            arrival=arrival,
        )

    @property
    def name(self) -> str:
        """Semantic label of the frame, see :func:`classify`."""

        return classify(self.type, self.data)

    def with_delta(self, delta: int) -> "LoopEvent":
        if delta == self.delta:
            return self
        return replace(self, delta=delta)


def same_frame(left: LoopEvent, right: LoopEvent) -> bool:
    """Equality used by cycle detection: type and payload only."""

    return left.type == right.type and left.data == right.data


@dataclass(frozen=True, slots=True)
class Loop:
    """One activation of the reader field, between ON and OFF markers."""

    start_delta: int
    end_delta: int
    events: tuple[LoopEvent, ...]

    def __post_init__(self) -> None:
        events = tuple(self.events)
        if any(event.type.is_field_marker for event in events):
            raise ValueError("Loop events cannot contain ON/OFF markers")
        object.__setattr__(self, "events", events)

    @property
    def closed(self) -> bool:
        return self.end_delta != CONTINUOUS

    @property
    def names(self) -> tuple[str, ...]:
        return tuple(event.name for event in self.events)


def events_from_batch(batch: FrameBatch) -> list[LoopEvent]:
    return [
        LoopEvent.from_frame(frame, arrival=batch.arrival_monotonic_nanos)
        for frame in batch.frames
    ]


def sequence_equal(left: Sequence[LoopEvent], right: Sequence[LoopEvent]) -> bool:
    if len(left) != len(right):
        return False
    return all(same_frame(a, b) for a, b in zip(left, right))


__all__ = [
    "CONTINUOUS",
    "FrameBatch",
    "FrameType",
    "Loop",
    "LoopEvent",
    "RawFrame",
    "events_from_batch",
    "same_frame",
    "sequence_equal",
]
