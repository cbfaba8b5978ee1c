"""Polling frame technology types reported by the capture layer."""

from __future__ import annotations

from enum import IntEnum
from typing import Any


class FrameType(IntEnum):
    """Polling frame type codes.

    The integer values mirror the character codes used by the platform
    capture API, so ``chr(FrameType.A)`` yields ``"A"`` and the field state
    markers map to ``"O"`` (on) and ``"X"`` (off).
    """

    A = ord("A")
    B = ord("B")
    F = ord("F")
    ON = ord("O")
    OFF = ord("X")
    UNKNOWN = ord("U")

    @property
    def letter(self) -> str:
        return chr(self.value)

    @property
    def is_field_marker(self) -> bool:
        return self in (FrameType.ON, FrameType.OFF)


_ALIASES = {
    "A": FrameType.A,
    "B": FrameType.B,
    "F": FrameType.F,
    "ON": FrameType.ON,
    "O": FrameType.ON,
    "OFF": FrameType.OFF,
    "X": FrameType.OFF,
    "UNKNOWN": FrameType.UNKNOWN,
    "U": FrameType.UNKNOWN,
}


def parse_frame_type(value: Any) -> FrameType:
    """Coerce names, letters or numeric codes into a :class:`FrameType`.

    Numeric codes outside the known set resolve to ``UNKNOWN`` because the
    capture layer may report vendor specific types.
    """

    if isinstance(value, FrameType):
        return value
    if isinstance(value, bool):
        raise ValueError(f"Invalid frame type {value!r}")
    if isinstance(value, int):
        try:
            return FrameType(value)
        except ValueError:
            return FrameType.UNKNOWN
    if isinstance(value, str):
        key = value.strip().upper()
        if key in _ALIASES:
            return _ALIASES[key]
        raise ValueError(f"Unknown frame type {value!r}")
    raise ValueError(f"Invalid frame type {value!r}")


__all__ = ["FrameType", "parse_frame_type"]
