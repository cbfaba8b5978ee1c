"""Rotation of a detected cycle to a canonical phase.

A detected cycle may start anywhere inside the reader's loop.  The aligner
scores every admissible rotation and keeps the best one:

1. When some rotations start with ``ON`` right after an ``OFF``, only those
   are considered.
2. Two points are awarded each time the traversal reaches a technology of
   higher rank than any seen before (A, then B, then F).
3. One point is awarded when an ``ON``/``OFF`` pair closes the rotation.
4. A tiny bonus derived from the first event's payload keeps the choice
   stable for loops without field markers.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping, Sequence, TypeVar

from .events import LoopEvent
from .frame_types import FrameType

T = TypeVar("T")

TECHNOLOGY_RANK: Mapping[FrameType, int] = MappingProxyType(
    {FrameType.A: 2, FrameType.B: 3, FrameType.F: 4}
)

UNRANKED = -1
RANK_STEP_SCORE = 2.0
TRAILING_PAIR_SCORE = 1.0
LENGTH_WEIGHT = 0.001
FIRST_BYTE_WEIGHT = 0.00001


def rotate(sequence: Sequence[T], offset: int) -> tuple[T, ...]:
    """Return ``sequence`` rotated left by ``offset`` positions."""

    items = tuple(sequence)
    if not items:
        return items
    offset %= len(items)
    return items[offset:] + items[:offset]


def _signed_byte(value: int) -> int:
    return value - 256 if value > 127 else value


def candidate_rotations(cycle: Sequence[LoopEvent]) -> list[int]:
    size = len(cycle)
    candidates = [
        index
        for index in range(size)
        if cycle[index].type == FrameType.ON
        and cycle[(index - 1) % size].type == FrameType.OFF
    ]
    return candidates or list(range(size))


def score_rotation(cycle: Sequence[LoopEvent], rotation: int) -> float:
    size = len(cycle)
    head = cycle[rotation % size]
    score = len(head.data) * LENGTH_WEIGHT
    if head.data:
        score += _signed_byte(head.data[0]) * FIRST_BYTE_WEIGHT

    highest = UNRANKED
    for index in range(size):
        rank = TECHNOLOGY_RANK.get(cycle[(rotation + index) % size].type, UNRANKED)
        if rank > highest:
            score += RANK_STEP_SCORE
            highest = rank

    if (
        size >= 2
        and cycle[(rotation + size - 2) % size].type == FrameType.ON
        and cycle[(rotation + size - 1) % size].type == FrameType.OFF
    ):
        score += TRAILING_PAIR_SCORE
    return score


def best_rotation(cycle: Sequence[LoopEvent]) -> int:
    best_offset = 0
    best_score: float | None = None
    for rotation in candidate_rotations(cycle):
        score = score_rotation(cycle, rotation)
        if best_score is None or score > best_score:
            best_offset, best_score = rotation, score
    return best_offset


def align(cycle: Sequence[LoopEvent]) -> tuple[LoopEvent, ...]:
    """Rotate ``cycle`` to the best scoring phase."""

    if len(cycle) <= 1:
        return tuple(cycle)
    return rotate(cycle, best_rotation(cycle))


__all__ = [
    "FIRST_BYTE_WEIGHT",
    "LENGTH_WEIGHT",
    "TECHNOLOGY_RANK",
    "align",
    "best_rotation",
    "candidate_rotations",
    "rotate",
    "score_rotation",
]
