"""Detection of the repeating polling cycle inside a sample window.

Readers emit the same sequence of probe frames over and over while idle.
:func:`detect_cycle` looks for the longest pattern that appears twice in a
row within the sample and reduces it to its minimal repeating unit.

Containment is tested with a single greedy scan that restarts the pattern
cursor on every mismatch.  This is linear in the sample size but can miss a
valid repeat when a mismatch happens to start a new occurrence; the detector
accepts that limitation since the sample is refreshed with every batch.
"""

from __future__ import annotations

from typing import Callable, Sequence, TypeVar

from .events import LoopEvent, same_frame

T = TypeVar("T")

Equality = Callable[[T, T], bool]


def contains_run(
    sequence: Sequence[T], pattern: Sequence[T], equal: Equality[T]
) -> bool:
    """Return ``True`` when the greedy scan finds ``pattern`` in ``sequence``."""

    if not pattern:
        return True
    cursor = 0
    for item in sequence:
        if equal(item, pattern[cursor]):
            cursor += 1
            if cursor == len(pattern):
                return True
        else:
            cursor = 0
    return False


def _matches_repetition(
    sequence: Sequence[T], unit: Sequence[T], equal: Equality[T]
) -> bool:
    size = len(unit)
    return all(equal(item, unit[index % size]) for index, item in enumerate(sequence))


def smallest_repeating_unit(
    sequence: Sequence[T], equal: Equality[T]
) -> tuple[T, ...]:
    """Shortest prefix that rebuilds ``sequence`` when repeated.

    Only proper divisors up to half the length are tried; a sequence with no
    shorter unit yields an empty tuple.
    """

    size = len(sequence)
    for length in range(1, size // 2 + 1):
        if size % length:
            continue
        unit = tuple(sequence[:length])
        if _matches_repetition(sequence, unit, equal):
            return unit
    return ()


def largest_repeating_sequence(
    sequence: Sequence[T], equal: Equality[T]
) -> tuple[T, ...]:
    """Longest ``sequence[start:end]`` found twice in a row, minimised.

    Candidates start in the first half of the sample.  Among equally long
    candidates the one with the earliest start index wins.
    """

    size = len(sequence)
    best: tuple[T, ...] = ()
    found = False
    for start in range(size // 2):
        for end in range(start, size):
            if found and end - start <= len(best):
                continue
            pattern = tuple(sequence[start:end])
            if contains_run(sequence, pattern + pattern, equal):
                best = pattern
                found = True
    if not best:
        return ()
    return smallest_repeating_unit(best, equal) or best


def detect_cycle(sample: Sequence[LoopEvent]) -> tuple[LoopEvent, ...]:
    """Minimal repeating period of ``sample`` or ``()`` when none is found."""

    return largest_repeating_sequence(sample, same_frame)


__all__ = [
    "contains_run",
    "detect_cycle",
    "largest_repeating_sequence",
    "smallest_repeating_unit",
]
