"""Reorder and timer wrap correction for incoming frame batches.

The capture layer delivers some frame types ahead of others, so a batch is
not guaranteed to be chronological.  In addition the reader timer is a
free-running counter that eventually rolls over.  The helpers in this module
rewrite the trailing window of the history so that events are sorted by
timestamp, entries past a rollover are placed after the rest, and deltas are
recomputed along the corrected order.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from .events import LoopEvent
from .settings import DEFAULT_SORT_THRESHOLD, DEFAULT_WRAP_THRESHOLD


@dataclass(frozen=True, slots=True)
class WindowCorrection:
    """Outcome of correcting one trailing window."""

    events: tuple[LoopEvent, ...]
    reordered: int = 0
    wrapped: int = 0


def window_size(batch_size: int, sort_threshold: int = DEFAULT_SORT_THRESHOLD) -> int:
    """Number of trailing events rewritten for a batch of ``batch_size``."""

    return max(sort_threshold, batch_size) + 1


def correct_window(
    window: Sequence[LoopEvent],
    *,
    wrap_threshold: int = DEFAULT_WRAP_THRESHOLD,
) -> WindowCorrection:
    """Sort ``window[1:]`` against its first entry and rechain deltas.

    The first event is the anchor and keeps its delta.  Events whose
    timestamp is more than ``wrap_threshold`` below the anchor are treated as
    post-rollover and placed after the non-wrapped group.
    """

    if len(window) <= 1:
        return WindowCorrection(tuple(window))

    first = window[0]
    tail = list(window[1:])
    floor = first.timestamp - wrap_threshold
    not_wrapped = [event for event in tail if event.timestamp >= floor]
    wrapped = [event for event in tail if event.timestamp < floor]
    ordered = sorted(not_wrapped, key=lambda event: event.timestamp)
    ordered.extend(sorted(wrapped, key=lambda event: event.timestamp))

    reordered = sum(1 for before, after in zip(tail, ordered) if before is not after)

    corrected = [first]
    previous = first.timestamp
    for event in ordered:
        corrected.append(event.with_delta(max(0, event.timestamp - previous)))
        previous = event.timestamp
    return WindowCorrection(tuple(corrected), reordered=reordered, wrapped=len(wrapped))


def normalize(
    history: Sequence[LoopEvent],
    batch: Sequence[LoopEvent],
    *,
    sort_threshold: int = DEFAULT_SORT_THRESHOLD,
    wrap_threshold: int = DEFAULT_WRAP_THRESHOLD,
) -> list[LoopEvent]:
    """Return ``history + batch`` with its trailing window corrected.

    An empty ``batch`` leaves the history untouched.  Batches must be applied
    in arrival order; the wrap heuristic relies on the anchor being the
    latest already-corrected event.
    """

    combined = list(history)
    if not batch:
        return combined
    combined.extend(batch)
    size = min(len(combined), window_size(len(batch), sort_threshold))
    start = len(combined) - size
    correction = correct_window(combined[start:], wrap_threshold=wrap_threshold)
    combined[start:] = correction.events
    return combined


__all__ = ["WindowCorrection", "correct_window", "normalize", "window_size"]
