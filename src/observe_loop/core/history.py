"""Append-only storage for normalised polling loop events."""

from __future__ import annotations

from typing import Iterator, Sequence, overload

from .events import LoopEvent
from .normalizer import WindowCorrection, correct_window, window_size
from .settings import DEFAULT_SORT_THRESHOLD, DEFAULT_WRAP_THRESHOLD


class EventHistory(Sequence[LoopEvent]):
    """Append-only sequence whose bounded tail may be rewritten.

    Entries are only ever appended; :meth:`append_batch` rewrites the last
    ``max(sort_threshold, len(batch)) + 1`` entries in place.  When ``limit``
    is positive the oldest entries are dropped once the history grows past
    it, which is the cap a collaborator may enforce.
    """

    def __init__(
        self,
        events: Sequence[LoopEvent] = (),
        *,
        sort_threshold: int = DEFAULT_SORT_THRESHOLD,
        wrap_threshold: int = DEFAULT_WRAP_THRESHOLD,
        limit: int = 0,
    ) -> None:
        if limit < 0:
            raise ValueError("EventHistory limit must be non-negative")
        self._events: list[LoopEvent] = list(events)
        self._sort_threshold = sort_threshold
        self._wrap_threshold = wrap_threshold
        self._limit = limit
        self._dropped = 0

    def __len__(self) -> int:
        return len(self._events)

    @overload
    def __getitem__(self, index: int) -> LoopEvent: ...

    @overload
    def __getitem__(self, index: slice) -> list[LoopEvent]: ...

    def __getitem__(self, index):
        return self._events[index]

    def __iter__(self) -> Iterator[LoopEvent]:
        return iter(self._events)

    @property
    def dropped(self) -> int:
        """Number of entries discarded because of ``limit``."""

        return self._dropped

    def tail(self, count: int) -> list[LoopEvent]:
        if count <= 0:
            return []
        return self._events[-count:]

    def append_batch(self, batch: Sequence[LoopEvent]) -> WindowCorrection:
        """Append ``batch`` and correct the trailing window in place."""

        if not batch:
            return WindowCorrection(())
        self._events.extend(batch)
        size = min(len(self._events), window_size(len(batch), self._sort_threshold))
        start = len(self._events) - size
        correction = correct_window(
            self._events[start:], wrap_threshold=self._wrap_threshold
        )
        self._events[start:] = correction.events
        self._enforce_limit()
        return correction

    def clear(self) -> None:
        self._events.clear()
        self._dropped = 0

    def _enforce_limit(self) -> None:
        if not self._limit:
            return
        excess = len(self._events) - self._limit
        if excess > 0:
            del self._events[:excess]
            self._dropped += excess


__all__ = ["EventHistory"]
