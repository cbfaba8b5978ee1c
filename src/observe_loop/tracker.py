"""Single-writer orchestration of the polling loop pipeline."""

from __future__ import annotations

import logging
from typing import Optional

from .core.alignment import align
from .core.cycles import detect_cycle
from .core.events import FrameBatch, Loop, LoopEvent, events_from_batch
from .core.history import EventHistory
from .core.segmentation import segment
from .core.settings import PipelineSettings

logger = logging.getLogger(__name__)


class BatchOrderError(ValueError):
    """Raised when a batch arrives older than one already applied."""


class PollingLoopTracker:
    """Apply frame batches in arrival order and maintain the loop view.

    Each call to :meth:`process_batch` appends the batch to the history,
    corrects the trailing window and, unless refreshing is skipped,
    recomputes the loops from the last ``sample_threshold`` events.  When no
    cycle can be detected the previous view is kept.
    """

    def __init__(self, settings: Optional[PipelineSettings] = None) -> None:
        self._settings = (settings or PipelineSettings()).with_defaults()
        self._clear_state()

    def _clear_state(self) -> None:
        self._history = self._new_history()
        self._cycle: tuple[LoopEvent, ...] = ()
        self._loops: tuple[Loop, ...] = ()
        self._last_arrival: Optional[int] = None
        self._batches = 0
        self._empty_batches = 0
        self._frames = 0
        self._reordered = 0
        self._wrapped = 0
        self._cycles_detected = 0

    def _new_history(self) -> EventHistory:
        return EventHistory(
            sort_threshold=self._settings.sort_threshold,
            wrap_threshold=self._settings.wrap_threshold,
            limit=self._settings.history_limit,
        )

    @property
    def settings(self) -> PipelineSettings:
        return self._settings

    @property
    def history(self) -> EventHistory:
        return self._history

    @property
    def cycle(self) -> tuple[LoopEvent, ...]:
        """Aligned cycle the current loop view was derived from."""

        return self._cycle

    @property
    def loops(self) -> tuple[Loop, ...]:
        return self._loops

    @property
    def statistics(self) -> dict[str, int]:
        return {
            "batches": self._batches,
            "empty_batches": self._empty_batches,
            "frames": self._frames,
            "reordered": self._reordered,
            "wrapped": self._wrapped,
            "cycles_detected": self._cycles_detected,
            "dropped": self._history.dropped,
        }

    def reset(self) -> None:
        """Forget every event, loop and statistics counter, keeping the settings.

        The arrival order check starts over as well, so the next batch may
        carry any arrival stamp.
        """

        self._clear_state()
        logger.info("Polling loop tracker reset.", extra={"event": "observe_loop.reset"})

    def process_batch(self, batch: FrameBatch, *, refresh: bool = True) -> tuple[Loop, ...]:
        """Apply ``batch`` and return the current loop view."""

        arrival = batch.arrival_monotonic_nanos
        if self._last_arrival is not None and arrival < self._last_arrival:
            raise BatchOrderError(
                f"Batch arrived at {arrival} ns, before the last applied batch "
                f"({self._last_arrival} ns)."
            )
        self._last_arrival = arrival
        self._batches += 1

        if not batch.frames:
            self._empty_batches += 1
            return self._loops

        events = events_from_batch(batch)
        self._frames += len(events)
        correction = self._history.append_batch(events)
        self._reordered += correction.reordered
        self._wrapped += correction.wrapped
        if correction.wrapped:
            logger.info(
                "Reader timer rollover detected.",
                extra={
                    "event": "observe_loop.timer_wrap",
                    "wrapped": correction.wrapped,
                    "arrival": arrival,
                },
            )
        if correction.reordered:
            logger.debug(
                "Batch frames reordered by timestamp.",
                extra={
                    "event": "observe_loop.reordered",
                    "reordered": correction.reordered,
                    "batch_size": len(events),
                },
            )

        if refresh:
            self.refresh()
        return self._loops

    def refresh(self) -> tuple[Loop, ...]:
        """Recompute the loop view from the trailing history sample."""

        sample = self._history.tail(self._settings.sample_threshold)
        cycle = detect_cycle(sample)
        if not cycle:
            logger.debug(
                "No repeating cycle in sample yet.",
                extra={"event": "observe_loop.cycle_pending", "sample_size": len(sample)},
            )
            return self._loops

        self._cycles_detected += 1
        self._cycle = align(cycle)
        self._loops = tuple(segment(self._cycle))
        logger.debug(
            "Polling loop updated.",
            extra={
                "event": "observe_loop.loops_updated",
                "cycle_length": len(self._cycle),
                "loops": len(self._loops),
            },
        )
        return self._loops


__all__ = ["BatchOrderError", "PollingLoopTracker"]
