from __future__ import annotations

from observe_loop.core.events import CONTINUOUS
from observe_loop.core.frame_types import FrameType
from observe_loop.core.history import EventHistory
from observe_loop.core.normalizer import correct_window, normalize, window_size

from tests.helpers import build_event


def _timestamps(events) -> list[int]:
    return [event.timestamp for event in events]


def test_window_size_covers_batch_and_threshold() -> None:
    assert window_size(3, 16) == 17
    assert window_size(40, 16) == 41


def test_correct_window_sorts_and_rechains_deltas() -> None:
    window = [
        build_event(FrameType.ON, timestamp=1_000, delta=500),
        build_event(FrameType.B, "0500", timestamp=1_300),
        build_event(FrameType.A, "52", timestamp=1_100),
        build_event(FrameType.F, "00ffff0100", timestamp=1_200),
    ]

    correction = correct_window(window, wrap_threshold=3_000_000)

    assert _timestamps(correction.events) == [1_000, 1_100, 1_200, 1_300]
    assert [event.delta for event in correction.events] == [500, 100, 100, 100]
    assert correction.reordered == 3
    assert correction.wrapped == 0


def test_wrapped_timestamps_follow_non_wrapped_events() -> None:
    anchor = 10_000_000
    window = [
        build_event(FrameType.A, "52", timestamp=anchor),
        build_event(FrameType.B, "0500", timestamp=200),
        build_event(FrameType.A, "26", timestamp=anchor + 300),
        build_event(FrameType.F, "00ffff0100", timestamp=100),
        build_event(FrameType.OFF, timestamp=anchor + 100),
    ]

    correction = correct_window(window, wrap_threshold=3_000_000)

    assert _timestamps(correction.events) == [anchor, anchor + 100, anchor + 300, 100, 200]
    assert correction.wrapped == 2
    deltas = [event.delta for event in correction.events[1:]]
    assert deltas == [100, 200, 0, 100]
    assert all(delta >= 0 for delta in deltas)


def test_timestamps_within_wrap_threshold_are_not_wrapped() -> None:
    anchor = 5_000_000
    window = [
        build_event(FrameType.A, "52", timestamp=anchor),
        build_event(FrameType.B, "0500", timestamp=anchor - 1_000),
    ]

    correction = correct_window(window, wrap_threshold=3_000_000)

    assert _timestamps(correction.events) == [anchor, anchor - 1_000]
    assert correction.wrapped == 0
    assert correction.events[1].delta == 0


def test_single_event_window_passes_through() -> None:
    event = build_event(FrameType.A, "52", timestamp=10)

    correction = correct_window([event])

    assert correction.events == (event,)
    assert correction.events[0].delta == CONTINUOUS


def test_normalize_empty_batch_returns_history_unchanged() -> None:
    history = [build_event(FrameType.A, "52", timestamp=10 * index) for index in range(3)]

    assert normalize(history, []) == history


def test_normalize_only_rewrites_trailing_window() -> None:
    history = [
        build_event(FrameType.A, "52", timestamp=1_000 - 10 * index, delta=7)
        for index in range(6)
    ]
    batch = [build_event(FrameType.B, "0500", timestamp=2_000)]

    corrected = normalize(history, batch, sort_threshold=2)

    # Window of max(2, 1) + 1 = 3 events: the last two history entries and the batch.
    assert corrected[:4] == history[:4]
    assert _timestamps(corrected[4:]) == [960, 950, 2_000]
    assert corrected[4].delta == 7
    assert corrected[5].delta == 0
    assert corrected[6].delta == 1_050


def test_event_history_appends_and_corrects_in_place() -> None:
    history = EventHistory(sort_threshold=4)
    history.append_batch([build_event(FrameType.A, "52", timestamp=100)])
    correction = history.append_batch(
        [
            build_event(FrameType.F, "00ffff0100", timestamp=400),
            build_event(FrameType.B, "0500", timestamp=250),
        ]
    )

    assert _timestamps(history) == [100, 250, 400]
    assert [event.delta for event in history] == [CONTINUOUS, 150, 150]
    assert correction.reordered == 2


def test_event_history_limit_drops_oldest_entries() -> None:
    history = EventHistory(sort_threshold=1, limit=3)
    for index in range(5):
        history.append_batch([build_event(FrameType.A, "52", timestamp=index * 10)])

    assert len(history) == 3
    assert history.dropped == 2
    assert _timestamps(history) == [20, 30, 40]


def test_event_history_ignores_empty_batches() -> None:
    history = EventHistory()
    correction = history.append_batch([])

    assert len(history) == 0
    assert correction.events == ()
