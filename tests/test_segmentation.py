from __future__ import annotations

import pytest

from observe_loop.core.events import CONTINUOUS, Loop
from observe_loop.core.frame_types import FrameType
from observe_loop.core.segmentation import segment

from tests.helpers import build_event


def test_two_field_activations_yield_two_closed_loops() -> None:
    events = [
        build_event(FrameType.ON, delta=10),
        build_event(FrameType.A, "52", delta=1),
        build_event(FrameType.B, "050008", delta=2),
        build_event(FrameType.OFF, delta=20),
        build_event(FrameType.ON, delta=30),
        build_event(FrameType.F, "00ffff0100", delta=3),
        build_event(FrameType.OFF, delta=40),
    ]

    loops = segment(events)

    assert len(loops) == 2
    first, second = loops
    assert (first.start_delta, first.end_delta) == (10, 20)
    assert first.names == ("WUPA", "WUPB")
    assert (second.start_delta, second.end_delta) == (30, 40)
    assert second.names == ("WILDCARD",)
    assert all(loop.closed for loop in loops)


def test_trailing_events_form_open_loop() -> None:
    events = [
        build_event(FrameType.A, "26", delta=5),
        build_event(FrameType.B, "050000", delta=6),
    ]

    loops = segment(events)

    assert loops == [Loop(CONTINUOUS, CONTINUOUS, tuple(events))]
    assert not loops[0].closed


def test_open_loop_after_field_on_keeps_start_delta() -> None:
    loops = segment([build_event(FrameType.ON, delta=70)])

    assert loops == [Loop(70, CONTINUOUS, ())]


def test_repeated_field_on_is_not_a_loop_member() -> None:
    events = [
        build_event(FrameType.ON, delta=10),
        build_event(FrameType.A, "52", delta=1),
        build_event(FrameType.ON, delta=99),
        build_event(FrameType.OFF, delta=20),
    ]

    loops = segment(events)

    assert len(loops) == 1
    assert loops[0].start_delta == 10
    assert [event.type for event in loops[0].events] == [FrameType.A]


def test_empty_input_yields_no_loops() -> None:
    assert segment([]) == []


def test_loop_rejects_field_markers() -> None:
    with pytest.raises(ValueError):
        Loop(0, 0, (build_event(FrameType.OFF),))
