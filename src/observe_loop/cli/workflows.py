"""Command handlers for the observe-loop CLI."""

from __future__ import annotations

import argparse
import json
import logging
from typing import Any, Dict, List, Mapping, Sequence

from ..core.classifier import classify
from ..core.events import Loop, LoopEvent
from ..core.formatting import format_delta, frame_type_letter, gain_percentage, loop_signature
from ..core.frame_types import parse_frame_type
from ..core.settings import PipelineSettings
from ..tracker import BatchOrderError, PollingLoopTracker
from .errors import CliError
from .io import load_batches

logger = logging.getLogger(__name__)


def _event_payload(event: LoopEvent) -> Dict[str, Any]:
    return {
        "type": frame_type_letter(event.type),
        "data": event.data.hex(),
        "name": event.name,
        "vendor_gain": event.vendor_gain,
        "timestamp": event.timestamp,
        "delta": event.delta,
    }


def _loop_payload(loop: Loop) -> Dict[str, Any]:
    return {
        "start_delta": loop.start_delta,
        "end_delta": loop.end_delta,
        "closed": loop.closed,
        "events": [_event_payload(event) for event in loop.events],
    }


def _render_text(
    cycle: Sequence[LoopEvent], loops: Sequence[Loop], statistics: Mapping[str, int]
) -> str:
    if not cycle:
        return (
            f"No repeating polling loop found in {statistics['frames']} frames "
            f"({statistics['batches']} batches)."
        )
    lines: List[str] = [f"Cycle: {loop_signature(cycle)} ({len(cycle)} events)"]
    for index, loop in enumerate(loops, start=1):
        lines.append(
            f"Loop {index}: idle before {format_delta(loop.start_delta)}, "
            f"idle after {format_delta(loop.end_delta)}"
        )
        for event in loop.events:
            payload = event.data.hex() or "-"
            lines.append(
                f"  {frame_type_letter(event.type):<2}{payload:<24}{event.name:<28}"
                f"{gain_percentage(event.vendor_gain):>5}  {format_delta(event.delta)}"
            )
    return "\n".join(lines)


def resolve_settings(
    namespace: argparse.Namespace, config: Mapping[str, Any]
) -> PipelineSettings:
    settings = PipelineSettings.from_config(config)
    return settings.override(
        sort_threshold=getattr(namespace, "sort_threshold", None),
        wrap_threshold=getattr(namespace, "wrap_threshold", None),
        sample_threshold=getattr(namespace, "sample_threshold", None),
    )


def _handle_analyze(namespace: argparse.Namespace, *, config: Mapping[str, Any]) -> str:
    settings = resolve_settings(namespace, config)
    batches = load_batches(namespace.capture)
    tracker = PollingLoopTracker(settings)
    for batch in batches:
        try:
            tracker.process_batch(batch)
        except BatchOrderError as exc:
            raise CliError(
                str(exc),
                category="usage",
                context={"path": str(namespace.capture)},
            ) from exc

    statistics = tracker.statistics
    logger.info(
        "Capture analysed.",
        extra={
            "event": "observe_loop.cli.analyze",
            "path": str(namespace.capture),
            **statistics,
        },
    )
    if namespace.output_format == "json":
        payload = {
            "cycle": [_event_payload(event) for event in tracker.cycle],
            "loops": [_loop_payload(loop) for loop in tracker.loops],
            "settings": settings.as_dict(),
            "statistics": statistics,
        }
        return json.dumps(payload, indent=2, sort_keys=True)
    return _render_text(tracker.cycle, tracker.loops, statistics)


def _handle_classify(namespace: argparse.Namespace, *, config: Mapping[str, Any]) -> str:
    try:
        frame_type = parse_frame_type(namespace.frame_type)
    except ValueError as exc:
        raise CliError(
            str(exc), category="usage", context={"type": namespace.frame_type}
        ) from exc
    try:
        data = bytes.fromhex(namespace.data.replace(" ", ""))
    except ValueError as exc:
        raise CliError(
            f"Invalid hex payload {namespace.data!r}",
            category="usage",
            context={"data": namespace.data},
        ) from exc
    return classify(frame_type, data) or "(field marker)"


__all__ = ["_handle_analyze", "_handle_classify", "resolve_settings"]
