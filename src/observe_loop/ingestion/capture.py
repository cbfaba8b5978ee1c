"""Decoding of frame batches recorded by the capture layer.

Captures are stored one batch per line as newline-delimited JSON, optionally
gzip compressed::

    {"arrival_monotonic_nanos": 1200, "frames": [
        {"type": "A", "data": "52", "vendor_gain": 7, "timestamp": 10}]}

JSON documents holding a list of batches and Parquet tables with one frame
per row (grouped by a ``batch`` column) are accepted as well.
"""

from __future__ import annotations

import gzip
import json
import zlib
from collections.abc import Mapping as ABCMapping
from pathlib import Path
from typing import Any, Iterable, Iterator, List, Mapping

from ..core.events import FrameBatch, RawFrame
from ..core.frame_types import parse_frame_type


class CaptureFormatError(ValueError):
    """Raised when a capture payload cannot be decoded."""


def _first_present(payload: Mapping[str, Any], *keys: str, default: Any = None) -> Any:
    for key in keys:
        if key in payload and payload[key] is not None:
            return payload[key]
    return default


def _decode_data(value: Any) -> bytes:
    if value is None:
        return b""
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    if isinstance(value, str):
        text = value.replace(" ", "").replace(":", "")
        try:
            return bytes.fromhex(text)
        except ValueError as exc:
            raise CaptureFormatError(f"Invalid hex payload {value!r}") from exc
    if isinstance(value, list):
        try:
            return bytes(value)
        except (TypeError, ValueError) as exc:
            raise CaptureFormatError(f"Invalid byte list {value!r}") from exc
    raise CaptureFormatError(f"Unsupported frame data {value!r}")


def _decode_int(value: Any, field: str) -> int:
    if isinstance(value, bool):
        raise CaptureFormatError(f"Invalid {field} {value!r}")
    try:
        numeric = int(value)
    except (TypeError, ValueError) as exc:
        raise CaptureFormatError(f"Invalid {field} {value!r}") from exc
    if numeric < 0:
        raise CaptureFormatError(f"{field} must be non-negative, got {numeric}")
    return numeric


def frame_from_mapping(payload: Mapping[str, Any]) -> RawFrame:
    """Build a :class:`RawFrame` from a decoded JSON object."""

    if not isinstance(payload, ABCMapping):
        raise CaptureFormatError(f"Frame payload must be an object, got {payload!r}")
    if "type" not in payload:
        raise CaptureFormatError("Frame payload is missing 'type'")
    try:
        frame_type = parse_frame_type(payload["type"])
    except ValueError as exc:
        raise CaptureFormatError(str(exc)) from exc
    return RawFrame(
        type=frame_type,
        data=_decode_data(payload.get("data")),
        vendor_gain=_decode_int(
            _first_present(payload, "vendor_gain", "vendorGain", default=0), "vendor_gain"
        ),
        timestamp=_decode_int(payload.get("timestamp", 0), "timestamp"),
    )


def batch_from_mapping(payload: Mapping[str, Any]) -> FrameBatch:
    """Build a :class:`FrameBatch` from a decoded JSON object."""

    if not isinstance(payload, ABCMapping):
        raise CaptureFormatError(f"Batch payload must be an object, got {payload!r}")
    frames = payload.get("frames")
    if not isinstance(frames, list):
        raise CaptureFormatError("Batch payload requires a 'frames' list")
    arrival = _first_present(
        payload, "arrival_monotonic_nanos", "arrivalMonotonicNanos", default=0
    )
    return FrameBatch(
        frames=tuple(frame_from_mapping(frame) for frame in frames),
        arrival_monotonic_nanos=_decode_int(arrival, "arrival_monotonic_nanos"),
    )


def _iter_batches(handle: Iterable[str]) -> Iterator[FrameBatch]:
    for number, line in enumerate(handle, start=1):
        if not line.strip():
            continue
        try:
            payload = json.loads(line)
        except json.JSONDecodeError as exc:
            raise CaptureFormatError(f"Line {number} is not valid JSON: {exc.msg}") from exc
        yield batch_from_mapping(payload)


_GZIP_MAGIC = b"\x1f\x8b"


def _is_gzip(source: Path) -> bool:
    with source.open("rb") as handle:
        return handle.read(len(_GZIP_MAGIC)) == _GZIP_MAGIC


def iter_capture(path: str | Path) -> Iterator[FrameBatch]:
    """Yield batches stored in a JSONL capture, compressed or not.

    Compression is detected from the gzip magic bytes.  Undecodable text and
    corrupt or truncated gzip streams raise :class:`CaptureFormatError`.
    """

    source = Path(path)
    if not source.exists():
        raise FileNotFoundError(f"Capture {source} does not exist")

    compressed = _is_gzip(source)
    try:
        if compressed:
            with gzip.open(source, "rt", encoding="utf8") as handle:
                yield from _iter_batches(handle)
        else:
            with source.open("r", encoding="utf8") as handle:
                yield from _iter_batches(handle)
    except UnicodeDecodeError as exc:
        raise CaptureFormatError(f"Capture {source} is not UTF-8 text: {exc.reason}") from exc
    except (gzip.BadGzipFile, zlib.error, EOFError) as exc:
        raise CaptureFormatError(f"Capture {source} is not a valid gzip stream: {exc}") from exc


def _load_json_batches(source: Path) -> List[FrameBatch]:
    with source.open("r", encoding="utf8") as handle:
        try:
            data = json.load(handle)
        except json.JSONDecodeError as exc:
            raise CaptureFormatError(f"{source} is not valid JSON: {exc.msg}") from exc
        except UnicodeDecodeError as exc:
            raise CaptureFormatError(f"{source} is not UTF-8 text: {exc.reason}") from exc
    if isinstance(data, ABCMapping):
        data = [data]
    if not isinstance(data, list):
        raise CaptureFormatError(f"JSON capture {source} must contain a list of batches")
    return [batch_from_mapping(item) for item in data]


def _load_parquet_batches(source: Path) -> List[FrameBatch]:
    import pandas as pd

    frame = pd.read_parquet(source)
    if "batch" not in frame.columns:
        raise CaptureFormatError(f"Parquet capture {source} requires a 'batch' column")
    batches: List[FrameBatch] = []
    for _, rows in frame.groupby("batch", sort=True):
        records = rows.to_dict(orient="records")
        arrival = _first_present(
            records[0], "arrival_monotonic_nanos", "arrivalMonotonicNanos", default=0
        )
        batches.append(
            FrameBatch(
                frames=tuple(frame_from_mapping(record) for record in records),
                arrival_monotonic_nanos=_decode_int(arrival, "arrival_monotonic_nanos"),
            )
        )
    return batches


def load_capture(path: str | Path) -> List[FrameBatch]:
    """Load every batch of a capture, choosing the decoder from the suffix."""

    source = Path(path)
    if not source.exists():
        raise FileNotFoundError(f"Capture {source} does not exist")
    name = source.name.lower()
    if name.endswith((".jsonl", ".jsonl.gz", ".jsonl.gzip")):
        return list(iter_capture(source))
    if name.endswith(".json"):
        return _load_json_batches(source)
    if name.endswith(".parquet"):
        return _load_parquet_batches(source)
    raise CaptureFormatError(f"Unsupported capture format: {source}")


__all__ = [
    "CaptureFormatError",
    "batch_from_mapping",
    "frame_from_mapping",
    "iter_capture",
    "load_capture",
]
