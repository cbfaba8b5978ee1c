from __future__ import annotations

import gzip
import json
from pathlib import Path

import pytest

from observe_loop.core.frame_types import FrameType
from observe_loop.ingestion import (
    CaptureFormatError,
    batch_from_mapping,
    frame_from_mapping,
    iter_capture,
    load_capture,
)

BATCHES = [
    {
        "arrival_monotonic_nanos": 100,
        "frames": [
            {"type": "O", "data": "", "vendor_gain": 3, "timestamp": 1_000},
            {"type": "A", "data": "52", "vendor_gain": 5, "timestamp": 1_100},
        ],
    },
    {
        "arrivalMonotonicNanos": 200,
        "frames": [
            {"type": 66, "data": [5, 0, 8], "vendorGain": 7, "timestamp": 1_200},
            {"type": "OFF", "timestamp": 1_300},
        ],
    },
]


def _write_jsonl(path: Path, batches=BATCHES) -> Path:
    path.write_text("\n".join(json.dumps(batch) for batch in batches) + "\n", encoding="utf8")
    return path


def test_frame_from_mapping_accepts_aliases() -> None:
    frame = frame_from_mapping({"type": "f", "data": "00 ff ff 01 00", "vendorGain": 4})

    assert frame.type == FrameType.F
    assert frame.data == bytes.fromhex("00ffff0100")
    assert frame.vendor_gain == 4
    assert frame.timestamp == 0


def test_unknown_numeric_type_is_preserved_as_unknown() -> None:
    frame = frame_from_mapping({"type": 0x5A, "data": "10"})

    assert frame.type == FrameType.UNKNOWN


@pytest.mark.parametrize(
    "payload",
    [
        pytest.param({"data": "52"}, id="missing-type"),
        pytest.param({"type": "Q"}, id="unknown-letter"),
        pytest.param({"type": "A", "data": "zz"}, id="bad-hex"),
        pytest.param({"type": "A", "timestamp": -1}, id="negative-timestamp"),
        pytest.param({"type": "A", "vendor_gain": True}, id="bool-gain"),
        pytest.param(["A", "52"], id="not-an-object"),
    ],
)
def test_invalid_frames_are_rejected(payload) -> None:
    with pytest.raises(CaptureFormatError):
        frame_from_mapping(payload)


def test_batch_requires_frames_list() -> None:
    with pytest.raises(CaptureFormatError):
        batch_from_mapping({"arrival_monotonic_nanos": 1})


def test_iter_capture_reads_plain_jsonl(tmp_path: Path) -> None:
    capture = _write_jsonl(tmp_path / "capture.jsonl")

    batches = list(iter_capture(capture))

    assert [batch.arrival_monotonic_nanos for batch in batches] == [100, 200]
    assert [frame.type for frame in batches[0].frames] == [FrameType.ON, FrameType.A]
    assert batches[1].frames[0].type == FrameType.B
    assert batches[1].frames[0].data == bytes.fromhex("050008")
    assert batches[1].frames[0].vendor_gain == 7
    assert batches[1].frames[1].data == b""


def test_load_capture_reads_gzip_jsonl(tmp_path: Path) -> None:
    capture = tmp_path / "capture.jsonl.gz"
    with gzip.open(capture, "wt", encoding="utf8") as handle:
        for batch in BATCHES:
            handle.write(json.dumps(batch) + "\n")

    batches = load_capture(capture)

    assert len(batches) == 2
    assert len(batches[0]) == 2


def test_load_capture_reads_json_documents(tmp_path: Path) -> None:
    listing = tmp_path / "capture.json"
    listing.write_text(json.dumps(BATCHES), encoding="utf8")
    single = tmp_path / "single.json"
    single.write_text(json.dumps(BATCHES[0]), encoding="utf8")

    assert len(load_capture(listing)) == 2
    assert len(load_capture(single)) == 1


def test_blank_lines_are_skipped(tmp_path: Path) -> None:
    capture = tmp_path / "capture.jsonl"
    capture.write_text("\n" + json.dumps(BATCHES[0]) + "\n\n", encoding="utf8")

    assert len(load_capture(capture)) == 1


def test_invalid_json_line_reports_line_number(tmp_path: Path) -> None:
    capture = tmp_path / "capture.jsonl"
    capture.write_text(json.dumps(BATCHES[0]) + "\n{broken\n", encoding="utf8")

    with pytest.raises(CaptureFormatError, match="Line 2"):
        load_capture(capture)


def test_unsupported_suffix_is_rejected(tmp_path: Path) -> None:
    capture = tmp_path / "capture.csv"
    capture.write_text("type,data\n", encoding="utf8")

    with pytest.raises(CaptureFormatError):
        load_capture(capture)


def test_missing_capture_raises(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_capture(tmp_path / "absent.jsonl")


def test_load_capture_reads_parquet(tmp_path: Path) -> None:
    pd = pytest.importorskip("pandas")
    pytest.importorskip("pyarrow")
    rows = [
        (0, 10, "A", "52", 5),
        (0, 10, "B", "0500", 6),
        (1, 20, "F", "00ffff0100", 7),
    ]
    table = pd.DataFrame(
        [
            {
                "batch": batch,
                "arrival_monotonic_nanos": arrival,
                "type": frame_type,
                "data": data,
                "vendor_gain": 1,
                "timestamp": timestamp,
            }
            for batch, arrival, frame_type, data, timestamp in rows
        ]
    )
    capture = tmp_path / "capture.parquet"
    table.to_parquet(capture)

    batches = load_capture(capture)

    assert [len(batch) for batch in batches] == [2, 1]
    assert [batch.arrival_monotonic_nanos for batch in batches] == [10, 20]
    assert batches[1].frames[0].type == FrameType.F


def test_gzip_capture_with_trailing_garbage_is_rejected(tmp_path: Path) -> None:
    capture = tmp_path / "capture.jsonl.gz"
    line = (json.dumps(BATCHES[0]) + "\n").encode("utf8")
    capture.write_bytes(gzip.compress(line) + b"\x00garbage-not-gzip")

    with pytest.raises(CaptureFormatError):
        load_capture(capture)


def test_truncated_gzip_capture_is_rejected(tmp_path: Path) -> None:
    capture = tmp_path / "capture.jsonl.gz"
    compressed = gzip.compress((json.dumps(BATCHES[0]) + "\n").encode("utf8"))
    capture.write_bytes(compressed[:-6])

    with pytest.raises(CaptureFormatError, match="gzip"):
        load_capture(capture)


def test_non_utf8_jsonl_capture_is_rejected(tmp_path: Path) -> None:
    capture = tmp_path / "capture.jsonl"
    capture.write_bytes(b'{"frames": []}\n\xff\xfe\x8b\n')

    with pytest.raises(CaptureFormatError, match="UTF-8"):
        load_capture(capture)


def test_gzip_is_detected_from_content(tmp_path: Path) -> None:
    capture = tmp_path / "capture.jsonl"
    capture.write_bytes(gzip.compress((json.dumps(BATCHES[1]) + "\n").encode("utf8")))

    batches = load_capture(capture)

    assert [batch.arrival_monotonic_nanos for batch in batches] == [200]
