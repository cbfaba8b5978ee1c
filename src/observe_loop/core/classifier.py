"""Semantic labelling of passively captured polling frames.

The classifier maps the technology type and raw payload of a polling frame
to a short command label such as ``WUPA`` or ``ECP1_TRANSIT_VENTRA``.  It is
a total function: payloads that match none of the known patterns resolve to
the generic :data:`GENERIC_LABEL`.

Lookups are performed on the lowercase hexadecimal representation of fixed
byte ranges.  Ranges that fall outside the payload never match.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping, Optional

from .frame_types import FrameType

GENERIC_LABEL = "PLF"
UNKNOWN_LABEL = "UNKNOWN"

FELICA_SYSTEM_CODES: Mapping[str, str] = MappingProxyType(
    {
        "ffff": "WILDCARD",
        "0003": "CJRC",
        "8008": "OCTOPUS",
        "fe00": "COMMON",
        "12fc": "NDEF",
        "88b4": "LITE",
        "957a": "ID",
    }
)

ECP_TRANSIT_CODES: Mapping[str, str] = MappingProxyType(
    {
        "030000": "VENTRA",
        "030400": "HOPCARD",
        "030002": "TFL",
        "030001": "WMATA",
        "030005": "LATAP",
        "030007": "CLIPPER",
        "03095a": "NAVIGO",
    }
)

ECP_ACCESS_SUBTYPES: Mapping[str, str] = MappingProxyType(
    {
        "00": "UNIVERSITY",
        "01": "AUTOMOTIVE",
        "08": "AUTOMOTIVE",
        "09": "AUTOMOTIVE",
        "0a": "AUTOMOTIVE",
        "0b": "AUTOMOTIVE",
        "06": "HOME",
    }
)

ECP1_PAYLOADS: Mapping[str, str] = MappingProxyType(
    {
        "6a01000000": "VAS_OR_PAYMENT",
        "6a01000001": "VAS_AND_PAYMENT",
        "6a01000002": "VAS_ONLY",
        "6a01000003": "PAY_ONLY",
        "6a01cf0000": "IGNORE",
        "6a01c30000": "GYMKIT",
    }
)

ECP2_KINDS: Mapping[str, str] = MappingProxyType(
    {
        "01": "TRANSIT",
        "02": "ACCESS",
        "03": "IDENTITY",
        "05": "HANDOVER",
    }
)

# Exact payloads recognised regardless of the reported technology.
LEGACY_COMMANDS: Mapping[str, str] = MappingProxyType(
    {
        "010b3f80": "APGEN",
        "0600": "INITIATE",
        "10": "REQT",
        "5000": "HLTA",
    }
)

MAGSAFE_WAKEUPS: Mapping[str, str] = MappingProxyType(
    {"7a": "MAGWUP1", "7b": "MAGWUP2", "7c": "MAGWUP3", "7d": "MAGWUP4"}
)

MIFARE_BACKDOOR_WAKEUPS: Mapping[str, str] = MappingProxyType(
    {"40": "WUPC1", "20": "WUPC1", "43": "WUPC2", "23": "WUPC2"}
)

_TRANSIT_PREFIX = "6a0103"


def _hex_range(payload: str, start: int, length: int) -> Optional[str]:
    """Return ``length`` bytes of ``payload`` starting at byte ``start``."""

    begin = start * 2
    end = begin + length * 2
    if start < 0 or end > len(payload):
        return None
    return payload[begin:end]


def transit_label(code: Optional[str]) -> str:
    if code is None:
        return UNKNOWN_LABEL
    return ECP_TRANSIT_CODES.get(code.lower(), UNKNOWN_LABEL)


def access_label(code: Optional[str]) -> str:
    if code is None:
        return UNKNOWN_LABEL
    return ECP_ACCESS_SUBTYPES.get(code.lower(), UNKNOWN_LABEL)


def felica_system_code_label(code: Optional[str]) -> str:
    if code is None:
        return UNKNOWN_LABEL
    return FELICA_SYSTEM_CODES.get(code.lower(), UNKNOWN_LABEL)


def _ecp1_label(payload: str) -> str:
    label = ECP1_PAYLOADS.get(payload)
    if label is not None:
        return label
    if payload.startswith(_TRANSIT_PREFIX):
        return "TRANSIT_" + transit_label(_hex_range(payload, 3, 3))
    return UNKNOWN_LABEL


def _ecp2_label(payload: str) -> str:
    kind = ECP2_KINDS.get(_hex_range(payload, 3, 1) or "")
    if kind == "TRANSIT":
        return "TRANSIT_" + transit_label(_hex_range(payload, 5, 3))
    if kind == "ACCESS":
        return "ACCESS_" + access_label(_hex_range(payload, 4, 1))
    if kind is None:
        return UNKNOWN_LABEL
    return kind


def ecp_label(payload: str) -> str:
    """Decode an Enhanced Contactless Polling frame (``6a`` prefix)."""

    version = _hex_range(payload, 1, 1)
    if version == "01":
        return "ECP1_" + _ecp1_label(payload)
    if version == "02":
        return "ECP2_" + _ecp2_label(payload)
    return "ECP_UNKNOWN"


def _fallback_label(payload: str) -> str:
    size = len(payload) // 2

    label = LEGACY_COMMANDS.get(payload)
    if label is not None:
        return label
    if payload.startswith("50") and size == 5:
        return "HLTB"

    # Picopass frames do not carry a proper CRC, only the command byte.
    if 1 <= size <= 2:
        if payload.endswith("0a"):
            return "ACTALL"
        if payload.endswith("0c"):
            return "IDENTIFY"

    if payload.startswith("6a") and size >= 4:
        return ecp_label(payload)

    if size == 1:
        if payload.startswith("7"):
            return MAGSAFE_WAKEUPS.get(payload, "MAGWUPU")
        label = MIFARE_BACKDOOR_WAKEUPS.get(payload)
        if label is not None:
            return label

    return GENERIC_LABEL


def _type_a_label(payload: str) -> str:
    if payload.startswith("52"):
        return "WUPA"
    if payload.startswith("26"):
        return "REQA"
    return _fallback_label(payload)


def _type_b_label(payload: str) -> str:
    if payload.startswith("05"):
        last = int(payload[-2:], 16)
        return "WUPB" if last & 0x08 else "REQB"
    return _fallback_label(payload)


def _type_f_label(payload: str) -> str:
    system_code = _hex_range(payload, 1, 2)
    if system_code is not None:
        return felica_system_code_label(system_code)
    return _fallback_label(payload)


def classify(frame_type: FrameType | int, data: bytes) -> str:
    """Return the semantic label for a polling frame.

    Field state markers (``ON``/``OFF``) carry no command and map to an
    empty string.  Unknown numeric types are classified with the fallback
    table only.
    """

    payload = bytes(data).hex()
    if frame_type == FrameType.ON or frame_type == FrameType.OFF:
        return ""
    if frame_type == FrameType.A:
        return _type_a_label(payload)
    if frame_type == FrameType.B:
        return _type_b_label(payload)
    if frame_type == FrameType.F:
        return _type_f_label(payload)
    return _fallback_label(payload)


__all__ = [
    "ECP1_PAYLOADS",
    "ECP_ACCESS_SUBTYPES",
    "ECP_TRANSIT_CODES",
    "FELICA_SYSTEM_CODES",
    "GENERIC_LABEL",
    "UNKNOWN_LABEL",
    "access_label",
    "classify",
    "ecp_label",
    "felica_system_code_label",
    "transit_label",
]
