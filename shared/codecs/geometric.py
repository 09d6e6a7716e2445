"""
R0/R1 geometric codecs.

Up to 8 bytes become an integer "area" ``A``; the payload carries the radius
of a sphere with that surface area (``A = 4*pi*r^2``) as a raw little-endian
double. R1 additionally scales the radius down by the golden ratio.

This is a float round trip: ``A`` comes back exactly only while
``round(4*pi*r^2)`` lands on the original integer. That holds for small areas
and for values with few significant bits (short zero-padded text such as
``"AB"``), but not in general for full 8-byte values.
"""

from __future__ import annotations

import base64
import binascii
import math
import struct
from typing import Optional

from .base import U64_MASK, DecodeResult, TextCodec

R0_PREFIX = "R0:"
R1_PREFIX = "R1:"
PHI = 1.618033988749895
SLOT_BYTES = 8

_DOUBLE_LE = struct.Struct("<d")


def bytes_to_area(data: bytes) -> int:
    """Big-endian u64 from up to 8 bytes, zero-padded on the right."""
    return int.from_bytes(data[:SLOT_BYTES].ljust(SLOT_BYTES, b"\x00"), "big")


def area_to_bytes(area: int) -> bytes:
    return area.to_bytes(SLOT_BYTES, "big").rstrip(b"\x00")


def area_to_radius(area: int) -> float:
    if area == 0:
        return 0.0
    return math.sqrt(area / (4.0 * math.pi))


def radius_to_area(radius: float) -> int:
    area = 4.0 * math.pi * radius * radius
    if not math.isfinite(area) or area < 0:
        return 0
    return min(round(area), U64_MASK)


class GeometricCodec(TextCodec):
    """Approximate codec; see module docstring for the precision boundary."""

    def __init__(self, golden: bool = False) -> None:
        self.golden = golden
        self.name = "r1" if golden else "r0"
        self.prefix = R1_PREFIX if golden else R0_PREFIX

    def encode_area(self, area: int) -> str:
        radius = area_to_radius(area)
        if self.golden:
            radius /= PHI
        return self.prefix + base64.b64encode(_DOUBLE_LE.pack(radius)).decode("ascii")

    def decode_area(self, payload: str) -> Optional[int]:
        """Recovered area, or None when the payload is not 8 base64'd bytes."""
        try:
            raw = base64.b64decode(payload[len(self.prefix) :], validate=True)
        except (binascii.Error, ValueError):
            return None
        if len(raw) != SLOT_BYTES:
            return None
        (radius,) = _DOUBLE_LE.unpack(raw)
        if self.golden:
            radius *= PHI
        return radius_to_area(radius)

    def encode(self, text: str) -> str:
        return self.encode_area(bytes_to_area(text.encode("utf-8")))

    def decode(self, payload: str) -> DecodeResult:
        area = self.decode_area(payload)
        if area is None:
            return DecodeResult(payload, True)
        return DecodeResult(area_to_bytes(area).decode("utf-8", errors="replace"), True)


__all__ = [
    "GeometricCodec",
    "R0_PREFIX",
    "R1_PREFIX",
    "PHI",
    "bytes_to_area",
    "area_to_bytes",
    "area_to_radius",
    "radius_to_area",
]
