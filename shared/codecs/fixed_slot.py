from __future__ import annotations

import base64
import binascii
import unicodedata

from .base import DecodeResult, TextCodec

PREFIX = "U64:"
SLOT_BYTES = 8
SAFE_BYTES = 6
PLACEHOLDER = "·"


def _printable(data: bytes) -> str:
    return "".join(chr(byte) if 32 <= byte <= 126 else PLACEHOLDER for byte in data)


def _is_trimmable(ch: str) -> bool:
    return ch.isspace() or unicodedata.category(ch) == "Cc"


def _trim(text: str) -> str:
    start, end = 0, len(text)
    while start < end and _is_trimmable(text[start]):
        start += 1
    while end > start and _is_trimmable(text[end - 1]):
        end -= 1
    return text[start:end]


class FixedSlotCodec(TextCodec):
    """
    U64 "safe-6" codec: the first 6 UTF-8 bytes in an 8-byte slot, base64'd.
    Anything past byte 6 is dropped on encode.
    """

    name = "u64"
    prefix = PREFIX

    def encode(self, text: str) -> str:
        slot = text.encode("utf-8")[:SAFE_BYTES].ljust(SLOT_BYTES, b"\x00")
        return PREFIX + base64.b64encode(slot).decode("ascii")

    def decode(self, payload: str) -> DecodeResult:
        try:
            slot = base64.b64decode(payload[len(PREFIX) :], validate=True)
        except (binascii.Error, ValueError):
            return DecodeResult(payload, True)
        if len(slot) != SLOT_BYTES:
            return DecodeResult(payload, True)

        data = slot[:SAFE_BYTES].rstrip(b"\x00")
        try:
            text = data.decode("utf-8")
        except UnicodeDecodeError:
            text = _printable(data)
        return DecodeResult(_trim(text), True)


__all__ = ["FixedSlotCodec", "PREFIX", "SAFE_BYTES"]
