from __future__ import annotations

import logging
import re
from typing import List

from .base import U64_MASK, DecodeResult, TextCodec, mod_inverse_odd
from .params import DEFAULT_RING_MULTIPLIER

logger = logging.getLogger(__name__)

PREFIX = "M3:"
WORD_SEPARATOR = "."
WORD_BYTES = 8

_HEX_WORD = re.compile(r"[0-9a-fA-F]{1,16}")


class MultiplicativeRingCodec(TextCodec):
    """
    M3 codec over the ring Z/2^64.

    Payload is ``M3:<len>.<w0>.<w1>...`` where ``len`` is the byte count and
    each ``wi`` is a little-endian 8-byte word multiplied by an odd constant.
    Odd multipliers are units mod 2^64, so the transform is exact for any length.
    """

    name = "m3"
    prefix = PREFIX

    def __init__(self, multiplier: int = DEFAULT_RING_MULTIPLIER) -> None:
        self.multiplier = multiplier & U64_MASK
        self.inverse = mod_inverse_odd(self.multiplier)

    def encode(self, text: str) -> str:
        if text.startswith(PREFIX):
            return text

        data = text.encode("utf-8")
        words: List[int] = [len(data)]
        for offset in range(0, len(data), WORD_BYTES):
            chunk = data[offset : offset + WORD_BYTES].ljust(WORD_BYTES, b"\x00")
            word = int.from_bytes(chunk, "little")
            words.append((word * self.multiplier) & U64_MASK)
        return PREFIX + WORD_SEPARATOR.join(f"{word:016x}" for word in words)

    def decode(self, payload: str) -> DecodeResult:
        body = payload[len(PREFIX) :]
        parts = [part for part in body.split(WORD_SEPARATOR) if part]
        if not parts:
            return DecodeResult("", True)
        if not all(_HEX_WORD.fullmatch(part) for part in parts):
            logger.debug("M3 payload has a non-hex word")
            return DecodeResult("", True)

        words = [int(part, 16) for part in parts]
        length = words[0]
        if length == 0:
            return DecodeResult("", True)

        out = bytearray()
        for word in words[1:]:
            out.extend(((word * self.inverse) & U64_MASK).to_bytes(WORD_BYTES, "little"))
        try:
            return DecodeResult(bytes(out[:length]).decode("utf-8"), True)
        except UnicodeDecodeError:
            return DecodeResult("", True)


__all__ = ["MultiplicativeRingCodec", "PREFIX"]
