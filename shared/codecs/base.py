from __future__ import annotations

from abc import ABC, abstractmethod
from typing import NamedTuple

U64_MASK = (1 << 64) - 1
FNV32_OFFSET = 2166136261
FNV32_PRIME = 16777619


class DecodeResult(NamedTuple):
    text: str
    integrity_ok: bool = True


class TextCodec(ABC):
    """
    A reversible (or approximately reversible) text transform.

    `prefix` is the tag every encoded payload starts with; decoding must not
    need anything but the payload itself.
    """

    name: str = ""
    prefix: str = ""

    def matches(self, payload: str) -> bool:
        return bool(self.prefix) and payload.startswith(self.prefix)

    @abstractmethod
    def encode(self, text: str) -> str:
        ...

    @abstractmethod
    def decode(self, payload: str) -> DecodeResult:
        ...


class IdentityCodec(TextCodec):
    """Untagged passthrough, also the fallback for unrecognised prefixes."""

    name = "identity"

    def encode(self, text: str) -> str:
        return text

    def decode(self, payload: str) -> DecodeResult:
        return DecodeResult(payload, True)


def fnv1a32(data: bytes) -> int:
    """32-bit FNV-1a (simple integrity check, not crypto)."""
    value = FNV32_OFFSET
    for byte in data:
        value ^= byte
        value = (value * FNV32_PRIME) & 0xFFFFFFFF
    return value


def mod_inverse_odd(a: int) -> int:
    """Multiplicative inverse of odd `a` modulo 2^64 via 2-adic Newton iteration."""
    if a & 1 != 1:
        raise ValueError("multiplier must be odd to be invertible mod 2^64")
    a &= U64_MASK
    inv = a  # correct to 3 bits; each step doubles the precision
    for _ in range(6):
        inv = (inv * (2 - a * inv)) & U64_MASK
    return inv


__all__ = [
    "U64_MASK",
    "DecodeResult",
    "TextCodec",
    "IdentityCodec",
    "fnv1a32",
    "mod_inverse_odd",
]
