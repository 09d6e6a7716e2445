"""
CME2 modular-split codec.

Wire form::

    CME2|m=<modulus>|p=<precision>|rem=<remainder>|q=<masked quotient hex16>|c=<fnv1a32 hex8>

Up to 8 UTF-8 bytes are read as one big-endian u64 ``x`` and split as
``x = m*q + rem``. ``q`` travels XOR-masked with the session key. The original
length is not sent, so leading zero bytes are lost on decode.
"""

from __future__ import annotations

import logging
import re
from typing import Dict

from pydantic import BaseModel, ValidationError, field_validator

from shared.protocol.errors import ErrorCode

from .base import U64_MASK, DecodeResult, TextCodec, fnv1a32
from .params import DEFAULT_PARAMETERS, SessionParameters

logger = logging.getLogger(__name__)

PREFIX = "CME2|"
MAX_BYTES = 8

_DECIMAL = re.compile(r"[0-9]{1,20}")
_HEX64 = re.compile(r"[0-9a-fA-F]{1,16}")
_HEX32 = re.compile(r"[0-9a-fA-F]{1,8}")


def error_payload(code: ErrorCode, **details: object) -> str:
    extra = "".join(f"|{key}={value}" for key, value in details.items())
    return f"{PREFIX}ERR={code.value}{extra}"


class CME2Fields(BaseModel):
    """Named fields of a CME2 value payload (``p`` is informational only)."""

    m: int
    rem: int
    q: int
    c: int

    @field_validator("m", "rem", mode="before")
    @classmethod
    def _decimal_u64(cls, value: object) -> int:
        if not isinstance(value, str) or not _DECIMAL.fullmatch(value):
            raise ValueError("expected unsigned decimal")
        number = int(value)
        if number > U64_MASK:
            raise ValueError("out of u64 range")
        return number

    @field_validator("q", mode="before")
    @classmethod
    def _hex64(cls, value: object) -> int:
        if not isinstance(value, str) or not _HEX64.fullmatch(value):
            raise ValueError("expected hex u64")
        return int(value, 16)

    @field_validator("c", mode="before")
    @classmethod
    def _hex32(cls, value: object) -> int:
        if not isinstance(value, str) or not _HEX32.fullmatch(value):
            raise ValueError("expected hex u32")
        return int(value, 16)


def _parse_fields(payload: str) -> Dict[str, str]:
    fields: Dict[str, str] = {}
    for part in payload.split("|"):
        key, sep, value = part.partition("=")
        if sep:
            fields[key] = value
    return fields


class ModularSplitCodec(TextCodec):
    name = "cme2"
    prefix = PREFIX

    def __init__(self, params: SessionParameters = DEFAULT_PARAMETERS) -> None:
        self.params = params

    def encode(self, text: str) -> str:
        data = text.encode("utf-8")
        if len(data) > MAX_BYTES:
            return error_payload(ErrorCode.TOO_LONG, max=MAX_BYTES, len=len(data))

        x = int.from_bytes(data, "big")
        m = self.params.modulus
        q, rem = divmod(x, m)
        masked_q = q ^ self.params.mask_key
        checksum = fnv1a32(data)
        return f"{PREFIX}m={m}|p={self.params.precision_digits}|rem={rem}|q={masked_q:016x}|c={checksum:08x}"

    def decode(self, payload: str) -> DecodeResult:
        if "ERR=" in payload:
            return DecodeResult(payload, False)

        try:
            fields = CME2Fields.model_validate(_parse_fields(payload))
        except ValidationError as exc:
            logger.debug("CME2 field validation failed: %s", exc)
            return DecodeResult(error_payload(ErrorCode.BAD_FIELDS), False)

        q = fields.q ^ self.params.mask_key
        x = (fields.m * q + fields.rem) & U64_MASK
        data = x.to_bytes(8, "big").lstrip(b"\x00")
        try:
            text = data.decode("utf-8")
        except UnicodeDecodeError:
            return DecodeResult(error_payload(ErrorCode.BAD_UTF8), False)

        integrity_ok = fnv1a32(data) == fields.c
        if not integrity_ok:
            logger.warning("CME2 checksum mismatch (expected %08x, got %08x)", fields.c, fnv1a32(data))
        return DecodeResult(text, integrity_ok)


__all__ = ["ModularSplitCodec", "CME2Fields", "PREFIX", "MAX_BYTES", "error_payload"]
