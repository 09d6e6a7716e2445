from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional

from shared.protocol.errors import ErrorCode, ProtocolError, StatusCode

from .base import DecodeResult, IdentityCodec, TextCodec
from .fixed_slot import FixedSlotCodec
from .geometric import GeometricCodec
from .modular import PREFIX as CME2_PREFIX
from .modular import ModularSplitCodec
from .params import DEFAULT_PARAMETERS, SessionParameters
from .ring import MultiplicativeRingCodec

logger = logging.getLogger(__name__)

DEFAULT_CODEC = "cme2"


class CodecRegistry:
    """Named codecs plus the single prefix table used to decode any payload."""

    def __init__(self, codecs: Iterable[TextCodec]) -> None:
        self._identity = IdentityCodec()
        self._by_name: Dict[str, TextCodec] = {self._identity.name: self._identity}
        self._by_prefix: List[TextCodec] = []
        for codec in codecs:
            self.register(codec)

    def register(self, codec: TextCodec) -> None:
        self._by_name[codec.name] = codec
        if codec.prefix:
            self._by_prefix = [c for c in self._by_prefix if c.prefix != codec.prefix]
            self._by_prefix.append(codec)

    @property
    def names(self) -> List[str]:
        return sorted(self._by_name)

    def get(self, name: str) -> TextCodec:
        codec = self._by_name.get(name.lower())
        if codec is None:
            raise ProtocolError(StatusCode.BAD_REQUEST, ErrorCode.UNKNOWN_CODEC, f"Unknown codec {name!r}")
        return codec

    def codec_for(self, payload: str) -> Optional[TextCodec]:
        for codec in self._by_prefix:
            if codec.matches(payload):
                return codec
        return None

    def encode(self, text: str, name: str = DEFAULT_CODEC) -> str:
        return self.get(name).encode(text)

    def decode(self, payload: str) -> DecodeResult:
        codec = self.codec_for(payload)
        if codec is None:
            return self._identity.decode(payload)
        result = codec.decode(payload)
        logger.debug("Decoded %s payload (integrity_ok=%s)", codec.name, result.integrity_ok)
        return result


def is_error_payload(payload: str) -> bool:
    return payload.startswith(f"{CME2_PREFIX}ERR=")


def build_registry(params: SessionParameters = DEFAULT_PARAMETERS) -> CodecRegistry:
    return CodecRegistry(
        [
            ModularSplitCodec(params),
            MultiplicativeRingCodec(params.ring_multiplier),
            FixedSlotCodec(),
            GeometricCodec(golden=False),
            GeometricCodec(golden=True),
        ]
    )


__all__ = ["CodecRegistry", "DEFAULT_CODEC", "build_registry", "is_error_payload"]
