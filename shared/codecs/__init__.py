"""
Tagged text codecs. Every encoded payload starts with its codec's prefix
(``CME2|``, ``M3:``, ``U64:``, ``R0:``, ``R1:``); untagged text is identity.
"""

from .base import DecodeResult, IdentityCodec, TextCodec, fnv1a32, mod_inverse_odd
from .fixed_slot import FixedSlotCodec
from .geometric import GeometricCodec
from .modular import ModularSplitCodec
from .params import DEFAULT_PARAMETERS, SessionParameters
from .registry import DEFAULT_CODEC, CodecRegistry, build_registry, is_error_payload
from .ring import MultiplicativeRingCodec

__all__ = [
    "DecodeResult",
    "TextCodec",
    "IdentityCodec",
    "ModularSplitCodec",
    "MultiplicativeRingCodec",
    "FixedSlotCodec",
    "GeometricCodec",
    "SessionParameters",
    "DEFAULT_PARAMETERS",
    "CodecRegistry",
    "DEFAULT_CODEC",
    "build_registry",
    "is_error_payload",
    "fnv1a32",
    "mod_inverse_odd",
]
