from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .base import U64_MASK

DEFAULT_MODULUS = 5
DEFAULT_PRECISION_DIGITS = 6
DEFAULT_MASK_KEY = 0xC0FFEE_BADC0DE1
DEFAULT_RING_MULTIPLIER = 0x9E3779B97F4A7C15


class SessionParameters(BaseModel):
    """
    Per-session codec parameters. Fixed configuration for now; a handshake
    that negotiates them would build a new instance and hand it to the session.
    """

    model_config = ConfigDict(frozen=True)

    modulus: int = Field(default=DEFAULT_MODULUS, gt=0, le=U64_MASK, description="Odd modulus for CME2 splitting")
    precision_digits: int = Field(default=DEFAULT_PRECISION_DIGITS, ge=0, description="Fixed-point scale (informational)")
    mask_key: int = Field(default=DEFAULT_MASK_KEY, ge=0, le=U64_MASK, description="XOR key for the CME2 quotient")
    ring_multiplier: int = Field(default=DEFAULT_RING_MULTIPLIER, gt=0, le=U64_MASK, description="Odd M3 multiplier")

    @field_validator("modulus", "ring_multiplier")
    @classmethod
    def _must_be_odd(cls, value: int) -> int:
        if value % 2 == 0:
            raise ValueError("must be odd")
        return value


DEFAULT_PARAMETERS = SessionParameters()

__all__ = [
    "SessionParameters",
    "DEFAULT_PARAMETERS",
    "DEFAULT_MODULUS",
    "DEFAULT_PRECISION_DIGITS",
    "DEFAULT_MASK_KEY",
    "DEFAULT_RING_MULTIPLIER",
]
