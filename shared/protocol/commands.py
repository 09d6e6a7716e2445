from __future__ import annotations

from enum import StrEnum
from typing import Union


class FrameType(StrEnum):
    """
    Frame types carried in the second field of a CME1 line.
    UNKNOWN is never sent; it marks lines too short to carry a type.
    """

    HELLO = "HELLO"
    WELCOME = "WELCOME"
    ACK = "ACK"
    HELLO_ACK = "HELLO_ACK"
    TEXT = "TEXT"
    UNKNOWN = "UNKNOWN"


def normalize_frame_type(frame_type: Union[str, FrameType]) -> str:
    """Convert enum/string into canonical frame type text."""
    return frame_type.value if isinstance(frame_type, FrameType) else str(frame_type)


def is_frame_type(value: str) -> bool:
    """Check if `value` is a known frame type."""
    try:
        FrameType(value)
        return True
    except ValueError:
        return False


__all__ = ["FrameType", "normalize_frame_type", "is_frame_type"]
