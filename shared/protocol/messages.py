from __future__ import annotations

from enum import StrEnum
from typing import Union
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field

from shared.utils.common import utc_timestamp

from .commands import FrameType, normalize_frame_type


def _default_id() -> str:
    return str(uuid4())


class Direction(StrEnum):
    IN = "IN"
    OUT = "OUT"


class Frame(BaseModel):
    """One parsed protocol line. Lives for a single parse/dispatch pass."""

    model_config = ConfigDict(frozen=True)

    type: Union[FrameType, str] = Field(..., description="Frame type such as HELLO or TEXT")
    payload: str = Field(default="", description="Everything after the type field, '|' preserved")
    raw: str = Field(default="", description="Trimmed original line")

    @property
    def type_text(self) -> str:
        return normalize_frame_type(self.type)

    def is_type(self, frame_type: FrameType) -> bool:
        return self.type_text == frame_type.value


class ChatMsg(BaseModel):
    """Message log entry as shown to the user."""

    id: str = Field(default_factory=_default_id)
    direction: Direction
    text: str
    integrity_ok: bool = True
    timestamp: int = Field(default_factory=utc_timestamp, description="Unix timestamp (seconds)")

    def __str__(self) -> str:
        flag = "" if self.integrity_ok else " [integrity?]"
        return f"{self.direction.value} {self.text}{flag}"


__all__ = ["Direction", "Frame", "ChatMsg"]
