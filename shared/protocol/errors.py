from __future__ import annotations

from enum import IntEnum, StrEnum
from typing import Optional


class StatusCode(IntEnum):
    """HTTP-like status codes used across error reports."""

    BAD_REQUEST = 400
    CONFLICT = 409
    INTERNAL_ERROR = 500
    SERVICE_UNAVAILABLE = 503


class ErrorCode(StrEnum):
    """Domain specific error codes. Codec codes also appear on the wire as ``ERR=<code>``."""

    TOO_LONG = "TOO_LONG"
    BAD_FIELDS = "BAD_FIELDS"
    BAD_UTF8 = "BAD_UTF8"
    UNKNOWN_CODEC = "UNKNOWN_CODEC"
    NO_HANDSHAKE = "NO_HANDSHAKE"
    NOT_CONNECTED = "NOT_CONNECTED"


class ProtocolError(Exception):
    """Structured protocol exception carrying status + code + message."""

    def __init__(self, status: StatusCode, code: Optional[ErrorCode] = None, message: str = "") -> None:
        self.status = status
        self.code = code
        self.message = message
        super().__init__(f"{status.name} ({int(status)}): {message} (code={code.value if code else 'n/a'})")

    def to_payload(self) -> dict:
        """Map error into a dict suitable for logs and status displays."""
        return {
            "status": int(self.status),
            "error_code": self.code.value if self.code is not None else None,
            "error_message": self.message,
        }


__all__ = ["StatusCode", "ErrorCode", "ProtocolError"]
