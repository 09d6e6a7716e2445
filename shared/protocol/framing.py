from __future__ import annotations

import logging
from typing import Iterator, Union

from .commands import FrameType, is_frame_type, normalize_frame_type
from .constants import ENCODING, FIELD_SEPARATOR, FRAME_DELIMITER, FRAME_PREFIX
from .errors import ProtocolError, StatusCode
from .messages import Frame

logger = logging.getLogger(__name__)


class LineReassembler:
    """
    Accumulates raw TCP chunks and hands back complete newline-terminated lines.
    An unterminated tail stays buffered until its newline arrives or `clear()` is called.
    """

    def __init__(self) -> None:
        self._buffer = bytearray()

    @property
    def pending(self) -> int:
        return len(self._buffer)

    def feed(self, chunk: bytes) -> None:
        self._buffer.extend(chunk)

    def drain_lines(self) -> Iterator[str]:
        """Yield every complete, non-empty, whitespace-trimmed line currently buffered."""
        while True:
            idx = self._buffer.find(FRAME_DELIMITER)
            if idx < 0:
                return
            line_bytes = bytes(self._buffer[:idx])
            del self._buffer[: idx + 1]
            try:
                line = line_bytes.decode(ENCODING)
            except UnicodeDecodeError:
                logger.debug("Dropping undecodable line (%s bytes)", len(line_bytes))
                continue
            line = line.strip()
            if line:
                yield line

    def clear(self) -> None:
        self._buffer.clear()


def build_frame(frame_type: Union[str, FrameType], payload: str = "") -> str:
    """Build `CME1|TYPE|payload` (or `CME1|TYPE` when the payload is empty)."""
    type_text = normalize_frame_type(frame_type)
    if "\n" in type_text or "\n" in payload:
        raise ProtocolError(StatusCode.BAD_REQUEST, message="Frame fields must not contain a newline")
    if not payload:
        return f"{FRAME_PREFIX}{type_text}"
    return f"{FRAME_PREFIX}{type_text}{FIELD_SEPARATOR}{payload}"


def build_hello(device: str, version: str) -> str:
    return build_frame(FrameType.HELLO, f"{device}{FIELD_SEPARATOR}{version}")


def build_welcome(token: str) -> str:
    return build_frame(FrameType.WELCOME, token)


def build_text(payload: str) -> str:
    return build_frame(FrameType.TEXT, payload)


def build_ack() -> str:
    return build_frame(FrameType.ACK)


def parse_frame(line: str) -> Frame:
    """
    Parse one line into a Frame.

    Unframed lines become TEXT frames carrying the whole line, so peers that
    send plain text still get their messages through.
    """
    raw = line.strip()
    if raw == FrameType.ACK.value or raw.startswith(f"{FRAME_PREFIX}{FrameType.ACK.value}"):
        return Frame(type=FrameType.ACK, payload="", raw=raw)
    if not raw.startswith(FRAME_PREFIX):
        return Frame(type=FrameType.TEXT, payload=raw, raw=raw)

    parts = raw.split(FIELD_SEPARATOR)
    if len(parts) < 2 or not parts[1]:
        return Frame(type=FrameType.UNKNOWN, payload="", raw=raw)
    type_text = parts[1]
    frame_type: Union[FrameType, str] = FrameType(type_text) if is_frame_type(type_text) else type_text
    return Frame(type=frame_type, payload=FIELD_SEPARATOR.join(parts[2:]), raw=raw)


def encode_line(line: str) -> bytes:
    """Encode a protocol line for the wire, newline-terminated."""
    data = line.encode(ENCODING)
    if data.endswith(FRAME_DELIMITER):
        return data
    return data + FRAME_DELIMITER


__all__ = [
    "LineReassembler",
    "build_frame",
    "build_hello",
    "build_welcome",
    "build_text",
    "build_ack",
    "parse_frame",
    "encode_line",
]
