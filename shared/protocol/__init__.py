"""
Shared protocol package that centralizes frame types, message models, line
framing and the handshake state machines for both client and server.
"""

from .commands import FrameType, is_frame_type, normalize_frame_type
from .constants import (
    DEFAULT_DEVICE_LABEL,
    DEFAULT_PORT,
    DEFAULT_VERSION,
    ENCODING,
    FRAME_DELIMITER,
    FRAME_PREFIX,
    PROTOCOL_MAGIC,
    READ_CHUNK_SIZE,
)
from .errors import ErrorCode, ProtocolError, StatusCode
from .framing import (
    LineReassembler,
    build_ack,
    build_frame,
    build_hello,
    build_text,
    build_welcome,
    encode_line,
    parse_frame,
)
from .handshake import (
    HandshakeState,
    HandshakeStateMachine,
    HandshakeStatus,
    ResponderHandshake,
    legacy_welcome_token,
)
from .messages import ChatMsg, Direction, Frame

__all__ = [
    "FrameType",
    "is_frame_type",
    "normalize_frame_type",
    "DEFAULT_DEVICE_LABEL",
    "DEFAULT_PORT",
    "DEFAULT_VERSION",
    "ENCODING",
    "FRAME_DELIMITER",
    "FRAME_PREFIX",
    "PROTOCOL_MAGIC",
    "READ_CHUNK_SIZE",
    "ErrorCode",
    "ProtocolError",
    "StatusCode",
    "LineReassembler",
    "build_ack",
    "build_frame",
    "build_hello",
    "build_text",
    "build_welcome",
    "encode_line",
    "parse_frame",
    "HandshakeState",
    "HandshakeStateMachine",
    "HandshakeStatus",
    "ResponderHandshake",
    "legacy_welcome_token",
    "ChatMsg",
    "Direction",
    "Frame",
]
