from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import StrEnum
from typing import Optional

from shared.utils.common import random_token

from .commands import FrameType
from .constants import FIELD_SEPARATOR, FRAME_PREFIX
from .messages import Frame

logger = logging.getLogger(__name__)


class HandshakeStatus(StrEnum):
    IDLE = "idle"
    CONNECTING = "connecting"
    AWAITING_WELCOME = "awaiting_welcome"
    HANDSHAKEN = "handshaken"
    DISCONNECTED = "disconnected"


@dataclass
class HandshakeState:
    handshake_ok: bool = False
    session_id: str = ""


def legacy_welcome_token(line: str) -> Optional[str]:
    """
    Extract the session token from an unframed WELCOME line.

    Accepts `<tag>|WELCOME|<token>` and `WELCOME <token>`; any other line
    returns None. A WELCOME without a token yields "".
    """
    raw = line.strip()
    if "WELCOME" not in raw:
        return None
    if FIELD_SEPARATOR in raw:
        parts = raw.split(FIELD_SEPARATOR)
        if parts[0] == FrameType.WELCOME.value:
            return parts[1].strip()
        if len(parts) >= 2 and parts[1] == FrameType.WELCOME.value:
            return parts[2].strip() if len(parts) >= 3 else ""
        return None
    words = raw.split()
    if words[0] != FrameType.WELCOME.value:
        return None
    return words[1] if len(words) >= 2 else ""


class HandshakeStateMachine:
    """
    Client side of the HELLO/WELCOME exchange.

    IDLE -> CONNECTING -> AWAITING_WELCOME -> HANDSHAKEN, with DISCONNECTED
    reachable from anywhere. TEXT may only be sent once HANDSHAKEN.
    """

    def __init__(self) -> None:
        self.state = HandshakeState()
        self.status = HandshakeStatus.IDLE
        self._hello_sent = False

    @property
    def handshake_ok(self) -> bool:
        return self.state.handshake_ok

    @property
    def session_id(self) -> str:
        return self.state.session_id

    def begin_connect(self) -> None:
        self.state = HandshakeState()
        self._hello_sent = False
        self.status = HandshakeStatus.CONNECTING

    def on_transport_ready(self) -> bool:
        """Return True when the caller must send HELLO now (once per connect)."""
        if self._hello_sent or self.state.handshake_ok:
            return False
        self._hello_sent = True
        self.status = HandshakeStatus.AWAITING_WELCOME
        return True

    def welcome_token(self, frame: Frame) -> Optional[str]:
        """Session token if `frame` completes the handshake, otherwise None."""
        if frame.is_type(FrameType.WELCOME):
            return frame.payload.strip()
        if not frame.raw.startswith(FRAME_PREFIX):
            return legacy_welcome_token(frame.raw)
        return None

    def accept_welcome(self, token: str) -> None:
        if token:
            self.state.session_id = token
        self.state.handshake_ok = True
        self.status = HandshakeStatus.HANDSHAKEN
        logger.info("Handshake complete, session=%s", self.state.session_id or "<none>")

    def can_send(self, connected: bool) -> bool:
        return connected and self.state.handshake_ok

    def reset(self) -> None:
        self.state = HandshakeState()
        self._hello_sent = False
        self.status = HandshakeStatus.DISCONNECTED


class ResponderHandshake:
    """Server side: answers HELLO with a fresh session token."""

    def __init__(self, token_length: int = 8) -> None:
        self.state = HandshakeState()
        self.token_length = token_length
        self.device: str = ""
        self.version: str = ""

    @property
    def handshake_ok(self) -> bool:
        return self.state.handshake_ok

    @property
    def session_id(self) -> str:
        return self.state.session_id

    def on_hello(self, payload: str) -> str:
        """Record the peer's `<device>|<version>` and mint the session token."""
        device, sep, version = payload.partition(FIELD_SEPARATOR)
        self.device = device
        self.version = version if sep else "?"
        self.state.session_id = random_token(self.token_length)
        self.state.handshake_ok = True
        logger.info("HELLO from %s ver=%s -> session=%s", self.device, self.version, self.state.session_id)
        return self.state.session_id

    def on_hello_ack(self) -> None:
        self.state.handshake_ok = True

    def adopt(self, token: str) -> None:
        if token:
            self.state.session_id = token
        self.state.handshake_ok = True

    def reset(self) -> None:
        self.state = HandshakeState()
        self.device = ""
        self.version = ""


__all__ = [
    "HandshakeStatus",
    "HandshakeState",
    "HandshakeStateMachine",
    "ResponderHandshake",
    "legacy_welcome_token",
]
