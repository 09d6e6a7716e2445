from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol

from client.config import CLIENT_CONFIG
from shared.codecs import DEFAULT_CODEC, CodecRegistry, SessionParameters, build_registry, is_error_payload
from shared.protocol import (
    ChatMsg,
    Direction,
    FrameType,
    HandshakeStateMachine,
    LineReassembler,
    build_hello,
    build_text,
    encode_line,
    parse_frame,
)
from shared.protocol.errors import ErrorCode, ProtocolError, StatusCode
from shared.settings import SETTINGS

from .network import SendResult

logger = logging.getLogger(__name__)


class Transport(Protocol):
    def bind(self, events: Any) -> None: ...

    def open(self, host: str, port: int) -> None: ...

    def close(self) -> None: ...

    def send(self, data: bytes) -> SendResult: ...


@dataclass
class SessionState:
    """What the UI observes: status line, message log, handshake flags."""

    status: str = "idle"
    messages: List[ChatMsg] = field(default_factory=list)
    handshake_ok: bool = False
    session_id: str = ""


Listener = Callable[[SessionState], None]


class ClientSession:
    """
    One peer session: turns transport events into protocol state and the
    message log, and gates outbound TEXT on a completed handshake.
    """

    def __init__(
        self,
        transport: Transport,
        config: Optional[Dict[str, Any]] = None,
        params: Optional[SessionParameters] = None,
        registry: Optional[CodecRegistry] = None,
    ) -> None:
        self.config = config or CLIENT_CONFIG
        self.transport = transport
        self.params = params or SETTINGS.session
        self.registry = registry or build_registry(self.params)
        self.codec_name: str = self.registry.get(self.config.get("codec", DEFAULT_CODEC)).name
        self.device_label: str = self.config["device_label"]
        self.protocol_version: str = self.config["protocol_version"]

        self.state = SessionState()
        self.handshake = HandshakeStateMachine()
        self._reassembler = LineReassembler()
        self._listeners: List[Listener] = []
        self._connected = False
        transport.bind(self)

    # --- Observers -------------------------------------------------------
    def add_listener(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener(self.state)
            except Exception as exc:
                logger.exception("Session listener error: %s", exc)

    def _set_status(self, status: str) -> None:
        self.state.status = status
        self._notify()

    def _log(self, direction: Direction, text: str, integrity_ok: bool = True) -> None:
        self.state.messages.append(ChatMsg(direction=direction, text=text, integrity_ok=integrity_ok))

    def _sync_handshake(self) -> None:
        self.state.handshake_ok = self.handshake.handshake_ok
        self.state.session_id = self.handshake.session_id

    # --- UI-facing operations --------------------------------------------
    @property
    def connected(self) -> bool:
        return self._connected

    def connect(self, host: str, port: int) -> None:
        self.state.messages.clear()
        self.handshake.begin_connect()
        self._reassembler.clear()
        self._connected = False
        self._sync_handshake()
        if not 1 <= port <= 65535:
            logger.warning("Refusing to connect to %s:%s: port out of range", host, port)
            self.transport.close()
            self._teardown("failed: bad port")
            return
        logger.info("Connecting to %s:%s", host, port)
        self._set_status("connecting...")
        self.transport.open(host, port)

    def disconnect(self) -> None:
        self.transport.close()
        self._teardown("idle")

    def set_codec(self, name: str) -> None:
        self.codec_name = self.registry.get(name).name
        logger.info("Outbound codec set to %s", self.codec_name)

    def apply_session_parameters(self, params: SessionParameters) -> None:
        """Swap codec parameters; only allowed while no session is established."""
        if self.handshake.handshake_ok:
            raise ProtocolError(StatusCode.CONFLICT, message="Session parameters are fixed once handshaken")
        self.params = params
        self.registry = build_registry(params)

    def send_text(self, text: str) -> bool:
        if not self._connected:
            logger.warning("Send blocked: no connection")
            self._set_status("not connected")
            return False
        if not self.handshake.can_send(self._connected):
            logger.warning("Send blocked: TEXT before WELCOME (%s)", ErrorCode.NO_HANDSHAKE.value)
            self._set_status("blocked: no handshake")
            return False

        payload = self.registry.encode(text, self.codec_name)
        if is_error_payload(payload):
            logger.warning("Codec %s rejected outbound text: %s", self.codec_name, payload)
            self._set_status(f"codec error: {payload}")
            return False
        try:
            frame = build_text(payload)
        except ProtocolError as exc:
            self._set_status(f"send failed: {exc.message}")
            return False

        result = self._send_line(frame)
        if not result.ok:
            self._set_status(f"send failed: {result.reason}")
            return False
        self._log(Direction.OUT, text)
        self._set_status("sent")
        return True

    # --- Transport events ------------------------------------------------
    def on_ready(self) -> None:
        self._connected = True
        self.state.status = "connected"
        if self.handshake.on_transport_ready():
            result = self._send_line(build_hello(self.device_label, self.protocol_version))
            if result.ok:
                self._log(Direction.OUT, FrameType.HELLO.value)
            else:
                logger.warning("HELLO not sent: %s", result.reason)
        self._notify()

    def on_data_received(self, data: bytes) -> None:
        self._reassembler.feed(data)
        for line in self._reassembler.drain_lines():
            self._handle_line(line)
        self._notify()

    def on_closed(self) -> None:
        logger.info("Peer closed the session")
        self._teardown("peer closed")

    def on_failed(self, error: Exception) -> None:
        if isinstance(error, ProtocolError):
            reason = error.message
            logger.error("Transport failed: %s", error.to_payload())
        else:
            reason = str(error)
            logger.error("Transport failed: %s", reason)
        self._teardown(f"failed: {reason}")

    # --- Internals -------------------------------------------------------
    def _teardown(self, status: str) -> None:
        self._connected = False
        self.handshake.reset()
        self._reassembler.clear()
        self._sync_handshake()
        self._set_status(status)

    def _send_line(self, line: str) -> SendResult:
        logger.debug("TX %s", line)
        return self.transport.send(encode_line(line))

    def _handle_line(self, line: str) -> None:
        logger.debug("RX %s", line)
        frame = parse_frame(line)

        token = self.handshake.welcome_token(frame)
        if token is not None:
            self.handshake.accept_welcome(token)
            self._sync_handshake()
            self.state.status = "handshake ok"
            self._log(Direction.IN, f"WELCOME {self.state.session_id}".rstrip())
            return

        match frame.type_text:
            case FrameType.ACK:
                self._log(Direction.IN, FrameType.ACK.value)
            case FrameType.HELLO_ACK:
                self._log(Direction.IN, frame.raw)
            case FrameType.TEXT:
                result = self.registry.decode(frame.payload)
                if not result.integrity_ok:
                    logger.warning("Integrity check failed for inbound payload %s", frame.payload)
                self._log(Direction.IN, result.text, result.integrity_ok)
            case _:
                logger.warning("Unhandled frame type %s: %s", frame.type_text, frame.raw)
                self._log(Direction.IN, frame.raw)


__all__ = ["ClientSession", "SessionState", "Transport", "Listener"]
