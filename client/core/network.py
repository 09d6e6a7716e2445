from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Protocol

from client.config import CLIENT_CONFIG
from shared.protocol.errors import ErrorCode, ProtocolError, StatusCode

logger = logging.getLogger(__name__)


class NetworkError(ProtocolError):
    """Network level error surfaced to higher layers."""

    pass


@dataclass(frozen=True)
class SendResult:
    """Outcome of handing bytes to the transport. `ok` means queued locally, not delivered."""

    ok: bool
    reason: str = ""


class TransportEvents(Protocol):
    def on_ready(self) -> None: ...

    def on_data_received(self, data: bytes) -> None: ...

    def on_closed(self) -> None: ...

    def on_failed(self, error: Exception) -> None: ...


class NetworkClient:
    """
    asyncio TCP transport for a single peer connection.

    Raw chunks are handed to the bound `TransportEvents` in arrival order from
    one receive task. There is no automatic reconnect.
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None) -> None:
        self.config = config or CLIENT_CONFIG
        self.read_chunk_size: int = int(self.config["read_chunk_size"])

        self.events: Optional[TransportEvents] = None
        self.reader: Optional[asyncio.StreamReader] = None
        self.writer: Optional[asyncio.StreamWriter] = None
        self.connected: bool = False
        self._receive_task: Optional[asyncio.Task] = None

    def bind(self, events: TransportEvents) -> None:
        self.events = events

    def open(self, host: str, port: int) -> None:
        """Start connecting in the background, superseding any previous connection."""
        self.close()
        loop = asyncio.get_running_loop()
        self._receive_task = loop.create_task(self._run(host, port), name="client-recv-loop")

    def close(self) -> None:
        if self._receive_task:
            self._receive_task.cancel()
            self._receive_task = None
        if self.writer:
            self.writer.close()
        self.reader = None
        self.writer = None
        self.connected = False

    def send(self, data: bytes) -> SendResult:
        if not self.connected or self.writer is None:
            return SendResult(False, "not connected")
        if self.writer.is_closing():
            return SendResult(False, "connection closing")
        try:
            self.writer.write(data)
        except (ConnectionError, OSError) as exc:
            logger.warning("Connection lost during send: %s", exc)
            self.connected = False
            return SendResult(False, str(exc))
        return SendResult(True)

    async def _run(self, host: str, port: int) -> None:
        try:
            reader, writer = await asyncio.open_connection(host, port)
        except (OSError, ValueError, OverflowError) as exc:
            logger.warning("Connect to %s:%s failed: %s", host, port, exc)
            error = NetworkError(StatusCode.SERVICE_UNAVAILABLE, ErrorCode.NOT_CONNECTED, f"connect to {host}:{port}: {exc}")
            self._emit("on_failed", error)
            return

        self.reader, self.writer = reader, writer
        self.connected = True
        logger.info("Connected to %s:%s", host, port)
        try:
            self._emit("on_ready")
            while True:
                chunk = await reader.read(self.read_chunk_size)
                if not chunk:
                    logger.info("Peer %s:%s closed the connection", host, port)
                    self._mark_down(writer)
                    self._emit("on_closed")
                    break
                self._emit("on_data_received", chunk)
        except OSError as exc:
            logger.error("Receive loop terminated: %s", exc)
            self._mark_down(writer)
            self._emit("on_failed", NetworkError(StatusCode.INTERNAL_ERROR, message=f"receive failed: {exc}"))
        finally:
            self._mark_down(writer)
            writer.close()

    def _mark_down(self, writer: asyncio.StreamWriter) -> None:
        if self.writer is writer:
            self.reader = None
            self.writer = None
            self.connected = False

    def _emit(self, event: str, *args: Any) -> None:
        if self.events is None:
            logger.debug("No listener bound for %s", event)
            return
        try:
            getattr(self.events, event)(*args)
        except Exception as exc:
            logger.exception("Handler error for %s: %s", event, exc)


__all__ = ["NetworkClient", "NetworkError", "SendResult", "TransportEvents"]
