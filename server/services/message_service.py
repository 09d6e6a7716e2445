from __future__ import annotations

import logging

from server.core.connection_manager import ConnectionManager
from shared.codecs import DEFAULT_CODEC, CodecRegistry, is_error_payload
from shared.protocol import Direction, build_ack, build_text
from shared.protocol.errors import ErrorCode, ProtocolError
from shared.protocol.messages import Frame

logger = logging.getLogger(__name__)


class MessageService:
    def __init__(
        self,
        registry: CodecRegistry,
        connection_manager: ConnectionManager,
        codec_name: str = DEFAULT_CODEC,
    ) -> None:
        self.registry = registry
        self.connection_manager = connection_manager
        self.codec_name = registry.get(codec_name).name

    async def handle_text(self, frame: Frame, ctx) -> str:
        result = self.registry.decode(frame.payload)
        if not result.integrity_ok:
            logger.warning("Integrity check failed for payload from %s: %s", ctx.peername, frame.payload)
        logger.info("TEXT from %s: %s", ctx.peername, result.text)
        ctx.log(Direction.IN, result.text, result.integrity_ok)
        return build_ack()

    async def send_text(self, text: str) -> bool:
        """Encode and send to the active peer; refused before that peer's HELLO."""
        ctx = self.connection_manager.active
        if ctx is None:
            logger.warning("Send blocked: no peer connected (%s)", ErrorCode.NOT_CONNECTED.value)
            return False
        if not ctx.is_handshaken():
            logger.warning("Send blocked: peer %s has not completed the handshake", ctx.peername)
            return False

        payload = self.registry.encode(text, self.codec_name)
        if is_error_payload(payload):
            logger.warning("Codec %s rejected outbound text: %s", self.codec_name, payload)
            return False
        try:
            line = build_text(payload)
        except ProtocolError as exc:
            logger.warning("Cannot frame outbound text: %s", exc.message)
            return False
        if not await self.connection_manager.send_line(line, ctx):
            return False
        ctx.log(Direction.OUT, text)
        return True
