from __future__ import annotations

import logging
from typing import Optional

from shared.protocol import Direction, FrameType, build_welcome
from shared.protocol.messages import Frame

logger = logging.getLogger(__name__)


class HandshakeService:
    """Answers the connect-time HELLO with WELCOME and tracks control frames."""

    async def handle_hello(self, frame: Frame, ctx) -> str:
        token = ctx.handshake.on_hello(frame.payload)
        ctx.log(Direction.IN, f"HELLO {ctx.handshake.device} {ctx.handshake.version}")
        ctx.log(Direction.OUT, f"WELCOME {token}")
        return build_welcome(token)

    async def handle_hello_ack(self, frame: Frame, ctx) -> Optional[str]:
        # some clients confirm the WELCOME explicitly
        ctx.handshake.on_hello_ack()
        ctx.log(Direction.IN, frame.raw)
        logger.info("HELLO_ACK from %s %s", ctx.peername, frame.payload)
        return None

    async def handle_welcome(self, frame: Frame, ctx) -> Optional[str]:
        ctx.handshake.adopt(frame.payload.strip())
        ctx.log(Direction.IN, f"WELCOME {ctx.handshake.session_id}".rstrip())
        return None

    async def handle_ack(self, frame: Frame, ctx) -> Optional[str]:
        ctx.log(Direction.IN, FrameType.ACK.value)
        return None
