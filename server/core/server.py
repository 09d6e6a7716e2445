from __future__ import annotations

import asyncio
import logging
from typing import Optional

from shared.protocol import READ_CHUNK_SIZE, Direction, parse_frame
from shared.protocol.errors import ProtocolError

from .connection import ConnectionContext
from .connection_manager import ConnectionManager
from .router import FrameRouter

logger = logging.getLogger(__name__)


class PeerServer:
    """Listens for one peer at a time and feeds its lines through the frame router."""

    def __init__(
        self,
        host: str,
        port: int,
        router: FrameRouter,
        connection_manager: ConnectionManager,
        read_chunk_size: int = READ_CHUNK_SIZE,
    ) -> None:
        self.host = host
        self.port = port
        self.router = router
        self.connection_manager = connection_manager
        self.read_chunk_size = read_chunk_size
        self._server: Optional[asyncio.AbstractServer] = None

    @property
    def bound_port(self) -> int:
        """Actual listening port (differs from `port` when 0 was requested)."""
        if self._server and self._server.sockets:
            return self._server.sockets[0].getsockname()[1]
        return self.port

    async def start(self) -> None:
        self._server = await asyncio.start_server(self._handle_client, self.host, self.port)
        logger.info("Server listening on %s:%s", self.host, self.bound_port)

    async def stop(self) -> None:
        active = self.connection_manager.active
        if active:
            active.writer.close()
        if self._server:
            self._server.close()
            await self._server.wait_closed()
            self._server = None
        logger.info("Server stopped")

    async def _handle_client(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        ctx = ConnectionContext(reader=reader, writer=writer, peername=str(writer.get_extra_info("peername")))
        previous = self.connection_manager.register(ctx)
        if previous:
            logger.info("Peer %s replaces %s", ctx.peername, previous.peername)
            previous.writer.close()
        logger.info("Peer %s connected", ctx.peername)
        try:
            while True:
                chunk = await reader.read(self.read_chunk_size)
                if not chunk:
                    logger.info("Peer %s disconnected", ctx.peername)
                    break
                ctx.touch()
                ctx.reassembler.feed(chunk)
                for line in ctx.reassembler.drain_lines():
                    await self._handle_line(line, ctx)
        except (ConnectionResetError, ConnectionAbortedError, BrokenPipeError, OSError) as exc:
            logger.info("Peer %s connection reset: %s", ctx.peername, exc)
        except Exception as exc:
            logger.exception("Unhandled error: %s", exc)
        finally:
            ctx.reset()
            try:
                writer.close()
                await writer.wait_closed()
            except OSError as e:
                logger.debug("Error during writer cleanup: %s", e)
            finally:
                self.connection_manager.unregister(ctx)

    async def _handle_line(self, line: str, ctx: ConnectionContext) -> None:
        logger.debug("RX %s: %s", ctx.peername, line)
        frame = parse_frame(line)
        if not self.router.has_handler(frame.type_text):
            logger.warning("Unhandled frame type %s from %s", frame.type_text, ctx.peername)
            ctx.log(Direction.IN, frame.raw)
            return
        try:
            reply = await self.router.dispatch(frame, ctx)
        except ProtocolError as exc:
            logger.warning("Protocol error for %s: %s", ctx.peername, exc.to_payload())
            return
        if reply:
            await self.connection_manager.send_line(reply, ctx)
