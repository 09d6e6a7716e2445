from __future__ import annotations

import asyncio
import logging

from server.config import SERVER_CONFIG, load_server_config
from server.core import ConnectionManager, FrameRouter, PeerServer
from server.services import HandshakeService, MessageService
from shared.codecs import build_registry
from shared.protocol import FrameType
from shared.settings import load_settings

logger = logging.getLogger(__name__)

QUIT_COMMANDS = {"/q", "/quit", "/exit"}


def build_router(handshake_service: HandshakeService, message_service: MessageService) -> FrameRouter:
    router = FrameRouter()
    router.register(FrameType.HELLO, handshake_service.handle_hello)
    router.register(FrameType.HELLO_ACK, handshake_service.handle_hello_ack)
    router.register(FrameType.WELCOME, handshake_service.handle_welcome)
    router.register(FrameType.ACK, handshake_service.handle_ack)
    router.register(FrameType.TEXT, message_service.handle_text)
    return router


async def _stdin_loop(message_service: MessageService) -> None:
    """Typed lines go to the connected peer once it has said HELLO."""
    loop = asyncio.get_running_loop()
    while True:
        line = await loop.run_in_executor(None, input, "")
        line = line.strip()
        if not line:
            continue
        if line.lower() in QUIT_COMMANDS:
            break
        if not await message_service.send_text(line):
            print("[not sent: no handshaken peer or codec rejected the text]")


async def run_server() -> None:
    load_server_config()
    settings = load_settings()
    logging.basicConfig(level=SERVER_CONFIG["log_level"])

    registry = build_registry(settings.session)
    connection_manager = ConnectionManager()
    handshake_service = HandshakeService()
    message_service = MessageService(registry, connection_manager, SERVER_CONFIG["codec"])
    router = build_router(handshake_service, message_service)

    server = PeerServer(
        SERVER_CONFIG["host"],
        SERVER_CONFIG["port"],
        router,
        connection_manager,
        read_chunk_size=SERVER_CONFIG["read_chunk_size"],
    )
    await server.start()
    try:
        await _stdin_loop(message_service)
    except EOFError:
        logger.info("stdin closed")
    finally:
        await server.stop()


def main() -> None:
    asyncio.run(run_server())


if __name__ == "__main__":
    main()
