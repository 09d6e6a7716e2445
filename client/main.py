from __future__ import annotations

import asyncio
import logging

from client.config import CLIENT_CONFIG, load_config
from client.core import ClientSession, NetworkClient
from client.ui import ChatCLI
from shared.settings import load_settings


async def run_client() -> None:
    load_config()
    settings = load_settings()
    logging.basicConfig(level=CLIENT_CONFIG["log_level"])
    network = NetworkClient()
    session = ClientSession(network, params=settings.session)
    cli = ChatCLI(session)

    session.connect(CLIENT_CONFIG["server_host"], CLIENT_CONFIG["server_port"])
    try:
        await cli.run()
    finally:
        network.close()


def main() -> None:
    asyncio.run(run_client())


if __name__ == "__main__":
    main()
