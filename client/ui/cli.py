from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Optional

from client.config import CLIENT_CONFIG
from client.core.session import ClientSession, SessionState
from shared.protocol.errors import ProtocolError
from shared.protocol.messages import Direction

logger = logging.getLogger(__name__)


class ChatCLI:
    """Simple async CLI driving a ClientSession."""

    def __init__(self, session: ClientSession, config: Optional[Dict[str, Any]] = None) -> None:
        self.session = session
        self.config = config or CLIENT_CONFIG
        self._printed = 0
        self._last_status = ""
        session.add_listener(self._on_state)

    async def run(self) -> None:
        logger.info("CLI ready. Type 'help' for commands.")
        loop = asyncio.get_running_loop()
        try:
            while True:
                try:
                    cmd = await loop.run_in_executor(None, input, "> ")
                except EOFError:
                    self.session.disconnect()
                    break
                parts = cmd.strip().split(maxsplit=1)
                if not parts:
                    continue
                match parts[0]:
                    case "help":
                        self._show_help()
                    case "connect":
                        self._handle_connect(parts[1].split() if len(parts) > 1 else [])
                    case "send":
                        self._handle_send(parts)
                    case "codec":
                        self._handle_codec(parts)
                    case "status":
                        self._show_status()
                    case "history":
                        for msg in self.session.state.messages:
                            print(msg)
                    case "disconnect":
                        self.session.disconnect()
                    case "quit":
                        self.session.disconnect()
                        break
                    case _:
                        print("Unknown command")
        finally:
            self.session.remove_listener(self._on_state)

    def _show_help(self) -> None:
        print(
            "Commands: connect [host] [port], send <text>, codec <name>, status, history, "
            "disconnect, quit"
        )
        print("Codecs:", ", ".join(self.session.registry.names))

    def _handle_connect(self, args: list[str]) -> None:
        host = args[0] if args else self.config["server_host"]
        try:
            port = int(args[1]) if len(args) > 1 else int(self.config["server_port"])
        except ValueError:
            print("Usage: connect [host] [port]")
            return
        self._printed = 0
        self.session.connect(host, port)

    def _handle_send(self, parts: list[str]) -> None:
        if len(parts) < 2:
            print("Usage: send <text>")
            return
        if not self.session.send_text(parts[1]):
            print(f"Send failed: {self.session.state.status}")

    def _handle_codec(self, parts: list[str]) -> None:
        if len(parts) < 2:
            print(f"Current codec: {self.session.codec_name}")
            return
        try:
            self.session.set_codec(parts[1].strip())
            print(f"Codec set to {self.session.codec_name}")
        except ProtocolError as exc:
            print(f"Codec change failed: {exc.message}")

    def _show_status(self) -> None:
        state = self.session.state
        session = state.session_id or "-"
        print(f"status={state.status} handshake_ok={state.handshake_ok} session={session} codec={self.session.codec_name}")

    def _on_state(self, state: SessionState) -> None:
        if state.status != self._last_status:
            self._last_status = state.status
            print(f"\n[{state.status}]")
        if len(state.messages) < self._printed:
            self._printed = 0
        for msg in state.messages[self._printed :]:
            if msg.direction is Direction.IN:
                print(f"\n{msg}")
        self._printed = len(state.messages)
